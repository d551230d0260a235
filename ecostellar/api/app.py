"""
HTTP API application factory.

The application owns one ContractGateway: initialization is started on
startup without blocking it, the RPC session is closed on cleanup.
"""

import asyncio
import contextlib

from aiohttp import web
from loguru import logger

from ecostellar.services.soroban.gateway import ContractGateway

GATEWAY_KEY = web.AppKey("gateway", ContractGateway)
PRODUCTION_KEY = web.AppKey("production", bool)
INIT_TASK_KEY = web.AppKey("gateway_init_task", asyncio.Task)


def _log_init_result(task: asyncio.Task) -> None:
    """Log the outcome of background gateway initialization."""
    if task.cancelled():
        logger.warning("Gateway initialization cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Gateway initialization crashed: {exc}")
        return
    result = task.result()
    if result["success"]:
        logger.info(f"Gateway ready (mock mode: {result.get('mock', False)})")
    else:
        logger.error(f"Gateway initialization failed: {result['message']}")


async def _start_gateway(app: web.Application) -> None:
    task = asyncio.create_task(app[GATEWAY_KEY].initialize())
    task.add_done_callback(_log_init_result)
    app[INIT_TASK_KEY] = task


async def _stop_gateway(app: web.Application) -> None:
    task = app.get(INIT_TASK_KEY)
    if task is not None and not task.done():
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    await app[GATEWAY_KEY].close()


def create_app(gateway: ContractGateway, production: bool = False) -> web.Application:
    """
    Create the HTTP API application.

    Args:
        gateway: Gateway instance owned by the application
        production: Hide error details from response bodies

    Returns:
        Configured aiohttp application
    """
    from ecostellar.api.routes import setup_routes

    app = web.Application()
    app[GATEWAY_KEY] = gateway
    app[PRODUCTION_KEY] = production

    setup_routes(app)

    app.on_startup.append(_start_gateway)
    app.on_cleanup.append(_stop_gateway)

    return app
