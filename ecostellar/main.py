"""
EcoStellar API main entry point.

Composition root: settings -> gateway config -> gateway -> HTTP app.
The gateway is created here and handed to the application; nothing
else constructs one.
"""

import sys

from aiohttp import web
from loguru import logger

from ecostellar.api import create_app
from ecostellar.config.settings import Settings, settings
from ecostellar.initialization.logging import setup_logging
from ecostellar.services.soroban import ContractGateway, GatewayConfig


def build_gateway(app_settings: Settings) -> ContractGateway:
    """Create the gateway from application settings."""
    return ContractGateway(GatewayConfig.from_settings(app_settings))


def build_app(app_settings: Settings = settings) -> web.Application:
    """
    Wire the HTTP application.

    Args:
        app_settings: Loaded settings (defaults to the module instance)

    Returns:
        aiohttp application owning a fresh gateway
    """
    gateway = build_gateway(app_settings)
    return create_app(gateway, production=app_settings.is_production)


def main() -> None:
    """Configure logging and run the HTTP API."""
    setup_logging(settings.log_level, settings.log_file)

    app = build_app(settings)

    logger.info(
        f"EcoStellar API listening on {settings.api_host}:{settings.api_port}\n"
        f"  Environment: {settings.environment}\n"
        f"  Network: {settings.stellar_network}"
    )
    web.run_app(
        app,
        host=settings.api_host,
        port=settings.api_port,
        print=None,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("EcoStellar API stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"EcoStellar API crashed: {e}")
        sys.exit(1)
