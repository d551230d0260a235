"""
Soroban RPC client factory.
"""

from loguru import logger
from stellar_sdk import SorobanServerAsync
from stellar_sdk.client.aiohttp_client import AiohttpClient


def create_soroban_server(rpc_url: str) -> SorobanServerAsync:
    """
    Get asynchronous Soroban RPC server connection.

    Args:
        rpc_url: Soroban RPC endpoint

    Returns:
        SorobanServerAsync backed by the SDK's aiohttp client
    """
    logger.debug(f"Creating Soroban RPC client for {rpc_url}")
    return SorobanServerAsync(server_url=rpc_url, client=AiohttpClient())
