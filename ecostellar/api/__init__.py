"""
HTTP API.

aiohttp application exposing the contract gateway over REST.
"""

from .app import GATEWAY_KEY, PRODUCTION_KEY, create_app


__all__ = [
    "GATEWAY_KEY",
    "PRODUCTION_KEY",
    "create_app",
]
