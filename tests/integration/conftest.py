"""
Shared fixtures for HTTP API integration tests.

The application runs on an in-process aiohttp test server with a mock
mode gateway; individual tests replace gateway methods to simulate
blockchain failures.
"""

import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from ecostellar.api import create_app


@pytest_asyncio.fixture
async def api_client(mock_gateway):
    """Test client for a development-mode application."""
    app = create_app(mock_gateway)
    async with TestClient(TestServer(app)) as client:
        yield client


@pytest_asyncio.fixture
async def production_client(mock_gateway):
    """Test client for a production-mode application."""
    app = create_app(mock_gateway, production=True)
    async with TestClient(TestServer(app)) as client:
        yield client
