"""Pytest configuration and shared fixtures for all tests."""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

# Добавить корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest  # noqa: E402
from stellar_sdk import Account, Keypair, StrKey, scval  # noqa: E402

from ecostellar.services.soroban.config import GatewayConfig  # noqa: E402
from ecostellar.services.soroban.gateway import ContractGateway  # noqa: E402
from tests.stubs import make_sent, make_simulation, make_transaction  # noqa: E402


@pytest.fixture
def operator_keypair():
    """Random operator keypair."""
    return Keypair.random()


@pytest.fixture
def player_address():
    """Valid player account address."""
    return Keypair.random().public_key


@pytest.fixture
def contract_ids():
    """Three distinct valid contract addresses."""
    return {
        "token": StrKey.encode_contract(bytes([1]) * 32),
        "rewards": StrKey.encode_contract(bytes([2]) * 32),
        "nft": StrKey.encode_contract(bytes([3]) * 32),
    }


@pytest.fixture
def live_config(operator_keypair, contract_ids):
    """Complete configuration with fast polling."""
    return GatewayConfig(
        network="test",
        operator_secret=operator_keypair.secret,
        token_contract=contract_ids["token"],
        rewards_contract=contract_ids["rewards"],
        nft_contract=contract_ids["nft"],
        max_poll_retries=3,
        poll_interval=0.5,
    )


@pytest.fixture
def mock_config():
    """Configuration without secret or contracts (mock mode)."""
    return GatewayConfig()


@pytest.fixture
def rpc_server(operator_keypair):
    """
    Stub Soroban RPC server.

    Defaults describe a successful invocation that lands on the first poll.
    """
    server = MagicMock()
    server.get_health = AsyncMock(return_value=SimpleNamespace(status="healthy"))
    server.load_account = AsyncMock(
        side_effect=lambda account_id: Account(account_id, 1)
    )
    server.simulate_transaction = AsyncMock(
        return_value=make_simulation(scval.to_void())
    )
    server.prepare_transaction = AsyncMock(side_effect=lambda envelope, simulation: envelope)
    server.send_transaction = AsyncMock(return_value=make_sent())
    server.get_transaction = AsyncMock(return_value=make_transaction())
    server.close = AsyncMock()
    return server


@pytest.fixture
def server_factory(rpc_server):
    """RPC client factory returning the stub server."""
    return MagicMock(return_value=rpc_server)


@pytest.fixture
def sleep():
    """Recording replacement for asyncio.sleep."""
    return AsyncMock()


@pytest.fixture
def live_gateway(live_config, server_factory, sleep):
    """Gateway in live mode wired to the stub server."""
    return ContractGateway(live_config, server_factory=server_factory, sleep=sleep)


@pytest.fixture
def mock_gateway(mock_config, server_factory):
    """Gateway in mock mode; the factory must never be called."""
    return ContractGateway(mock_config, server_factory=server_factory)
