"""
Unit tests for ContractGateway in mock mode and its mode-independent helpers.

Tests cover:
- Mock mode selection and initialization
- Mock adapter results (no network access)
- Address validation
- Explorer links
"""

from decimal import Decimal

import pytest
from stellar_sdk import Keypair, StrKey

from ecostellar.services.soroban import arguments as arg
from ecostellar.services.soroban.config import GatewayConfig
from ecostellar.services.soroban.gateway import ContractGateway


class TestMockInitialization:
    """Test mock mode selection."""

    def test_incomplete_config_selects_mock(self, mock_gateway):
        assert mock_gateway.mock_mode is True
        assert mock_gateway.initialized is False

    @pytest.mark.asyncio
    async def test_initialize(self, mock_gateway, server_factory):
        result = await mock_gateway.initialize()

        assert result["success"] is True
        assert result["mock"] is True
        assert mock_gateway.initialized is True
        server_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_initialize_twice(self, mock_gateway):
        await mock_gateway.initialize()
        result = await mock_gateway.initialize()

        assert result["success"] is True
        assert result["mock"] is True

    @pytest.mark.asyncio
    async def test_missing_single_contract_is_mock(self, operator_keypair, contract_ids, server_factory):
        config = GatewayConfig(
            operator_secret=operator_keypair.secret,
            token_contract=contract_ids["token"],
            rewards_contract=contract_ids["rewards"],
        )
        gateway = ContractGateway(config, server_factory=server_factory)

        assert gateway.mock_mode is True
        assert (await gateway.initialize())["mock"] is True
        server_factory.assert_not_called()


class TestMockAdapters:
    """Test mock adapter results."""

    @pytest.mark.asyncio
    async def test_every_operation_is_mock(self, mock_gateway, server_factory, player_address, contract_ids):
        """Test every operation succeeds with mock=True and no RPC client."""
        results = [
            await mock_gateway.query(contract_ids["token"], "balance", [arg.address(player_address)]),
            await mock_gateway.invoke(contract_ids["token"], "mint", [arg.int128(1)]),
            await mock_gateway.mint_fungible(player_address, 100),
            await mock_gateway.get_fungible_balance(player_address),
            await mock_gateway.record_session(player_address, 750, "carbon_dash"),
            await mock_gateway.mint_tree_certificate(player_address, {}),
            await mock_gateway.list_certificates(player_address),
            await mock_gateway.get_transaction_status("ab" * 32),
        ]

        for result in results:
            assert result["success"] is True
            assert result["mock"] is True
        server_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_mint_fungible(self, mock_gateway, player_address):
        result = await mock_gateway.mint_fungible(player_address, 100)

        assert result["tokens_minted"] == 100
        assert result["tx_hash"].startswith("mock_mint_")
        assert result["explorer_link"].endswith(f"/testnet/tx/{result['tx_hash']}")

    @pytest.mark.asyncio
    async def test_balance_is_fixed_stub(self, mock_gateway, player_address):
        """Test the mock balance does not track mock mints."""
        await mock_gateway.mint_fungible(player_address, 100)
        result = await mock_gateway.get_fungible_balance(player_address)

        assert result["balance"] == Decimal("1250")

    @pytest.mark.asyncio
    async def test_record_session_reward(self, mock_gateway, player_address):
        result = await mock_gateway.record_session(player_address, 750, "carbon_dash")

        assert result["tokens_earned"] == 75
        assert result["session_id"].startswith("mock_sess_")

    @pytest.mark.asyncio
    async def test_record_session_reward_floors(self, mock_gateway, player_address):
        result = await mock_gateway.record_session(player_address, 9)
        assert result["tokens_earned"] == 0

    @pytest.mark.asyncio
    async def test_mint_tree_certificate(self, mock_gateway, player_address):
        result = await mock_gateway.mint_tree_certificate(player_address, {})

        assert isinstance(result["token_id"], int)
        assert result["tx_hash"].startswith("mock_tree_")
        assert result["explorer_link"] == (
            f"https://stellar.expert/explorer/testnet/tx/{result['tx_hash']}"
        )

    @pytest.mark.asyncio
    async def test_list_certificates_empty(self, mock_gateway, player_address):
        result = await mock_gateway.list_certificates(player_address)

        assert result["count"] == 0
        assert result["nfts"] == []

    @pytest.mark.asyncio
    async def test_close_without_server(self, mock_gateway):
        await mock_gateway.initialize()
        await mock_gateway.close()


class TestAddressValidation:
    """Test is_valid_address."""

    def test_account_address(self):
        assert ContractGateway.is_valid_address(Keypair.random().public_key) is True

    def test_contract_address(self):
        assert ContractGateway.is_valid_address(StrKey.encode_contract(bytes(32))) is True

    @pytest.mark.parametrize(
        "value",
        [
            "",
            None,
            12345,
            "guest",
            "GABC123DEFG456HIJK789LMNO012PQRS345TUVW678XYZA901BCDE234",
            "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
        ],
    )
    def test_invalid_values(self, value):
        assert ContractGateway.is_valid_address(value) is False

    def test_secret_seed_rejected(self):
        assert ContractGateway.is_valid_address(Keypair.random().secret) is False

    def test_truncated_address(self):
        assert ContractGateway.is_valid_address(Keypair.random().public_key[:-1]) is False

    def test_bad_checksum(self):
        address = Keypair.random().public_key
        last = "A" if address[-1] != "A" else "B"
        assert ContractGateway.is_valid_address(address[:-1] + last) is False


class TestExplorerLink:
    """Test explorer_link."""

    def test_testnet(self, mock_config):
        gateway = ContractGateway(mock_config)
        tx_hash = "ab" * 32
        assert gateway.explorer_link(tx_hash) == f"https://stellar.expert/explorer/testnet/tx/{tx_hash}"

    def test_mainnet(self):
        gateway = ContractGateway(GatewayConfig(network="main"))
        tx_hash = "cd" * 32
        assert gateway.explorer_link(tx_hash) == f"https://stellar.expert/explorer/public/tx/{tx_hash}"

    def test_custom_base(self):
        gateway = ContractGateway(GatewayConfig(explorer_base="https://explorer.example"))
        assert gateway.explorer_link("mock_mint_1") == "https://explorer.example/testnet/tx/mock_mint_1"


class TestDescribe:
    """Test describe."""

    def test_mock_description(self, mock_gateway):
        info = mock_gateway.describe()

        assert info["mock_mode"] is True
        assert info["network"] == "test"
        assert info["operator_public_key"] is None
        assert info["contracts"] == {"eco_token": None, "game_rewards": None, "tree_nft": None}
