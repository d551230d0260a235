"""Integration tests for the HTTP API."""

from unittest.mock import AsyncMock, patch

import pytest

from ecostellar.api.responses import status_for
from ecostellar.config.constants import GENERIC_ERROR_MESSAGE
from ecostellar.services.soroban.errors import ErrorCode, make_error


class TestHealth:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        response = await api_client.get("/health")
        body = await response.json()

        assert response.status == 200
        assert body["status"] == "ok"
        assert body["mock_mode"] is True
        assert body["network"] == "test"


class TestGameSubmit:
    """Tests for POST /api/game/submit."""

    @pytest.mark.asyncio
    async def test_guest_session(self, api_client, mock_gateway):
        """Guest sessions get the local reward and never reach the gateway."""
        with patch.object(mock_gateway, "record_session", AsyncMock()) as record:
            response = await api_client.post(
                "/api/game/submit",
                json={"wallet_address": "guest", "score": 750},
            )
        body = await response.json()

        assert response.status == 200
        assert body["guest"] is True
        assert body["tokens_earned"] == 75
        record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_wallet_treated_as_guest(self, api_client):
        response = await api_client.post(
            "/api/game/submit",
            json={"wallet_address": "not-a-wallet", "score": 99},
        )
        body = await response.json()

        assert body["guest"] is True
        assert body["tokens_earned"] == 9

    @pytest.mark.asyncio
    async def test_player_session(self, api_client, player_address):
        response = await api_client.post(
            "/api/game/submit",
            json={"wallet_address": player_address, "score": 750, "game_type": "carbon_dash"},
        )
        body = await response.json()

        assert response.status == 200
        assert body["guest"] is False
        assert body["tokens_earned"] == 75
        assert body["mock"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [None, "750", -1, True, 2**32])
    async def test_invalid_score(self, api_client, player_address, score):
        response = await api_client.post(
            "/api/game/submit",
            json={"wallet_address": player_address, "score": score},
        )
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_invalid_json(self, api_client):
        response = await api_client.post(
            "/api/game/submit",
            data="{not json",
            headers={"Content-Type": "application/json"},
        )
        body = await response.json()

        assert response.status == 400
        assert body["success"] is False

    @pytest.mark.asyncio
    async def test_body_not_utf8(self, api_client):
        response = await api_client.post(
            "/api/game/submit",
            data=b'{"score": "\xff"}',
            headers={"Content-Type": "application/json"},
        )
        body = await response.json()

        assert response.status == 400
        assert body["success"] is False

    @pytest.mark.asyncio
    async def test_body_must_be_object(self, api_client):
        response = await api_client.post("/api/game/submit", json=[1, 2, 3])
        assert response.status == 400


class TestPlayer:
    """Tests for player balance and NFT routes."""

    @pytest.mark.asyncio
    async def test_balance(self, api_client, player_address):
        response = await api_client.get(f"/api/player/{player_address}/balance")
        body = await response.json()

        assert response.status == 200
        assert body["balance"] == 1250
        assert body["wallet_address"] == player_address

    @pytest.mark.asyncio
    async def test_balance_invalid_wallet(self, api_client):
        response = await api_client.get("/api/player/GABC/balance")
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_nfts(self, api_client, player_address):
        response = await api_client.get(f"/api/player/{player_address}/nfts")
        body = await response.json()

        assert response.status == 200
        assert body["count"] == 0
        assert body["nfts"] == []


class TestMint:
    """Tests for mint routes."""

    @pytest.mark.asyncio
    async def test_tree_mint(self, api_client, player_address):
        response = await api_client.post(
            "/api/tree/mint",
            json={"wallet_address": player_address, "species": "Oak", "latitude": 40774000},
        )
        body = await response.json()

        assert response.status == 200
        assert isinstance(body["token_id"], int)
        assert body["explorer_link"].endswith(f"/testnet/tx/{body['tx_hash']}")

    @pytest.mark.asyncio
    async def test_tree_mint_passes_metadata(self, api_client, mock_gateway, player_address):
        with patch.object(
            mock_gateway,
            "mint_tree_certificate",
            AsyncMock(return_value={"success": True, "token_id": 1}),
        ) as mint:
            await api_client.post(
                "/api/tree/mint",
                json={"wallet_address": player_address, "species": "Oak", "carbon_offset": 750},
            )

        metadata = mint.await_args.args[1]
        assert metadata.species == "Oak"
        assert metadata.carbon_offset == 750
        assert metadata.partner_org == "EcoStellar"

    @pytest.mark.asyncio
    async def test_tree_mint_bad_metadata(self, api_client, player_address):
        response = await api_client.post(
            "/api/tree/mint",
            json={"wallet_address": player_address, "latitude": "north"},
        )
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_tree_mint_fractional_coordinate(self, api_client, player_address):
        """Coordinates in degrees instead of micro-degrees are rejected."""
        response = await api_client.post(
            "/api/tree/mint",
            json={"wallet_address": player_address, "latitude": 40.77},
        )
        body = await response.json()

        assert response.status == 400
        assert "latitude" in body["error"]

    @pytest.mark.asyncio
    async def test_tree_mint_invalid_wallet(self, api_client):
        response = await api_client.post("/api/tree/mint", json={"wallet_address": "guest"})
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_token_mint(self, api_client, player_address):
        response = await api_client.post(
            "/api/token/mint",
            json={"wallet_address": player_address, "amount": 100},
        )
        body = await response.json()

        assert response.status == 200
        assert body["tokens_minted"] == 100
        assert body["tx_hash"].startswith("mock_mint_")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5, "abc", None, True, "NaN"])
    async def test_token_mint_invalid_amount(self, api_client, player_address, amount):
        response = await api_client.post(
            "/api/token/mint",
            json={"wallet_address": player_address, "amount": amount},
        )
        assert response.status == 400


class TestTransaction:
    """Tests for GET /api/tx/{tx_hash}."""

    @pytest.mark.asyncio
    async def test_status_with_explorer_link(self, api_client):
        tx_hash = "ab" * 32
        response = await api_client.get(f"/api/tx/{tx_hash}")
        body = await response.json()

        assert response.status == 200
        assert body["status"] == "SUCCESS"
        assert body["explorer_link"] == f"https://stellar.expert/explorer/testnet/tx/{tx_hash}"


class TestErrorMapping:
    """Gateway error codes map to HTTP statuses."""

    @pytest.mark.parametrize(
        "code,status",
        [
            (ErrorCode.SIMULATION_FAILED, 422),
            (ErrorCode.TIMEOUT, 504),
            (ErrorCode.TX_FAILED, 502),
            (ErrorCode.BALANCE_FAILED, 502),
            (ErrorCode.INIT_FAILED, 502),
        ],
    )
    def test_status_for(self, code, status):
        assert status_for(code.value) == status

    @pytest.mark.asyncio
    async def test_simulation_failure_is_422(self, api_client, mock_gateway, player_address):
        error = make_error(ErrorCode.SIMULATION_FAILED, "Contract simulation failed: balance", "HostError")
        with patch.object(mock_gateway, "get_fungible_balance", AsyncMock(return_value=error)):
            response = await api_client.get(f"/api/player/{player_address}/balance")
        body = await response.json()

        assert response.status == 422
        assert body["code"] == "SIMULATION_FAILED"
        assert body["detail"] == "HostError"

    @pytest.mark.asyncio
    async def test_timeout_is_504(self, api_client, mock_gateway, player_address):
        error = make_error(ErrorCode.TIMEOUT, "Transaction mint timed out", "ab" * 32)
        with patch.object(mock_gateway, "mint_fungible", AsyncMock(return_value=error)):
            response = await api_client.post(
                "/api/token/mint",
                json={"wallet_address": player_address, "amount": 1},
            )

        assert response.status == 504

    @pytest.mark.asyncio
    async def test_other_failures_are_502(self, api_client, mock_gateway, player_address):
        error = make_error(ErrorCode.NFT_FETCH_FAILED, "Failed to fetch player NFTs", "boom")
        with patch.object(mock_gateway, "list_certificates", AsyncMock(return_value=error)):
            response = await api_client.get(f"/api/player/{player_address}/nfts")

        assert response.status == 502

    @pytest.mark.asyncio
    async def test_production_hides_details(self, production_client, mock_gateway, player_address):
        error = make_error(ErrorCode.GAME_RECORD_FAILED, "Failed to record game session", "secret detail")
        with patch.object(mock_gateway, "record_session", AsyncMock(return_value=error)):
            response = await production_client.post(
                "/api/game/submit",
                json={"wallet_address": player_address, "score": 10},
            )
        body = await response.json()

        assert response.status == 502
        assert body["code"] == "GAME_RECORD_FAILED"
        assert body["message"] == GENERIC_ERROR_MESSAGE
        assert body["detail"] is None
