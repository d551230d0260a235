"""
HTTP API routes.

Endpoints:
- GET  /health
- POST /api/game/submit
- GET  /api/player/{wallet}/balance
- GET  /api/player/{wallet}/nfts
- POST /api/tree/mint
- POST /api/token/mint
- GET  /api/tx/{tx_hash}
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from aiohttp import web
from loguru import logger

from ecostellar.api.app import GATEWAY_KEY, PRODUCTION_KEY
from ecostellar.api.responses import bad_request, gateway_error, ok
from ecostellar.config.constants import DEFAULT_GAME_TYPE
from ecostellar.services.soroban.errors import is_error
from ecostellar.services.soroban.gateway import ContractGateway
from ecostellar.services.soroban.mock import fallback_reward
from ecostellar.services.soroban.models import TreeMetadata
from ecostellar.utils.security import mask_address

# u32 on-chain score
MAX_SCORE = 2**32 - 1

TREE_FIELDS = (
    "species",
    "location",
    "latitude",
    "longitude",
    "plant_date",
    "carbon_offset",
    "partner_org",
)

routes = web.RouteTableDef()


def _gateway(request: web.Request) -> ContractGateway:
    return request.app[GATEWAY_KEY]


def _respond(request: web.Request, result: dict[str, Any], **extra: Any) -> web.Response:
    if is_error(result):
        return gateway_error(result, production=request.app[PRODUCTION_KEY])
    return ok({**result, **extra})


async def _read_json(request: web.Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        # JSONDecodeError or a body that is not UTF-8
        raise bad_request("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise bad_request("Request body must be a JSON object")
    return body


def _require_wallet(gateway: ContractGateway, wallet: Any) -> str:
    if not gateway.is_valid_address(wallet):
        raise bad_request("Invalid Stellar wallet address")
    return wallet


@routes.get("/health")
async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with gateway mode and network
    """
    info = _gateway(request).describe()
    return ok(
        {
            "status": "ok",
            "mock_mode": info["mock_mode"],
            "network": info["network"],
            "initialized": info["initialized"],
            "timestamp": datetime.now(UTC).isoformat(),
        }
    )


@routes.post("/api/game/submit")
async def submit_game_handler(request: web.Request) -> web.Response:
    """
    Submit a game session and earn tokens.

    Guests (missing, "guest" or invalid wallet) get the local reward only,
    nothing is sent on-chain for them.
    """
    gateway = _gateway(request)
    body = await _read_json(request)

    score = body.get("score")
    if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= MAX_SCORE:
        raise bad_request(f"score must be an integer between 0 and {MAX_SCORE}")
    game_type = body.get("game_type") or DEFAULT_GAME_TYPE
    wallet = body.get("wallet_address")

    if not wallet or wallet == "guest" or not gateway.is_valid_address(wallet):
        logger.info(f"Guest game session: score={score}")
        return ok(
            {
                "success": True,
                "guest": True,
                "tokens_earned": fallback_reward(score),
                "blockchain": {"success": True, "mock": True},
            }
        )

    logger.info(f"Game session from {mask_address(wallet)}: score={score}, type={game_type}")
    result = await gateway.record_session(wallet, score, game_type)
    return _respond(request, result, guest=False)


@routes.get("/api/player/{wallet}/balance")
async def player_balance_handler(request: web.Request) -> web.Response:
    """ECO token balance of a player."""
    gateway = _gateway(request)
    wallet = _require_wallet(gateway, request.match_info["wallet"])

    result = await gateway.get_fungible_balance(wallet)
    return _respond(request, result, wallet_address=wallet)


@routes.get("/api/player/{wallet}/nfts")
async def player_nfts_handler(request: web.Request) -> web.Response:
    """Tree NFT certificates owned by a player."""
    gateway = _gateway(request)
    wallet = _require_wallet(gateway, request.match_info["wallet"])

    result = await gateway.list_certificates(wallet)
    return _respond(request, result, wallet_address=wallet)


@routes.post("/api/tree/mint")
async def mint_tree_handler(request: web.Request) -> web.Response:
    """Mint a Tree NFT certificate for a player."""
    gateway = _gateway(request)
    body = await _read_json(request)
    wallet = _require_wallet(gateway, body.get("wallet_address"))

    try:
        metadata = TreeMetadata.from_mapping(
            {name: body[name] for name in TREE_FIELDS if name in body}
        )
    except (TypeError, ValueError) as e:
        raise bad_request(f"Invalid tree metadata: {e}")

    result = await gateway.mint_tree_certificate(wallet, metadata)
    return _respond(request, result, wallet_address=wallet)


@routes.post("/api/token/mint")
async def mint_token_handler(request: web.Request) -> web.Response:
    """Mint ECO tokens to a player."""
    gateway = _gateway(request)
    body = await _read_json(request)
    wallet = _require_wallet(gateway, body.get("wallet_address"))

    raw_amount = body.get("amount")
    if isinstance(raw_amount, bool) or not isinstance(raw_amount, (int, float, str)):
        raise bad_request("amount must be a positive number")
    try:
        amount = Decimal(str(raw_amount))
    except InvalidOperation:
        raise bad_request("amount must be a positive number")
    if not amount.is_finite() or amount <= 0:
        raise bad_request("amount must be a positive number")

    result = await gateway.mint_fungible(wallet, amount)
    return _respond(request, result, wallet_address=wallet)


@routes.get("/api/tx/{tx_hash}")
async def transaction_handler(request: web.Request) -> web.Response:
    """Final status of a submitted transaction."""
    gateway = _gateway(request)
    tx_hash = request.match_info["tx_hash"]

    result = await gateway.get_transaction_status(tx_hash)
    return _respond(request, result, explorer_link=gateway.explorer_link(tx_hash))


def setup_routes(app: web.Application) -> None:
    """Register all API routes on the application."""
    app.add_routes(routes)
