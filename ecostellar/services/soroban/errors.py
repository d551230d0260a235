"""
Gateway error taxonomy.

Expected failures are returned as tagged dicts, never raised. Only
invalid configuration construction raises.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Failure kinds returned in the ``code`` field of error results."""

    INIT_FAILED = "INIT_FAILED"
    CALL_FAILED = "CALL_FAILED"
    SIMULATION_FAILED = "SIMULATION_FAILED"
    INVOKE_FAILED = "INVOKE_FAILED"
    TX_FAILED = "TX_FAILED"
    TIMEOUT = "TIMEOUT"

    # Adapter-level wrappers
    MINT_FAILED = "MINT_FAILED"
    GAME_RECORD_FAILED = "GAME_RECORD_FAILED"
    NFT_MINT_FAILED = "NFT_MINT_FAILED"
    BALANCE_FAILED = "BALANCE_FAILED"
    NFT_FETCH_FAILED = "NFT_FETCH_FAILED"
    TX_FETCH_FAILED = "TX_FETCH_FAILED"


class GatewayConfigError(ValueError):
    """Raised when a GatewayConfig is constructed with invalid values."""
    pass


class GatewayNotReadyError(RuntimeError):
    """Raised internally when live initialization did not succeed."""
    pass


def _jsonable(detail: Any) -> Any:
    """Reduce SDK response objects and exceptions to JSON-friendly data."""
    if detail is None or isinstance(detail, (str, int, float, bool)):
        return detail
    if isinstance(detail, BaseException):
        return str(detail) or detail.__class__.__name__
    if isinstance(detail, dict):
        return {str(k): _jsonable(v) for k, v in detail.items()}
    if isinstance(detail, (list, tuple)):
        return [_jsonable(v) for v in detail]
    if isinstance(detail, Enum):
        return detail.value
    # pydantic models (stellar_sdk RPC responses)
    model_dump = getattr(detail, "model_dump", None)
    if callable(model_dump):
        try:
            return _jsonable(model_dump(mode="json"))
        except Exception:
            pass
    return str(detail)


def make_error(
    code: ErrorCode,
    message: str,
    detail: Any = None,
) -> dict[str, Any]:
    """
    Build a standardized error result.

    Args:
        code: Error kind
        message: Human-readable message
        detail: Diagnostic payload (exception, RPC response, hash...)

    Returns:
        Dict with success=False, code, message, detail, timestamp
    """
    return {
        "success": False,
        "code": code.value,
        "message": message,
        "detail": _jsonable(detail),
        "timestamp": datetime.now(UTC).isoformat(),
    }


def is_error(result: dict[str, Any], code: ErrorCode | None = None) -> bool:
    """Check whether a result is a failure (optionally of a given code)."""
    if result.get("success"):
        return False
    return code is None or result.get("code") == code.value
