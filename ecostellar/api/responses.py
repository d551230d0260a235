"""
JSON responses and error -> HTTP status mapping.
"""

import json
from decimal import Decimal
from functools import partial
from typing import Any

from aiohttp import web

from ecostellar.config.constants import GENERIC_ERROR_MESSAGE
from ecostellar.services.soroban.errors import ErrorCode

# Gateway error codes with a dedicated HTTP status, everything else is 502
_STATUS_BY_CODE = {
    ErrorCode.SIMULATION_FAILED.value: 422,
    ErrorCode.TIMEOUT.value: 504,
}


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


dumps = partial(json.dumps, default=_json_default)


def ok(data: dict[str, Any]) -> web.Response:
    """200 response with Decimal-aware serialization."""
    return web.json_response(data, dumps=dumps)


def status_for(code: str | None) -> int:
    """HTTP status for a gateway error code."""
    return _STATUS_BY_CODE.get(code, 502)


def gateway_error(result: dict[str, Any], production: bool = False) -> web.Response:
    """
    Convert a gateway error result to an HTTP response.

    Args:
        result: Error dict from the gateway
        production: Hide message and detail from clients

    Returns:
        JSON response with the mapped status
    """
    body = dict(result)
    if production:
        body["message"] = GENERIC_ERROR_MESSAGE
        body["detail"] = None
    return web.json_response(body, status=status_for(result.get("code")), dumps=dumps)


def bad_request(message: str) -> web.HTTPBadRequest:
    """Build a 400 error to raise from a handler."""
    return web.HTTPBadRequest(
        text=dumps({"success": False, "error": message}),
        content_type="application/json",
    )
