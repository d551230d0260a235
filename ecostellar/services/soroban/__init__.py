"""
Soroban services module.

Contract invocation through a mode-transparent gateway:
typed arguments, transaction lifecycle, mock fallback.
"""

from .arguments import ContractArg, ScalarType
from .config import GatewayConfig
from .errors import ErrorCode, GatewayConfigError, GatewayNotReadyError, make_error
from .gateway import ContractGateway
from .lifecycle import TransactionLifecycle
from .models import LifecycleState, TreeMetadata
from .server import create_soroban_server


__all__ = [
    "ContractArg",
    "ContractGateway",
    "ErrorCode",
    "GatewayConfig",
    "GatewayConfigError",
    "GatewayNotReadyError",
    "LifecycleState",
    "ScalarType",
    "TransactionLifecycle",
    "TreeMetadata",
    "create_soroban_server",
    "make_error",
]
