"""
Application constants.

Centralized constants for the application.
"""

from decimal import Decimal

# ========================================================================
# STELLAR NETWORK CONSTANTS
# ========================================================================

TESTNET_RPC_URL = "https://soroban-testnet.stellar.org"
DEFAULT_EXPLORER_BASE = "https://stellar.expert/explorer"

# Explorer path segment per network selector
EXPLORER_NETWORK_PATHS = {
    "main": "public",
    "test": "testnet",
}

# ========================================================================
# TRANSACTION LIFECYCLE CONSTANTS
# ========================================================================

# Envelope validity window (in seconds)
TX_TIMEOUT_SECONDS = 30

# Status polling (30 attempts at 1s ~ 30 seconds)
TX_MAX_POLL_RETRIES = 30
TX_POLL_INTERVAL_SECONDS = 1.0

# Inclusion fee in stroops, resource fee is added during assembly
TX_BASE_FEE = 100

# ========================================================================
# TOKEN CONSTANTS
# ========================================================================

# ECO token uses the ledger's 7-decimal fixed-point convention
ECO_TOKEN_DECIMALS = 7
STROOPS_PER_TOKEN = 10 ** ECO_TOKEN_DECIMALS

# Game reward: 1 ECO per 10 points
SCORE_PER_TOKEN = 10

# ========================================================================
# MOCK MODE CONSTANTS
# ========================================================================

MOCK_TX_PREFIX = "mock_"
MOCK_BALANCE = Decimal("1250")
MOCK_TOKEN_ID_UPPER_BOUND = 1_000_000

# ========================================================================
# TREE CERTIFICATE DEFAULTS
# ========================================================================

DEFAULT_TREE_SPECIES = "Unknown"
DEFAULT_TREE_LOCATION = "Unknown"
DEFAULT_CARBON_OFFSET_KG = 500
DEFAULT_PARTNER_ORG = "EcoStellar"

DEFAULT_GAME_TYPE = "carbon_dash"

# ========================================================================
# HTTP API CONSTANTS
# ========================================================================

API_DEFAULT_HOST = "0.0.0.0"
API_DEFAULT_PORT = 3001
GENERIC_ERROR_MESSAGE = "Blockchain operation failed. Please try again later."
