"""
Mock Mode Responses.

Placeholder results returned when blockchain configuration is incomplete.
Every result is tagged ``mock: True``; nothing here touches the network.
"""

import random
import time
from decimal import Decimal
from typing import Any

from ecostellar.config.constants import (
    MOCK_BALANCE,
    MOCK_TOKEN_ID_UPPER_BOUND,
    MOCK_TX_PREFIX,
    SCORE_PER_TOKEN,
)


def mock_tx_hash(label: str) -> str:
    """Timestamp-derived fake hash, e.g. ``mock_mint_1700000000000``."""
    return f"{MOCK_TX_PREFIX}{label}_{int(time.time() * 1000)}"


def fallback_reward(score: int) -> int:
    """Tokens earned for a score when the contract result is unavailable."""
    return score // SCORE_PER_TOKEN


class MockResponses:
    """
    Synthesizes gateway results for demo environments.

    The balance is a fixed stub and does not track mock mints.
    """

    def __init__(self, explorer_link):
        """
        Initialize mock responses.

        Args:
            explorer_link: Callable building explorer URLs from a hash
        """
        self._explorer_link = explorer_link

    def query(self) -> dict[str, Any]:
        return {"success": True, "result": None, "mock": True}

    def invoke(self, method: str) -> dict[str, Any]:
        return {
            "success": True,
            "hash": mock_tx_hash(method),
            "status": "SUCCESS",
            "ledger": None,
            "return_value": None,
            "method": method,
            "mock": True,
        }

    def mint_fungible(self, amount: int | Decimal) -> dict[str, Any]:
        tx_hash = mock_tx_hash("mint")
        return {
            "success": True,
            "tx_hash": tx_hash,
            "tokens_minted": amount,
            "ledger": None,
            "explorer_link": self._explorer_link(tx_hash),
            "mock": True,
        }

    def fungible_balance(self) -> dict[str, Any]:
        return {
            "success": True,
            "balance": MOCK_BALANCE,
            "balance_raw": None,
            "mock": True,
        }

    def record_session(self, score: int) -> dict[str, Any]:
        tx_hash = mock_tx_hash("game")
        return {
            "success": True,
            "tx_hash": tx_hash,
            "tokens_earned": fallback_reward(score),
            "session_id": mock_tx_hash("sess"),
            "ledger": None,
            "explorer_link": self._explorer_link(tx_hash),
            "mock": True,
        }

    def mint_tree_certificate(self) -> dict[str, Any]:
        tx_hash = mock_tx_hash("tree")
        return {
            "success": True,
            "token_id": random.randrange(MOCK_TOKEN_ID_UPPER_BOUND),
            "tx_hash": tx_hash,
            "ledger": None,
            "explorer_link": self._explorer_link(tx_hash),
            "mock": True,
        }

    def list_certificates(self) -> dict[str, Any]:
        return {"success": True, "count": 0, "nfts": [], "mock": True}

    def transaction_status(self, tx_hash: str) -> dict[str, Any]:
        return {
            "success": True,
            "hash": tx_hash,
            "status": "SUCCESS",
            "ledger": None,
            "created_at": None,
            "mock": True,
        }
