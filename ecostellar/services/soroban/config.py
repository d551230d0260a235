"""
Gateway Configuration.

Immutable process-lifetime configuration for the ContractGateway.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stellar_sdk import Network

from ecostellar.config.constants import (
    DEFAULT_EXPLORER_BASE,
    EXPLORER_NETWORK_PATHS,
    TESTNET_RPC_URL,
    TX_BASE_FEE,
    TX_MAX_POLL_RETRIES,
    TX_POLL_INTERVAL_SECONDS,
    TX_TIMEOUT_SECONDS,
)

from .errors import GatewayConfigError

if TYPE_CHECKING:
    from ecostellar.config.settings import Settings


@dataclass(frozen=True)
class GatewayConfig:
    """
    Gateway configuration.

    Mock mode is selected when the operator secret or any of the three
    contract IDs is missing.
    """

    network: str = "test"
    rpc_url: str = TESTNET_RPC_URL
    operator_secret: str | None = field(default=None, repr=False)
    token_contract: str | None = None
    rewards_contract: str | None = None
    nft_contract: str | None = None
    tx_timeout: int = TX_TIMEOUT_SECONDS
    max_poll_retries: int = TX_MAX_POLL_RETRIES
    poll_interval: float = TX_POLL_INTERVAL_SECONDS
    base_fee: int = TX_BASE_FEE
    explorer_base: str = DEFAULT_EXPLORER_BASE

    def __post_init__(self) -> None:
        if self.network not in EXPLORER_NETWORK_PATHS:
            raise GatewayConfigError(
                f"Unknown network {self.network!r}, expected 'test' or 'main'"
            )
        if self.tx_timeout <= 0:
            raise GatewayConfigError("tx_timeout must be positive")
        if self.max_poll_retries < 1:
            raise GatewayConfigError("max_poll_retries must be at least 1")
        if self.poll_interval < 0:
            raise GatewayConfigError("poll_interval must not be negative")
        if self.base_fee <= 0:
            raise GatewayConfigError("base_fee must be positive")
        if not self.rpc_url:
            raise GatewayConfigError("rpc_url is required")

    @property
    def is_complete(self) -> bool:
        """True when every value needed for live calls is present."""
        return all(
            [
                self.operator_secret,
                self.token_contract,
                self.rewards_contract,
                self.nft_contract,
            ]
        )

    @property
    def missing_keys(self) -> list[str]:
        """Names of the absent values that force mock mode."""
        required = {
            "ADMIN_SECRET_KEY": self.operator_secret,
            "ECO_TOKEN_CONTRACT_ID": self.token_contract,
            "GAME_REWARDS_CONTRACT_ID": self.rewards_contract,
            "TREE_NFT_CONTRACT_ID": self.nft_contract,
        }
        return [name for name, value in required.items() if not value]

    @property
    def network_passphrase(self) -> str:
        if self.network == "main":
            return Network.PUBLIC_NETWORK_PASSPHRASE
        return Network.TESTNET_NETWORK_PASSPHRASE

    @property
    def contracts(self) -> dict[str, str | None]:
        return {
            "eco_token": self.token_contract,
            "game_rewards": self.rewards_contract,
            "tree_nft": self.nft_contract,
        }

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GatewayConfig":
        """
        Build gateway configuration from application settings.

        Args:
            settings: Loaded application settings

        Returns:
            GatewayConfig instance
        """
        return cls(
            network=settings.stellar_network,
            rpc_url=settings.stellar_rpc_url,
            operator_secret=settings.admin_secret_key,
            token_contract=settings.eco_token_contract_id,
            rewards_contract=settings.game_rewards_contract_id,
            nft_contract=settings.tree_nft_contract_id,
            tx_timeout=settings.tx_timeout,
            max_poll_retries=settings.tx_max_retries,
            poll_interval=settings.tx_poll_interval,
            explorer_base=settings.stellar_explorer_base.rstrip("/"),
        )
