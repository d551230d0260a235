"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ecostellar.config.constants import (
    API_DEFAULT_HOST,
    API_DEFAULT_PORT,
    DEFAULT_EXPLORER_BASE,
    TESTNET_RPC_URL,
    TX_MAX_POLL_RETRIES,
    TX_POLL_INTERVAL_SECONDS,
    TX_TIMEOUT_SECONDS,
)

_NETWORK_ALIASES = {
    "test": "test",
    "testnet": "test",
    "main": "main",
    "mainnet": "main",
    "public": "main",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Stellar network
    stellar_network: str = "test"
    stellar_rpc_url: str = TESTNET_RPC_URL
    stellar_explorer_base: str = DEFAULT_EXPLORER_BASE

    # Operator credential (signs every transaction)
    admin_secret_key: str | None = None

    # Contract IDs
    eco_token_contract_id: str | None = None
    game_rewards_contract_id: str | None = None
    tree_nft_contract_id: str | None = None

    # Transaction lifecycle
    tx_timeout: int = Field(
        default=TX_TIMEOUT_SECONDS, gt=0, description="Envelope validity window in seconds"
    )
    tx_max_retries: int = Field(
        default=TX_MAX_POLL_RETRIES, ge=1, description="Maximum transaction status polls"
    )
    tx_poll_interval: float = Field(
        default=TX_POLL_INTERVAL_SECONDS, ge=0, description="Seconds between status polls"
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_file: str | None = "logs/ecostellar.log"
    api_host: str = API_DEFAULT_HOST
    api_port: int = Field(
        default=API_DEFAULT_PORT, ge=1, le=65535, description="HTTP API port"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('stellar_network')
    @classmethod
    def normalize_network(cls, v: str) -> str:
        """Map testnet/mainnet aliases onto the test/main selector."""
        network = _NETWORK_ALIASES.get(v.strip().lower())
        if network is None:
            raise ValueError(
                'STELLAR_NETWORK must be one of: '
                + ', '.join(sorted(_NETWORK_ALIASES))
            )
        return network

    @field_validator(
        'admin_secret_key',
        'eco_token_contract_id',
        'game_rewards_contract_id',
        'tree_nft_contract_id',
        'log_file',
    )
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank values from .env as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def is_production(self) -> bool:
        return self.environment == 'production'


# Global settings instance
settings = Settings()
