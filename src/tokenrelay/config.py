"""Application configuration using pydantic-settings.

The relay targets a single EVM chain; all values can be overridden through
environment variables or a local ``.env`` file.
"""

from functools import lru_cache
from typing import Optional
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3000, description="API server port")
    cors_origins: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ======================
    # Chain
    # ======================
    rpc_url: str = Field(
        default="https://rpc.merlinchain.io", description="Chain JSON-RPC endpoint"
    )
    chain_id: int = Field(default=4200, description="EVM chain ID (Merlin mainnet)")
    explorer_url: str = Field(
        default="https://scan.merlinchain.io", description="Block explorer base URL"
    )
    rpc_timeout: float = Field(default=30.0, description="Timeout for RPC calls (seconds)")
    probe_timeout: float = Field(
        default=5.0, description="Timeout for the RPC health probe (seconds)"
    )

    # ======================
    # Transaction building
    # ======================
    default_token_decimals: int = Field(
        default=18, description="Decimals used when a token's decimals() call fails"
    )
    default_gas_limit: int = Field(
        default=100000, description="Gas limit used when estimation fails"
    )
    default_priority_fee_wei: int = Field(
        default=1_000_000_000, description="Priority fee when the node does not suggest one"
    )

    # ======================
    # Relay
    # ======================
    require_rpc_health: bool = Field(
        default=True, description="Probe the RPC endpoint before every broadcast"
    )
    replay_guard_enabled: bool = Field(
        default=True, description="Reject envelopes whose hash was already broadcast"
    )
    replay_guard_ttl_seconds: int = Field(
        default=86400, description="How long a broadcast hash is remembered"
    )
    replay_guard_max_entries: int = Field(
        default=100000, description="Upper bound on remembered hashes"
    )

    # ======================
    # Client
    # ======================
    relay_url: str = Field(
        default="http://localhost:3000", description="Relay base URL used by the client"
    )
    wallet_private_key: Optional[str] = Field(
        default=None, description="Private key for the local development wallet"
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "chain": {
                "chain_id": self.chain_id,
                "rpc": self._redact_url(self.rpc_url),
                "explorer": self.explorer_url,
            },
            "relay": {
                "require_rpc_health": self.require_rpc_health,
                "replay_guard_enabled": self.replay_guard_enabled,
            },
            "wallet_configured": bool(self.wallet_private_key),
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials, API-key paths and query strings of an RPC URL.

        Hosted RPC providers embed API keys either as userinfo or as the
        path (``/v3/<key>``), so only scheme and host survive.
        """
        parts = urlsplit(url)
        if not parts.scheme or not parts.hostname:
            return "***"
        host = parts.hostname
        if parts.port:
            host = f"{host}:{parts.port}"
        suffix = "/***" if parts.path.strip("/") or parts.query else ""
        return f"{parts.scheme}://{host}{suffix}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
