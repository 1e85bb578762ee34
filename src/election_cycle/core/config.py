"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

import re
from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy connection string (postgresql+asyncpg://...)",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # JWT
    jwt_secret_key: str = Field(min_length=32, description="Secret key for signing JWTs (minimum 32 characters)")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=30,
        description="Access token expiration in minutes",
        gt=0,
    )
    jwt_refresh_token_expire_days: int = Field(
        default=7,
        description="Refresh token expiration in days",
        gt=0,
    )

    # Election: identities and ballot shape
    operator_identity: str = Field(
        default="election",
        min_length=1,
        max_length=64,
        description="Identity that runs the election and publishes ballots",
    )
    treasury_symbol: str = Field(
        default="8,VOTE",
        description="Treasury / weight-class tag voters are enrolled under",
    )
    ballot_category: str = Field(default="election", description="Category of created ballots")
    voting_method: str = Field(default="1token1vote", description="Voting method of created ballots")
    weighting_mode: str = Field(
        default="votestake",
        description="Weighting mode toggled on a ballot right after creation",
    )

    # Election: ballot creation fee
    ballot_fee_recipient: str = Field(default="decide", description="Recipient of the one-time ballot fee")
    ballot_fee_amount: Decimal = Field(
        default=Decimal("30.00000000"),
        description="Ballot creation fee paid once per cycle",
        ge=0,
    )
    ballot_fee_symbol: str = Field(default="WAX", description="Token symbol of the ballot fee")
    ballot_fee_memo: str = Field(default="Ballot Fee Payment", description="Memo attached to the fee transfer")

    # Election: per-invocation work caps
    sync_batch_size: int = Field(
        default=100,
        description="Voters synchronized per advance call once voting has closed",
        gt=0,
    )
    cleanup_batch_size: int = Field(
        default=200,
        description="Voters migrated per cleanup step",
        gt=0,
    )
    nomination_purge_threshold: int = Field(
        default=200,
        description="Nomination total at which unaccepted nominations are purged",
        gt=0,
        le=255,
    )
    self_nomination_accept_limit: int = Field(
        default=150,
        description="Self nominations are auto-accepted while the nomination total is below this",
        ge=0,
        le=255,
    )

    # External services
    ballot_service_url: str = Field(
        default="http://localhost:8888",
        description="Base URL of the external ballot/voting service",
    )
    ballot_service_timeout: float = Field(
        default=10.0,
        description="Ballot service request timeout in seconds",
        gt=0,
    )
    ledger_url: str = Field(
        default="http://localhost:8889",
        description="Base URL of the token ledger",
    )
    ledger_timeout: float = Field(
        default=10.0,
        description="Ledger request timeout in seconds",
        gt=0,
    )

    @field_validator("ballot_service_url", "ledger_url")
    @classmethod
    def validate_service_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            msg = "service URLs must use http or https"
            raise ValueError(msg)
        return v.rstrip("/")

    # Scheduler
    auto_advance_enabled: bool = Field(
        default=False,
        description="Enable the background loop that advances the election periodically",
    )
    auto_advance_interval: int = Field(
        default=60,
        description="Seconds between background advance calls",
        ge=10,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins (must be explicitly configured)",
    )
    cors_origin_regex: str = Field(
        default="",
        description="Regex pattern for allowed CORS origins",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name (e.g. production, dev, staging)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )
    rate_limit_per_minute: int = Field(
        default=200,
        description="Maximum API requests per minute per IP address",
        gt=0,
    )
    trusted_proxy_headers: str = Field(
        default="CF-Connecting-IP,X-Forwarded-For,X-Real-IP",
        description="Comma-separated list of HTTP headers to check for real client IP, in priority order",
    )

    @property
    def trusted_proxy_header_list(self) -> list[str]:
        """Parse trusted proxy headers string into a list."""
        if not self.trusted_proxy_headers.strip():
            return []
        return [h.strip() for h in self.trusted_proxy_headers.split(",") if h.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
