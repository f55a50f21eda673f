"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (DATABASE_URL, SECRET_KEY) are
validated at load time.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (database_url, secret_key).
    """

    # App
    app_name: str = "procurement"
    app_version: str = "1.0.0"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Database (PostgreSQL via asyncpg)
    database_url: str = ""
    database_echo: bool = False
    # Optional pool overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Procurement rules
    default_currency: str = "JMD"
    threshold_works_amount: Decimal = Decimal("5000000")
    threshold_goods_services_amount: Decimal = Decimal("3000000")
    combinable_list_limit: int = 100
    splinter_threshold_amount: Decimal = Decimal("250000")
    splinter_window_days: int = 30

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"
    vote_rate_limit: str = "30/minute"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env and rule amounts."""
        if not self.database_url:
            raise ValueError(
                "DATABASE_URL is required (postgresql+asyncpg://...). "
                "Set in environment or .env file."
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if self.threshold_works_amount <= 0 or self.threshold_goods_services_amount <= 0:
            raise ValueError("Threshold amounts must be positive")
        if self.splinter_threshold_amount <= 0 or self.splinter_window_days < 1:
            raise ValueError("Splintering threshold and window must be positive")
        if len(self.default_currency) != 3:
            raise ValueError(
                f"DEFAULT_CURRENCY must be a 3-letter code, got: {self.default_currency!r}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
