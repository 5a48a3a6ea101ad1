"""Configuration management for Courier."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_ATTEMPT_DELAYS_MS: list[int] = [1000, 3000, 10000, 30000, 60000]


class Settings(BaseSettings):
    """Courier configuration loaded from environment variables.

    All settings can be overridden via environment variables with
    the COURIER_ prefix. For example:
        COURIER_QDRANT_URL=http://localhost:6333
        COURIER_WEBHOOK_MAX_ATTEMPTS=3
        COURIER_WEBHOOK_ATTEMPT_DELAYS_MS='[500, 2000]'

    Per-call arguments to the deliverer always take precedence over
    the webhook defaults configured here.
    """

    # Environment
    env: Literal["development", "production", "test"] = Field(
        default="development",
        description="Environment: development, production, or test",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format: json for production, text for development",
    )

    # Storage
    qdrant_url: str = Field(
        default="http://localhost:6333",
        description="Qdrant connection URL",
    )
    qdrant_api_key: str | None = Field(
        default=None,
        description="Qdrant API key (for cloud)",
    )
    collection_prefix: str = Field(
        default="courier",
        description="Prefix for Qdrant collection names",
    )

    # Webhook delivery
    webhook_max_attempts: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Attempt cycles per delivery (a GET plus fallback POST is one cycle)",
    )
    webhook_attempt_delays_ms: list[int] = Field(
        default_factory=lambda: list(DEFAULT_ATTEMPT_DELAYS_MS),
        description="Backoff schedule in milliseconds, clamped to the last entry",
    )
    webhook_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Per-request HTTP timeout (httpx default)",
    )

    model_config = {
        "env_prefix": "COURIER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("webhook_attempt_delays_ms")
    @classmethod
    def _check_delays(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("webhook_attempt_delays_ms must contain at least one delay")
        if any(delay < 0 for delay in value):
            raise ValueError("webhook_attempt_delays_ms must not contain negative delays")
        return value


# Global settings instance
settings = Settings()
