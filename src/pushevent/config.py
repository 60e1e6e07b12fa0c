"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with PUSHEVENT_ prefix.
No config files — just env vars (12-factor app style).
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via PUSHEVENT_* env vars."""

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 3012

    # Delivery
    outbound_queue_size: int = 64  # per-connection buffer before a client is dropped

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_prefix": "PUSHEVENT_"}

    @field_validator("outbound_queue_size")
    @classmethod
    def validate_queue_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("PUSHEVENT_OUTBOUND_QUEUE_SIZE must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# Singleton — import this everywhere
settings = Settings()
