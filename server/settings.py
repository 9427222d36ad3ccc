"""
Server configuration using pydantic-settings.

Environment variables (prefix: DEAL_):
    DEAL_HOST               - Bind address (default: 0.0.0.0)
    DEAL_PORT               - Port (default: 3001)
    DEAL_LOG_LEVEL          - Logging level name (default: INFO)
    DEAL_CORS_ORIGINS       - Comma-separated allowed origins
    DEAL_HEARTBEAT_SECONDS  - WebSocket heartbeat interval (default: 25)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ServerSettings(BaseSettings):
    """Configuration for the room server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="DEAL_",
    )

    host: str = Field(default="0.0.0.0", description="Address the HTTP server binds to.")
    port: int = Field(default=3001, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    cors_origins: str = Field(
        default="http://localhost:5173",
        description="Comma-separated list of origins allowed by CORS.",
    )
    heartbeat_seconds: float = Field(default=25.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept any standard logging level name, case-insensitively."""
        level = value.upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> ServerSettings:
    """Return cached server settings instance."""
    return ServerSettings()
