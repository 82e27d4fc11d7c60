from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """
    Central configuration for the Financial MCP server.

    Values are loaded from environment variables (case-insensitive), e.g.
    `ALPHA_VANTAGE_API_KEY` and `FMP_API_KEY`. A `.env` file in the working
    directory is read as well during development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Upstream APIs
    alpha_vantage_api_key: str
    fmp_api_key: str
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    fmp_base_url: str = "https://financialmodelingprep.com/api/v3"
    request_timeout: Optional[float] = None  # None waits indefinitely

    # Transport
    mcp_transport: Literal["stdio", "http"] = "stdio"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8000

    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


class RuntimeContext(BaseModel):
    """
    Process-wide runtime context for the MCP server.

    This is created once in `main.py` and passed down where needed.
    """

    settings: Settings


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment, failing fast on missing credentials.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        missing = [
            str(err["loc"][0]).upper()
            for err in exc.errors()
            if err["type"] == "missing" and err["loc"]
        ]
        if missing:
            raise ConfigurationError(
                f"{missing[0]} environment variable is required"
            ) from exc
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from environment."""
    return load_settings()
