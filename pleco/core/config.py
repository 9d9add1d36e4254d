"""
Core configuration and settings for Pleco.
"""

import json
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from pleco import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PLECO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_logs: bool = False

    # Local drive store (one sub-directory per drive key)
    store_path: str = "./drives"

    # Remote drive daemon
    daemon_url: str | None = None
    daemon_token: str | None = None

    # HTTP (seed fetches and daemon requests)
    http_timeout: float = 30.0
    user_agent: str = f"Pleco/{__version__} (hyperdrive crawler)"

    # Scrape policy
    exclude_dirs: Annotated[list[str], NoDecode] = Field(default=["node_modules", ".git"])
    scrapable_extensions: Annotated[list[str], NoDecode] = Field(
        default=[".htm", ".html", ".md", ".xml", ".json", ".js", ".css"]
    )

    # Crawler
    read_concurrency: int = Field(default=1, ge=1)

    @field_validator("exclude_dirs", "scrapable_extensions", mode="before")
    @classmethod
    def parse_list(cls, v: Any) -> list[str]:
        """Parse list settings from JSON string if needed."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, treat as comma-separated
                return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("scrapable_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Extensions are matched with their leading dot."""
        return [ext if ext.startswith(".") else f".{ext}" for ext in v]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
