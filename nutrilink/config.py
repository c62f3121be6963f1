"""
Runtime configuration.

Settings are read from environment variables, optionally seeded from a
``.env`` file:

Example .env:
    USDA_API_KEY=your-fdc-key
    OFF_USER_AGENT=Nutrilink/1.0 (+https://example.org)
    SEARCH_CACHE_TTL_SECONDS=3600
    LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Process-wide settings.

    Example:
        >>> settings = Settings(usda_api_key="abc")
        >>> assert settings.search_cache_ttl_seconds == 3600
    """

    model_config = ConfigDict(frozen=True)

    usda_api_key: Optional[str] = Field(None, description="FDC API key")
    usda_base_url: str = Field("https://api.nal.usda.gov/fdc/v1")
    usda_requests_per_hour: int = Field(1000, gt=0)
    off_base_url: str = Field("https://world.openfoodfacts.org")
    off_user_agent: str = Field("Nutrilink/1.0")
    http_timeout_seconds: int = Field(10, gt=0)
    search_cache_ttl_seconds: int = Field(3600, ge=0)
    item_cache_ttl_seconds: int = Field(86400, ge=0)
    not_found_cache_ttl_seconds: int = Field(900, ge=0)
    log_level: str = Field("INFO")
    log_json: bool = Field(False)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> Settings:
        """
        Build settings from the environment.

        Args:
            dotenv_path: Optional explicit ``.env`` path (default: search cwd)

        Returns:
            Settings instance
        """
        load_dotenv(dotenv_path)

        return cls(
            usda_api_key=os.getenv("USDA_API_KEY") or None,
            usda_base_url=os.getenv("USDA_BASE_URL", "https://api.nal.usda.gov/fdc/v1"),
            usda_requests_per_hour=_env_int("USDA_REQUESTS_PER_HOUR", 1000),
            off_base_url=os.getenv("OFF_BASE_URL", "https://world.openfoodfacts.org"),
            off_user_agent=os.getenv("OFF_USER_AGENT", "Nutrilink/1.0"),
            http_timeout_seconds=_env_int("HTTP_TIMEOUT_SECONDS", 10),
            search_cache_ttl_seconds=_env_int("SEARCH_CACHE_TTL_SECONDS", 3600),
            item_cache_ttl_seconds=_env_int("ITEM_CACHE_TTL_SECONDS", 86400),
            not_found_cache_ttl_seconds=_env_int("NOT_FOUND_CACHE_TTL_SECONDS", 900),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOG_JSON", False),
        )
