"""
Environment-driven settings for the Purple Shopping backend.

Values come from process environment variables or a ``.env`` file, using
the upper snake case names below. ``get_settings()`` caches one instance.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Final, Literal

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["local", "test", "staging", "production"]

TELEGRAM_WEBAPP_ORIGINS: Final[frozenset[str]] = frozenset(
    {"https://web.telegram.org", "https://webapp.telegram.org"}
)
LOCAL_ENVIRONMENTS: Final[frozenset[str]] = frozenset({"local", "test"})
LOCALHOST_PREFIX: Final[str] = "http://localhost"


def parse_origins(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated string, JSON array string or list into origins.

    Trailing slashes are dropped so origins compare equal to browser ``Origin`` headers.
    """
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return [str(item).strip().rstrip("/") for item in decoded if str(item).strip()]
        return [part.strip().rstrip("/") for part in text.split(",") if part.strip()]
    if isinstance(value, list):
        origins = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise ValueError("CORS origin list entries must be non-empty strings.")
            origins.append(item.strip().rstrip("/"))
        return origins
    raise ValueError("CORS origins must be provided as a string or list of strings.")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    project_name: str = Field(default="Purple Shopping Backend", alias="PROJECT_NAME")
    environment: Environment = Field(default="local", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api", alias="API_V1_PREFIX")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(alias="DATABASE_URL")

    # Age limit for initData, measured from its auth_date.
    telegram_init_data_max_age_seconds: int = Field(
        default=24 * 60 * 60,
        alias="TELEGRAM_INIT_DATA_MAX_AGE_SECONDS",
        gt=0,
    )

    production_app_origin: AnyHttpUrl | None = Field(default=None, alias="PRODUCTION_APP_ORIGIN")
    raw_backend_cors_origins: str | None = Field(default=None, alias="BACKEND_CORS_ORIGINS")
    max_request_bytes: int = Field(default=1024 * 1024, alias="MAX_REQUEST_BYTES", gt=0)

    # Public base URL of the storefront; Mini-App buttons and bot webhooks point here.
    site_url: str = Field(default="http://localhost:3000", alias="SITE_URL")

    @field_validator("database_url", mode="before")
    @classmethod
    def _require_database_url(cls, value: object) -> str:
        url = str(value or "").strip()
        if not url:
            raise ValueError("DATABASE_URL must not be empty.")
        return url

    @field_validator("site_url", mode="before")
    @classmethod
    def _normalise_site_url(cls, value: object) -> str:
        url = str(value or "").strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("SITE_URL must be an absolute http(s) URL.")
        return url

    @property
    def backend_cors_origins(self) -> list[str]:
        """Localhost origins from BACKEND_CORS_ORIGINS, honoured only in local/test.

        Raises:
            ValueError: if an entry is not an ``http://localhost`` origin.
        """
        if self.environment not in LOCAL_ENVIRONMENTS:
            return []

        origins = parse_origins(self.raw_backend_cors_origins)
        for origin in origins:
            if not origin.startswith(LOCALHOST_PREFIX):
                raise ValueError(
                    f"BACKEND_CORS_ORIGINS accepts only {LOCALHOST_PREFIX}:* origins, got "
                    f"{origin!r}. Use PRODUCTION_APP_ORIGIN for deployed domains."
                )
        return origins

    @property
    def cors_origins(self) -> list[str]:
        """Every origin allowed by CORS: Telegram clients, localhost and production."""
        origins = set(TELEGRAM_WEBAPP_ORIGINS) | set(self.backend_cors_origins)
        if self.production_app_origin is not None:
            origins.add(str(self.production_app_origin).rstrip("/"))
        return sorted(origins)


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


settings = get_settings()

__all__ = ["Settings", "TELEGRAM_WEBAPP_ORIGINS", "get_settings", "parse_origins", "settings"]
