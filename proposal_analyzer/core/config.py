"""
Application configuration models and helpers.

Centralizes settings management so both the FastAPI service and the client
session share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_API_KEYS = frozenset({"", "your_gemini_api_key_here", "changeme"})


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class GeminiSettings(BaseSettings):
    """Configuration for Gemini model access.

    The API key is optional: without it the service runs in a degraded mode
    and answers analysis requests with ``AI_NOT_CONFIGURED``.
    """

    api_key: Optional[str] = Field(None, validation_alias="GEMINI_API_KEY")
    model_name: str = Field("gemini-2.5-flash", validation_alias="GEMINI_MODEL_NAME")
    temperature: float = Field(0.3, validation_alias="GEMINI_TEMPERATURE")
    max_output_tokens: int = Field(
        1500,
        validation_alias="GEMINI_MAX_OUTPUT_TOKENS",
        description="Upper bound on the size of the structured analysis.",
    )

    @property
    def is_configured(self) -> bool:
        """Return True when a usable (non-placeholder) API key is present."""
        return (self.api_key or "").strip() not in _PLACEHOLDER_API_KEYS


class UploadSettings(BaseSettings):
    """Limits applied to uploaded proposals."""

    max_upload_bytes: int = Field(
        10 * 1024 * 1024,
        validation_alias="MAX_UPLOAD_BYTES",
        description="Largest accepted PDF, enforced by both client and server.",
    )


class RateLimitSettings(BaseSettings):
    """Per-client request cap for the analysis endpoint."""

    max_requests: int = Field(10, validation_alias="RATE_LIMIT_MAX_REQUESTS")
    window_seconds: int = Field(15 * 60, validation_alias="RATE_LIMIT_WINDOW_SECONDS")


class ClientSettings(BaseSettings):
    """Settings used by the client session that talks to the service."""

    analysis_api_url: str = Field(
        "http://localhost:5001/api",
        validation_alias="ANALYSIS_API_URL",
        description="Base URL of the analysis service API.",
    )
    request_timeout_seconds: float = Field(60.0, validation_alias="ANALYSIS_TIMEOUT")
    fallback_delay_seconds: float = Field(
        2.0,
        validation_alias="DEMO_FALLBACK_DELAY",
        description="Pause before showing the fallback result when the service fails.",
    )
    demo_delay_seconds: float = Field(
        3.0,
        validation_alias="DEMO_DELAY",
        description="Pause before showing the canned result of an explicit demo run.",
    )
    export_dir: Path = Field(Path("."), validation_alias="EXPORT_DIR")


class AppSettings(BaseSettings):
    """Root settings object for the service and client session."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_url: str = Field(
        "http://localhost:3000",
        validation_alias="FRONTEND_URL",
        description="Comma-separated origins allowed to call the API from a browser.",
    )
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)

    @property
    def frontend_origins(self) -> tuple[str, ...]:
        """Split the configured origins into a tuple."""
        return tuple(
            origin.strip() for origin in self.frontend_url.split(",") if origin.strip()
        )


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ClientSettings",
    "GeminiSettings",
    "RateLimitSettings",
    "UploadSettings",
    "get_settings",
]
