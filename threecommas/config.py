"""Configuration helpers for the 3Commas client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Awaitable, Callable, Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth import ApiKeyType
from .constants import DEFAULT_TIMEOUT_MS, THREECOMMAS_BASE, THREECOMMAS_WS

LOGGER = logging.getLogger(__name__)

ForcedMode = Literal["paper", "real"]

# Called with the remote error body and a ``reject`` callback before a failed
# call raises. May be a plain function or a coroutine function.
ErrorHandler = Callable[[Any, Callable[..., None]], Optional[Awaitable[Any]]]


@dataclass(frozen=True)
class APIOptions:
    """Construction-time options of a client instance."""

    key: str = ""
    api_key_type: ApiKeyType = ApiKeyType.SYSTEM_GENERATED
    secrets: str = ""
    timeout: int = DEFAULT_TIMEOUT_MS
    forced_mode: Optional[ForcedMode] = None
    error_handler: Optional[ErrorHandler] = None
    base_url: str = THREECOMMAS_BASE
    ws_url: str = THREECOMMAS_WS

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


class Settings(BaseSettings):
    """Client settings loaded from environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api_key: str = Field("", alias="THREECOMMAS_API_KEY")
    api_key_type: ApiKeyType = Field(ApiKeyType.SYSTEM_GENERATED, alias="THREECOMMAS_API_KEY_TYPE")
    api_secret: str = Field("", alias="THREECOMMAS_API_SECRET")
    api_secret_file: Optional[Path] = Field(default=None, alias="THREECOMMAS_API_SECRET_FILE")
    timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, alias="THREECOMMAS_TIMEOUT_MS", gt=0)
    forced_mode: Optional[ForcedMode] = Field(default=None, alias="THREECOMMAS_FORCED_MODE")
    base_url: str = Field(THREECOMMAS_BASE, alias="THREECOMMAS_BASE_URL")
    ws_url: str = Field(THREECOMMAS_WS, alias="THREECOMMAS_WS_URL")

    @model_validator(mode="after")
    def _read_secret_file(self) -> "Settings":
        """Prefer the secret stored in ``THREECOMMAS_API_SECRET_FILE`` when set."""

        if self.api_secret_file is None:
            return self
        try:
            self.api_secret = self.api_secret_file.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ValueError(
                f"THREECOMMAS_API_SECRET_FILE points to an unreadable file: {self.api_secret_file}"
            ) from exc
        LOGGER.debug("Loaded API secret from %s", self.api_secret_file)
        return self

    def to_options(self, error_handler: ErrorHandler | None = None) -> APIOptions:
        return APIOptions(
            key=self.api_key,
            api_key_type=self.api_key_type,
            secrets=self.api_secret,
            timeout=self.timeout_ms,
            forced_mode=self.forced_mode,
            error_handler=error_handler,
            base_url=self.base_url.rstrip("/"),
            ws_url=self.ws_url,
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""

    return Settings()  # type: ignore[call-arg]


__all__ = ["APIOptions", "ErrorHandler", "ForcedMode", "Settings", "get_settings"]
