"""
Centralized settings for leyline.

Manifesto:
    Every ``LEYLINE_*`` environment variable is parsed once, here, into a
    validated :class:`LeylineSettings`.  Modules ask ``get_settings()`` instead
    of reading ``os.environ`` themselves, so the cache directory, cache
    threshold and logging switches mean the same thing everywhere.

Lenient parsing:
    The threshold and boolean switches never abort the CLI.  An unparsable
    or out-of-range ``LEYLINE_CACHE_THRESHOLD`` becomes ``0.8``;
    unrecognised boolean strings fall back to the field default.

Tags:
    leyline, configuration, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CACHE_THRESHOLD = 0.8
DEFAULT_REMOTE_URL = "https://github.com/phrazzld/leyline.git"
DEFAULT_REMOTE_REF = "master"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


class LeylineSettings(BaseSettings):
    """Leyline configuration.

    All fields can be set via ``LEYLINE_*`` environment variables (e.g.
    ``LEYLINE_CACHE_DIR=/tmp/leyline``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEYLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Cache ────────────────────────────────────────────────────
    cache_dir: str = Field(default="~/.cache/leyline")
    cache_threshold: float = Field(
        default=DEFAULT_CACHE_THRESHOLD,
        description="Minimum cache hit ratio that lets sync skip copying",
    )
    cache_warnings: bool = Field(default=True)
    cache_auto_recovery: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    structured_logging: bool = Field(default=False)
    debug: bool = Field(default=False)
    log_level: str = Field(default="WARNING")

    # ── Remote ───────────────────────────────────────────────────
    remote_url: str = Field(default=DEFAULT_REMOTE_URL)
    remote_ref: str = Field(default=DEFAULT_REMOTE_REF)
    git_timeout_seconds: int = Field(default=120)

    @field_validator("cache_threshold", mode="before")
    @classmethod
    def _coerce_threshold(cls, value: Any) -> float:
        try:
            threshold = float(value)
        except (TypeError, ValueError):
            return DEFAULT_CACHE_THRESHOLD
        if not 0.0 <= threshold <= 1.0:
            return DEFAULT_CACHE_THRESHOLD
        return threshold

    @field_validator(
        "cache_warnings", "cache_auto_recovery", "structured_logging", "debug",
        mode="before",
    )
    @classmethod
    def _lenient_bool(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("git_timeout_seconds", mode="before")
    @classmethod
    def _positive_timeout(cls, value: Any) -> int:
        try:
            seconds = int(value)
        except (TypeError, ValueError):
            return 120
        return seconds if seconds > 0 else 120

    # ── Derived properties ───────────────────────────────────────

    @property
    def cache_path(self) -> Path:
        """Expanded cache directory."""
        return Path(self.cache_dir).expanduser()

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, LeylineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> LeylineSettings:
    """Load, validate, and cache a :class:`LeylineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = LeylineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
