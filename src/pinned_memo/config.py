"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for logging and block timers."""

    log_level: str = "INFO"
    log_json: bool = False
    timing_enabled: bool = False


def _flag(name: str) -> bool:
    raw = os.getenv(name, "0").strip()
    if raw not in {"0", "1"}:
        raise ValueError(f"{name} must be one of: 0, 1")
    return raw == "1"


def log_level_from_env() -> str:
    """Return the validated PINNED_MEMO_LOG_LEVEL value."""
    level = os.getenv("PINNED_MEMO_LOG_LEVEL", "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"PINNED_MEMO_LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")
    return level


def timing_enabled_from_env() -> bool:
    """Return the PINNED_MEMO_TIMING flag without reading any other variable."""
    return _flag("PINNED_MEMO_TIMING")


def settings_from_env() -> Settings:
    """
    Build Settings from environment variables.

    Optional:
      - PINNED_MEMO_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL; default INFO)
      - PINNED_MEMO_LOG_JSON ("1" renders JSON lines; default "0")
      - PINNED_MEMO_TIMING ("1" enables block timers; default "0")
    """
    return Settings(
        log_level=log_level_from_env(),
        log_json=_flag("PINNED_MEMO_LOG_JSON"),
        timing_enabled=timing_enabled_from_env(),
    )
