"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

TRUTHY_VALUES = {"1", "true", "yes", "on"}

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class RestoreSettings:
    """
    Runtime settings for bulk restore tooling.
    """

    batch_size: int = 100
    batch_delay_seconds: float = 0.2
    export_page_size: int = 1000


@dataclass(frozen=True)
class ImageRelaySettings:
    """
    Runtime settings for the image relay endpoint.
    """

    timeout_seconds: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    cache_max_age_seconds: int = 31_536_000


@lru_cache(maxsize=1)
def get_restore_settings() -> RestoreSettings:
    """
    Return cached restore settings from environment variables.
    """

    return RestoreSettings(
        batch_size=max(1, _get_int_env("RESTORE_BATCH_SIZE", 100)),
        batch_delay_seconds=max(0.0, _get_float_env("RESTORE_BATCH_DELAY_SECONDS", 0.2)),
        export_page_size=max(1, _get_int_env("BACKUP_EXPORT_PAGE_SIZE", 1000)),
    )


@lru_cache(maxsize=1)
def get_image_relay_settings() -> ImageRelaySettings:
    """
    Return cached image relay settings from environment variables.
    """

    return ImageRelaySettings(
        timeout_seconds=max(1.0, _get_float_env("IMAGE_RELAY_TIMEOUT_SECONDS", 15.0)),
        user_agent=_get_str_env("IMAGE_RELAY_USER_AGENT", DEFAULT_USER_AGENT),
        cache_max_age_seconds=max(0, _get_int_env("IMAGE_RELAY_CACHE_MAX_AGE_SECONDS", 31_536_000)),
    )
