"""Root logger setup for the panel runtime.

``BOXLINK_LOG_LEVEL`` (name or number) or a truthy ``BOXLINK_DEBUG`` override
both the CLI default and the debug toggle on the settings tab.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "BOXLINK_LOG_LEVEL"
DEBUG_ENV = "BOXLINK_DEBUG"
# Transport and UI loggers; only verbose when the panel itself is at DEBUG.
_LIBRARY_LOGGERS = ("urllib3", "requests", "nicegui", "uvicorn.access")


def _parse_level(value: Union[int, str, None], fallback: int) -> int:
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    candidate = logging.getLevelName(text.upper()) if text else None
    return candidate if isinstance(candidate, int) else fallback


def env_level() -> Optional[int]:
    """Level forced by the environment, or None when nothing is set."""
    explicit = os.getenv(LEVEL_ENV)
    if explicit and explicit.strip():
        return _parse_level(explicit, logging.INFO)
    if (os.getenv(DEBUG_ENV) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def env_debug_forced() -> bool:
    level = env_level()
    return level is not None and level <= logging.DEBUG


def configure_root(default_level: Union[int, str] = logging.INFO) -> int:
    """Install the compact console format; returns the effective level."""
    forced = env_level()
    level = forced if forced is not None else _parse_level(default_level, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=_FORMAT, datefmt=_DATEFMT)
    return _apply(level)


def apply_gui_preferences(debug_enabled: bool) -> int:
    """Apply the settings-tab debug toggle unless the environment pins a level."""
    forced = env_level()
    if forced is not None:
        return _apply(forced)
    return _apply(logging.DEBUG if debug_enabled else logging.INFO)


def _apply(level: int) -> int:
    logging.getLogger().setLevel(level)
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
    return level
