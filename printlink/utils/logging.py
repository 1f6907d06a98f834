"""Root logger setup for the CLI.

Environment overrides win over persisted settings:
  - PRINTLINK_LOG_LEVEL: level name or number
  - PRINTLINK_DEBUG: truthy -> DEBUG
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LEVEL_ENV = "PRINTLINK_LOG_LEVEL"
DEBUG_ENV = "PRINTLINK_DEBUG"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
# urllib3 logs one line per connection; a subnet scan opens hundreds.
_CHATTY_LOGGERS = ("urllib3.connectionpool",)
_TRUTHY = {"1", "true", "yes", "on"}


def _parse_level(value: int | str | None, fallback: int) -> int:
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if not text:
        return fallback
    try:
        return int(text)
    except ValueError:
        pass
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def _env_level() -> Optional[int]:
    raw = os.getenv(LEVEL_ENV)
    if raw and raw.strip():
        return _parse_level(raw, logging.INFO)
    if (os.getenv(DEBUG_ENV) or "").strip().lower() in _TRUTHY:
        return logging.DEBUG
    return None


def _set_level(level: int) -> int:
    logging.getLogger().setLevel(level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    return level


def configure_root(default_level: int | str = logging.INFO) -> int:
    """Install a compact handler once and return the effective level."""
    level = _env_level()
    if level is None:
        level = _parse_level(default_level, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(format=_FORMAT, datefmt=_DATEFMT)
    return _set_level(level)


def apply_preferences(debug_enabled: bool) -> int:
    """Switch between INFO and DEBUG from settings unless the environment decides."""
    level = _env_level()
    if level is None:
        level = logging.DEBUG if debug_enabled else logging.INFO
    return _set_level(level)


__all__ = ["DEBUG_ENV", "LEVEL_ENV", "apply_preferences", "configure_root"]
