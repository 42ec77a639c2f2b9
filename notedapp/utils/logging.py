from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"
_LEVEL_ENV_VAR = "NOTEDAPP_LOG_LEVEL"
_DEBUG_FLAG = "NOTEDAPP_DEBUG"


def _coerce_level(value: Optional[str], fallback: int) -> int:
    if not value:
        return fallback
    text = value.strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    candidate = logging.getLevelName(text.upper())
    if isinstance(candidate, int):
        return candidate
    return fallback


def _env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def resolve_env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    env = os.environ if environ is None else environ
    value = env.get(_LEVEL_ENV_VAR)
    if value:
        return _coerce_level(value, logging.INFO)
    if _env_truthy(env.get(_DEBUG_FLAG)):
        return logging.DEBUG
    return None


def configure_root(
    default_level: int | str = logging.INFO,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Configure the root logger with a compact format.

    Environment overrides:
      - NOTEDAPP_LOG_LEVEL: explicit log level (name or number)
      - NOTEDAPP_DEBUG: truthy -> DEBUG
    """
    fallback = (
        _coerce_level(default_level, logging.INFO)
        if isinstance(default_level, str)
        else int(default_level)
    )
    env_level = resolve_env_level(environ)
    effective = env_level if env_level is not None else fallback

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)
    root.setLevel(effective)
    return effective


def apply_debug_preference(
    debug_enabled: bool,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Update root log level from the debug setting while honoring env overrides.
    Returns the effective level after the update.
    """
    env_level = resolve_env_level(environ)
    level = env_level if env_level is not None else (logging.DEBUG if debug_enabled else logging.INFO)
    logging.getLogger().setLevel(level)
    return level


def level_name(level: int) -> str:
    """Return logging level name for diagnostics."""
    return logging.getLevelName(level)
