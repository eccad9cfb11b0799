from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"
_LEVEL_ENV_VARS = ("SSUI_LOG_LEVEL",)
_DEBUG_FLAGS = ("SSUI_DEBUG",)

_COLOR_RESET = "\033[0m"
_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}


def _coerce_level(value: Optional[str], fallback: int) -> int:
    if not value:
        return fallback
    text = value.strip()
    if not text:
        return fallback
    if text.isdecimal():
        return int(text)
    upper = text.upper()
    if hasattr(logging, upper):
        candidate = getattr(logging, upper)
        if isinstance(candidate, int):
            return candidate
    return fallback


def env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_env_level() -> Optional[int]:
    for var in _LEVEL_ENV_VARS:
        value = os.getenv(var)
        if value:
            return _coerce_level(value, logging.INFO)
    if any(env_truthy(os.getenv(flag)) for flag in _DEBUG_FLAGS):
        return logging.DEBUG
    return None


class ColorFormatter(logging.Formatter):
    """Wrap each record in an ANSI colour picked by level."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        if not color:
            return text
        return f"{color}{text}{_COLOR_RESET}"


def configure_root(default_level: int | str = logging.INFO, *, color: bool = False) -> int:
    """
    Configure the root logger with a compact format.

    Environment overrides:
      - SSUI_LOG_LEVEL: explicit log level
      - SSUI_DEBUG: truthy -> DEBUG
    """
    fallback = (
        _coerce_level(default_level, logging.INFO)
        if isinstance(default_level, str)
        else int(default_level)
    )
    effective = _resolve_env_level() or fallback

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter_cls = ColorFormatter if color else logging.Formatter
        handler.setFormatter(formatter_cls(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT))
        root.addHandler(handler)
    root.setLevel(effective)
    return effective