"""
utils/logger.py
---------------
Process-wide logging setup for the bot and its storage layer.
Modules call `get_logger(__name__)`; the first call installs one stdout
handler on the root logger at LOG_LEVEL.
"""

import logging
import sys

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers (httpx logs every Telegram poll at INFO)
_QUIET_LOGGERS = ("httpx", "telegram.ext.Updater", "apscheduler")

_handler: logging.Handler | None = None


def resolve_level(name: str) -> int:
    """'debug' -> logging.DEBUG; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _install_handler() -> None:
    global _handler
    if _handler is not None:
        return
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(resolve_level(LOG_LEVEL))
    root.addHandler(_handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger for one module; usually called with ``__name__``."""
    _install_handler()
    return logging.getLogger(name)
