"""
Logging setup for shopcart.

Every module takes its logger from here:

    from shopcart.logging import get_logger
    logger = get_logger(__name__)

Row keys, instance names and item names reach the logs from user input, so
they go through the sanitize helpers first.
"""

import logging
import os
import sys
from functools import cache

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
COMPACT_FORMAT = "%(levelname)s - %(name)s - %(message)s"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")

_CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def configure_logging(level: str | None = None, compact: bool | None = None) -> None:
    """
    Send log records to stdout unless the host application set up logging.

    Args:
        level: Level name, defaults to $LOG_LEVEL or INFO
        compact: Drop timestamps (for collectors that add their own),
            defaults to LOG_FORMAT=simple
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    if compact is None:
        compact = os.environ.get("LOG_FORMAT", "").lower() == "simple"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(COMPACT_FORMAT if compact else DETAILED_FORMAT))
    root.setLevel(numeric_level)
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _clean(value: object) -> str:
    # CWE-117: a newline in a row key must not start a forged log line
    return str(value).translate(_CONTROL_CHARS)


def sanitize_id_for_logging(id_value: object) -> str:
    """Row key or product id cut to its first 8 characters; "N/A" when empty."""
    if id_value is None or id_value == "":
        return "N/A"
    return _clean(id_value)[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """
    Instance or item name safe to log.

    Control characters are escaped and anything over ``max_length`` is cut
    and marked with "...".
    """
    if not value:
        return "N/A"
    cleaned = _clean(value)
    return cleaned if len(cleaned) <= max_length else cleaned[:max_length] + "..."


__all__ = [
    "DETAILED_FORMAT",
    "COMPACT_FORMAT",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
