"""Logging setup for pic-schedule.

All modules log through ``logging.getLogger(__name__)``; this module only
installs one stderr handler on the root logger with the project format.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Marks the handler installed here so repeated calls can find it again.
_HANDLER_ATTR = "_pic_schedule_log_handler"

# HTTP client loggers that are noisy below WARNING.
_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "google_genai",
    "googleapiclient.discovery_cache",
)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for console output.

    Safe to call more than once: the existing handler is reused and only
    its level is updated.  Unless *level* is ``DEBUG``, the HTTP client
    libraries are capped at ``WARNING``.

    Args:
        level: A standard logging level name such as ``"DEBUG"`` or
            ``"warning"`` (case-insensitive).

    Raises:
        ValueError: If *level* is not a recognised logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    library_level = logging.NOTSET if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    existing = next(
        (h for h in root.handlers if getattr(h, _HANDLER_ATTR, False)), None
    )
    if existing is not None:
        existing.setLevel(numeric_level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return the logger called *name* (usually the caller's ``__name__``)."""
    return logging.getLogger(name)
