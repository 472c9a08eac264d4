"""Structured logging setup for family-cal.

One stderr handler, one format, shared by the library and the CLI.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Marks the handler we own so repeated setup calls do not stack handlers.
_HANDLER_ATTR = "_family_cal_log_handler"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with the project formatter.

    Safe to call more than once; a second call only updates the level.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``).

    Raises:
        ValueError: If *level* is not a recognised logging level string.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)

    # The Google and Supabase HTTP stacks are chatty at INFO.
    for noisy in ("httpx", "googleapiclient.discovery_cache"):
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))
