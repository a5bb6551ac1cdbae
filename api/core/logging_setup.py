"""
Process-wide logging configuration.

Feature modules log through `logging.getLogger(__name__)` with short
`event key=value` messages; this module only decides level and format.
"""

from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def log_level() -> int:
    raw = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    level = logging.getLevelName(raw)
    # getLevelName returns a string like "Level FOO" for unknown names.
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    logging.basicConfig(level=log_level(), format=DEFAULT_FORMAT)
    # asyncpg is chatty at DEBUG; keep it at the app level or above.
    logging.getLogger("asyncpg").setLevel(max(log_level(), logging.INFO))
