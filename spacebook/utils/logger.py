"""Process-wide logging setup shared by every layer."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from spacebook.utils.config import get_settings


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
_configured = False


def _resolve_level(name: str) -> Optional[int]:
    """Return the numeric level for a name or alias such as WARN, else None."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stdout handler once; later calls are no-ops.

    Sync endpoints run on a worker pool, so each line carries the thread
    name to tell concurrent booking attempts apart.
    """

    global _configured
    if _configured:
        return

    requested = level or get_settings().log_level
    resolved = _resolve_level(requested)
    logging.basicConfig(
        level=logging.INFO if resolved is None else resolved,
        format=_LOG_FORMAT,
        stream=sys.stdout,
    )
    if resolved is None:
        logging.getLogger(__name__).warning("Unknown LOG_LEVEL %r; using INFO", requested)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
