"""Process-wide logging configuration."""

from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "httpx")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    from .config import settings

    resolved = (level or settings.log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root.setLevel(resolved)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
