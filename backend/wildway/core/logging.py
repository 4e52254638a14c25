"""Simple logging setup for the application."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | None = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if root.handlers:
        # Already configured (uvicorn, pytest); only honour the requested level.
        root.setLevel(level_name)
    else:
        logging.basicConfig(level=level_name, format=LOG_FORMAT)

    # SQL echo is only useful when explicitly debugging.
    if level_name != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
