"""
Process-wide logging setup (stdlib `logging`).
"""

from __future__ import annotations

import logging

from . import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    level = logging.getLevelName(settings.log_level())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    # Keep handlers installed by uvicorn or pytest.
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)

    # Request lines are already emitted by uvicorn.access; asyncpg is chatty at DEBUG.
    logging.getLogger("asyncpg").setLevel(max(level, logging.INFO))
