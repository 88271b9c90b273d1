"""Application-wide logging setup.

Plain-text records on stdout in development; the level comes from
``settings.LOG_LEVEL``. Every module logger lives under the ``statebook``
namespace so third-party noise can be tuned separately.
"""

from __future__ import annotations

import logging
import sys

from statebook.config import settings

ROOT_LOGGER = "statebook"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str | None = None) -> None:
    global _configured

    numeric_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(numeric_level)

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        _configured = True

    # SQLAlchemy echo is controlled by DB_ECHO; keep its default logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DB_ECHO else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
