"""Logging configuration helpers for padsampler."""

from __future__ import annotations

import logging
import sys

from . import settings


def configure_logging(default_level: str | None = None) -> int:
    """Configure process-wide logging and return the resolved level.

    The level comes from ``LOG_LEVEL``; ``default_level`` overrides it when given.
    """
    level_name = (default_level or settings.LOG_LEVEL).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
        invalid_level = level_name
    else:
        invalid_level = None

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    if invalid_level is not None:
        logging.getLogger(__name__).warning(
            "Invalid LOG_LEVEL '%s'; using %s", invalid_level, logging.getLevelName(level)
        )

    return level
