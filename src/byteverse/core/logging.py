"""Process-wide logging configuration."""

from __future__ import annotations

import logging
from logging.config import dictConfig

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process.

    Uvicorn's access and error loggers keep their own handlers. Package
    loggers under ``byteverse`` propagate to the root console handler.
    """
    resolved = level.upper()
    if resolved not in logging.getLevelNamesMapping():
        resolved = "INFO"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"plain": {"format": _FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "level": resolved,
                },
            },
            "loggers": {
                "byteverse": {"level": resolved},
            },
            "root": {"level": resolved, "handlers": ["console"]},
        }
    )
