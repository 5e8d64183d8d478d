"""Central logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from src.core.config import settings


def _root_level() -> str:
    if settings.log_level:
        return settings.log_level.upper()
    return "DEBUG" if settings.environment == "development" else "INFO"


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "loggers": {
        # SQL echo at DEBUG drowns out callback traces
        "sqlalchemy.engine": {"level": "WARNING"},
    },
    "root": {
        "handlers": ["console"],
        "level": _root_level(),
    },
}


def configure_logging() -> None:
    """Apply the logging configuration once at application startup."""

    dictConfig(LOGGING_CONFIG)


logger = logging.getLogger("ses-callbacks")
