"""Logging configuration helpers."""

from __future__ import annotations

import logging.config
from typing import Any

from .config import LoggingSettings

PACKAGE_LOGGER = "clinical_triage"

# Third-party loggers that only add request noise at INFO.
QUIET_LOGGERS = ("uvicorn.access", "httpx")

_FORMATS: dict[bool, dict[str, str]] = {
    True: {
        "format": "ts={asctime} level={levelname} logger={name} msg={message}",
        "style": "{",
    },
    False: {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
}


def build_logging_config(settings: LoggingSettings) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for ``settings``."""
    level = settings.level
    loggers: dict[str, dict[str, Any]] = {
        PACKAGE_LOGGER: {"level": level, "propagate": True},
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"triage": dict(_FORMATS[settings.structured])},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "triage",
                "level": level,
            },
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": level},
    }


def configure_logging(settings: LoggingSettings) -> None:
    """Install console logging for the application and its dependencies."""
    logging.config.dictConfig(build_logging_config(settings))


__all__ = ["build_logging_config", "configure_logging"]
