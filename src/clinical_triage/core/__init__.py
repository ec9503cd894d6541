"""Core utilities for configuration, logging, and dependency wiring."""

from .config import AppSettings, LoggingSettings, RefreshSettings, load_app_settings
from .container import ServiceContainer
from .interfaces import IngestionError
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "IngestionError",
    "LoggingSettings",
    "RefreshSettings",
    "ServiceContainer",
    "configure_logging",
    "load_app_settings",
]
