"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator

SortKey = Literal["priority", "date", "sender"]
SortOrder = Literal["asc", "desc"]

_LEVEL_NAMES = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle brace-style structured logging"
    )

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVEL_NAMES:
            raise ValueError(f"unknown logging level '{value}'")
        return level


class RefreshSettings(BaseModel):
    """Settings controlling the periodic re-ingestion of messages."""

    enabled: bool = Field(
        default=False, description="Re-load sources on a fixed interval"
    )
    interval_seconds: float = Field(
        default=30.0, ge=1.0, description="Seconds between scheduled loads"
    )


class InboxSettings(BaseModel):
    """Initial view state applied to a freshly created email store."""

    default_folder: str = Field(default="inbox", description="Active folder")
    sort_by: SortKey = Field(default="priority", description="Initial sort key")
    sort_order: SortOrder = Field(default="asc", description="Initial direction")


class SourceSettings(BaseModel):
    """Where raw messages are read from."""

    json_path: Path | None = Field(
        default=None,
        description="JSON file holding emails and notifications; "
        "the built-in sample set is used when unset",
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    inbox: InboxSettings = Field(default_factory=InboxSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)


ENV_PREFIX = "CLINICAL_TRIAGE_"
_BOOLEAN_WORDS = {"true": True, "false": False}


def _settings_path(raw_key: str) -> list[str]:
    """Map ``CLINICAL_TRIAGE_REFRESH__ENABLED`` to ``["refresh", "enabled"]``."""
    return [part.lower() for part in raw_key[len(ENV_PREFIX) :].split("__") if part]


def _parse_env_value(value: str | None) -> Any:
    """Blank values mean unset; true/false become booleans."""
    if value is None or value == "":
        return None
    return _BOOLEAN_WORDS.get(value.lower(), value)


def _prefixed(items: Mapping[str, str | None]) -> dict[str, str | None]:
    return {key: value for key, value in items.items() if key.startswith(ENV_PREFIX)}


def _collect_env_values(
    env_file: Path | str | None, *, include_environment: bool
) -> dict[str, Any]:
    """Build a nested settings tree from an env file and the process environment.

    Process variables take precedence over the file.
    """
    raw: dict[str, str | None] = {}
    if env_file and Path(env_file).is_file():
        raw.update(_prefixed(dotenv_values(env_file)))
    if include_environment:
        raw.update(_prefixed(os.environ))

    tree: dict[str, Any] = {}
    for key, value in raw.items():
        path = _settings_path(key)
        if not path:
            continue
        node = tree
        for part in path[:-1]:
            node = cast(dict[str, Any], node.setdefault(part, {}))
        node[path[-1]] = _parse_env_value(value)
    return tree


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment=include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "InboxSettings",
    "LoggingSettings",
    "RefreshSettings",
    "SortKey",
    "SortOrder",
    "SourceSettings",
    "load_app_settings",
]
