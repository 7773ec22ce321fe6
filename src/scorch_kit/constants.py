"""Stable constants shared across scorch-kit modules."""

from __future__ import annotations

from typing import Final

# Schema version for persisted runtime config.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Component type reported in status updates.
PAUSE_COMPONENT_TYPE: Final[str] = "pause"

# Status label pushed while a pause is waiting.
STATUS_RUNNING: Final[str] = "running"

# Metadata key that carries template replacements.
REPLACE_KEY: Final[str] = "replace"

# Nanosecond unit table used by duration parsing/formatting.
NANOSECOND: Final[int] = 1
MICROSECOND: Final[int] = 1_000 * NANOSECOND
MILLISECOND: Final[int] = 1_000 * MICROSECOND
SECOND: Final[int] = 1_000 * MILLISECOND
MINUTE: Final[int] = 60 * SECOND
HOUR: Final[int] = 60 * MINUTE

# Wait-loop defaults.
DEFAULT_PAUSE_SECONDS: Final[int] = 10
DEFAULT_TICK_SECONDS: Final[int] = 1

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_PAUSE_SECONDS",
    "DEFAULT_TICK_SECONDS",
    "HOUR",
    "MICROSECOND",
    "MILLISECOND",
    "MINUTE",
    "NANOSECOND",
    "PAUSE_COMPONENT_TYPE",
    "REPLACE_KEY",
    "SECOND",
    "STATUS_RUNNING",
]
