"""Pause directive parsing and duration resolution."""

from scorch_kit.pause.directive import (
    DEFAULT_PAUSE_DURATION,
    PauseDirective,
    parse_pause_directive,
    resolve_pause_duration,
)

__all__ = [
    "DEFAULT_PAUSE_DURATION",
    "PauseDirective",
    "parse_pause_directive",
    "resolve_pause_duration",
]
