"""Lifecycle components and the registry for detached background work."""

from scorch_kit.control_plane.background import (
    BackgroundEntry,
    BackgroundRegistry,
    BackgroundRunner,
)
from scorch_kit.control_plane.pause import PauseComponent

__all__ = [
    "BackgroundEntry",
    "BackgroundRegistry",
    "BackgroundRunner",
    "PauseComponent",
]
