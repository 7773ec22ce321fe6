"""Error taxonomy for metadata resolution and pause execution.

Every ``MetadataError`` is raised before a pause announces itself, emits a
status update, or launches a background task, so callers can treat them as
side-effect free.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MetadataIssue:
    """Single structured metadata validation failure."""

    path: str
    message: str


class MetadataError(ValueError):
    """Base class for metadata validation and decode failures."""


class MetadataValidationError(MetadataError):
    """Raised when metadata has the wrong shape or types."""

    def __init__(self, issues: Sequence[MetadataIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid metadata:\n{rendered}")


class ConflictingSpecError(MetadataError):
    """Raised when both ``duration`` and ``random`` are given."""

    def __init__(self) -> None:
        super().__init__("cannot specify both duration and random")


class MultipleDistributionsSpecifiedError(MetadataError):
    """Raised when more than one distribution family is populated."""

    def __init__(self, path: str, families: Sequence[str]) -> None:
        self.path = path
        self.families = tuple(families)
        super().__init__(
            f"{path}: cannot specify multiple distributions ({', '.join(self.families)})"
        )


class NoDistributionSpecifiedError(MetadataError):
    """Raised when a generic distribution block names no family."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path}: no distribution specified (uniform, gaussian, or exponential)")


class InvalidRangeError(MetadataError):
    """Raised when a uniform range is empty or inverted."""

    def __init__(self, minimum: object, maximum: object) -> None:
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"uniform maximum ({maximum}) must be greater than minimum ({minimum})")


class EmptyChoiceSetError(MetadataError):
    """Raised when a replacement key lists no values to choose from."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"replacement key {key!r} has empty list")


class UnsupportedReplacementTypeError(MetadataError):
    """Raised when a replacement value is neither a list nor a distribution block."""

    def __init__(self, key: str, value: object) -> None:
        self.key = key
        self.value_type = type(value).__name__
        super().__init__(f"replacement key {key!r} has unsupported type {self.value_type}")


class NonFiniteSampleError(MetadataError):
    """Raised when a distribution block produces an infinite or NaN draw."""

    def __init__(self, path: str, value: float) -> None:
        self.path = path
        self.value = value
        super().__init__(f"{path}: sampled value {value!r} is not finite")


class SimulatedFailureError(RuntimeError):
    """Raised when a pause finishes in a stage listed in ``failStages``."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"failing as instructed in stage {stage!r}")


__all__ = [
    "ConflictingSpecError",
    "EmptyChoiceSetError",
    "InvalidRangeError",
    "MetadataError",
    "MetadataIssue",
    "MetadataValidationError",
    "MultipleDistributionsSpecifiedError",
    "NoDistributionSpecifiedError",
    "NonFiniteSampleError",
    "SimulatedFailureError",
    "UnsupportedReplacementTypeError",
]
