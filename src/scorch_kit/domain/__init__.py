"""
scorch-kit — domain layer.

File: src/scorch_kit/domain/__init__.py

Purpose
- Domain types shared by the sampling, pause, and templating layers.
- Keep the domain layer free of IO side effects.
"""

from scorch_kit.domain.durations import (
    Duration,
    DurationParseError,
    coerce_duration,
    format_duration_nanos,
    parse_duration_nanos,
)
from scorch_kit.domain.errors import (
    ConflictingSpecError,
    EmptyChoiceSetError,
    InvalidRangeError,
    MetadataError,
    MetadataIssue,
    MetadataValidationError,
    MultipleDistributionsSpecifiedError,
    NoDistributionSpecifiedError,
    NonFiniteSampleError,
    SimulatedFailureError,
    UnsupportedReplacementTypeError,
)
from scorch_kit.domain.models import (
    ComponentIdentity,
    ComponentOptions,
    ConfigTree,
    PauseOutcome,
    PauseState,
    ResolvedReplacements,
    Scalar,
    Stage,
)

__all__ = [
    "ComponentIdentity",
    "ComponentOptions",
    "ConfigTree",
    "ConflictingSpecError",
    "Duration",
    "DurationParseError",
    "EmptyChoiceSetError",
    "InvalidRangeError",
    "MetadataError",
    "MetadataIssue",
    "MetadataValidationError",
    "MultipleDistributionsSpecifiedError",
    "NoDistributionSpecifiedError",
    "NonFiniteSampleError",
    "PauseOutcome",
    "PauseState",
    "ResolvedReplacements",
    "Scalar",
    "SimulatedFailureError",
    "Stage",
    "UnsupportedReplacementTypeError",
    "coerce_duration",
    "format_duration_nanos",
    "parse_duration_nanos",
]
