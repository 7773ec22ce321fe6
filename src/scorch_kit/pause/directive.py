"""
scorch-kit — pause directive parsing and resolution.

File: src/scorch_kit/pause/directive.py

Purpose
- Turn raw pause metadata into a ``PauseDirective`` and resolve exactly one
  concrete wait duration from it.

Resolution rules, in order
1. ``duration`` and ``random`` both set -> ``ConflictingSpecError``.
2. ``duration`` set -> used as-is.
3. ``random`` set -> more than one family -> ``MultipleDistributionsSpecifiedError``;
   one family (or none, meaning uniform) -> sampled with ``DURATION_POLICY``.
4. neither -> the default duration (10s unless configured otherwise).

Recognized metadata keys
- ``duration``, ``random.{uniform,gaussian,exponential}``, ``failStages``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Final

from scorch_kit.constants import DEFAULT_PAUSE_SECONDS, SECOND
from scorch_kit.domain.durations import Duration, DurationParseError, coerce_duration
from scorch_kit.domain.errors import ConflictingSpecError, MetadataIssue, MetadataValidationError
from scorch_kit.domain.models import Stage
from scorch_kit.sampling.sampler import DURATION_POLICY, DistributionSampler
from scorch_kit.sampling.schema import (
    DistributionSpec,
    IssueCollector,
    parse_distribution,
    parse_duration_value,
)

DEFAULT_PAUSE_DURATION: Final[Duration] = Duration(DEFAULT_PAUSE_SECONDS * SECOND)

_PAUSE_KEYS: Final[frozenset[str]] = frozenset({"duration", "random", "failStages"})


@dataclass(frozen=True, slots=True)
class PauseDirective:
    """How long to pause and in which stages to fail afterwards."""

    duration: Duration | None = None
    random: DistributionSpec | None = None
    fail_stages: frozenset[Stage] = frozenset()

    @property
    def is_resolved(self) -> bool:
        return self.duration is not None and self.random is None

    def should_fail(self, stage: Stage) -> bool:
        return stage in self.fail_stages

    def resolve(
        self,
        sampler: DistributionSampler,
        *,
        default_duration: Duration = DEFAULT_PAUSE_DURATION,
    ) -> PauseDirective:
        """Return a copy carrying one concrete ``duration``.

        A resolved directive resolves to itself; a random directive is
        resampled on every call.
        """

        if self.duration is not None and self.random is not None:
            raise ConflictingSpecError()
        if self.duration is not None:
            return self
        if self.random is not None:
            nanos = sampler.sample(self.random, DURATION_POLICY, path="random")
            return replace(self, duration=Duration(math.floor(nanos)), random=None)
        return replace(self, duration=default_duration)


def parse_pause_directive(meta: Mapping[str, object]) -> PauseDirective:
    """Validate raw pause metadata into a ``PauseDirective``.

    Raises a ``MetadataError`` subclass; nothing is sampled here.
    """

    if not isinstance(meta, Mapping):
        raise MetadataValidationError(
            (MetadataIssue("<root>", f"expected an object, got {type(meta).__name__}"),)
        )

    raw_duration = meta.get("duration")
    raw_random = meta.get("random")
    if raw_duration is not None and raw_random is not None:
        raise ConflictingSpecError()

    issues = IssueCollector()
    for key in sorted(meta, key=str):
        if key not in _PAUSE_KEYS:
            issues.add(str(key), "unknown key")

    duration: Duration | None = None
    if raw_duration is not None:
        try:
            duration = coerce_duration(raw_duration)
        except DurationParseError as exc:
            issues.add("duration", str(exc))

    fail_stages = _parse_fail_stages(meta.get("failStages"), issues)
    issues.raise_if_any()

    random_spec: DistributionSpec | None = None
    if raw_random is not None:
        random_spec = parse_distribution(
            raw_random,
            path="random",
            value_parser=parse_duration_value,
            allow_kind=False,
        )

    return PauseDirective(duration=duration, random=random_spec, fail_stages=fail_stages)


def resolve_pause_duration(
    meta: Mapping[str, object],
    sampler: DistributionSampler,
    *,
    default_duration: Duration = DEFAULT_PAUSE_DURATION,
) -> PauseDirective:
    """Parse and resolve in one step."""

    return parse_pause_directive(meta).resolve(sampler, default_duration=default_duration)


def _parse_fail_stages(raw: object, issues: IssueCollector) -> frozenset[Stage]:
    if raw is None:
        return frozenset()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, (list, tuple, set, frozenset)):
        issues.add("failStages", f"expected a list of stage names, got {type(raw).__name__}")
        return frozenset()

    stages: set[Stage] = set()
    for index, item in enumerate(raw):
        if not isinstance(item, str):
            issues.add(f"failStages[{index}]", f"expected a string, got {type(item).__name__}")
            continue
        try:
            stages.add(Stage.parse(item))
        except ValueError as exc:
            issues.add(f"failStages[{index}]", str(exc))
    return frozenset(stages)


__all__ = [
    "DEFAULT_PAUSE_DURATION",
    "PauseDirective",
    "parse_pause_directive",
    "resolve_pause_duration",
]
