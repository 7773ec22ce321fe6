"""
scorch-kit — unit tests for pause directives

File: tests/unit/pause/test_directive.py

Purpose
- Validate pause metadata parsing and the ordered duration resolution rules.

What this test file should cover
- Fixed durations, defaults, random sampling, and every conflict shape.
- ``failStages`` parsing and strict key checking.
"""

from __future__ import annotations

from itertools import combinations

import pytest

from scorch_kit.constants import SECOND
from scorch_kit.domain.durations import Duration
from scorch_kit.domain.errors import (
    ConflictingSpecError,
    MetadataValidationError,
    MultipleDistributionsSpecifiedError,
)
from scorch_kit.domain.models import Stage
from scorch_kit.pause import (
    DEFAULT_PAUSE_DURATION,
    PauseDirective,
    parse_pause_directive,
    resolve_pause_duration,
)
from scorch_kit.sampling import DistributionSampler, DistributionSpec, UniformSpec

_FAMILY_BLOCKS: dict[str, dict[str, object]] = {
    "uniform": {"minimum": "1s", "maximum": "2s"},
    "gaussian": {"mean": "3s", "stddev": "1s"},
    "exponential": {"mean": "2s"},
}


@pytest.fixture
def sampler() -> DistributionSampler:
    return DistributionSampler(seed=2024)


def test_fixed_duration_is_used_as_is(sampler: DistributionSampler) -> None:
    directive = parse_pause_directive({"duration": "3s"})
    resolved = directive.resolve(sampler)

    assert resolved.duration == Duration(3 * SECOND)
    assert resolved.is_resolved
    assert resolved.resolve(sampler) is resolved


def test_missing_duration_defaults_to_ten_seconds(sampler: DistributionSampler) -> None:
    resolved = resolve_pause_duration({}, sampler)

    assert resolved.duration == DEFAULT_PAUSE_DURATION == Duration(10 * SECOND)
    assert resolved.fail_stages == frozenset()


def test_default_duration_is_configurable(sampler: DistributionSampler) -> None:
    resolved = resolve_pause_duration({}, sampler, default_duration=Duration(SECOND))
    assert resolved.duration == Duration(SECOND)


def test_duration_and_random_conflict() -> None:
    with pytest.raises(ConflictingSpecError):
        parse_pause_directive({"duration": "3s", "random": {"uniform": {}}})


def test_unparsed_conflicting_directive_fails_on_resolve(sampler: DistributionSampler) -> None:
    directive = PauseDirective(duration=Duration(SECOND), random=DistributionSpec())
    with pytest.raises(ConflictingSpecError):
        directive.resolve(sampler)


@pytest.mark.parametrize(
    "families",
    [pair for size in (2, 3) for pair in combinations(sorted(_FAMILY_BLOCKS), size)],
)
def test_every_family_combination_is_rejected(families: tuple[str, ...]) -> None:
    raw_random = {family: _FAMILY_BLOCKS[family] for family in families}
    with pytest.raises(MultipleDistributionsSpecifiedError):
        parse_pause_directive({"random": raw_random})


def test_random_uniform_resolves_within_range(sampler: DistributionSampler) -> None:
    directive = parse_pause_directive({"random": {"uniform": _FAMILY_BLOCKS["uniform"]}})
    assert directive.random == DistributionSpec(UniformSpec(minimum=1e9, maximum=2e9))

    resolved = [directive.resolve(sampler) for _ in range(10_000)]
    assert all(item.random is None for item in resolved)
    durations = [item.duration for item in resolved]
    assert all(d is not None and Duration(SECOND) <= d < Duration(2 * SECOND) for d in durations)


def test_random_without_family_uses_default_uniform(sampler: DistributionSampler) -> None:
    directive = parse_pause_directive({"random": {}})
    durations = {directive.resolve(sampler).duration for _ in range(10_000)}

    assert len(durations) > 1
    assert all(d is not None and Duration(0) <= d < Duration(10 * SECOND) for d in durations)


def test_negative_gaussian_durations_clamp_to_zero(sampler: DistributionSampler) -> None:
    directive = parse_pause_directive({"random": {"gaussian": {"mean": "-5s", "stddev": "1ms"}}})
    assert directive.resolve(sampler).duration == Duration(0)


def test_random_resolution_is_reproducible_with_a_seed() -> None:
    directive = parse_pause_directive({"random": {"exponential": {"mean": "2s"}}})
    first = directive.resolve(DistributionSampler(seed=5))
    second = directive.resolve(DistributionSampler(seed=5))
    assert first == second


def test_fail_stages_parse_into_stage_set() -> None:
    directive = parse_pause_directive({"duration": "1s", "failStages": ["start", "Cleanup"]})

    assert directive.fail_stages == frozenset({Stage.START, Stage.CLEANUP})
    assert directive.should_fail(Stage.START)
    assert not directive.should_fail(Stage.STOP)


@pytest.mark.parametrize(
    ("meta", "path"),
    [
        ({"failStages": "start"}, "failStages"),
        ({"failStages": ["teardown"]}, "failStages[0]"),
        ({"failStages": ["start", 3]}, "failStages[1]"),
        ({"duration": "soon"}, "duration"),
        ({"duration": "1s", "durations": "2s"}, "durations"),
        ({"random": {"type": "int"}}, "random.type"),
        ({"random": {"uniform": {"minimum": "fast"}}}, "random.uniform.minimum"),
    ],
)
def test_invalid_metadata_reports_paths(meta: dict[str, object], path: str) -> None:
    with pytest.raises(MetadataValidationError) as info:
        parse_pause_directive(meta)
    assert path in [issue.path for issue in info.value.issues]


def test_non_mapping_metadata_is_rejected() -> None:
    with pytest.raises(MetadataValidationError):
        parse_pause_directive(["duration", "1s"])  # type: ignore[arg-type]
