"""Unit tests for replace-block resolution."""

from __future__ import annotations

import pytest

from scorch_kit.domain.errors import (
    EmptyChoiceSetError,
    MetadataValidationError,
    MultipleDistributionsSpecifiedError,
    NoDistributionSpecifiedError,
    UnsupportedReplacementTypeError,
)
from scorch_kit.sampling import DistributionSampler
from scorch_kit.templating import resolve_replacements


def test_list_choice_keeps_the_original_type() -> None:
    resolved = resolve_replacements(
        {"$COUNT": [5], "$FLAG": [True], "$NAME": ["node"], "$NOTHING": [None]},
        DistributionSampler(seed=1),
    )
    assert resolved == {"$COUNT": 5, "$FLAG": True, "$NAME": "node", "$NOTHING": None}
    assert isinstance(resolved["$COUNT"], int)


def test_list_choice_draws_from_every_member() -> None:
    sampler = DistributionSampler(seed=4)
    seen = {resolve_replacements({"$X": ["a", "b", "c"]}, sampler)["$X"] for _ in range(100)}
    assert seen == {"a", "b", "c"}


def test_distribution_with_int_type_is_rounded() -> None:
    resolved = resolve_replacements(
        {"$N": {"type": "int", "gaussian": {"mean": 4.0, "stddev": 0.0}}},
        DistributionSampler(seed=1),
    )
    assert resolved == {"$N": 4}
    assert isinstance(resolved["$N"], int)


def test_distribution_without_type_is_a_float() -> None:
    resolved = resolve_replacements(
        {"$RATE": {"uniform": {"minimum": 0.5, "maximum": 0.6}}},
        DistributionSampler(seed=1),
    )
    value = resolved["$RATE"]
    assert isinstance(value, float)
    assert 0.5 <= value < 0.6


def test_negative_gaussian_values_are_not_clamped() -> None:
    resolved = resolve_replacements(
        {"$D": {"gaussian": {"mean": -3.0, "stddev": 0.0}}},
        DistributionSampler(seed=1),
    )
    assert resolved == {"$D": -3.0}


def test_resolution_is_reproducible_regardless_of_key_order() -> None:
    forward = {"$A": ["x", "y", "z"], "$B": {"uniform": {}}, "$C": ["p", "q"]}
    backward = dict(reversed(list(forward.items())))

    assert resolve_replacements(forward, DistributionSampler(seed=77)) == resolve_replacements(
        backward, DistributionSampler(seed=77)
    )


def test_empty_list_is_rejected() -> None:
    with pytest.raises(EmptyChoiceSetError) as info:
        resolve_replacements({"$X": []}, DistributionSampler(seed=1))
    assert info.value.key == "$X"


@pytest.mark.parametrize("value", ["literal", 5, 1.5, None, True])
def test_unsupported_shapes_are_rejected(value: object) -> None:
    with pytest.raises(UnsupportedReplacementTypeError) as info:
        resolve_replacements({"$X": value}, DistributionSampler(seed=1))
    assert info.value.key == "$X"


def test_distribution_block_errors_propagate() -> None:
    sampler = DistributionSampler(seed=1)
    with pytest.raises(NoDistributionSpecifiedError):
        resolve_replacements({"$X": {"type": "int"}}, sampler)
    with pytest.raises(MultipleDistributionsSpecifiedError):
        resolve_replacements({"$X": {"uniform": {}, "gaussian": {}}}, sampler)


def test_non_mapping_replace_block_is_rejected() -> None:
    with pytest.raises(MetadataValidationError):
        resolve_replacements(["$X"], DistributionSampler(seed=1))  # type: ignore[arg-type]


def test_non_string_keys_are_reported_before_sorting() -> None:
    replace = {1: ["a"], "$A": ["b"], 2.5: ["c"]}

    with pytest.raises(MetadataValidationError) as info:
        resolve_replacements(replace, DistributionSampler(seed=1))  # type: ignore[arg-type]

    assert [issue.path for issue in info.value.issues] == ["replace", "replace"]
    assert "got 1" in str(info.value)
    assert "got 2.5" in str(info.value)


def test_large_magnitude_int_block_resolves_to_an_int() -> None:
    resolved = resolve_replacements(
        {"$X": {"type": "int", "uniform": {"minimum": 1e29, "maximum": 2e29}}},
        DistributionSampler(seed=1),
    )

    assert isinstance(resolved["$X"], int)
    assert int(1e29) <= resolved["$X"] <= int(2e29)
