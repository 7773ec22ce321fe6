"""Resolve a ``replace`` block into concrete template values."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from scorch_kit.domain.errors import (
    EmptyChoiceSetError,
    MetadataIssue,
    MetadataValidationError,
    UnsupportedReplacementTypeError,
)
from scorch_kit.domain.models import ResolvedReplacements
from scorch_kit.sampling.sampler import GENERIC_POLICY, DistributionSampler
from scorch_kit.sampling.schema import parse_distribution


def resolve_replacements(
    replace: Mapping[str, Any],
    sampler: DistributionSampler,
    *,
    path: str = "replace",
) -> ResolvedReplacements:
    """Select one concrete value for every key of ``replace``.

    A list value yields one of its elements with its original type; a mapping
    is a distribution block sampled with ``GENERIC_POLICY``. Keys are visited
    in sorted order so a seeded sampler reproduces the same result.
    """

    if not isinstance(replace, Mapping):
        raise MetadataValidationError(
            (MetadataIssue(path, f"expected an object, got {type(replace).__name__}"),)
        )

    bad_keys = [key for key in replace if not isinstance(key, str)]
    if bad_keys:
        raise MetadataValidationError(
            tuple(
                MetadataIssue(path, f"replacement keys must be strings, got {key!r}")
                for key in sorted(bad_keys, key=repr)
            )
        )

    resolved: ResolvedReplacements = {}
    for key in sorted(replace):
        spec = replace[key]

        if isinstance(spec, (list, tuple)):
            if not spec:
                raise EmptyChoiceSetError(key)
            resolved[key] = sampler.choice(spec)
        elif isinstance(spec, Mapping):
            entry_path = f"{path}.{key}"
            distribution = parse_distribution(spec, path=entry_path)
            resolved[key] = sampler.resolve_value(distribution, GENERIC_POLICY, path=entry_path)
        else:
            raise UnsupportedReplacementTypeError(key, spec)

    return resolved


__all__ = ["resolve_replacements"]
