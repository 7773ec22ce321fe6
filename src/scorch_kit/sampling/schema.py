"""
scorch-kit — distribution block schema.

File: src/scorch_kit/sampling/schema.py

Purpose
- Parse untyped ``uniform``/``gaussian``/``exponential`` metadata blocks into a
  typed discriminated union, collecting structured issues with dotted paths.

Functional requirements
- Unset parameters stay ``None`` so a sampling policy can supply defaults.
- More than one populated family fails with ``MultipleDistributionsSpecifiedError``.
- Unknown keys and wrongly typed values fail with ``MetadataValidationError``.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Final

from scorch_kit.domain.durations import DurationParseError, coerce_duration
from scorch_kit.domain.errors import (
    MetadataIssue,
    MetadataValidationError,
    MultipleDistributionsSpecifiedError,
)


class DistributionFamily(StrEnum):
    UNIFORM = "uniform"
    GAUSSIAN = "gaussian"
    EXPONENTIAL = "exponential"


class ValueKind(StrEnum):
    """Rounding applied to generic replacement samples."""

    INT = "int"
    FLOAT = "float"


@dataclass(frozen=True, slots=True)
class UniformSpec:
    family: ClassVar[DistributionFamily] = DistributionFamily.UNIFORM

    minimum: float | None = None
    maximum: float | None = None


@dataclass(frozen=True, slots=True)
class GaussianSpec:
    family: ClassVar[DistributionFamily] = DistributionFamily.GAUSSIAN

    mean: float | None = None
    stddev: float | None = None


@dataclass(frozen=True, slots=True)
class ExponentialSpec:
    family: ClassVar[DistributionFamily] = DistributionFamily.EXPONENTIAL

    mean: float | None = None


Distribution = UniformSpec | GaussianSpec | ExponentialSpec


@dataclass(frozen=True, slots=True)
class DistributionSpec:
    """Parsed distribution block.

    ``distribution`` is ``None`` when the block names no family; the sampling
    policy decides whether that means a default family or an error.
    """

    distribution: Distribution | None = None
    kind: ValueKind = ValueKind.FLOAT


ValueParser = Callable[[object, str, "IssueCollector"], float | None]

_FAMILY_FIELDS: Final[dict[DistributionFamily, tuple[str, ...]]] = {
    DistributionFamily.UNIFORM: ("minimum", "maximum"),
    DistributionFamily.GAUSSIAN: ("mean", "stddev"),
    DistributionFamily.EXPONENTIAL: ("mean",),
}


class IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[MetadataIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(MetadataIssue(path=path, message=message))

    def items(self) -> tuple[MetadataIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)

    def raise_if_any(self) -> None:
        if self._items:
            raise MetadataValidationError(self._items)


def parse_number(value: object, path: str, issues: IssueCollector) -> float | None:
    """Parse a finite JSON/YAML number; booleans are rejected."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected a number, got {type(value).__name__}")
        return None
    try:
        number = float(value)
    except OverflowError:
        issues.add(path, "is too large")
        return None
    if not math.isfinite(number):
        issues.add(path, "must be finite")
        return None
    return number


def parse_duration_value(value: object, path: str, issues: IssueCollector) -> float | None:
    """Parse a duration value and return it as float nanoseconds."""

    try:
        return float(coerce_duration(value).nanoseconds)
    except DurationParseError as exc:
        issues.add(path, str(exc))
        return None
    except OverflowError:
        issues.add(path, "duration is too large")
        return None


def populated_families(raw: Mapping[str, object]) -> tuple[DistributionFamily, ...]:
    """Return the families whose sub-block key is present and not null."""

    return tuple(family for family in DistributionFamily if raw.get(family.value) is not None)


def parse_distribution(
    raw: object,
    *,
    path: str,
    value_parser: ValueParser = parse_number,
    allow_kind: bool = True,
) -> DistributionSpec:
    """Parse one distribution block or raise a ``MetadataError`` subclass."""

    if not isinstance(raw, Mapping):
        raise MetadataValidationError(
            (MetadataIssue(path, f"expected an object, got {type(raw).__name__}"),)
        )

    issues = IssueCollector()
    allowed = {family.value for family in DistributionFamily}
    if allow_kind:
        allowed.add("type")
    _reject_unknown_keys(raw, allowed, path, issues)

    families = populated_families(raw)
    if len(families) > 1:
        raise MultipleDistributionsSpecifiedError(path, [family.value for family in families])

    kind = ValueKind.FLOAT
    if allow_kind and raw.get("type") is not None:
        raw_kind = raw["type"]
        try:
            kind = ValueKind(str(raw_kind).strip().lower())
        except ValueError:
            issues.add(_join(path, "type"), f"must be one of: int, float (got {raw_kind!r})")

    distribution: Distribution | None = None
    if families:
        family = families[0]
        distribution = _parse_family(
            family, raw[family.value], _join(path, family.value), value_parser, issues
        )

    issues.raise_if_any()
    return DistributionSpec(distribution=distribution, kind=kind)


def _parse_family(
    family: DistributionFamily,
    raw: object,
    path: str,
    value_parser: ValueParser,
    issues: IssueCollector,
) -> Distribution | None:
    if not isinstance(raw, Mapping):
        issues.add(path, f"expected an object, got {type(raw).__name__}")
        return None

    field_names = _FAMILY_FIELDS[family]
    _reject_unknown_keys(raw, set(field_names), path, issues)

    values: dict[str, float | None] = {}
    for name in field_names:
        value = raw.get(name)
        values[name] = None if value is None else value_parser(value, _join(path, name), issues)

    if family is DistributionFamily.UNIFORM:
        return UniformSpec(minimum=values["minimum"], maximum=values["maximum"])
    if family is DistributionFamily.GAUSSIAN:
        return GaussianSpec(mean=values["mean"], stddev=values["stddev"])
    return ExponentialSpec(mean=values["mean"])


def _reject_unknown_keys(
    raw: Mapping[object, object],
    allowed: set[str],
    path: str,
    issues: IssueCollector,
) -> None:
    for key in sorted(raw, key=str):
        if key not in allowed:
            issues.add(_join(path, str(key)), "unknown key")


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


__all__ = [
    "Distribution",
    "DistributionFamily",
    "DistributionSpec",
    "ExponentialSpec",
    "GaussianSpec",
    "IssueCollector",
    "UniformSpec",
    "ValueKind",
    "ValueParser",
    "parse_distribution",
    "parse_duration_value",
    "parse_number",
    "populated_families",
]
