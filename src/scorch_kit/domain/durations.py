"""Signed nanosecond-resolution durations with compact text parsing/rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Final

from scorch_kit.constants import HOUR, MICROSECOND, MILLISECOND, MINUTE, NANOSECOND, SECOND

_UNIT_NANOS: Final[dict[str, int]] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_SEGMENT_RE: Final[re.Pattern[str]] = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class DurationParseError(ValueError):
    """Raised when duration text is malformed."""


@dataclass(frozen=True, slots=True, order=True)
class Duration:
    """Elapsed time in whole nanoseconds; may be negative."""

    nanoseconds: int

    def __post_init__(self) -> None:
        if isinstance(self.nanoseconds, bool) or not isinstance(self.nanoseconds, int):
            raise TypeError(
                f"nanoseconds must be an integer, got {type(self.nanoseconds).__name__}"
            )

    @classmethod
    def from_seconds(cls, seconds: float | int) -> Duration:
        return cls(int(Decimal(str(seconds)) * SECOND))

    @classmethod
    def from_timedelta(cls, value: timedelta) -> Duration:
        micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
        return cls(micros * MICROSECOND)

    @classmethod
    def parse(cls, text: str) -> Duration:
        """Parse compact duration text such as ``"1m30s"``, ``"250ms"`` or ``"-1.5h"``."""

        return cls(parse_duration_nanos(text))

    def total_seconds(self) -> float:
        return self.nanoseconds / SECOND

    def to_timedelta(self) -> timedelta:
        return timedelta(microseconds=self.nanoseconds // MICROSECOND)

    def __bool__(self) -> bool:
        return self.nanoseconds != 0

    def __str__(self) -> str:
        return format_duration_nanos(self.nanoseconds)


def coerce_duration(value: object) -> Duration:
    """Convert metadata values into a ``Duration``.

    Accepted inputs are ``Duration``, ``timedelta``, duration text, and plain
    integers (interpreted as nanoseconds).
    """

    if isinstance(value, Duration):
        return value
    if isinstance(value, timedelta):
        return Duration.from_timedelta(value)
    if isinstance(value, bool):
        raise DurationParseError("duration must not be a boolean")
    if isinstance(value, int):
        return Duration(value)
    if isinstance(value, str):
        return Duration.parse(value)
    raise DurationParseError(f"unsupported duration value of type {type(value).__name__}")


def parse_duration_nanos(text: str) -> int:
    if not isinstance(text, str):
        raise DurationParseError(f"duration must be a string, got {type(text).__name__}")
    raw = text.strip()
    if not raw:
        raise DurationParseError("duration must not be empty")

    sign = 1
    body = raw
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if body == "0":
        return 0
    if not body:
        raise DurationParseError(f"invalid duration {text!r}")

    total = Decimal(0)
    position = 0
    while position < len(body):
        match = _SEGMENT_RE.match(body, position)
        if match is None:
            raise DurationParseError(f"invalid duration {text!r}")
        number, unit = match.groups()
        try:
            total += Decimal(number) * _UNIT_NANOS[unit]
        except InvalidOperation as exc:
            raise DurationParseError(f"invalid duration {text!r}") from exc
        position = match.end()

    return sign * int(total.to_integral_value(rounding=ROUND_DOWN))


def format_duration_nanos(nanoseconds: int) -> str:
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)

    if magnitude < SECOND:
        if magnitude < MICROSECOND:
            return f"{sign}{magnitude}ns"
        if magnitude < MILLISECOND:
            return f"{sign}{_fraction(magnitude, MICROSECOND)}µs"
        return f"{sign}{_fraction(magnitude, MILLISECOND)}ms"

    hours, remainder = divmod(magnitude, HOUR)
    minutes, remainder = divmod(remainder, MINUTE)
    seconds = f"{_fraction(remainder, SECOND)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


def _fraction(value: int, unit: int) -> str:
    whole, remainder = divmod(value, unit)
    if not remainder:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{remainder:0{width}d}".rstrip("0")


__all__ = [
    "Duration",
    "DurationParseError",
    "coerce_duration",
    "format_duration_nanos",
    "parse_duration_nanos",
]
