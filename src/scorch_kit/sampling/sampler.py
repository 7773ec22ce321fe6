"""Seedable scalar sampling from uniform, gaussian, and exponential families.

The pause and templating layers share one sampler and differ only in the
``SamplingPolicy`` they pass: the policy supplies defaults for unset
parameters, decides whether negative gaussian draws are clamped to zero, and
decides what a block without any family means.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final, TypeVar

from scorch_kit.constants import SECOND
from scorch_kit.domain.errors import (
    InvalidRangeError,
    NoDistributionSpecifiedError,
    NonFiniteSampleError,
)
from scorch_kit.sampling.schema import (
    DistributionFamily,
    DistributionSpec,
    ExponentialSpec,
    GaussianSpec,
    UniformSpec,
    ValueKind,
)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SamplingPolicy:
    """Defaults and clamping rules for one sampling context."""

    name: str
    uniform_minimum: float
    uniform_maximum: float
    gaussian_mean: float
    gaussian_stddev: float
    exponential_mean: float
    clamp_negative_gaussian: bool
    default_family: DistributionFamily | None


# Pause durations, in nanoseconds.
DURATION_POLICY: Final[SamplingPolicy] = SamplingPolicy(
    name="duration",
    uniform_minimum=0.0,
    uniform_maximum=float(10 * SECOND),
    gaussian_mean=float(10 * SECOND),
    gaussian_stddev=float(2 * SECOND),
    exponential_mean=float(10 * SECOND),
    clamp_negative_gaussian=True,
    default_family=DistributionFamily.UNIFORM,
)

# Generic template values. Negative gaussian draws are passed through.
GENERIC_POLICY: Final[SamplingPolicy] = SamplingPolicy(
    name="generic",
    uniform_minimum=0.0,
    uniform_maximum=10.0,
    gaussian_mean=10.0,
    gaussian_stddev=2.0,
    exponential_mean=10.0,
    clamp_negative_gaussian=False,
    default_family=None,
)


class DistributionSampler:
    """Sampler bound to an explicit ``random.Random`` generator.

    Pass ``seed`` (or a pre-built ``rng``) for reproducible draws. The methods
    used on the generator never hold state across calls, so one sampler may be
    shared by concurrently running asyncio tasks.
    """

    __slots__ = ("_rng",)

    def __init__(self, rng: random.Random | None = None, *, seed: int | None = None) -> None:
        if rng is not None and seed is not None:
            raise ValueError("pass either rng or seed, not both")
        self._rng = rng if rng is not None else random.Random(seed)

    def sample_uniform(self, minimum: float, maximum: float) -> float:
        """Draw from ``[minimum, maximum)``."""

        if maximum <= minimum:
            raise InvalidRangeError(minimum, maximum)
        value = minimum + self._rng.random() * (maximum - minimum)
        if value >= maximum:
            # float rounding on very wide ranges
            return math.nextafter(maximum, minimum)
        return value

    def sample_gaussian(
        self, mean: float, stddev: float, *, clamp_negative: bool = False
    ) -> float:
        value = mean + stddev * self._rng.normalvariate(0.0, 1.0)
        if clamp_negative and value < 0:
            return 0.0
        return value

    def sample_exponential(self, mean: float) -> float:
        return self._rng.expovariate(1.0) * mean

    def choice(self, values: Sequence[T]) -> T:
        """Pick one element with uniform index probability."""

        if not values:
            raise IndexError("cannot choose from an empty sequence")
        return values[self._rng.randrange(len(values))]

    def sample(
        self,
        spec: DistributionSpec,
        policy: SamplingPolicy,
        *,
        path: str = "<distribution>",
    ) -> float:
        """Sample ``spec`` as a float, filling unset parameters from ``policy``."""

        distribution = spec.distribution
        if distribution is None:
            if policy.default_family is None:
                raise NoDistributionSpecifiedError(path)
            distribution = _empty_distribution(policy.default_family)

        if isinstance(distribution, GaussianSpec):
            value = self.sample_gaussian(
                _or_default(distribution.mean, policy.gaussian_mean),
                _or_default(distribution.stddev, policy.gaussian_stddev),
                clamp_negative=policy.clamp_negative_gaussian,
            )
        elif isinstance(distribution, ExponentialSpec):
            value = self.sample_exponential(
                _or_default(distribution.mean, policy.exponential_mean)
            )
        else:
            value = self.sample_uniform(
                _or_default(distribution.minimum, policy.uniform_minimum),
                _or_default(distribution.maximum, policy.uniform_maximum),
            )

        if not math.isfinite(value):
            raise NonFiniteSampleError(path, value)
        return value

    def resolve_value(
        self,
        spec: DistributionSpec,
        policy: SamplingPolicy,
        *,
        path: str = "<distribution>",
    ) -> int | float:
        """Sample, then apply the ``kind`` rounding carried by ``spec``."""

        value = self.sample(spec, policy, path=path)
        if spec.kind is ValueKind.INT:
            return round_half_away_from_zero(value)
        return value


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero; ``value`` must be finite."""

    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return -whole if value < 0 else whole


def _or_default(value: float | None, default: float) -> float:
    return default if value is None else value


def _empty_distribution(family: DistributionFamily) -> UniformSpec | GaussianSpec | ExponentialSpec:
    if family is DistributionFamily.GAUSSIAN:
        return GaussianSpec()
    if family is DistributionFamily.EXPONENTIAL:
        return ExponentialSpec()
    return UniformSpec()


__all__ = [
    "DURATION_POLICY",
    "GENERIC_POLICY",
    "DistributionSampler",
    "SamplingPolicy",
    "round_half_away_from_zero",
]
