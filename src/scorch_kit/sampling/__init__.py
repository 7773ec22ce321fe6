"""Distribution parsing and sampling shared by pause and templating."""

from scorch_kit.sampling.sampler import (
    DURATION_POLICY,
    GENERIC_POLICY,
    DistributionSampler,
    SamplingPolicy,
    round_half_away_from_zero,
)
from scorch_kit.sampling.schema import (
    Distribution,
    DistributionFamily,
    DistributionSpec,
    ExponentialSpec,
    GaussianSpec,
    UniformSpec,
    ValueKind,
    parse_distribution,
    parse_duration_value,
    parse_number,
)

__all__ = [
    "DURATION_POLICY",
    "GENERIC_POLICY",
    "Distribution",
    "DistributionFamily",
    "DistributionSampler",
    "DistributionSpec",
    "ExponentialSpec",
    "GaussianSpec",
    "SamplingPolicy",
    "UniformSpec",
    "ValueKind",
    "parse_distribution",
    "parse_duration_value",
    "parse_number",
    "round_half_away_from_zero",
]
