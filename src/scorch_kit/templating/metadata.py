"""Render component metadata that carries its own ``replace`` block."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from scorch_kit.constants import REPLACE_KEY
from scorch_kit.domain.models import ResolvedReplacements, Scalar
from scorch_kit.sampling.sampler import DistributionSampler
from scorch_kit.templating.resolver import resolve_replacements
from scorch_kit.templating.rewriter import apply_replacements, merge_replacements


@dataclass(frozen=True, slots=True)
class RenderedMetadata:
    meta: dict[str, Any]
    resolved: ResolvedReplacements


def render_component_metadata(
    meta: Mapping[str, Any],
    sampler: DistributionSampler,
    *,
    base: Mapping[str, Scalar] | None = None,
) -> RenderedMetadata:
    """Resolve ``meta['replace']``, layer it over ``base``, and apply it.

    ``base`` is the experiment-level resolved layer; the component's own keys
    win on conflict. The returned metadata no longer contains ``replace``.
    """

    body = {key: value for key, value in meta.items() if key != REPLACE_KEY}
    raw_replace = meta.get(REPLACE_KEY)

    own: ResolvedReplacements = {}
    if raw_replace is not None:
        own = resolve_replacements(raw_replace, sampler, path=REPLACE_KEY)

    resolved = merge_replacements(base or {}, own)
    rendered = apply_replacements(body, resolved)
    return RenderedMetadata(meta=rendered, resolved=resolved)


__all__ = ["RenderedMetadata", "render_component_metadata"]
