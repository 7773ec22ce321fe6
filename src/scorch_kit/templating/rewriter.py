"""Apply resolved replacements to a nested config tree."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from scorch_kit.domain.models import ResolvedReplacements, Scalar


def apply_replacements(tree: Any, resolved: Mapping[str, Scalar]) -> Any:
    """Return ``tree`` with every replacement key substituted.

    A string equal to a key is replaced by the value itself, keeping its type.
    Any other string gets each key substituted by the value's text, visiting
    keys in lexicographic order. The input tree is never mutated; with nothing
    to apply it is returned as-is.
    """

    if not resolved:
        return tree

    ordered = tuple(sorted(resolved.items()))
    return _apply_to_value(copy.deepcopy(tree), dict(ordered), ordered)


def merge_replacements(
    base: Mapping[str, Scalar], override: Mapping[str, Scalar]
) -> ResolvedReplacements:
    """Combine two resolved layers; ``override`` wins on duplicate keys."""

    merged: ResolvedReplacements = dict(base)
    merged.update(override)
    return merged


def render_scalar(value: Scalar) -> str:
    """Text used when a value is interpolated into a larger string.

    Scalars use their YAML spelling (``null``, ``true``/``false``) and floats
    their shortest round-trip repr, so a substituted string reads back as the
    same value. This differs from a Go ``%v`` rendering, which would give
    ``<nil>`` for null and ``[a b]`` for a list. Lists and mappings picked
    from a choice list fall back to ``str()``; use a whole-token placeholder
    to keep them structured.
    """

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _apply_to_value(
    value: Any,
    lookup: Mapping[str, Scalar],
    ordered: tuple[tuple[str, Scalar], ...],
) -> Any:
    if isinstance(value, str):
        return _apply_to_string(value, lookup, ordered)
    if isinstance(value, dict):
        for key in value:
            value[key] = _apply_to_value(value[key], lookup, ordered)
        return value
    if isinstance(value, list):
        for index, item in enumerate(value):
            value[index] = _apply_to_value(item, lookup, ordered)
        return value
    if isinstance(value, tuple):
        return tuple(_apply_to_value(item, lookup, ordered) for item in value)
    return value


def _apply_to_string(
    text: str,
    lookup: Mapping[str, Scalar],
    ordered: tuple[tuple[str, Scalar], ...],
) -> Scalar:
    if text in lookup:
        # list choices may hold containers; keep them detached from ``resolved``
        return copy.deepcopy(lookup[text])

    result = text
    for key, replacement in ordered:
        if key:
            result = result.replace(key, render_scalar(replacement))
    return result


__all__ = ["apply_replacements", "merge_replacements", "render_scalar"]
