"""
scorch-kit — metadata templating.

File: src/scorch_kit/templating/__init__.py

Purpose
- Resolve ``replace`` blocks into concrete values, merge resolved layers, and
  rewrite nested metadata trees with them.
"""

from scorch_kit.templating.metadata import RenderedMetadata, render_component_metadata
from scorch_kit.templating.resolver import resolve_replacements
from scorch_kit.templating.rewriter import apply_replacements, merge_replacements, render_scalar

__all__ = [
    "RenderedMetadata",
    "apply_replacements",
    "merge_replacements",
    "render_component_metadata",
    "render_scalar",
    "resolve_replacements",
]
