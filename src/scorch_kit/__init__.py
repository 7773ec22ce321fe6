"""
scorch-kit — package root.

File: src/scorch_kit/__init__.py

Purpose
- Pause component and metadata-templating engine for scorch experiment pipelines.

Import boundary
- Must not have side effects at import time (no config loading, no logging init).
- Heavy submodules (CLI, rich console) are imported lazily by their callers.
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
