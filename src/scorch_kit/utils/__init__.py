"""Shared utilities."""

from scorch_kit.utils.concurrency import CancellationToken

__all__ = ["CancellationToken"]
