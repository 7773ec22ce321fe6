"""
scorch-kit — observability.

File: src/scorch_kit/observability/__init__.py

Purpose
- Structured JSON-lines logging (stdlib + structlog) and the component
  status-update side channel.
"""

from scorch_kit.observability.logging import (
    LoggingConfig,
    RunLogHandle,
    configure_structlog,
    correlation_scope,
    flush_logging,
    get_active_logging_handle,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)
from scorch_kit.observability.status import (
    ComponentUpdate,
    FanOutStatusSink,
    LoggingStatusSink,
    StatusRecorder,
    StatusSink,
)

__all__ = [
    "ComponentUpdate",
    "FanOutStatusSink",
    "LoggingConfig",
    "LoggingStatusSink",
    "StatusRecorder",
    "StatusSink",
    "RunLogHandle",
    "configure_structlog",
    "correlation_scope",
    "flush_logging",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
