"""Component status updates and the sinks that receive them."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import structlog


@dataclass(frozen=True, slots=True)
class ComponentUpdate:
    """One status update pushed by a running component."""

    experiment_name: str
    component_name: str
    component_type: str
    run_index: int
    loop_index: int
    count_index: int
    stage: str
    status: str
    output: bytes = b""

    @property
    def output_text(self) -> str:
        return self.output.decode("utf-8", errors="replace")

    def to_dict(self) -> dict[str, object]:
        return {
            "experiment_name": self.experiment_name,
            "component_name": self.component_name,
            "component_type": self.component_type,
            "run_index": self.run_index,
            "loop_index": self.loop_index,
            "count_index": self.count_index,
            "stage": self.stage,
            "status": self.status,
            "output": self.output_text,
        }


@runtime_checkable
class StatusSink(Protocol):
    """Receiver of component status updates.

    Implementations must tolerate calls from several concurrently running
    background pauses.
    """

    def update_component(self, update: ComponentUpdate) -> None: ...


class StatusRecorder:
    """Thread-safe in-memory sink that keeps every update in arrival order."""

    def __init__(self, on_update: Callable[[ComponentUpdate], None] | None = None) -> None:
        self._lock = threading.Lock()
        self._updates: list[ComponentUpdate] = []
        self._on_update = on_update

    def update_component(self, update: ComponentUpdate) -> None:
        with self._lock:
            self._updates.append(update)
        if self._on_update is not None:
            self._on_update(update)

    @property
    def updates(self) -> tuple[ComponentUpdate, ...]:
        with self._lock:
            return tuple(self._updates)

    def for_stage(self, stage: str) -> tuple[ComponentUpdate, ...]:
        return tuple(update for update in self.updates if update.stage == stage)

    def clear(self) -> None:
        with self._lock:
            self._updates.clear()


class LoggingStatusSink:
    """Sink that writes each update as a structlog event."""

    def __init__(self, *, logger: Any | None = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def update_component(self, update: ComponentUpdate) -> None:
        self._logger.info(
            "component_status_update",
            experiment=update.experiment_name,
            component=update.component_name,
            component_type=update.component_type,
            run_index=update.run_index,
            loop_index=update.loop_index,
            count_index=update.count_index,
            stage=update.stage,
            status=update.status,
            output=update.output_text.rstrip("\n"),
        )


class FanOutStatusSink:
    """Forward every update to several sinks in registration order."""

    def __init__(self, *sinks: StatusSink) -> None:
        self._sinks = tuple(sinks)

    def update_component(self, update: ComponentUpdate) -> None:
        for sink in self._sinks:
            sink.update_component(update)


__all__ = [
    "ComponentUpdate",
    "FanOutStatusSink",
    "LoggingStatusSink",
    "StatusRecorder",
    "StatusSink",
]
