"""Dataclass domain models shared by the pause and templating layers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from scorch_kit.constants import PAUSE_COMPONENT_TYPE

Scalar = str | int | float | bool | None
ConfigTree = Mapping[str, Any] | list[Any] | Scalar
ResolvedReplacements = dict[str, Scalar]


class Stage(StrEnum):
    """Lifecycle phase a pipeline component passes through."""

    CONFIGURE = "configure"
    START = "start"
    STOP = "stop"
    CLEANUP = "cleanup"

    @classmethod
    def parse(cls, value: str | Stage) -> Stage:
        if isinstance(value, Stage):
            return value
        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            allowed = ", ".join(item.value for item in cls)
            raise ValueError(f"unknown stage {value!r}; expected one of: {allowed}") from exc


class PauseState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PauseOutcome(StrEnum):
    """Terminal result of one wait loop."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def state(self) -> PauseState:
        return PauseState(self.value)


@dataclass(frozen=True, slots=True)
class ComponentIdentity:
    """Key identifying one component instance within an experiment."""

    experiment_name: str
    component_name: str

    def __str__(self) -> str:
        return f"{self.experiment_name}/{self.component_name}"


@dataclass(frozen=True, slots=True)
class ComponentOptions:
    """Per-invocation options handed to a component by the pipeline engine."""

    name: str
    experiment_name: str
    type: str = PAUSE_COMPONENT_TYPE
    run_index: int = 0
    loop_index: int = 0
    count_index: int = 0
    background: bool = False
    meta: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("component name must not be empty")
        if not self.experiment_name.strip():
            raise ValueError("experiment name must not be empty")
        for label, value in (
            ("run_index", self.run_index),
            ("loop_index", self.loop_index),
            ("count_index", self.count_index),
        ):
            if value < 0:
                raise ValueError(f"{label} must be >= 0")

    @property
    def identity(self) -> ComponentIdentity:
        return ComponentIdentity(self.experiment_name, self.name)


__all__ = [
    "ComponentIdentity",
    "ComponentOptions",
    "ConfigTree",
    "PauseOutcome",
    "PauseState",
    "ResolvedReplacements",
    "Scalar",
    "Stage",
]
