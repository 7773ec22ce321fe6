"""
scorch-kit — pause component.

File: src/scorch_kit/control_plane/pause.py

Purpose
- Delay, throttle, or deliberately fail a pipeline stage.

Lifecycle
- ``configure``/``start`` run the pause inline, or detached through the
  ``BackgroundRegistry`` when ``options.background`` is set.
- ``stop``/``cleanup`` never run detached; they skip their own pause when the
  registry reports the component's background work was handled.

Wait loop
- Cancelled before starting: re-raise the token's cause, no side effects.
- Announce the planned duration once, then race the token against a tick
  timer until the duration has elapsed. Every full tick that leaves time on
  the clock pushes one ``running`` status update; the tick that reaches the
  duration does not.
- Finish with ``SimulatedFailureError`` when the stage is in ``failStages``.

Metadata rendering, parsing, and sampling all complete before the first side
effect, so a ``MetadataError`` never leaves a half-started pause behind.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console

from scorch_kit.constants import DEFAULT_TICK_SECONDS, PAUSE_COMPONENT_TYPE, STATUS_RUNNING
from scorch_kit.control_plane.background import BackgroundRegistry
from scorch_kit.domain.durations import Duration
from scorch_kit.domain.errors import SimulatedFailureError
from scorch_kit.domain.models import ComponentOptions, PauseOutcome, PauseState, Scalar, Stage
from scorch_kit.observability.logging import correlation_scope
from scorch_kit.observability.status import ComponentUpdate, StatusSink
from scorch_kit.pause.directive import DEFAULT_PAUSE_DURATION, PauseDirective, parse_pause_directive
from scorch_kit.sampling.sampler import DistributionSampler
from scorch_kit.templating.metadata import render_component_metadata

if TYPE_CHECKING:
    from scorch_kit.utils.concurrency import CancellationToken


class PauseComponent:
    """Pipeline component that waits, reports progress, and optionally fails."""

    def __init__(
        self,
        options: ComponentOptions,
        *,
        sink: StatusSink,
        registry: BackgroundRegistry | None = None,
        sampler: DistributionSampler | None = None,
        base_replacements: Mapping[str, Scalar] | None = None,
        default_duration: Duration = DEFAULT_PAUSE_DURATION,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        console: Console | None = None,
        logger: Any | None = None,
    ) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")

        self._options = options
        self._sink = sink
        self._registry = registry if registry is not None else BackgroundRegistry()
        self._sampler = sampler if sampler is not None else DistributionSampler()
        self._base_replacements = dict(base_replacements or {})
        self._default_duration = default_duration
        self._tick_seconds = float(tick_seconds)
        self._console = console if console is not None else Console(stderr=True)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._states: dict[Stage, PauseState] = {}

    @property
    def type(self) -> str:
        return PAUSE_COMPONENT_TYPE

    @property
    def options(self) -> ComponentOptions:
        return self._options

    @property
    def registry(self) -> BackgroundRegistry:
        return self._registry

    def state(self, stage: Stage) -> PauseState:
        return self._states.get(stage, PauseState.IDLE)

    async def configure(self, token: CancellationToken) -> None:
        await self._invoke(Stage.CONFIGURE, token, may_background=True)

    async def start(self, token: CancellationToken) -> None:
        await self._invoke(Stage.START, token, may_background=True)

    async def stop(self, token: CancellationToken) -> None:
        await self._invoke(Stage.STOP, token, may_background=False)

    async def cleanup(self, token: CancellationToken) -> None:
        await self._invoke(Stage.CLEANUP, token, may_background=False)

    def prepare(self) -> PauseDirective:
        """Render, parse, and resolve this component's metadata.

        Every call resamples random durations and template values.
        """

        rendered = render_component_metadata(
            self._options.meta,
            self._sampler,
            base=self._base_replacements,
        )
        directive = parse_pause_directive(rendered.meta)
        return directive.resolve(self._sampler, default_duration=self._default_duration)

    async def run_stage(
        self,
        stage: Stage,
        directive: PauseDirective,
        token: CancellationToken,
    ) -> PauseOutcome:
        """Run the wait loop for an already resolved directive."""

        if token.is_cancelled:
            return PauseOutcome.CANCELLED
        if directive.duration is None:
            raise ValueError("directive must be resolved before running")

        duration = directive.duration
        self._states[stage] = PauseState.RUNNING
        self._announce(stage, duration)

        loop = asyncio.get_running_loop()
        total = duration.total_seconds()
        started = loop.time()
        tick = 1

        while (elapsed := loop.time() - started) < total:
            interval = min(self._tick_seconds, total - elapsed)
            if await token.wait_for(interval):
                return self._finish(stage, PauseOutcome.CANCELLED)
            if interval < self._tick_seconds or loop.time() - started >= total:
                continue
            self._emit(stage, f"pausing... ({tick}s / {duration})\n")
            tick += 1

        if directive.should_fail(stage):
            return self._finish(stage, PauseOutcome.FAILED)
        return self._finish(stage, PauseOutcome.COMPLETED)

    async def _invoke(self, stage: Stage, token: CancellationToken, *, may_background: bool) -> None:
        identity = self._options.identity
        with correlation_scope(
            experiment=identity.experiment_name,
            component=identity.component_name,
            stage=stage.value,
        ):
            if not may_background and await self._registry.handle_backgrounded(identity, stage):
                return

            token.raise_if_cancelled()
            directive = self.prepare()

            if may_background and self._options.background:
                self._registry.start(
                    identity,
                    stage,
                    lambda child: self._execute(stage, directive, child),
                    token,
                )
                return

            await self._execute(stage, directive, token)

    async def _execute(
        self,
        stage: Stage,
        directive: PauseDirective,
        token: CancellationToken,
    ) -> None:
        outcome = await self.run_stage(stage, directive, token)
        if outcome is PauseOutcome.CANCELLED:
            token.raise_if_cancelled()
        if outcome is PauseOutcome.FAILED:
            raise SimulatedFailureError(stage.value)

    def _announce(self, stage: Stage, duration: Duration) -> None:
        self._console.print(f"pausing for {duration}", style="yellow", markup=False)
        self._logger.info(
            "pause_started",
            component=self._options.name,
            stage=stage.value,
            duration=str(duration),
            background=self._options.background,
        )

    def _emit(self, stage: Stage, output: str) -> None:
        self._sink.update_component(
            ComponentUpdate(
                experiment_name=self._options.experiment_name,
                component_name=self._options.name,
                component_type=self._options.type,
                run_index=self._options.run_index,
                loop_index=self._options.loop_index,
                count_index=self._options.count_index,
                stage=stage.value,
                status=STATUS_RUNNING,
                output=output.encode("utf-8"),
            )
        )

    def _finish(self, stage: Stage, outcome: PauseOutcome) -> PauseOutcome:
        self._states[stage] = outcome.state
        log = self._logger.warning if outcome is PauseOutcome.FAILED else self._logger.info
        log("pause_finished", component=self._options.name, stage=stage.value, outcome=outcome.value)
        return outcome


__all__ = ["PauseComponent"]
