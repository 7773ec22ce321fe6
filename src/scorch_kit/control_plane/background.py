"""
scorch-kit — background task registry.

File: src/scorch_kit/control_plane/background.py

Purpose
- Track detached lifecycle tasks keyed by component identity and stage.
- Let later stages decide whether a backgrounded pause was already handled.

Contract
- ``start`` launches at most one live task per (component, stage).
- ``handle_backgrounded`` is consulted by ``stop``/``cleanup``. When the
  component has background work registered it cancels whatever is still
  running, waits for it, and returns ``True`` so the caller skips its own
  pause. ``stop`` keeps the records so ``cleanup`` also skips; ``cleanup``
  forgets them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from scorch_kit.domain.models import ComponentIdentity, Stage
from scorch_kit.utils.concurrency import CancellationToken

BackgroundRunner = Callable[[CancellationToken], Awaitable[None]]


@dataclass(slots=True)
class BackgroundEntry:
    identity: ComponentIdentity
    stage: Stage
    task: asyncio.Task[None]
    token: CancellationToken
    error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return not self.task.done()


class BackgroundRegistry:
    """Registry of detached pause tasks shared across lifecycle calls."""

    def __init__(self, *, logger: Any | None = None) -> None:
        self._entries: dict[tuple[ComponentIdentity, Stage], BackgroundEntry] = {}
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def start(
        self,
        identity: ComponentIdentity,
        stage: Stage,
        runner: BackgroundRunner,
        token: CancellationToken,
    ) -> asyncio.Task[None]:
        """Launch ``runner`` as a detached task and return immediately.

        The runner receives a child of ``token`` so the registry can cancel
        the background work without cancelling the caller.
        """

        key = (identity, stage)
        existing = self._entries.get(key)
        if existing is not None and existing.is_running:
            raise RuntimeError(f"{identity} already has a running background task for {stage}")

        child = token.linked()
        # The task body first runs at the next suspension point, after the
        # entry below is registered.
        task = asyncio.create_task(
            self._run(key, runner, child, parent=token),
            name=f"background:{identity}:{stage.value}",
        )
        self._entries[key] = BackgroundEntry(identity=identity, stage=stage, task=task, token=child)

        self._logger.info(
            "background_task_started",
            experiment=identity.experiment_name,
            component=identity.component_name,
            stage=stage.value,
        )
        return task

    def is_running(self, identity: ComponentIdentity, stage: Stage) -> bool:
        entry = self._entries.get((identity, stage))
        return entry is not None and entry.is_running

    def stages(self, identity: ComponentIdentity) -> tuple[Stage, ...]:
        return tuple(stage for (owner, stage) in self._entries if owner == identity)

    async def join(self, identity: ComponentIdentity, stage: Stage) -> BaseException | None:
        """Wait for a background task and return the error it ended with, if any."""

        entry = self._entries.get((identity, stage))
        if entry is None:
            raise KeyError(f"no background task for {identity} in {stage}")
        await asyncio.wait({entry.task})
        return entry.error

    async def cancel(
        self,
        identity: ComponentIdentity,
        stage: Stage,
        cause: BaseException | None = None,
    ) -> BaseException | None:
        entry = self._entries.get((identity, stage))
        if entry is None:
            raise KeyError(f"no background task for {identity} in {stage}")
        entry.token.cancel(cause)
        return await self.join(identity, stage)

    async def handle_backgrounded(self, identity: ComponentIdentity, stage: Stage) -> bool:
        """Return ``True`` when ``stage`` must skip its own pause for ``identity``."""

        if stage not in (Stage.STOP, Stage.CLEANUP):
            return False

        owned = [entry for (owner, _), entry in self._entries.items() if owner == identity]
        if not owned:
            return False

        for entry in owned:
            if entry.is_running:
                entry.token.cancel(asyncio.CancelledError(f"background pause ended by {stage}"))
        await asyncio.wait({entry.task for entry in owned})

        if stage is Stage.CLEANUP:
            for entry in owned:
                self._entries.pop((entry.identity, entry.stage), None)

        self._logger.info(
            "background_tasks_handled",
            experiment=identity.experiment_name,
            component=identity.component_name,
            stage=stage.value,
            handled_stages=[entry.stage.value for entry in owned],
        )
        return True

    async def shutdown(self) -> None:
        """Cancel and await every registered task."""

        entries = list(self._entries.values())
        for entry in entries:
            if entry.is_running:
                entry.token.cancel()
        if entries:
            await asyncio.wait({entry.task for entry in entries})
        self._entries.clear()

    async def _run(
        self,
        key: tuple[ComponentIdentity, Stage],
        runner: BackgroundRunner,
        token: CancellationToken,
        *,
        parent: CancellationToken,
    ) -> None:
        try:
            await runner(token)
        except (asyncio.CancelledError, Exception) as exc:
            entry = self._entries[key]
            entry.error = exc
            if exc is token.cause or isinstance(exc, asyncio.CancelledError):
                self._log_outcome(entry, "cancelled", cause=repr(exc))
            else:
                self._log_outcome(entry, "failed", error=str(exc))
            if (
                isinstance(exc, asyncio.CancelledError)
                and exc is not token.cause
                and _task_is_cancelling()
            ):
                # The task itself was cancelled, e.g. by loop shutdown.
                raise
        else:
            self._log_outcome(self._entries[key], "completed")
        finally:
            parent.unlink(token)

    def _log_outcome(self, entry: BackgroundEntry, outcome: str, **fields: object) -> None:
        log = self._logger.warning if outcome == "failed" else self._logger.info
        log(
            "background_task_finished",
            experiment=entry.identity.experiment_name,
            component=entry.identity.component_name,
            stage=entry.stage.value,
            outcome=outcome,
            **fields,
        )


def _task_is_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


__all__ = ["BackgroundEntry", "BackgroundRegistry", "BackgroundRunner"]
