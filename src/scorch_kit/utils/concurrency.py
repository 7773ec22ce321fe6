"""Async cancellation primitives used by the pause wait loop."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Final

_DEFAULT_CANCEL_MESSAGE: Final[str] = "operation cancelled"


class CancellationToken:
    """Cooperative cancellation token backed by ``asyncio.Event``.

    The token remembers the exception that cancelled it so waiters can re-raise
    the original cause unchanged. Only the first ``cancel`` call takes effect.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._cause: BaseException | None = None
        self._children: list[CancellationToken] = []

    def cancel(self, cause: BaseException | None = None) -> None:
        if self._event.is_set():
            return
        self._cause = cause if cause is not None else asyncio.CancelledError(_DEFAULT_CANCEL_MESSAGE)
        self._event.set()
        for child in self._children:
            child.cancel(self._cause)
        self._children.clear()

    def cancel_after(self, delay_seconds: float) -> asyncio.TimerHandle:
        """Cancel with a ``TimeoutError`` cause once ``delay_seconds`` elapse.

        Must be called from a running event loop.
        """

        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        loop = asyncio.get_running_loop()
        cause = TimeoutError(f"operation timed out after {delay_seconds} seconds")
        return loop.call_later(delay_seconds, self.cancel, cause)

    def linked(self) -> CancellationToken:
        """Return a child token cancelled whenever this token is cancelled."""

        child = CancellationToken()
        if self._event.is_set():
            child.cancel(self._cause)
        else:
            self._children.append(child)
        return child

    def unlink(self, child: CancellationToken) -> None:
        """Stop propagating cancellation to ``child``; unknown tokens are ignored."""

        with suppress(ValueError):
            self._children.remove(child)

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    async def wait(self) -> None:
        await self._event.wait()

    async def wait_for(self, timeout_seconds: float) -> bool:
        """Wait up to ``timeout_seconds``; return ``True`` if cancelled first."""

        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(timeout_seconds, 0.0))
        except TimeoutError:
            return self._event.is_set()
        return True

    def raise_if_cancelled(self) -> None:
        if self._cause is not None:
            raise self._cause


__all__ = ["CancellationToken"]
