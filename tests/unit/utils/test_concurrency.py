"""Tests for the cancellation token used by the pause wait loop."""

from __future__ import annotations

import asyncio

import pytest

from scorch_kit.utils.concurrency import CancellationToken


async def test_default_cause_is_cancelled_error() -> None:
    token = CancellationToken()
    assert not token.is_cancelled
    token.raise_if_cancelled()

    token.cancel()

    assert token.is_cancelled
    assert isinstance(token.cause, asyncio.CancelledError)
    with pytest.raises(asyncio.CancelledError) as info:
        token.raise_if_cancelled()
    assert info.value is token.cause


async def test_first_cancel_wins() -> None:
    token = CancellationToken()
    first = RuntimeError("first")
    token.cancel(first)
    token.cancel(RuntimeError("second"))

    assert token.cause is first


async def test_linked_child_follows_parent_but_not_the_reverse() -> None:
    parent = CancellationToken()
    child = parent.linked()
    sibling = parent.linked()

    sibling.cancel()
    assert not parent.is_cancelled

    cause = asyncio.CancelledError("parent gone")
    parent.cancel(cause)
    assert child.is_cancelled
    assert child.cause is cause

    late = parent.linked()
    assert late.is_cancelled
    assert late.cause is cause


async def test_cancel_after_uses_timeout_cause() -> None:
    token = CancellationToken()
    token.cancel_after(0.02)

    await asyncio.wait_for(token.wait(), timeout=1.0)

    assert isinstance(token.cause, TimeoutError)


async def test_cancel_after_rejects_negative_delay() -> None:
    with pytest.raises(ValueError):
        CancellationToken().cancel_after(-1)


async def test_wait_for_reports_timeout_or_cancellation() -> None:
    token = CancellationToken()
    assert await token.wait_for(0.01) is False

    asyncio.get_running_loop().call_later(0.01, token.cancel)
    loop = asyncio.get_running_loop()
    started = loop.time()
    assert await token.wait_for(5.0) is True
    assert loop.time() - started < 1.0

    assert await token.wait_for(0.0) is True


async def test_unlinked_child_no_longer_follows_parent() -> None:
    parent = CancellationToken()
    kept = parent.linked()
    released = parent.linked()

    parent.unlink(released)
    parent.unlink(released)
    parent.cancel()

    assert kept.is_cancelled
    assert not released.is_cancelled
