"""Tests for CancelScope deadlines and parent/child propagation."""

from __future__ import annotations

import asyncio

import pytest

from kubemon.core.cancel_scope import CancelScope
from kubemon.core.exceptions import CancellationError, DeadlineExceeded


class TestCancel:
    def test_cancel_records_first_reason(self) -> None:
        scope = CancelScope()
        assert not scope.cancelled
        assert scope.error is None

        scope.cancel("first")
        scope.cancel("second")

        assert scope.cancelled
        assert str(scope.error) == "first"
        with pytest.raises(CancellationError, match="first"):
            scope.raise_if_cancelled()

    def test_parent_cancels_children(self) -> None:
        parent = CancelScope.background()
        child = parent.child()
        grandchild = child.child()

        parent.cancel("stop")

        assert child.error is parent.error
        assert grandchild.error is parent.error

    def test_child_cancel_leaves_parent_alone(self) -> None:
        parent = CancelScope.background()
        child = parent.child()

        child.cancel()

        assert child.cancelled
        assert not parent.cancelled

    def test_child_of_cancelled_parent_starts_cancelled(self) -> None:
        parent = CancelScope()
        parent.cancel("gone")
        child = parent.child()
        assert child.error is parent.error

    def test_context_manager_cancels_on_exit(self) -> None:
        parent = CancelScope()
        with parent.child() as scope:
            assert not scope.cancelled
        assert scope.cancelled
        assert not parent.cancelled


class TestDeadline:
    @pytest.mark.asyncio
    async def test_timeout_fires_deadline_exceeded(self) -> None:
        scope = CancelScope(timeout=0.01)
        assert scope.deadline is not None

        error = await asyncio.wait_for(scope.wait(), timeout=1)

        assert isinstance(error, DeadlineExceeded)

    @pytest.mark.asyncio
    async def test_remaining_counts_down_to_zero(self) -> None:
        scope = CancelScope(timeout=60)
        assert 0 < scope.remaining() <= 60

        expired = CancelScope(timeout=0.01)
        await asyncio.wait_for(expired.wait(), timeout=1)
        assert expired.remaining() == pytest.approx(0.0, abs=1e-3)

    @pytest.mark.asyncio
    async def test_child_inherits_earlier_parent_deadline(self) -> None:
        parent = CancelScope(timeout=0.01)
        child = parent.child(timeout=60)

        assert child.deadline == parent.deadline
        error = await asyncio.wait_for(child.wait(), timeout=1)
        assert isinstance(error, DeadlineExceeded)

    @pytest.mark.asyncio
    async def test_child_deadline_does_not_cancel_parent(self) -> None:
        parent = CancelScope.background()
        child = parent.child(timeout=0.01)

        await asyncio.wait_for(child.wait(), timeout=1)

        assert not parent.cancelled
        assert parent.deadline is None
        assert parent.remaining() is None


class TestRun:
    @pytest.mark.asyncio
    async def test_returns_result(self) -> None:
        async def work() -> int:
            await asyncio.sleep(0)
            return 7

        assert await CancelScope().run(work()) == 7

    @pytest.mark.asyncio
    async def test_propagates_exception(self) -> None:
        async def work() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await CancelScope().run(work())

    @pytest.mark.asyncio
    async def test_cancel_interrupts_awaitable(self) -> None:
        scope = CancelScope()
        started = asyncio.Event()
        interrupted = asyncio.Event()

        async def slow() -> None:
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                interrupted.set()
                raise

        task = asyncio.create_task(scope.run(slow()))
        await started.wait()
        scope.cancel("stop")

        with pytest.raises(CancellationError, match="stop"):
            await task
        assert interrupted.is_set()

    @pytest.mark.asyncio
    async def test_already_cancelled_scope_raises_immediately(self) -> None:
        scope = CancelScope()
        scope.cancel()
        ran = False

        async def work() -> None:
            nonlocal ran
            ran = True

        with pytest.raises(CancellationError):
            await scope.run(work())
        assert not ran

    @pytest.mark.asyncio
    async def test_task_cancellation_cancels_awaitable(self) -> None:
        scope = CancelScope()
        started = asyncio.Event()
        interrupted = asyncio.Event()

        async def slow() -> None:
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                interrupted.set()
                raise

        task = asyncio.create_task(scope.run(slow()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.wait_for(interrupted.wait(), timeout=1)
        assert not scope.cancelled
