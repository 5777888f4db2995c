"""CancelScope: cooperative cancellation and deadlines for Kubemon operations.

A scope is a token passed down the call chain. Cancelling a scope (explicitly or
when its deadline passes) cancels every scope derived from it, and anything
waiting on the scope wakes up with the scope's ``CancellationError``.

Usage:
    root = CancelScope.background()
    with root.child(timeout=120) as scope:
        pod = await client.await_pod_not_pending(name, version, scope)

Leaving the ``with`` block cancels the child so nothing started under it
outlives the block. Cancelling twice is a no-op.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Optional, Set, TypeVar

from kubemon.core.exceptions import CancellationError, DeadlineExceeded

T = TypeVar("T")


class CancelScope:
    """Cancellation token with an optional deadline, chained to a parent scope."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        parent: Optional[CancelScope] = None,
    ) -> None:
        """Initialize the scope.

        Args:
            timeout: Seconds until the scope expires. Requires a running event loop.
            parent: Scope whose cancellation also cancels this one.
        """
        self._parent = parent
        self._children: Set[CancelScope] = set()
        self._event = asyncio.Event()
        self._error: Optional[CancellationError] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._deadline: Optional[float] = None

        if parent is not None:
            if parent.error is not None:
                self._finish(parent.error)
                return
            parent._children.add(self)
            self._deadline = parent.deadline

        if timeout is not None:
            loop = asyncio.get_running_loop()
            deadline = loop.time() + timeout
            if self._deadline is None or deadline < self._deadline:
                self._deadline = deadline
                self._timer = loop.call_later(
                    timeout,
                    self._finish,
                    DeadlineExceeded(f"deadline of {timeout}s exceeded"),
                )

    @classmethod
    def background(cls) -> CancelScope:
        """Return a fresh root scope that is never cancelled on its own."""
        return cls()

    def child(self, timeout: Optional[float] = None) -> CancelScope:
        """Derive a scope that is cancelled with this one, optionally sooner."""
        return CancelScope(timeout=timeout, parent=self)

    @property
    def cancelled(self) -> bool:
        """True once the scope has been cancelled or has expired."""
        return self._error is not None

    @property
    def error(self) -> Optional[CancellationError]:
        """The reason the scope ended, or None while it is still live."""
        return self._error

    @property
    def deadline(self) -> Optional[float]:
        """Event loop time at which the scope expires, if it has a deadline."""
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None if there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    def cancel(self, reason: str = "scope cancelled") -> None:
        """Cancel this scope and every scope derived from it."""
        self._finish(CancellationError(reason))

    def raise_if_cancelled(self) -> None:
        """Raise the scope's error if it has ended."""
        if self._error is not None:
            raise self._error

    async def wait(self) -> CancellationError:
        """Block until the scope ends and return its error."""
        await self._event.wait()
        assert self._error is not None
        return self._error

    async def run(self, aw: Awaitable[T]) -> T:
        """Await ``aw`` unless the scope ends first.

        Raises:
            CancellationError: the scope ended before ``aw`` finished; ``aw`` is
                cancelled.
        """
        if self._error is not None:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise self._error
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        assert self._error is not None
        raise self._error

    def _finish(self, error: CancellationError) -> None:
        if self._error is not None:
            return
        self._error = error
        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._parent is not None:
            self._parent._children.discard(self)
        for child in list(self._children):
            child._finish(error)
        self._children.clear()

    def __enter__(self) -> CancelScope:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()
