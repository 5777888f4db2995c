"""Pod watch streams.

A watch is one long-lived GET against the watch API whose body is a sequence of
newline-delimited JSON records. A background task (``PodWatcher.run``) reads the
records, decodes them and hands them to a ``PodStatusStream``; the consumer
iterates the stream:

    stream = await client.watch_pod("web", resource_version, scope)
    async with stream:
        async for event in stream:
            print(event.type, event.pod.phase)

Delivery guarantees:
- events arrive in the order they were read, and none that decoded is dropped
- a stream ends with at most one terminal error, raised once by the iterator;
  after that, or after a clean end of the body, iteration stops
- cancelling the scope closes the HTTP response, so a pending read returns
  immediately and the scope's CancellationError becomes the terminal error
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, AsyncContextManager, Callable, Coroutine, Optional, Union

import aiohttp
import structlog
from pydantic import ValidationError

from kubemon.client.api import Pod, PodStatusEvent, RawWatchEvent, Status
from kubemon.core.cancel_scope import CancelScope
from kubemon.core.constants import WatchEventType
from kubemon.core.exceptions import (
    CancellationError,
    DecodingError,
    InvalidRequest,
    InvalidResponse,
    KubemonError,
    TransportError,
)

logger = structlog.get_logger(__name__)

StreamItem = Union[PodStatusEvent, KubemonError]


def decode_watch_event(line: Union[bytes, str]) -> PodStatusEvent:
    """Decode one watch stream record.

    Decoding is pure: the same record always yields an equal event.

    Raises:
        DecodingError: the record is not a ``{type, object}`` pod event.
        APIError: the record is an ERROR event sent by the server.
    """
    try:
        raw = RawWatchEvent.model_validate_json(line)
        if raw.type == WatchEventType.ERROR:
            status = Status.model_validate(raw.object)
            code = status.code or 500
            error_cls = InvalidRequest if 400 <= code < 500 else InvalidResponse
            raise error_cls(
                f"watch error event: {status.reason or ''} {status.message or ''}".strip(),
                status_code=code,
                body=line,
            )
        return PodStatusEvent(type=raw.type, pod=Pod.model_validate(raw.object))
    except ValidationError as e:
        raise DecodingError(f"failed to decode watch pod status: {e}") from e


class PodStatusStream:
    """Single-producer/single-consumer async iterator of pod status events.

    At most one item is buffered; the producer blocks until the consumer takes
    it. The producer task is owned by the stream: ``aclose()`` cancels it and
    waits for it to finish.
    """

    def __init__(self, pod_name: str) -> None:
        self.pod_name = pod_name
        self._queue: asyncio.Queue[StreamItem] = asyncio.Queue(maxsize=1)
        self._task: Optional[asyncio.Task] = None
        self._exhausted = False

    def start(self, producer: Coroutine[Any, Any, None]) -> None:
        """Run ``producer`` as the stream's background task."""
        if self._task is not None:
            raise RuntimeError(f"watch stream for pod {self.pod_name!r} already started")
        self._task = asyncio.create_task(producer, name=f"watch-{self.pod_name}")

    async def publish(self, item: StreamItem) -> None:
        """Hand an item to the consumer, blocking while the buffer is full."""
        await self._queue.put(item)

    @property
    def closed(self) -> bool:
        """True once the consumer has seen the end of the stream or closed it."""
        return self._exhausted

    def __aiter__(self) -> PodStatusStream:
        return self

    async def __anext__(self) -> PodStatusEvent:
        if self._exhausted:
            raise StopAsyncIteration
        if self._task is None:
            raise RuntimeError(f"watch stream for pod {self.pod_name!r} not started")

        item = await self._next_item()
        if item is None:
            self._exhausted = True
            raise StopAsyncIteration
        if isinstance(item, KubemonError):
            self._exhausted = True
            raise item
        return item

    async def _next_item(self) -> Optional[StreamItem]:
        """Return the next item, or None once the producer finished without one."""
        assert self._task is not None
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._task.done():
            return self._finished_producer_item()

        getter = asyncio.ensure_future(self._queue.get())
        try:
            await asyncio.wait(
                {getter, self._task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if not getter.done():
                getter.cancel()

        if getter.done() and not getter.cancelled():
            return getter.result()
        if not self._queue.empty():
            return self._queue.get_nowait()
        return self._finished_producer_item()

    def _finished_producer_item(self) -> Optional[StreamItem]:
        assert self._task is not None
        if self._task.cancelled():
            return None
        exc = self._task.exception()
        if exc is not None:
            # the producer publishes its own errors; anything else is a bug there
            raise exc
        return None

    async def aclose(self) -> None:
        """Stop the producer and mark the stream as finished."""
        self._exhausted = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)

    async def __aenter__(self) -> PodStatusStream:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class PodWatcher:
    """Background reader for one pod watch request.

    Args:
        pod_name: Pod being watched (for logging).
        open_stream: Returns an async context manager yielding the streaming
            response (``aiohttp.ClientResponse`` or any object with
            ``content.readline()`` and ``close()``).
        scope: Cancelling it ends the watch.
        stream: Where decoded events and the terminal error are published.
    """

    def __init__(
        self,
        pod_name: str,
        open_stream: Callable[[], AsyncContextManager[Any]],
        scope: CancelScope,
        stream: PodStatusStream,
    ) -> None:
        self.pod_name = pod_name
        self._open_stream = open_stream
        self._scope = scope
        self._stream = stream
        self._response: Any = None
        self._response_closed = False

    async def run(self) -> None:
        """Read the watch until it ends, fails or is cancelled."""
        try:
            async with contextlib.AsyncExitStack() as stack:
                self._response = await self._scope.run(
                    stack.enter_async_context(self._open_stream())
                )
                await self._read_events()
        except KubemonError as e:
            if isinstance(e, CancellationError):
                logger.debug("Watch cancelled", pod=self.pod_name, reason=str(e))
            else:
                logger.warning("Watch failed", pod=self.pod_name, error=str(e))
            await self._stream.publish(e)

    async def _read_events(self) -> None:
        while True:
            line = await self._read_line()
            if not line:
                logger.debug("Watch stream ended", pod=self.pod_name)
                return
            if not line.strip():
                continue
            event = decode_watch_event(line)
            logger.debug(
                "Received watch event",
                pod=self.pod_name,
                event_type=event.type,
                phase=event.pod.phase,
            )
            await self._stream.publish(event)

    async def _read_line(self) -> bytes:
        try:
            return await self._scope.run(self._response.content.readline())
        except CancellationError:
            self._close_response()
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            if self._scope.error is not None:
                raise self._scope.error
            raise TransportError(f"error reading streaming response body: {e!r}") from e

    def _close_response(self) -> None:
        """Close the underlying connection. Safe to call repeatedly."""
        if self._response_closed or self._response is None:
            return
        self._response_closed = True
        self._response.close()


__all__ = [
    "PodStatusStream",
    "PodWatcher",
    "decode_watch_event",
]
