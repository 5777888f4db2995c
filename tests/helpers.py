"""Fake API objects and streaming responses used across the test suite."""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any, AsyncIterator, Dict, List, Optional
from unittest.mock import MagicMock


def pod_json(
    name: str = "web",
    phase: Optional[str] = "Pending",
    resource_version: Optional[str] = "100",
) -> Dict[str, Any]:
    """A pod as the API server would return it."""
    pod: Dict[str, Any] = {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": name, "namespace": "default", "uid": f"uid-{name}"},
        "spec": {"containers": [{"name": "main", "image": "busybox"}]},
    }
    if resource_version is not None:
        pod["metadata"]["resourceVersion"] = resource_version
    if phase is not None:
        pod["status"] = {"phase": phase}
    return pod


def watch_line(event_type: str = "MODIFIED", **pod_kwargs: Any) -> bytes:
    """One newline-terminated watch stream record."""
    return (json.dumps({"type": event_type, "object": pod_json(**pod_kwargs)}) + "\n").encode()


class FakeContent:
    """Stand-in for ``aiohttp.StreamReader``.

    Returns the given lines in order. Once they run out, either returns b""
    (end of body) or blocks until cancelled when ``block`` is set.
    """

    def __init__(self, lines: List[Any], block: bool = False) -> None:
        self._lines = list(lines)
        self._block = block
        self.reads = 0
        self.read_started = asyncio.Event()

    async def readline(self) -> bytes:
        self.reads += 1
        if self._lines:
            item = self._lines.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item
        self.read_started.set()
        if self._block:
            await asyncio.Event().wait()
        return b""


class FakeResponse:
    """Stand-in for a streaming ``aiohttp.ClientResponse``."""

    def __init__(self, lines: List[Any], block: bool = False, status: int = 200) -> None:
        self.status = status
        self.content = FakeContent(lines, block=block)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


def fake_stream(response: FakeResponse) -> Any:
    """Return a ``stream_request_async`` replacement that yields ``response``."""

    @contextlib.asynccontextmanager
    async def stream_request_async(
        session: Any, app_route: str, params: Optional[Dict[str, str]] = None
    ) -> AsyncIterator[FakeResponse]:
        yield response

    return MagicMock(side_effect=stream_request_async)
