"""Context helpers for Kubemon structlog instrumentation.

Kubemon metadata is namespaced with the ``kube_`` prefix so it can be told
apart from keys bound by a host application.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator

import structlog

PREFIX = "kube_"


def _prefixed(key: str) -> str:
    return key if key.startswith(PREFIX) else f"{PREFIX}{key}"


def get_kubemon_context() -> Dict[str, Any]:
    """Return a copy of all active Kubemon metadata."""
    ctx = structlog.contextvars.get_contextvars()
    return {k: v for k, v in ctx.items() if k.startswith(PREFIX)}


def clear_kubemon_context() -> None:
    """Remove all Kubemon metadata from the current context."""
    metadata = get_kubemon_context()
    if metadata:
        structlog.contextvars.unbind_contextvars(*metadata.keys())


def set_kubemon_context(**metadata: Any) -> None:
    """Bind metadata to the current structlog context.

    Keys are prefixed with ``kube_``; None values are skipped.
    """
    filtered = {_prefixed(k): v for k, v in metadata.items() if v is not None}
    if filtered:
        structlog.contextvars.bind_contextvars(**filtered)


def unset_kubemon_context(*keys: str) -> None:
    """Remove metadata keys from the current context."""
    filtered = tuple(_prefixed(k) for k in keys if k)
    if filtered:
        structlog.contextvars.unbind_contextvars(*filtered)


@contextmanager
def bind_kubemon_context(**metadata: Any) -> Iterator[None]:
    """Context manager that binds Kubemon metadata temporarily.

    Values that were bound before entering are restored on exit.
    """
    filtered = {_prefixed(k): v for k, v in metadata.items() if v is not None}

    if not filtered:
        yield
        return

    current = structlog.contextvars.get_contextvars()
    previous = {k: current[k] for k in filtered if k in current}

    structlog.contextvars.bind_contextvars(**filtered)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*filtered.keys())
        if previous:
            structlog.contextvars.bind_contextvars(**previous)
