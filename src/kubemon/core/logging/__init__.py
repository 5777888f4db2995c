"""Kubemon logging helpers for structlog context management."""

from __future__ import annotations

from .context import (  # noqa: F401
    bind_kubemon_context,
    clear_kubemon_context,
    get_kubemon_context,
    set_kubemon_context,
    unset_kubemon_context,
)

__all__ = [
    "bind_kubemon_context",
    "clear_kubemon_context",
    "get_kubemon_context",
    "set_kubemon_context",
    "unset_kubemon_context",
]
