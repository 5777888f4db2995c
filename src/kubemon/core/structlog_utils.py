"""Utilities for structured logging with context binding."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Dict, Optional, TypeVar

from kubemon.core.logging import set_kubemon_context, unset_kubemon_context

F = TypeVar("F", bound=Callable[..., Any])


def bind_context(*param_names: str, **renames: str) -> Callable[[F], F]:
    """Decorator to bind function/method parameters to structlog context.

    The values are bound for the duration of the call and removed afterwards,
    whether the call returns or raises. Coroutine functions are supported; tasks
    they start inherit the bound values.

    Args:
        *param_names: Names of parameters to bind using their original names.
        **renames: Mapping of context keys to parameter paths
            (e.g., pod_name="pod.metadata.name").

    Example:
        >>> @bind_context("pod_name")
        ... async def delete_pod(self, pod_name: str) -> None:
        ...     logger.info("deleting")  # Includes kube_pod_name

        >>> @bind_context(pod_name="pod.metadata.name")
        ... async def run_pod(self, pod: Pod) -> Pod:
        ...     logger.info("creating")
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)
        positional_paths = tuple(param_names)
        rename_items = tuple(renames.items())

        def collect(args: Any, kwargs: Any) -> Dict[str, Any]:
            bound_args = signature.bind(*args, **kwargs)
            bound_args.apply_defaults()

            context_data = {}
            for param_name in positional_paths:
                value = _extract_value(bound_args.arguments, param_name)
                if value is not None:
                    context_data[param_name] = value
            for context_key, param_path in rename_items:
                value = _extract_value(bound_args.arguments, param_path)
                if value is not None:
                    context_data[context_key] = value
            return context_data

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                context_data = collect(args, kwargs)
                set_kubemon_context(**context_data)
                try:
                    return await func(*args, **kwargs)
                finally:
                    unset_kubemon_context(*context_data.keys())

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            context_data = collect(args, kwargs)
            set_kubemon_context(**context_data)
            try:
                return func(*args, **kwargs)
            finally:
                unset_kubemon_context(*context_data.keys())

        return wrapper  # type: ignore

    return decorator


def _extract_value(arguments: dict, param_path: str) -> Optional[Any]:
    """Extract a value from function arguments using dot notation.

    Example:
        >>> args = {"pod": Pod(metadata=ObjectMeta(name="web"))}
        >>> _extract_value(args, "pod.metadata.name")
        'web'
    """
    parts = param_path.split(".")
    value = arguments.get(parts[0])

    if value is None:
        return None

    for part in parts[1:]:
        try:
            value = getattr(value, part)
        except AttributeError:
            return None

    return value
