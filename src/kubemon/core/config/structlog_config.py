"""Shared structlog configuration for kubemon.

This module provides structlog configuration that enables:

1. Context variable merging (required for the ``@bind_context`` decorator)
2. Stdlib metadata decoration (logger name, level, timestamp)
3. Optional component identification in logs
4. Rendering through a stdlib handler so host applications keep control of
   where log lines go
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

import structlog

from kubemon.core.config.formatters import KubemonConsoleFormatter, KubemonJSONFormatter
from kubemon.core.configuration import KubemonConfig
from kubemon.core.exceptions import ConfigError

_configured_lock = threading.Lock()
_handler_name = "kubemon"

FORMATTERS = {
    "console": KubemonConsoleFormatter,
    "json": KubemonJSONFormatter,
}


def _create_component_processor(component_name: str) -> Callable:
    """Create a processor that adds the component name to all log events."""

    def add_component(
        logger: Any, method_name: str, event_dict: Dict[str, Any]
    ) -> Dict[str, Any]:
        event_dict["component"] = component_name
        return event_dict

    return add_component


def _build_processor_chain(
    component_name: Optional[str], extra_processors: Iterable[Callable]
) -> List[Callable]:
    processors: List[Callable] = [structlog.contextvars.merge_contextvars]

    if component_name:
        processors.append(_create_component_processor(component_name))

    processors.append(structlog.stdlib.filter_by_level)
    processors.append(structlog.stdlib.add_logger_name)
    processors.append(structlog.stdlib.add_log_level)
    processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(structlog.processors.format_exc_info)
    processors.extend(list(extra_processors))
    processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)
    return processors


def configure_structlog(
    component_name: Optional[str] = None,
    *,
    extra_processors: Optional[Iterable[Callable]] = None,
) -> None:
    """Configure structlog for kubemon.

    PROCESSOR CHAIN ORDER:

    1. merge_contextvars (Kubemon context)
    2. component processor (optional, when component_name is provided)
    3. filter_by_level, add_logger_name, add_log_level (stdlib)
    4. TimeStamper, format_exc_info
    5. Extra processors supplied via ``extra_processors`` (if any)
    6. ProcessorFormatter.wrap_for_formatter (keeps stdlib handlers working)

    Args:
        component_name: Component name to add to all logs (e.g., "cli")
        extra_processors: Additional structlog processors
    """
    structlog.configure(
        processors=_build_processor_chain(component_name, extra_processors or []),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging(
    level: Optional[str] = None,
    renderer: Optional[str] = None,
    component_name: Optional[str] = None,
    config: Optional[KubemonConfig] = None,
) -> None:
    """Configure structlog and attach one stderr handler to the ``kubemon`` logger.

    Values not passed explicitly are read from the ``logging`` config section.
    Calling this again replaces the handler rather than adding a second one.

    Raises:
        ConfigError: unknown level or renderer.
    """
    if level is None or renderer is None:
        config = config or KubemonConfig()
        level = level or config.get("logging", "level")
        renderer = renderer or config.get("logging", "renderer")

    level_name = str(level).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ConfigError(f'Unknown log level "{level}".')
    if renderer not in FORMATTERS:
        raise ConfigError(
            f'Unknown log renderer "{renderer}". Expected one of {sorted(FORMATTERS)}.'
        )

    with _configured_lock:
        configure_structlog(component_name=component_name)

        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_handler_name)
        handler.setFormatter(FORMATTERS[renderer]())

        kubemon_logger = logging.getLogger("kubemon")
        for existing in list(kubemon_logger.handlers):
            if existing.get_name() == _handler_name:
                kubemon_logger.removeHandler(existing)
        kubemon_logger.addHandler(handler)
        kubemon_logger.setLevel(numeric_level)
