"""Kubemon core logging configuration package.

This package contains the structlog processor chain and the stdlib formatters
that render structlog events for console or JSON output.
"""

from .formatters import KubemonConsoleFormatter, KubemonJSONFormatter
from .structlog_config import configure_logging, configure_structlog

__all__ = [
    "KubemonConsoleFormatter",
    "KubemonJSONFormatter",
    "configure_logging",
    "configure_structlog",
]
