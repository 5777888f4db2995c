"""Shared fixtures.

Tests never talk to a live API server: HTTP is mocked at the Requester or the
streaming response level.
"""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from kubemon.core.requester import Requester

SERVICE_URL = "http://kube.test:8001"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop KUBEMON__ overrides from the developer's shell."""
    for key in list(os.environ.keys()):
        if key.startswith("KUBEMON__"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def clean_structlog_context() -> None:
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def service_url() -> str:
    return SERVICE_URL


@pytest.fixture
def mock_requester() -> MagicMock:
    """Create a mock Requester with both sync and async methods."""
    requester = MagicMock(spec=Requester)
    requester.service_url = SERVICE_URL
    requester.send_request = MagicMock()
    requester.send_request_async = AsyncMock()
    requester.stream_request_async = MagicMock()
    return requester
