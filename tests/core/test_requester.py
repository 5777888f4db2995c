from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
import requests

from kubemon.core.configuration import KubemonConfig
from kubemon.core.exceptions import (
    ConfigError,
    EncodingError,
    InvalidRequest,
    InvalidResponse,
    TransportError,
)
from kubemon.core.requester import Requester


def http_response(status_code: int, content: bytes = b"{}") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


class FakeAsyncResponse:
    def __init__(self, status: int, content: bytes = b"{}") -> None:
        self.status = status
        self._content = content
        self.released = False

    async def read(self) -> bytes:
        return self._content

    def release(self) -> None:
        self.released = True

    async def __aenter__(self) -> "FakeAsyncResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.release()


@pytest.fixture
def requester(service_url: str) -> Requester:
    return Requester(service_url, retries_attempts=3, retries_timeout=30)


@pytest.fixture
def no_sleep(mocker):
    """Skip tenacity's backoff sleeps."""
    return mocker.patch("tenacity.nap.time.sleep")


@pytest.mark.parametrize(
    "service_url",
    ["localhost:8001", "http://", "ftp://kube.test", ""],
)
def test_malformed_service_url(service_url):
    with pytest.raises(ConfigError, match="failed to parse URL"):
        Requester(service_url)


def test_from_defaults():
    config = KubemonConfig(
        dict_config={"http": {"service_url": "https://kube.test:6443/", "request_timeout": 5}}
    )
    requester = Requester.from_defaults(config)
    assert requester.service_url == "https://kube.test:6443"
    assert requester.request_timeout == 5
    assert requester.watch_read_timeout == 300


def test_zero_watch_read_timeout_waits_forever():
    config = KubemonConfig(dict_config={"http": {"watch_read_timeout": 0}})
    assert Requester.from_defaults(config).watch_read_timeout is None


def test_null_watch_read_timeout_is_a_config_error(tmp_path):
    path = tmp_path / "kubemon.yaml"
    path.write_text(
        "http:\n"
        "  service_url: http://kube.test\n"
        "  request_timeout: 20\n"
        "  watch_read_timeout: null\n"
        "  retries_attempts: 3\n"
        "  retries_timeout: 30\n"
    )
    with pytest.raises(ConfigError, match="watch_read_timeout"):
        Requester.from_defaults(KubemonConfig(filepath=str(path)))


def test_send_request_success(mocker, requester):
    mock_request = mocker.patch(
        "kubemon.core.requester.requests.request",
        return_value=http_response(201, b'{"kind": "Pod"}'),
    )

    rc, content = requester.send_request(
        "/api/v1/namespaces/default/pods", {"kind": "Pod"}, "post", expected_status=201
    )

    assert rc == 201
    assert content == b'{"kind": "Pod"}'
    args, kwargs = mock_request.call_args
    assert args == ("POST", "http://kube.test:8001/api/v1/namespaces/default/pods")
    assert kwargs["data"] == b'{"kind": "Pod"}'
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_unexpected_success_code_is_an_error(mocker, requester):
    mocker.patch(
        "kubemon.core.requester.requests.request", return_value=http_response(200)
    )
    with pytest.raises(InvalidResponse) as exc_info:
        requester.send_request("/pods", {}, "post", expected_status=201)
    assert exc_info.value.status_code == 200


def test_client_error_carries_status_and_body(mocker, requester):
    mocker.patch(
        "kubemon.core.requester.requests.request",
        return_value=http_response(404, b'{"reason": "NotFound"}'),
    )
    with pytest.raises(InvalidRequest, match="Client error with status code 404") as exc_info:
        requester.send_request("/pods/web", None, "get")
    assert exc_info.value.status_code == 404
    assert exc_info.value.body == b'{"reason": "NotFound"}'


def test_no_retry_by_default(mocker, requester):
    mock_request = mocker.patch(
        "kubemon.core.requester.requests.request", return_value=http_response(502)
    )
    with pytest.raises(InvalidResponse, match="Request failed due to status code 502"):
        requester.send_request("/pods", None, "get")
    assert mock_request.call_count == 1


def test_transport_error(mocker, requester):
    mocker.patch(
        "kubemon.core.requester.requests.request",
        side_effect=requests.ConnectionError("refused"),
    )
    with pytest.raises(TransportError, match="failed to make request"):
        requester.send_request("/pods", None, "get")


def test_encoding_error(requester):
    with pytest.raises(EncodingError):
        requester.send_request("/pods", {"bad": object()}, "post")


def test_bad_request_type(requester):
    with pytest.raises(ValueError, match="request_type must be one of"):
        requester.send_request("/pods", None, "patch")


@pytest.mark.parametrize(
    "statuses, expected_attempts, expected_exception, expected_msg",
    [
        ([502, 502, 200], 3, None, None),
        (
            [502, 502, 502],
            3,
            RuntimeError,
            (
                "Exceeded HTTP request retry budget due to: Request failed due to status "
                "code 502 from GET request through route /pods"
            ),
        ),
        ([403], 1, InvalidRequest, "Client error with status code 403"),
    ],
)
def test_tenacious_retries(
    mocker, no_sleep, requester, statuses, expected_attempts, expected_exception, expected_msg
):
    mock_request = mocker.patch(
        "kubemon.core.requester.requests.request",
        side_effect=[http_response(s) for s in statuses],
    )
    if expected_exception:
        with pytest.raises(expected_exception, match=expected_msg):
            requester.send_request("/pods", None, "get", tenacious=True)
    else:
        rc, _ = requester.send_request("/pods", None, "get", tenacious=True)
        assert rc == 200

    assert mock_request.call_count == expected_attempts


class TestAsync:
    @pytest.mark.asyncio
    async def test_send_request_async_success(self, requester):
        session = MagicMock()
        session.request = AsyncMock(return_value=FakeAsyncResponse(200, b'{"items": []}'))

        rc, content = await requester.send_request_async(session, "/pods", None, "get")

        assert rc == 200
        assert content == b'{"items": []}'
        args, _ = session.request.call_args
        assert args == ("GET", "http://kube.test:8001/pods")

    @pytest.mark.asyncio
    async def test_send_request_async_status_error(self, requester):
        session = MagicMock()
        session.request = AsyncMock(return_value=FakeAsyncResponse(500, b"oops"))

        with pytest.raises(InvalidResponse) as exc_info:
            await requester.send_request_async(session, "/pods/web", None, "delete")
        assert exc_info.value.status_code == 500
        assert exc_info.value.body == b"oops"

    @pytest.mark.asyncio
    async def test_send_request_async_transport_error(self, requester):
        session = MagicMock()
        session.request = AsyncMock(side_effect=aiohttp.ClientConnectionError("reset"))

        with pytest.raises(TransportError, match="failed to make request"):
            await requester.send_request_async(session, "/pods", None, "get")

    @pytest.mark.asyncio
    async def test_send_request_async_tenacious(self, no_sleep, requester, mocker):
        mocker.patch("asyncio.sleep", new=AsyncMock())
        session = MagicMock()
        session.request = AsyncMock(
            side_effect=[FakeAsyncResponse(503), FakeAsyncResponse(200, b"{}")]
        )

        rc, _ = await requester.send_request_async(
            session, "/pods", None, "get", tenacious=True
        )

        assert rc == 200
        assert session.request.call_count == 2

    @pytest.mark.asyncio
    async def test_stream_request_yields_ok_response(self, requester):
        response = FakeAsyncResponse(200)
        session = MagicMock()
        session.get = AsyncMock(return_value=response)

        async with requester.stream_request_async(
            session, "/watch/pods/web", params={"resourceVersion": "7"}
        ) as stream_response:
            assert stream_response is response
            assert not response.released

        assert response.released
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"resourceVersion": "7"}
        assert kwargs["timeout"].total is None

    @pytest.mark.asyncio
    async def test_stream_request_rejects_non_ok_status(self, requester):
        response = FakeAsyncResponse(410, b'{"reason": "Expired"}')
        session = MagicMock()
        session.get = AsyncMock(return_value=response)

        with pytest.raises(InvalidRequest) as exc_info:
            async with requester.stream_request_async(session, "/watch/pods/web"):
                pytest.fail("must not yield a failed response")

        assert exc_info.value.status_code == 410
        assert response.released
