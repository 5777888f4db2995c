"""Requester object to make HTTP requests to the Kubernetes API server."""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any, AsyncIterator, Callable, Dict, Optional, Tuple, Type
from urllib.parse import urlsplit

import aiohttp
import requests
import structlog
import tenacity
import urllib3

from kubemon.core import __version__
from kubemon.core.configuration import KubemonConfig
from kubemon.core.exceptions import (
    ConfigError,
    EncodingError,
    InvalidRequest,
    InvalidResponse,
    TransportError,
)

logger = structlog.get_logger(__name__)

REQUEST_TYPES = ("get", "post", "put", "delete")


def http_request_ok(status_code: int, expected_status: int = 200) -> bool:
    """Return True if the status code is the one the route promises on success."""
    return status_code == expected_status


def validate_service_url(service_url: str) -> str:
    """Return the service url without a trailing slash, or raise ConfigError."""
    parts = urlsplit(service_url or "")
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(
            f"failed to parse URL {service_url!r}: expected scheme://hostname[:port]"
        )
    return service_url.rstrip("/")


def encode_message(message: Optional[Any]) -> Optional[bytes]:
    """JSON-encode a request body."""
    if message is None:
        return None
    try:
        return json.dumps(message).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"failed to encode request body in json: {e}") from e


def raise_for_status(
    status_code: int,
    content: Any,
    request_type: str,
    app_route: str,
    expected_status: int = 200,
) -> None:
    """Map an unexpected status code to InvalidRequest (4xx) or InvalidResponse."""
    if http_request_ok(status_code, expected_status):
        return

    if 400 <= status_code < 500:
        raise InvalidRequest(
            f"Client error with status code {status_code} from {request_type.upper()} "
            f"request through route {app_route}. Response content: {content!r}",
            status_code=status_code,
            body=content,
        )

    raise InvalidResponse(
        f"Request failed due to status code {status_code} from {request_type.upper()} "
        f"request through route {app_route}. Response content: {content!r}",
        status_code=status_code,
        body=content,
    )


class Requester:
    """Handles HTTP requests to the Kubernetes API server.

    Every call makes exactly one round trip unless the caller asks for retries
    with ``tenacious=True``.
    """

    def __init__(
        self,
        service_url: str,
        retries_timeout: int = 300,
        retries_attempts: int = 10,
        request_timeout: int = 20,
        watch_read_timeout: Optional[float] = 300,
    ) -> None:
        """Initialize requester.

        Args:
            service_url: The API server URL (scheme://hostname[:port]).
            retries_timeout: Total timeout for retries in seconds.
            retries_attempts: Number of retry attempts.
            request_timeout: Individual request timeout in seconds.
            watch_read_timeout: Longest wait for the next line of a streaming
                response, in seconds. None or 0 waits forever.

        Raises:
            ConfigError: the service url is malformed.
        """
        self.service_url = validate_service_url(service_url)
        self.retries_timeout = retries_timeout
        self.retries_attempts = retries_attempts
        self.request_timeout = request_timeout
        self.watch_read_timeout = watch_read_timeout or None

    @classmethod
    def from_defaults(
        cls: Type[Requester], config: Optional[KubemonConfig] = None
    ) -> Requester:
        """Instantiate a requester from config values."""
        config = config or KubemonConfig()
        return cls(
            service_url=config.get("http", "service_url"),
            retries_timeout=config.get_int("http", "retries_timeout"),
            retries_attempts=config.get_int("http", "retries_attempts"),
            request_timeout=config.get_int("http", "request_timeout"),
            watch_read_timeout=config.get_float("http", "watch_read_timeout"),
        )

    @property
    def headers(self) -> Dict[str, str]:
        """Headers sent with every request."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"kubemon/{__version__}",
        }

    def _should_retry_exception(self, exception: Any) -> bool:
        """Determine if an exception should trigger a retry."""
        logger.warning("Request attempt failed", error=str(exception))

        # Do not retry for client errors.
        if isinstance(exception, InvalidRequest):
            return False

        return isinstance(
            exception,
            (
                InvalidResponse,
                TransportError,
                urllib3.exceptions.NewConnectionError,
                urllib3.exceptions.MaxRetryError,
            ),
        )

    def _maybe_retry(self, func: Callable, tenacious: bool) -> Any:
        if not tenacious:
            return func

        def raise_if_exceed_retry(retry_state: tenacity.RetryCallState) -> Any:
            """If we trigger retry error, raise informative RuntimeError."""
            outcome = retry_state.outcome
            if outcome and outcome.exception():
                exception = outcome.exception()
                raise RuntimeError(
                    f"Exceeded HTTP request retry budget due to: {exception}"
                ) from exception

        # tenacity wraps coroutine functions with AsyncRetrying
        return tenacity.retry(
            stop=(
                tenacity.stop_after_attempt(self.retries_attempts)
                | tenacity.stop_after_delay(self.retries_timeout)
            ),
            wait=tenacity.wait_exponential_jitter(initial=1, exp_base=2, jitter=1),
            retry=tenacity.retry_if_exception(self._should_retry_exception),
            retry_error_callback=raise_if_exceed_retry,
        )(func)

    def _check_request_type(self, request_type: str) -> None:
        if request_type not in REQUEST_TYPES:
            raise ValueError(
                f"request_type must be one of {', '.join(REQUEST_TYPES)}. "
                f"Got {request_type}"
            )

    def _send_request(
        self,
        app_route: str,
        message: Optional[Any],
        request_type: str,
        expected_status: int = 200,
    ) -> Tuple[int, bytes]:
        self._check_request_type(request_type)
        route = self.service_url + app_route
        data = encode_message(message)
        logger.debug("Sending request", method=request_type.upper(), route=route)

        try:
            response = requests.request(
                request_type.upper(),
                route,
                data=data,
                headers=self.headers,
                timeout=self.request_timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(
                f"failed to make request: {request_type.upper()} {route!r}: {e}"
            ) from e

        with response:
            try:
                content = response.content
            except requests.RequestException as e:
                raise TransportError(
                    f"failed to read response body for {request_type.upper()} "
                    f"{route!r}: {e}"
                ) from e

        raise_for_status(
            response.status_code, content, request_type, app_route, expected_status
        )
        return response.status_code, content

    def send_request(
        self,
        app_route: str,
        message: Optional[Any],
        request_type: str,
        expected_status: int = 200,
        tenacious: bool = False,
    ) -> Tuple[int, bytes]:
        """Send a blocking request to the API server.

        Returns:
            Tuple of (status_code, raw response body).

        Raises:
            EncodingError: the message could not be serialized.
            TransportError: the request failed or the body could not be read.
            InvalidRequest: 4xx status.
            InvalidResponse: any other unexpected status.
            RuntimeError: retry budget exhausted (tenacious only).
        """

        def send_fn(
            app_route: str, message: Optional[Any], request_type: str
        ) -> Tuple[int, bytes]:
            return self._send_request(app_route, message, request_type, expected_status)

        send_method = self._maybe_retry(send_fn, tenacious)
        return send_method(
            app_route=app_route, message=message, request_type=request_type
        )

    async def _send_request_async(
        self,
        session: aiohttp.ClientSession,
        app_route: str,
        message: Optional[Any],
        request_type: str,
        expected_status: int = 200,
    ) -> Tuple[int, bytes]:
        """Async version of _send_request using aiohttp."""
        self._check_request_type(request_type)
        route = self.service_url + app_route
        data = encode_message(message)
        logger.debug("Sending request", method=request_type.upper(), route=route)

        try:
            response = await session.request(
                request_type.upper(),
                route,
                data=data,
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"failed to make request: {request_type.upper()} {route!r}: {e!r}"
            ) from e

        async with response:
            try:
                content = await response.read()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportError(
                    f"failed to read response body for {request_type.upper()} "
                    f"{route!r}: {e!r}"
                ) from e
            status_code = response.status

        raise_for_status(status_code, content, request_type, app_route, expected_status)
        return status_code, content

    async def send_request_async(
        self,
        session: aiohttp.ClientSession,
        app_route: str,
        message: Optional[Any],
        request_type: str,
        expected_status: int = 200,
        tenacious: bool = False,
    ) -> Tuple[int, bytes]:
        """Send an async request to the API server.

        Args:
            session: An active aiohttp ClientSession for making requests.
            app_route: The API route to request (appended to the service url).
            message: JSON-serializable request body, or None.
            request_type: HTTP method - 'get', 'post', 'put' or 'delete'.
            expected_status: The status code that means success for this route.
            tenacious: Whether to retry transient failures (default: False).

        Returns:
            Tuple of (status_code, raw response body).
        """

        async def send_fn(
            session: aiohttp.ClientSession,
            app_route: str,
            message: Optional[Any],
            request_type: str,
        ) -> Tuple[int, bytes]:
            return await self._send_request_async(
                session, app_route, message, request_type, expected_status
            )

        send_method = self._maybe_retry(send_fn, tenacious)
        return await send_method(
            session=session,
            app_route=app_route,
            message=message,
            request_type=request_type,
        )

    @contextlib.asynccontextmanager
    async def stream_request_async(
        self,
        session: aiohttp.ClientSession,
        app_route: str,
        params: Optional[Dict[str, str]] = None,
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """Open a long-lived GET whose body is read incrementally by the caller.

        The response is only yielded once a 200 status has been seen. It is
        released when the block exits.
        """
        route = self.service_url + app_route
        logger.debug("Opening stream", route=route, params=params)
        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.request_timeout,
            sock_read=self.watch_read_timeout,
        )

        try:
            response = await session.get(
                route, params=params, headers=self.headers, timeout=timeout
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"failed to make request: GET {route!r}: {e!r}") from e

        try:
            if response.status != 200:
                try:
                    content = await response.read()
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    raise TransportError(
                        f"failed to read response body for GET {route!r}: {e!r}"
                    ) from e
                raise_for_status(response.status, content, "get", app_route)
            yield response
        finally:
            response.release()
