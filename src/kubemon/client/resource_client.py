"""Typed create/get/list/delete against one resource collection of the API server."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Generic, Optional, Type, TypeVar

import aiohttp
import structlog
from pydantic import ValidationError

from kubemon.client.api import KubeModel
from kubemon.core.cancel_scope import CancelScope
from kubemon.core.exceptions import DecodingError, EncodingError
from kubemon.core.requester import Requester

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=KubeModel)
L = TypeVar("L", bound=KubeModel)
T = TypeVar("T")

SessionProvider = Callable[[], Awaitable[aiohttp.ClientSession]]


def decode_model(model: Type[T], content: bytes, what: str) -> T:
    """Decode a JSON response body into ``model``.

    Raises:
        DecodingError: the body is not valid JSON for the model.
    """
    try:
        return model.model_validate_json(content)  # type: ignore[attr-defined]
    except ValidationError as e:
        raise DecodingError(f"failed to decode {what}: {e}") from e


def encode_model(obj: KubeModel, what: str) -> Any:
    """Encode a model into the JSON-ready dict sent on the wire."""
    try:
        return obj.to_wire()
    except (TypeError, ValueError) as e:
        raise EncodingError(f"failed to encode {what} in json: {e}") from e


class ResourceClient(Generic[M, L]):
    """Client for a single resource collection, e.g. the pods of one namespace.

    Every async method takes an optional ``scope``; when it is cancelled the
    request in flight is abandoned and the scope's error is raised.
    """

    def __init__(
        self,
        requester: Requester,
        collection_route: str,
        model: Type[M],
        list_model: Type[L],
        session_provider: SessionProvider,
    ) -> None:
        self.requester = requester
        self.collection_route = collection_route.rstrip("/")
        self.model = model
        self.list_model = list_model
        self._session_provider = session_provider
        self._kind = model.__name__.lower()

    def item_route(self, name: str, subresource: Optional[str] = None) -> str:
        route = f"{self.collection_route}/{name}"
        if subresource:
            route = f"{route}/{subresource}"
        return route

    async def _request(
        self,
        route: str,
        message: Optional[Any],
        request_type: str,
        expected_status: int,
        scope: Optional[CancelScope],
        tenacious: bool = False,
    ) -> bytes:
        if scope is not None:
            scope.raise_if_cancelled()
        session = await self._session_provider()
        call = self.requester.send_request_async(
            session=session,
            app_route=route,
            message=message,
            request_type=request_type,
            expected_status=expected_status,
            tenacious=tenacious,
        )
        if scope is None:
            _, content = await call
        else:
            _, content = await scope.run(call)
        return content

    async def create(self, obj: M, scope: Optional[CancelScope] = None) -> M:
        """POST ``obj`` to the collection; the server answers 201 with the stored object."""
        message = encode_model(obj, self._kind)
        content = await self._request(
            self.collection_route, message, "post", 201, scope
        )
        return decode_model(self.model, content, self._kind)

    async def get(
        self, name: str, scope: Optional[CancelScope] = None, tenacious: bool = False
    ) -> M:
        content = await self._request(
            self.item_route(name), None, "get", 200, scope, tenacious
        )
        return decode_model(self.model, content, self._kind)

    async def list(
        self, scope: Optional[CancelScope] = None, tenacious: bool = False
    ) -> L:
        content = await self._request(
            self.collection_route, None, "get", 200, scope, tenacious
        )
        return decode_model(self.list_model, content, f"{self._kind} list")

    async def delete(self, name: str, scope: Optional[CancelScope] = None) -> None:
        """DELETE the named object. The response body is not decoded."""
        await self._request(self.item_route(name), None, "delete", 200, scope)

    async def get_raw(
        self,
        name: str,
        subresource: str,
        scope: Optional[CancelScope] = None,
        tenacious: bool = False,
    ) -> bytes:
        """GET a subresource (e.g. ``log``) and return its undecoded body."""
        return await self._request(
            self.item_route(name, subresource), None, "get", 200, scope, tenacious
        )

    # Blocking variants for callers without an event loop

    def get_sync(self, name: str, tenacious: bool = False) -> M:
        _, content = self.requester.send_request(
            app_route=self.item_route(name),
            message=None,
            request_type="get",
            tenacious=tenacious,
        )
        return decode_model(self.model, content, self._kind)

    def list_sync(self, tenacious: bool = False) -> L:
        _, content = self.requester.send_request(
            app_route=self.collection_route,
            message=None,
            request_type="get",
            tenacious=tenacious,
        )
        return decode_model(self.list_model, content, f"{self._kind} list")

    def delete_sync(self, name: str) -> None:
        self.requester.send_request(
            app_route=self.item_route(name), message=None, request_type="delete"
        )

    def get_raw_sync(self, name: str, subresource: str, tenacious: bool = False) -> bytes:
        _, content = self.requester.send_request(
            app_route=self.item_route(name, subresource),
            message=None,
            request_type="get",
            tenacious=tenacious,
        )
        return content
