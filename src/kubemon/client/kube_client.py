"""KubeClient: pod lifecycle operations against the Kubernetes API server.

This module holds everything a caller needs to run a pod and keep track of it:
- Pass-through calls (create, get, list, delete, logs, nodes)
- Watching a pod's status changes
- Waiting for a pod to leave the Pending phase
- Running a pod under a deadline, deleting it again if it never starts
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import aiohttp
import structlog

from kubemon.client.api import Node, NodeList, Pod, PodList, PodStatus
from kubemon.client.resource_client import ResourceClient
from kubemon.client.watch import PodStatusStream, PodWatcher
from kubemon.core.cancel_scope import CancelScope
from kubemon.core.configuration import KubemonConfig
from kubemon.core.constants import ApiPaths
from kubemon.core.exceptions import (
    CompensationFailure,
    ConfigError,
    DecodingError,
    KubemonError,
    PodNotRunningError,
    TransportError,
)
from kubemon.core.logging import bind_kubemon_context
from kubemon.core.requester import Requester
from kubemon.core.structlog_utils import bind_context

logger = structlog.get_logger(__name__)

DEFAULT_PENDING_TIMEOUT = 120.0


class KubeClient:
    """Pod and node operations for one namespace.

    Usage:
        async with KubeClient.from_defaults() as client:
            pod = await client.run_pod(pod_spec)

    Or with a session managed elsewhere:
        client = KubeClient(requester)
        client.set_session(existing_session)
        pods = await client.get_pods()
    """

    def __init__(
        self,
        requester: Requester,
        namespace: str = "default",
        pending_timeout: float = DEFAULT_PENDING_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            requester: The Requester instance for HTTP communication.
            namespace: Namespace pods are created in and read from.
            pending_timeout: Seconds run_pod waits for a pod to leave Pending.
        """
        if not namespace:
            raise ConfigError("namespace must not be empty")
        self.requester = requester
        self.namespace = namespace
        self.pending_timeout = pending_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._owns_session: bool = False

        self.pods: ResourceClient[Pod, PodList] = ResourceClient(
            requester,
            f"{ApiPaths.API_ENDPOINT}{ApiPaths.NAMESPACES}/{namespace}{ApiPaths.PODS}",
            Pod,
            PodList,
            self._ensure_session,
        )
        self.nodes: ResourceClient[Node, NodeList] = ResourceClient(
            requester,
            f"{ApiPaths.API_ENDPOINT}{ApiPaths.NODES}",
            Node,
            NodeList,
            self._ensure_session,
        )

    @classmethod
    def from_defaults(cls, config: Optional[KubemonConfig] = None) -> KubeClient:
        """Build a client from the ``http`` and ``kube`` config sections."""
        config = config or KubemonConfig()
        return cls(
            requester=Requester.from_defaults(config),
            namespace=config.get("kube", "namespace"),
            pending_timeout=config.get_float("kube", "pending_timeout"),
        )

    # ──────────────────────────────────────────────────────────────────────────
    # Session management
    # ──────────────────────────────────────────────────────────────────────────

    async def __aenter__(self) -> KubeClient:
        """Open a session unless one was set with set_session()."""
        await self._ensure_session()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        await self.close()

    def set_session(self, session: aiohttp.ClientSession) -> None:
        """Set an external session (client will not close it)."""
        self._session = session
        self._owns_session = False

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self._owns_session = False

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    # ──────────────────────────────────────────────────────────────────────────
    # Pass-through operations
    # ──────────────────────────────────────────────────────────────────────────

    async def create_pod(self, pod: Pod, scope: Optional[CancelScope] = None) -> Pod:
        """Submit a pod. Returns the stored pod with its name and resource version."""
        return await self.pods.create(pod, scope)

    async def get_pod(self, name: str, scope: Optional[CancelScope] = None) -> Pod:
        return await self.pods.get(name, scope)

    async def pod_status(
        self, name: str, scope: Optional[CancelScope] = None
    ) -> PodStatus:
        """Fetch the current status of a pod."""
        pod = await self.pods.get(name, scope)
        return pod.status or PodStatus()

    async def get_pods(self, scope: Optional[CancelScope] = None) -> List[Pod]:
        pod_list = await self.pods.list(scope)
        return list(pod_list.items)

    async def delete_pod(self, name: str, scope: Optional[CancelScope] = None) -> None:
        await self.pods.delete(name, scope)

    async def pod_log(self, name: str, scope: Optional[CancelScope] = None) -> str:
        """Fetch the log of the pod's first container."""
        content = await self.pods.get_raw(name, "log", scope)
        return content.decode("utf-8", errors="replace")

    async def get_nodes(self, scope: Optional[CancelScope] = None) -> List[Node]:
        node_list = await self.nodes.list(scope)
        return list(node_list.items)

    # ──────────────────────────────────────────────────────────────────────────
    # Watch and wait
    # ──────────────────────────────────────────────────────────────────────────

    def _watch_route(self, name: str) -> str:
        return (
            f"{ApiPaths.API_ENDPOINT}{ApiPaths.WATCH}{ApiPaths.NAMESPACES}/"
            f"{self.namespace}{ApiPaths.PODS}/{name}"
        )

    async def watch_pod(
        self,
        name: str,
        resource_version: str,
        scope: Optional[CancelScope] = None,
    ) -> PodStatusStream:
        """Start watching a pod's status changes from ``resource_version`` on.

        The watch runs in a background task owned by the returned stream.
        Close the stream or cancel ``scope`` to stop it early.

        Raises:
            ConfigError: ``resource_version`` is empty. No request is made.
        """
        if not resource_version:
            raise ConfigError(f"resourceVersion for pod {name!r} must be provided")
        scope = scope or CancelScope.background()
        session = await self._ensure_session()
        route = self._watch_route(name)

        def open_stream() -> Any:
            return self.requester.stream_request_async(
                session, route, params={"resourceVersion": resource_version}
            )

        stream = PodStatusStream(name)
        watcher = PodWatcher(name, open_stream, scope, stream)
        stream.start(watcher.run())
        logger.debug("Started watch", pod=name, resource_version=resource_version)
        return stream

    async def await_pod_not_pending(
        self,
        name: str,
        resource_version: str,
        scope: Optional[CancelScope] = None,
    ) -> Pod:
        """Block until the pod is observed in any phase other than Pending.

        There is no timeout of its own; cancel ``scope`` to stop waiting. The
        watch is torn down before this returns, whatever the outcome.

        Raises:
            ConfigError: ``resource_version`` is empty.
            CancellationError: ``scope`` was cancelled or expired.
            TransportError: the watch ended before the pod left Pending.
            KubemonError: any other error reported by the watch.
        """
        if not resource_version:
            raise ConfigError(f"resourceVersion for pod {name!r} must be provided")
        scope = scope or CancelScope.background()

        with scope.child() as watch_scope:
            stream = await self.watch_pod(name, resource_version, watch_scope)
            async with stream:
                async for event in stream:
                    if event.pod.is_pending:
                        logger.debug(
                            "Pod still pending",
                            pod=name,
                            event_type=event.type,
                            remaining=watch_scope.remaining(),
                        )
                        continue
                    logger.info("Pod left pending state", pod=name, phase=event.pod.phase)
                    return event.pod

        if scope.error is not None:
            raise scope.error
        raise TransportError(
            f"watch for pod {name!r} ended before pod left pending state"
        )

    # ──────────────────────────────────────────────────────────────────────────
    # Run
    # ──────────────────────────────────────────────────────────────────────────

    @bind_context(pod_name="pod.metadata.name")
    async def run_pod(
        self,
        pod: Pod,
        scope: Optional[CancelScope] = None,
        timeout: Optional[float] = None,
    ) -> Pod:
        """Create a pod and wait until it leaves the Pending phase.

        If the pod is not seen outside Pending within ``timeout`` seconds
        (``pending_timeout`` when not given), or the wait fails for any other
        reason, the pod is deleted again before the error is raised.

        Args:
            pod: The pod to create. Not modified.
            scope: Caller's scope; cancelling it aborts the run.
            timeout: Override for ``pending_timeout``.

        Returns:
            The pod as first observed outside Pending.

        Raises:
            KubemonError: creating the pod failed (nothing to clean up).
            PodNotRunningError: the pod was created but never left Pending;
                ``__cause__`` holds the underlying failure.
        """
        scope = scope or CancelScope.background()
        created = await self.create_pod(pod, scope)
        name = created.name
        if not name:
            raise DecodingError("created pod has no name")

        pending_timeout = self.pending_timeout if timeout is None else timeout
        logger.info(
            "Created pod",
            pod=name,
            resource_version=created.metadata.resource_version,
            pending_timeout=pending_timeout,
        )

        # the server may have picked the name (metadata.generateName)
        with bind_kubemon_context(pod_name=name):
            try:
                with scope.child(timeout=pending_timeout) as wait_scope:
                    running = await self.await_pod_not_pending(
                        name, created.metadata.resource_version or "", wait_scope
                    )
            except KubemonError as e:
                logger.warning("Pod did not leave pending state", pod=name, error=str(e))
                await self._compensate(name)
                raise PodNotRunningError(name, e) from e
            except asyncio.CancelledError:
                logger.warning("Run cancelled before pod left pending state", pod=name)
                await asyncio.shield(self._compensate(name))
                raise

        return running

    async def _compensate(self, name: str) -> None:
        """Delete a pod left behind by a failed run. Failures are only logged."""
        try:
            await self.delete_pod(name, CancelScope.background())
        except KubemonError as e:
            failure = CompensationFailure(name, e)
            logger.warning("Compensating delete failed", pod=name, error=str(failure))
        else:
            logger.info("Deleted pod after failed run", pod=name)

    # ──────────────────────────────────────────────────────────────────────────
    # Synchronous versions (for callers without an event loop)
    # ──────────────────────────────────────────────────────────────────────────

    # Read-only calls retry transient failures; delete is single-shot.

    def get_pod_sync(self, name: str) -> Pod:
        return self.pods.get_sync(name, tenacious=True)

    def pod_status_sync(self, name: str) -> PodStatus:
        return self.pods.get_sync(name, tenacious=True).status or PodStatus()

    def get_pods_sync(self) -> List[Pod]:
        return list(self.pods.list_sync(tenacious=True).items)

    def delete_pod_sync(self, name: str) -> None:
        self.pods.delete_sync(name)

    def pod_log_sync(self, name: str) -> str:
        content = self.pods.get_raw_sync(name, "log", tenacious=True)
        return content.decode("utf-8", errors="replace")

    def get_nodes_sync(self) -> List[Node]:
        return list(self.nodes.list_sync(tenacious=True).items)
