"""Pod-related commands.

Commands for running and inspecting pods, including:
- Running a pod from a manifest file
- Status, list, logs and delete pass-throughs
- Following a pod's status changes
"""

from typing import Any, Callable, Dict, List, Optional

import structlog
import yaml
from pydantic import ValidationError

from kubemon.client.api import Pod, PodStatus, PodStatusEvent
from kubemon.client.kube_client import KubeClient
from kubemon.core.cancel_scope import CancelScope
from kubemon.core.exceptions import ConfigError, DeadlineExceeded

logger = structlog.get_logger(__name__)


def load_pod(path: str) -> Pod:
    """Read a pod manifest (YAML or JSON) from disk.

    Raises:
        ConfigError: the file cannot be read or is not a valid pod manifest.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"failed to read pod manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse pod manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"pod manifest {path} must contain a mapping")
    if data.get("kind", "Pod") != "Pod":
        raise ConfigError(f"pod manifest {path} has kind {data['kind']!r}, expected 'Pod'")

    try:
        return Pod.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid pod manifest {path}: {e}") from e


async def run_pod(
    pod: Pod,
    timeout: Optional[float] = None,
    client: Optional[KubeClient] = None,
) -> Pod:
    """Create a pod and wait for it to leave Pending."""
    if client is None:
        client = KubeClient.from_defaults()
    async with client:
        return await client.run_pod(pod, timeout=timeout)


async def watch_pod(
    name: str,
    on_event: Callable[[PodStatusEvent], None],
    resource_version: Optional[str] = None,
    timeout: Optional[float] = None,
    client: Optional[KubeClient] = None,
) -> int:
    """Follow a pod's status changes, calling ``on_event`` for each one.

    Without ``resource_version`` the watch starts from the pod's current
    version. Watching stops when the server ends the stream or, if given,
    after ``timeout`` seconds.

    Returns:
        Number of events received.
    """
    if client is None:
        client = KubeClient.from_defaults()

    count = 0
    async with client:
        if not resource_version:
            current = await client.get_pod(name)
            resource_version = current.metadata.resource_version or ""

        with CancelScope(timeout=timeout) as scope:
            stream = await client.watch_pod(name, resource_version, scope)
            async with stream:
                try:
                    async for event in stream:
                        count += 1
                        on_event(event)
                except DeadlineExceeded:
                    logger.debug("Stopped watching pod", pod=name, events=count)
    return count


def pod_status(name: str, client: Optional[KubeClient] = None) -> PodStatus:
    if client is None:
        client = KubeClient.from_defaults()
    return client.pod_status_sync(name)


def list_pods(client: Optional[KubeClient] = None) -> List[Pod]:
    if client is None:
        client = KubeClient.from_defaults()
    pods = client.get_pods_sync()
    logger.debug("Fetched pods", count=len(pods), namespace=client.namespace)
    return pods


def pod_logs(name: str, client: Optional[KubeClient] = None) -> str:
    if client is None:
        client = KubeClient.from_defaults()
    return client.pod_log_sync(name)


def delete_pod(name: str, client: Optional[KubeClient] = None) -> None:
    if client is None:
        client = KubeClient.from_defaults()
    client.delete_pod_sync(name)
    logger.info("Deleted pod", pod=name)


def pod_rows(pods: List[Pod]) -> List[Dict[str, Any]]:
    """Flatten pods into table rows."""
    rows = []
    for pod in pods:
        status = pod.status or PodStatus()
        rows.append(
            {
                "NAME": pod.name,
                "PHASE": status.phase or "",
                "NODE": (pod.spec.node_name if pod.spec else None) or "",
                "POD IP": status.pod_ip or "",
                "STARTED": status.start_time or "",
            }
        )
    return rows
