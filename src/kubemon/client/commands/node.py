"""Node-related commands."""

from typing import Any, Dict, List, Optional

import structlog

from kubemon.client.api import Node
from kubemon.client.kube_client import KubeClient

logger = structlog.get_logger(__name__)


def list_nodes(client: Optional[KubeClient] = None) -> List[Node]:
    """Return all nodes of the cluster."""
    if client is None:
        client = KubeClient.from_defaults()
    nodes = client.get_nodes_sync()
    logger.debug("Fetched nodes", count=len(nodes))
    return nodes


def node_rows(nodes: List[Node]) -> List[Dict[str, Any]]:
    """Flatten nodes into table rows."""
    rows = []
    for node in nodes:
        status = node.status
        addresses = (status.addresses if status else None) or []
        capacity = (status.capacity if status else None) or {}
        ready = node.ready
        rows.append(
            {
                "NAME": node.name,
                "READY": "Unknown" if ready is None else str(ready),
                "ADDRESS": ", ".join(a.address for a in addresses),
                "CPU": capacity.get("cpu", ""),
                "MEMORY": capacity.get("memory", ""),
            }
        )
    return rows
