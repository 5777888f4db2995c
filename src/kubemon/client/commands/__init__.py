"""Commands for pod, node and config operations.

This module provides the backend logic for CLI commands, organized by domain:
- pod: Run, status, list, logs, delete, watch
- node: Node listing
- config: Configuration management
"""

from kubemon.client.commands.config import (
    update_config_value,
)
from kubemon.client.commands.node import (
    list_nodes,
    node_rows,
)
from kubemon.client.commands.pod import (
    delete_pod,
    list_pods,
    load_pod,
    pod_logs,
    pod_rows,
    pod_status,
    run_pod,
    watch_pod,
)

__all__ = [
    # Pod commands
    "load_pod",
    "run_pod",
    "pod_status",
    "list_pods",
    "pod_logs",
    "delete_pod",
    "watch_pod",
    "pod_rows",
    # Node commands
    "list_nodes",
    "node_rows",
    # Config commands
    "update_config_value",
]
