"""Pydantic models for the subset of the Kubernetes core v1 API that Kubemon uses.

Field names are snake_case in Python and camelCase on the wire. Unknown fields
sent by the server are kept so a decoded object can be re-encoded without loss.
Models are frozen: a pod spec handed to the client is never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kubemon.core.constants import PodPhase


class KubeModel(BaseModel):
    """Base model for API objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready representation sent to the API server."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ObjectMeta(KubeModel):
    """Metadata shared by all persisted resources."""

    name: Optional[str] = None
    generate_name: Optional[str] = None
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    creation_timestamp: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None


class EnvVar(KubeModel):
    name: str
    value: Optional[str] = None


class ContainerPort(KubeModel):
    container_port: int
    name: Optional[str] = None
    protocol: Optional[str] = None


class ResourceRequirements(KubeModel):
    limits: Optional[Dict[str, str]] = None
    requests: Optional[Dict[str, str]] = None


class Container(KubeModel):
    """A single container to run inside a pod."""

    name: str
    image: str
    command: Optional[List[str]] = None
    args: Optional[List[str]] = None
    env: Optional[List[EnvVar]] = None
    ports: Optional[List[ContainerPort]] = None
    resources: Optional[ResourceRequirements] = None
    working_dir: Optional[str] = None
    image_pull_policy: Optional[str] = None


class PodSpec(KubeModel):
    """Description of the containers and scheduling constraints of a pod."""

    containers: List[Container] = Field(default_factory=list)
    restart_policy: Optional[str] = None
    node_selector: Optional[Dict[str, str]] = None
    node_name: Optional[str] = None
    service_account_name: Optional[str] = None
    active_deadline_seconds: Optional[int] = None


class ContainerStatus(KubeModel):
    name: str
    ready: Optional[bool] = None
    restart_count: Optional[int] = None
    image: Optional[str] = None
    state: Optional[Dict[str, Any]] = None


class PodCondition(KubeModel):
    type: str
    status: str
    reason: Optional[str] = None
    message: Optional[str] = None


class PodStatus(KubeModel):
    """Most recently observed status of a pod."""

    phase: Optional[str] = None
    conditions: Optional[List[PodCondition]] = None
    message: Optional[str] = None
    reason: Optional[str] = None
    host_ip: Optional[str] = Field(default=None, alias="hostIP")
    pod_ip: Optional[str] = Field(default=None, alias="podIP")
    start_time: Optional[str] = None
    container_statuses: Optional[List[ContainerStatus]] = None


class Pod(KubeModel):
    """A pod: the unit of work Kubemon creates, watches and deletes."""

    api_version: Optional[str] = "v1"
    kind: Optional[str] = "Pod"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: Optional[PodSpec] = None
    status: Optional[PodStatus] = None

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def phase(self) -> Optional[str]:
        return self.status.phase if self.status is not None else None

    @property
    def is_pending(self) -> bool:
        return self.phase == PodPhase.PENDING


class PodList(KubeModel):
    items: List[Pod] = Field(default_factory=list)


class NodeAddress(KubeModel):
    type: str
    address: str


class NodeCondition(KubeModel):
    type: str
    status: str
    reason: Optional[str] = None
    message: Optional[str] = None


class NodeStatus(KubeModel):
    capacity: Optional[Dict[str, str]] = None
    allocatable: Optional[Dict[str, str]] = None
    addresses: Optional[List[NodeAddress]] = None
    conditions: Optional[List[NodeCondition]] = None


class Node(KubeModel):
    """A worker machine of the cluster."""

    api_version: Optional[str] = "v1"
    kind: Optional[str] = "Node"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: Optional[Dict[str, Any]] = None
    status: Optional[NodeStatus] = None

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def ready(self) -> Optional[bool]:
        """Whether the node reports a Ready=True condition, None if unreported."""
        for condition in (self.status.conditions if self.status else None) or []:
            if condition.type == "Ready":
                return condition.status == "True"
        return None


class NodeList(KubeModel):
    items: List[Node] = Field(default_factory=list)


class Status(KubeModel):
    """Error object sent by the server, e.g. inside an ERROR watch event."""

    status: Optional[str] = None
    message: Optional[str] = None
    reason: Optional[str] = None
    code: Optional[int] = None


class RawWatchEvent(KubeModel):
    """One undecoded record of a watch stream: ``{"type": ..., "object": {...}}``."""

    type: str
    object: Dict[str, Any]


class PodStatusEvent(KubeModel):
    """A decoded pod watch event: the change type and the pod it applies to."""

    type: str
    pod: Pod = Field(alias="object")
