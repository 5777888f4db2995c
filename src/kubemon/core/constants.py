"""Constants declared for pod phases and watch event types throughout Kubemon."""


class PodPhase:
    """Pod lifecycle phases as reported by the API server."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class WatchEventType:
    """Change types carried by watch stream records."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


class ApiPaths:
    """Route fragments of the core v1 API."""

    API_ENDPOINT = "/api/v1"
    NAMESPACES = "/namespaces"
    PODS = "/pods"
    NODES = "/nodes"
    WATCH = "/watch"
