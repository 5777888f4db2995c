"""Custom Exceptions used throughout Kubemon."""

from typing import Optional, Union


class KubemonError(Exception):
    """Base class for every error raised by Kubemon."""

    pass


class ConfigError(KubemonError):
    """Missing or malformed configuration, raised before any I/O happens."""

    pass


class EncodingError(KubemonError):
    """A request body could not be serialized to JSON."""

    pass


class DecodingError(KubemonError):
    """A response body or watch stream record could not be decoded."""

    pass


class TransportError(KubemonError):
    """The request could not be made or the response body could not be read."""

    pass


class APIError(KubemonError):
    """The API server answered with a status code other than the expected one."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Union[bytes, str, None] = None,
    ) -> None:
        """Initialize Exception with the status code and raw body for diagnostics."""
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidRequest(APIError):
    """Client error (4xx). Never retried."""

    pass


class InvalidResponse(APIError):
    """Server error or any other unexpected status code."""

    pass


class CancellationError(KubemonError):
    """The operation's cancel scope was cancelled."""

    pass


class DeadlineExceeded(CancellationError):
    """The operation's cancel scope reached its deadline."""

    pass


class CompensationFailure(KubemonError):
    """The cleanup delete of a half-created pod failed.

    Only ever logged; never raised to the caller of run_pod.
    """

    def __init__(self, pod_name: str, cause: Optional[BaseException] = None) -> None:
        """Initialize Exception."""
        super().__init__(f"failed to delete pod {pod_name!r} after failed run: {cause}")
        self.pod_name = pod_name
        self.cause = cause


class PodNotRunningError(KubemonError):
    """A created pod did not leave the Pending phase.

    The original failure is available as ``__cause__``.
    """

    def __init__(self, pod_name: str, reason: BaseException) -> None:
        """Initialize Exception."""
        super().__init__(
            f"timed out waiting for pod {pod_name!r} to leave pending state: {reason}"
        )
        self.pod_name = pod_name
