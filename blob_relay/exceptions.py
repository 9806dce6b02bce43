"""
Exception hierarchy for blob-relay.

Configuration errors are fatal and raised before any pass runs. Every other
error is tied to a single object and is caught at the per-object boundary of
the relay service, so it never aborts a pass.
"""

from typing import Optional


class RelayError(Exception):
    """Base exception for all blob-relay errors."""


class ConfigurationError(RelayError):
    """Raised when configuration is invalid."""


class ConfigurationMissing(ConfigurationError):
    """
    Raised when one or more required configuration values are absent.

    Attributes:
        missing: Names of the missing settings (environment variable names)
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Required configuration not set: {', '.join(self.missing)}")


class ObjectProcessingError(RelayError):
    """
    Raised when processing a single object fails.

    Components that do not know which object they are working on (the SFTP
    client, for instance) leave ``object_name`` unset; the relay service fills
    it in when it records the failure.

    Attributes:
        message: Error message without the object name
        object_name: Name of the object being processed, if known
        stage: Pipeline stage that failed (e.g. "downloading", "uploading")
    """

    stage: str = "processing"

    def __init__(self, message: str, *, object_name: Optional[str] = None, stage: Optional[str] = None) -> None:
        self.message = message
        self.object_name = object_name
        if stage is not None:
            self.stage = stage
        super().__init__(message)

    @property
    def kind(self) -> str:
        """Error kind reported in logs and summaries."""
        return type(self).__name__


class SourceUnavailable(ObjectProcessingError):
    """Object vanished from the source container or the backend is unreachable."""

    stage = "downloading"


class TransferConnectFailed(ObjectProcessingError):
    """SFTP connection or authentication failed."""

    stage = "uploading"


class TransferUploadFailed(ObjectProcessingError):
    """SFTP upload failed, was rejected, or was only partially written."""

    stage = "uploading"


class CopyInitiationFailed(ObjectProcessingError):
    """The storage backend rejected the archive copy request."""

    stage = "archiving"


class DestinationContainerUnresolved(CopyInitiationFailed):
    """The archive container does not exist or cannot be reached."""


class CopyVerificationFailed(ObjectProcessingError):
    """
    The archive copy settled in a non-success state; the source was kept.

    Attributes:
        status: Terminal copy status that was observed
        destination: Archive container the copy targeted
    """

    stage = "deleting"

    def __init__(self, object_name: str, status: str, destination: str) -> None:
        self.status = status
        self.destination = destination
        super().__init__(
            f"Failed to copy '{object_name}' to '{destination}'. Copy status: {status}",
            object_name=object_name,
        )


class CopyTimedOut(ObjectProcessingError):
    """The archive copy was still pending when the polling timeout elapsed."""

    stage = "archiving"


__all__ = [
    "RelayError",
    "ConfigurationError",
    "ConfigurationMissing",
    "ObjectProcessingError",
    "SourceUnavailable",
    "TransferConnectFailed",
    "TransferUploadFailed",
    "CopyInitiationFailed",
    "DestinationContainerUnresolved",
    "CopyVerificationFailed",
    "CopyTimedOut",
]
