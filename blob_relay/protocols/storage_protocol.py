"""
Protocols for the relay's external collaborators.

The relay service depends only on these interfaces, so alternative storage
backends or in-memory fakes can be substituted without inheritance.
"""

import io
import threading
from typing import Iterator, Optional, Protocol

from ..models.copy import CopyOperation, CopyStatus
from ..models.objects import ObjectDescriptor


class ObjectSourceProtocol(Protocol):
    """Protocol for listing, downloading and deleting source objects."""

    container: str

    def list_objects(self) -> Iterator[ObjectDescriptor]:
        """
        Lazily list every object in the source container.

        Returns:
            Iterator of object descriptors; a fresh call re-lists
        """
        ...

    def download_object(self, descriptor: ObjectDescriptor) -> io.IOBase:
        """
        Download an object's full payload.

        Raises:
            SourceUnavailable: If the object is gone or the backend is unreachable
        """
        ...

    def delete_object_if_exists(self, descriptor: ObjectDescriptor) -> bool:
        """
        Delete an object, treating absence as a noop.

        Returns:
            True if the object was deleted, False if it was already absent
        """
        ...


class ArchiveMoverProtocol(Protocol):
    """Protocol for server-side archive copies and verified source deletion."""

    def begin_copy(
        self, descriptor: ObjectDescriptor, destination_container: str, destination_name: str
    ) -> CopyOperation:
        """
        Start a server-side copy of an object.

        Raises:
            DestinationContainerUnresolved: If the destination container cannot be resolved
            CopyInitiationFailed: If the backend rejects the copy
        """
        ...

    def await_copy_completion(
        self, operation: CopyOperation, stop_event: Optional[threading.Event] = None
    ) -> CopyStatus:
        """
        Poll a copy until it leaves the pending state.

        Raises:
            CopyTimedOut: If the copy is still pending when the timeout elapses
        """
        ...

    def delete_source_if_verified(self, descriptor: ObjectDescriptor, operation: CopyOperation) -> bool:
        """
        Delete the source object only if the copy settled as success.

        Raises:
            CopyVerificationFailed: If the copy settled in any other state
        """
        ...


class TransferClientProtocol(Protocol):
    """Protocol for a single-use remote file transfer session."""

    def connect(self) -> None:
        """
        Open the session.

        Raises:
            TransferConnectFailed: On network or authentication failure
        """
        ...

    def ensure_directory(self, path: str) -> None:
        """Create ``path`` if it does not exist yet."""
        ...

    def upload(self, stream: io.IOBase, remote_path: str) -> int:
        """
        Upload a stream to ``remote_path``.

        Returns:
            Number of bytes written

        Raises:
            TransferUploadFailed: On any I/O error, partial write or rejection
        """
        ...

    def disconnect(self) -> None:
        """Close the session; never raises."""
        ...

    def __enter__(self) -> "TransferClientProtocol": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...


__all__ = [
    "ObjectSourceProtocol",
    "ArchiveMoverProtocol",
    "TransferClientProtocol",
]
