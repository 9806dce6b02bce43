"""Models for server-side archive copy operations."""

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import RelayBaseModel


class CopyStatus(str, Enum):
    """Status of an archive copy."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Check if the status is final."""
        return self is not CopyStatus.PENDING


class CopyOperation(RelayBaseModel):
    """
    In-flight archive copy.

    Attributes:
        source_uri: URI of the copied object
        source_name: Key of the object in the source container
        destination_container: Archive container name
        destination_name: Key of the copy in the archive container
        expected_etag: ETag the backend reported for the new copy
        expected_size: Size of the source object in bytes
        status: Last observed status
        polls: Number of status checks performed
    """

    source_uri: str
    source_name: str
    destination_container: str
    destination_name: str
    expected_etag: Optional[str] = None
    expected_size: Optional[int] = Field(default=None, ge=0)
    status: CopyStatus = CopyStatus.PENDING
    polls: int = Field(default=0, ge=0)

    @property
    def destination_uri(self) -> str:
        """URI of the archive copy."""
        return f"s3://{self.destination_container}/{self.destination_name}"


__all__ = ["CopyStatus", "CopyOperation"]
