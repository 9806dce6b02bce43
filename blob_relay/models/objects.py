"""Models describing source objects and their per-pass transfer tasks."""

import io
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field

from .base import RelayBaseModel


class TaskOutcome(str, Enum):
    """Final outcome of a transfer task."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class PipelineStage(str, Enum):
    """Stages an object moves through during a pass."""

    LISTING = "listing"
    CLASSIFYING = "classifying"
    DOWNLOADING = "downloading"
    UPLOADING = "uploading"
    ARCHIVING = "archiving"
    DELETING = "deleting"
    DONE = "done"


class ObjectDescriptor(RelayBaseModel):
    """
    Reference to an object listed from a container.

    Attributes:
        name: Object key, unique within the container
        container: Container (bucket) holding the object
        size: Object size in bytes as reported by the listing
        etag: Entity tag reported by the listing, if any
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    container: str = Field(min_length=1)
    size: int = Field(default=0, ge=0)
    etag: Optional[str] = None

    @property
    def uri(self) -> str:
        """Storage URI of the object."""
        return f"s3://{self.container}/{self.name}"


class TransferTask(RelayBaseModel):
    """
    Ephemeral per-object task for a single pass.

    The payload is owned by the task between download and upload and is
    released as soon as the upload finishes. The outcome can only move away
    from ``pending`` once.

    Attributes:
        descriptor: Source object reference
        classified_path: Destination sub-path, or None when unclassified
        payload: In-memory payload stream while the task holds it
        outcome: Current outcome
        stage: Last stage entered
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", validate_assignment=True)

    descriptor: ObjectDescriptor
    classified_path: Optional[str] = None
    payload: Optional[io.IOBase] = None
    outcome: TaskOutcome = TaskOutcome.PENDING
    stage: PipelineStage = PipelineStage.CLASSIFYING

    @property
    def name(self) -> str:
        """Name of the object this task handles."""
        return self.descriptor.name

    @property
    def is_finished(self) -> bool:
        """Check if the outcome has been finalized."""
        return self.outcome is not TaskOutcome.PENDING

    def finish(self, outcome: TaskOutcome) -> None:
        """
        Finalize the task outcome and release the payload.

        Args:
            outcome: Final outcome (succeeded, skipped or failed)

        Raises:
            ValueError: If the task is already finished or outcome is pending
        """
        if outcome is TaskOutcome.PENDING:
            raise ValueError("Cannot finish a task with a pending outcome")
        if self.is_finished:
            raise ValueError(f"Task for {self.name} already finished as {self.outcome.value}")
        self.release_payload()
        self.outcome = outcome

    def release_payload(self) -> None:
        """Close and drop the payload stream, if held."""
        if self.payload is not None:
            self.payload.close()
            self.payload = None


__all__ = [
    "TaskOutcome",
    "PipelineStage",
    "ObjectDescriptor",
    "TransferTask",
]
