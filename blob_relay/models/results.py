"""Result models for pipeline stages, objects and passes."""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import ConfigDict, Field

from .base import RelayBaseModel
from .objects import PipelineStage, TaskOutcome

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StageResult(RelayBaseModel, Generic[T]):
    """
    Success/failure variant returned by every orchestrated stage.

    Attributes:
        stage: Stage that produced the result
        value: Stage return value on success
        error: Exception raised by the stage on failure
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    stage: PipelineStage
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """Check if the stage succeeded."""
        return self.error is None

    @classmethod
    def success(cls, stage: PipelineStage, value: Optional[T] = None) -> "StageResult[T]":
        """Build a successful result."""
        return cls(stage=stage, value=value)

    @classmethod
    def failure(cls, stage: PipelineStage, error: Exception) -> "StageResult[T]":
        """Build a failed result."""
        return cls(stage=stage, error=error)


class ObjectResult(RelayBaseModel):
    """
    Outcome of handling one object during a pass.

    Attributes:
        name: Object name
        outcome: Final outcome (succeeded, skipped or failed)
        classified_path: Destination sub-path, if the object was classified
        remote_path: SFTP path the object was uploaded to
        archive_name: Name of the copy in the archive container
        stage: Stage reached (the failing stage for failed objects)
        error_kind: Error class name for failed objects
        error_message: Error message for failed objects
        reason: Human readable reason for skipped objects
    """

    name: str
    outcome: TaskOutcome
    classified_path: Optional[str] = None
    remote_path: Optional[str] = None
    archive_name: Optional[str] = None
    stage: Optional[PipelineStage] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    reason: Optional[str] = None


class PassSummary(RelayBaseModel):
    """
    Summary of one relay pass.

    The summary is built incrementally while the pass runs and is always
    returned, whatever happened to individual objects.

    Attributes:
        pipeline_name: Name of the pipeline (run-lock key)
        started_at: When the pass started
        finished_at: When the pass finished
        results: Per-object results in listing order
        overlapped: True when the pass was rejected because another one was running
        cancelled: True when the pass was stopped before finishing the listing
        listing_error: Error message if listing the source failed

    Example:
        >>> summary = PassSummary(pipeline_name="blob-relay")
        >>> summary.add_result(ObjectResult(name="Report_Q1.pdf", outcome=TaskOutcome.SKIPPED))
        >>> summary.skipped
        1
    """

    pipeline_name: str
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None
    results: List[ObjectResult] = Field(default_factory=list)
    overlapped: bool = False
    cancelled: bool = False
    listing_error: Optional[str] = None

    def add_result(self, result: ObjectResult) -> None:
        """
        Record the result of one object.

        Args:
            result: Object result to append
        """
        self.results.append(result)

    def finish(self) -> None:
        """Stamp the finish time."""
        self.finished_at = _utcnow()

    def _count(self, outcome: TaskOutcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def succeeded(self) -> int:
        """Number of objects relayed and archived."""
        return self._count(TaskOutcome.SUCCEEDED)

    @property
    def skipped(self) -> int:
        """Number of objects left alone because no rule matched."""
        return self._count(TaskOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        """Number of objects whose handling failed."""
        return self._count(TaskOutcome.FAILED)

    @property
    def total(self) -> int:
        """Number of objects seen in the pass."""
        return len(self.results)

    @property
    def failures(self) -> List[ObjectResult]:
        """Results of failed objects."""
        return [result for result in self.results if result.outcome is TaskOutcome.FAILED]

    @property
    def has_errors(self) -> bool:
        """Check if any object failed or the listing itself failed."""
        return self.failed > 0 or self.listing_error is not None

    @property
    def duration(self) -> Optional[float]:
        """Pass duration in seconds, once finished."""
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_json_dict(self) -> Dict[str, Any]:
        """
        Export the summary as a JSON-serializable dictionary.

        Returns:
            Dictionary with counts, flags and per-object results
        """
        return {
            "pipeline_name": self.pipeline_name,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "counts": {
                "succeeded": self.succeeded,
                "skipped": self.skipped,
                "failed": self.failed,
            },
            "overlapped": self.overlapped,
            "cancelled": self.cancelled,
            "listing_error": self.listing_error,
            "results": [result.model_dump(mode="json", exclude_none=True) for result in self.results],
        }


__all__ = [
    "StageResult",
    "ObjectResult",
    "PassSummary",
]
