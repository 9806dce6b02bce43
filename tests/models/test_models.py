"""Tests for Pydantic models."""

import io
from datetime import timedelta

import pytest
from pydantic import ValidationError

from blob_relay.models import (
    CopyOperation,
    CopyStatus,
    ObjectDescriptor,
    ObjectResult,
    PassSummary,
    PipelineStage,
    RelayConfig,
    StageResult,
    StorageDescriptor,
    TaskOutcome,
    TransferTask,
)


class TestObjectDescriptor:
    """Test ObjectDescriptor model."""

    def test_properties(self):
        """Test the URI keeps virtual folders."""
        descriptor = ObjectDescriptor(name="2024/Invoice_1.pdf", container="exportcontainer-live", size=3)

        assert descriptor.uri == "s3://exportcontainer-live/2024/Invoice_1.pdf"

    def test_is_frozen(self):
        """Test descriptors cannot be modified."""
        descriptor = ObjectDescriptor(name="Invoice_1.pdf", container="c")

        with pytest.raises(ValidationError):
            descriptor.name = "other"

    def test_validation(self):
        """Test empty names and negative sizes are rejected."""
        with pytest.raises(ValidationError):
            ObjectDescriptor(name="", container="c")
        with pytest.raises(ValidationError):
            ObjectDescriptor(name="a", container="c", size=-1)
        with pytest.raises(ValidationError):
            ObjectDescriptor(name="a", container="c", unexpected=True)


class TestTransferTask:
    """Test TransferTask model."""

    @pytest.fixture
    def task(self):
        """Pending task."""
        return TransferTask(descriptor=ObjectDescriptor(name="Invoice_1.pdf", container="c"))

    def test_defaults(self, task):
        """Test a new task is pending and holds nothing."""
        assert task.name == "Invoice_1.pdf"
        assert task.outcome == TaskOutcome.PENDING
        assert task.payload is None
        assert not task.is_finished

    def test_finish_releases_payload(self, task):
        """Test finishing closes the held payload."""
        payload = io.BytesIO(b"data")
        task.payload = payload

        task.finish(TaskOutcome.SUCCEEDED)

        assert task.outcome == TaskOutcome.SUCCEEDED
        assert task.payload is None
        assert payload.closed

    def test_finish_only_once(self, task):
        """Test the outcome is final once set."""
        task.finish(TaskOutcome.SKIPPED)

        with pytest.raises(ValueError, match="already finished"):
            task.finish(TaskOutcome.FAILED)

    def test_cannot_finish_pending(self, task):
        """Test pending is not a final outcome."""
        with pytest.raises(ValueError, match="pending"):
            task.finish(TaskOutcome.PENDING)


class TestCopyModels:
    """Test copy status and operation models."""

    def test_terminal_statuses(self):
        """Test only pending is non-terminal."""
        assert not CopyStatus.PENDING.is_terminal
        assert CopyStatus.SUCCESS.is_terminal
        assert CopyStatus.FAILED.is_terminal
        assert CopyStatus.ABORTED.is_terminal

    def test_copy_operation(self):
        """Test a new operation is pending."""
        operation = CopyOperation(
            source_uri="s3://src/a",
            source_name="a",
            destination_container="archive",
            destination_name="a",
        )

        assert operation.status == CopyStatus.PENDING
        assert operation.polls == 0
        assert operation.destination_uri == "s3://archive/a"


class TestStageResult:
    """Test StageResult model."""

    def test_success(self):
        """Test a successful stage result."""
        result = StageResult.success(PipelineStage.UPLOADING, 11)

        assert result.ok
        assert result.value == 11
        assert result.error is None

    def test_failure(self):
        """Test a failed stage result keeps the exception."""
        error = RuntimeError("boom")
        result = StageResult.failure(PipelineStage.ARCHIVING, error)

        assert not result.ok
        assert result.error is error
        assert result.stage == PipelineStage.ARCHIVING


class TestPassSummary:
    """Test PassSummary model."""

    @pytest.fixture
    def summary(self):
        """Summary with one result of each outcome."""
        summary = PassSummary(pipeline_name="blob-relay")
        summary.add_result(ObjectResult(name="Invoice_1.pdf", outcome=TaskOutcome.SUCCEEDED))
        summary.add_result(ObjectResult(name="Report.pdf", outcome=TaskOutcome.SKIPPED, reason="no rule"))
        summary.add_result(
            ObjectResult(
                name="Credit_2.pdf",
                outcome=TaskOutcome.FAILED,
                stage=PipelineStage.UPLOADING,
                error_kind="TransferUploadFailed",
                error_message="disk full",
            )
        )
        return summary

    def test_counts(self, summary):
        """Test counts per outcome."""
        assert (summary.succeeded, summary.skipped, summary.failed, summary.total) == (1, 1, 1, 3)
        assert [r.name for r in summary.failures] == ["Credit_2.pdf"]
        assert summary.has_errors

    def test_listing_error_counts_as_error(self):
        """Test a listing failure marks the pass as failed."""
        summary = PassSummary(pipeline_name="blob-relay", listing_error="boom")

        assert summary.failed == 0
        assert summary.has_errors

    def test_duration(self, summary):
        """Test duration is available once finished."""
        assert summary.duration is None
        summary.finished_at = summary.started_at + timedelta(seconds=2)

        assert summary.duration == pytest.approx(2.0)

    def test_to_json_dict(self, summary):
        """Test the JSON export."""
        summary.finish()
        data = summary.to_json_dict()

        assert data["counts"] == {"succeeded": 1, "skipped": 1, "failed": 1}
        assert data["pipeline_name"] == "blob-relay"
        assert data["finished_at"] is not None
        assert data["results"][1] == {"name": "Report.pdf", "outcome": "skipped", "reason": "no rule"}
        assert data["results"][2]["stage"] == "uploading"


class TestRelayConfig:
    """Test RelayConfig model."""

    def test_defaults(self):
        """Test optional settings get their defaults."""
        config = RelayConfig(archive_container="a", sftp_host="h", sftp_username="u", sftp_password="p")

        assert config.source_container == "exportcontainer-live"
        assert config.sftp_port == 22
        assert config.sftp_base_path == "/Inbound/"
        assert config.pipeline_name == "blob-relay"
        assert config.storage == StorageDescriptor()

    def test_password_is_masked(self):
        """Test the SFTP password does not appear in the repr."""
        config = RelayConfig(archive_container="a", sftp_host="h", sftp_username="u", sftp_password="hunter2")

        assert "hunter2" not in repr(config)

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_range(self, port):
        """Test out-of-range ports are rejected."""
        with pytest.raises(ValidationError):
            RelayConfig(archive_container="a", sftp_host="h", sftp_username="u", sftp_password="p", sftp_port=port)
