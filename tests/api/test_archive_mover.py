"""Tests for the S3 archive mover."""

import threading
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from blob_relay.api import S3ArchiveMover
from blob_relay.exceptions import (
    CopyInitiationFailed,
    CopyTimedOut,
    CopyVerificationFailed,
    DestinationContainerUnresolved,
)
from blob_relay.models import CopyOperation, CopyStatus

ARCHIVE = "exportcontainer-archive"


def _client_error(code, operation="HeadObject", http_status=None):
    response = {"Error": {"Code": code, "Message": code}}
    if http_status is not None:
        response["ResponseMetadata"] = {"HTTPStatusCode": http_status}
    return ClientError(response, operation)


class FakeClock:
    """Clock advanced manually by the stop event stand-in."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TickingEvent(threading.Event):
    """Event whose wait advances a fake clock instead of sleeping."""

    def __init__(self, clock):
        super().__init__()
        self.clock = clock
        self.waits = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        self.clock.now += timeout
        return self.is_set()


@pytest.fixture
def mock_source():
    """Mock object source."""
    source = Mock()
    source.delete_object_if_exists.return_value = True
    return source


@pytest.fixture
def clock():
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def mover(mock_s3_client, mock_source, clock):
    """Archive mover with a fake clock."""
    return S3ArchiveMover(mock_s3_client, mock_source, poll_interval=0.5, timeout=5.0, clock=clock)


@pytest.fixture
def operation():
    """Pending copy operation."""
    return CopyOperation(
        source_uri="s3://exportcontainer-live/Invoice_1001.pdf",
        source_name="Invoice_1001.pdf",
        destination_container=ARCHIVE,
        destination_name="Invoice_1001.pdf",
        expected_etag="abc123",
        expected_size=11,
    )


class TestBeginCopy:
    """Test S3ArchiveMover.begin_copy."""

    def test_begin_copy(self, mover, mock_s3_client, sample_descriptor):
        """Test a server-side copy is issued to the archive container."""
        mock_s3_client.copy_object.return_value = {"CopyObjectResult": {"ETag": '"abc123"'}}

        operation = mover.begin_copy(sample_descriptor, ARCHIVE, "Invoice_1001.pdf")

        mock_s3_client.head_bucket.assert_called_once_with(Bucket=ARCHIVE)
        mock_s3_client.copy_object.assert_called_once_with(
            Bucket=ARCHIVE,
            Key="Invoice_1001.pdf",
            CopySource={"Bucket": "exportcontainer-live", "Key": "Invoice_1001.pdf"},
        )
        assert operation.status == CopyStatus.PENDING
        assert operation.expected_etag == "abc123"
        assert operation.expected_size == 11
        assert operation.destination_uri == f"s3://{ARCHIVE}/Invoice_1001.pdf"

    def test_missing_archive_container(self, mover, mock_s3_client, sample_descriptor):
        """Test a missing archive bucket raises DestinationContainerUnresolved."""
        mock_s3_client.head_bucket.side_effect = _client_error("404", "HeadBucket")

        with pytest.raises(DestinationContainerUnresolved, match="does not exist"):
            mover.begin_copy(sample_descriptor, ARCHIVE, "Invoice_1001.pdf")
        mock_s3_client.copy_object.assert_not_called()

    def test_unreachable_archive_container(self, mover, mock_s3_client, sample_descriptor):
        """Test a connection failure while resolving the archive raises DestinationContainerUnresolved."""
        mock_s3_client.head_bucket.side_effect = EndpointConnectionError(endpoint_url="http://minio:9000")

        with pytest.raises(DestinationContainerUnresolved, match="unreachable"):
            mover.begin_copy(sample_descriptor, ARCHIVE, "Invoice_1001.pdf")

    def test_archive_container_without_list_permission(self, mover, mock_s3_client, sample_descriptor, caplog):
        """Test a 403 from the bucket check still attempts the copy."""
        mock_s3_client.head_bucket.side_effect = _client_error("403", "HeadBucket")
        mock_s3_client.copy_object.return_value = {"CopyObjectResult": {"ETag": '"abc123"'}}

        operation = mover.begin_copy(sample_descriptor, ARCHIVE, "Invoice_1001.pdf")

        mock_s3_client.copy_object.assert_called_once()
        assert operation.destination_name == "Invoice_1001.pdf"
        assert "attempting the copy anyway" in caplog.text

    def test_archive_container_check_rejected(self, mover, mock_s3_client, sample_descriptor):
        """Test other bucket check errors raise DestinationContainerUnresolved."""
        mock_s3_client.head_bucket.side_effect = _client_error("InvalidAccessKeyId", "HeadBucket")

        with pytest.raises(DestinationContainerUnresolved, match="InvalidAccessKeyId"):
            mover.begin_copy(sample_descriptor, ARCHIVE, "Invoice_1001.pdf")
        mock_s3_client.copy_object.assert_not_called()

    def test_unresolved_is_an_initiation_failure(self):
        """Test DestinationContainerUnresolved is a kind of CopyInitiationFailed."""
        assert issubclass(DestinationContainerUnresolved, CopyInitiationFailed)

    def test_copy_rejected(self, mover, mock_s3_client, sample_descriptor):
        """Test a rejected copy raises CopyInitiationFailed."""
        mock_s3_client.copy_object.side_effect = _client_error("AccessDenied", "CopyObject")

        with pytest.raises(CopyInitiationFailed, match="rejected"):
            mover.begin_copy(sample_descriptor, ARCHIVE, "Invoice_1001.pdf")


class TestCopyStatus:
    """Test S3ArchiveMover.get_copy_status."""

    def test_pending_while_destination_absent(self, mover, mock_s3_client, operation):
        """Test the copy is pending until the destination object appears."""
        mock_s3_client.head_object.side_effect = _client_error("404")

        assert mover.get_copy_status(operation) == CopyStatus.PENDING
        assert operation.polls == 1

    def test_success_when_destination_matches(self, mover, mock_s3_client, operation):
        """Test a matching destination means success."""
        mock_s3_client.head_object.return_value = {"ETag": '"abc123"', "ContentLength": 11}

        assert mover.get_copy_status(operation) == CopyStatus.SUCCESS

    def test_failed_on_etag_mismatch(self, mover, mock_s3_client, operation):
        """Test a different ETag means the copy failed."""
        mock_s3_client.head_object.return_value = {"ETag": '"other"', "ContentLength": 11}

        assert mover.get_copy_status(operation) == CopyStatus.FAILED

    def test_failed_on_size_mismatch(self, mover, mock_s3_client, operation):
        """Test a different size means the copy failed."""
        mock_s3_client.head_object.return_value = {"ETag": '"abc123"', "ContentLength": 3}

        assert mover.get_copy_status(operation) == CopyStatus.FAILED

    def test_transient_error_is_pending(self, mover, mock_s3_client, operation):
        """Test a transient backend error keeps the copy pending."""
        mock_s3_client.head_object.side_effect = _client_error("SlowDown")

        assert mover.get_copy_status(operation) == CopyStatus.PENDING

    def test_server_error_is_pending(self, mover, mock_s3_client, operation):
        """Test a 5xx response keeps the copy pending."""
        mock_s3_client.head_object.side_effect = _client_error("InternalError", http_status=500)

        assert mover.get_copy_status(operation) == CopyStatus.PENDING

    def test_connection_error_is_pending(self, mover, mock_s3_client, operation):
        """Test a dropped connection keeps the copy pending."""
        mock_s3_client.head_object.side_effect = EndpointConnectionError(endpoint_url="http://minio:9000")

        assert mover.get_copy_status(operation) == CopyStatus.PENDING

    @pytest.mark.parametrize("code", ["AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"])
    def test_permission_error_fails(self, mover, mock_s3_client, operation, code):
        """Test a refused status check fails the copy instead of waiting."""
        mock_s3_client.head_object.side_effect = _client_error(code, http_status=403)

        assert mover.get_copy_status(operation) == CopyStatus.FAILED


class TestAwaitCopyCompletion:
    """Test S3ArchiveMover.await_copy_completion."""

    def test_settles_after_polling(self, mover, mock_s3_client, operation, clock):
        """Test the mover polls until the copy appears."""
        mock_s3_client.head_object.side_effect = [
            _client_error("404"),
            _client_error("404"),
            {"ETag": '"abc123"', "ContentLength": 11},
        ]
        event = TickingEvent(clock)

        status = mover.await_copy_completion(operation, event)

        assert status == CopyStatus.SUCCESS
        assert operation.status == CopyStatus.SUCCESS
        assert operation.polls == 3
        assert event.waits == [0.5, 0.5]

    def test_immediate_success_does_not_wait(self, mover, mock_s3_client, operation, clock):
        """Test an already settled copy returns without waiting."""
        mock_s3_client.head_object.return_value = {"ETag": '"abc123"', "ContentLength": 11}
        event = TickingEvent(clock)

        assert mover.await_copy_completion(operation, event) == CopyStatus.SUCCESS
        assert event.waits == []

    def test_times_out(self, mover, mock_s3_client, operation, clock):
        """Test a copy that never settles raises CopyTimedOut."""
        mock_s3_client.head_object.side_effect = _client_error("404")

        with pytest.raises(CopyTimedOut, match="still pending"):
            mover.await_copy_completion(operation, TickingEvent(clock))
        assert clock.now == pytest.approx(5.0)
        assert operation.status == CopyStatus.PENDING

    def test_backoff_is_capped(self, mock_s3_client, mock_source, operation, clock):
        """Test the poll interval grows by the backoff factor up to the maximum."""
        mover = S3ArchiveMover(
            mock_s3_client, mock_source, poll_interval=0.5, poll_backoff=2.0, poll_max_interval=1.5, timeout=60.0,
            clock=clock,
        )
        mock_s3_client.head_object.side_effect = [_client_error("404")] * 4 + [
            {"ETag": '"abc123"', "ContentLength": 11}
        ]
        event = TickingEvent(clock)

        mover.await_copy_completion(operation, event)

        assert event.waits == [0.5, 1.0, 1.5, 1.5]

    def test_permission_error_ends_wait(self, mover, mock_s3_client, operation, clock):
        """Test a denied status check settles as FAILED on the first poll."""
        mock_s3_client.head_object.side_effect = _client_error("AccessDenied", http_status=403)
        event = TickingEvent(clock)

        assert mover.await_copy_completion(operation, event) == CopyStatus.FAILED
        assert operation.polls == 1
        assert event.waits == []
        assert clock.now == 0.0

    def test_stop_event_aborts(self, mover, mock_s3_client, operation):
        """Test a set stop event ends the wait with ABORTED."""
        event = threading.Event()
        event.set()

        assert mover.await_copy_completion(operation, event) == CopyStatus.ABORTED
        mock_s3_client.head_object.assert_not_called()


class TestDeleteSourceIfVerified:
    """Test S3ArchiveMover.delete_source_if_verified."""

    def test_deletes_on_success(self, mover, mock_source, operation, sample_descriptor):
        """Test the source is deleted after a successful copy."""
        operation.status = CopyStatus.SUCCESS

        assert mover.delete_source_if_verified(sample_descriptor, operation) is True
        mock_source.delete_object_if_exists.assert_called_once_with(sample_descriptor)

    @pytest.mark.parametrize("status", [CopyStatus.FAILED, CopyStatus.ABORTED, CopyStatus.PENDING])
    def test_keeps_source_otherwise(self, mover, mock_source, operation, sample_descriptor, status):
        """Test the source is kept for any non-success status."""
        operation.status = status

        with pytest.raises(CopyVerificationFailed) as exc_info:
            mover.delete_source_if_verified(sample_descriptor, operation)

        mock_source.delete_object_if_exists.assert_not_called()
        assert exc_info.value.status == status.value
        assert str(exc_info.value) == (
            f"Failed to copy 'Invoice_1001.pdf' to '{ARCHIVE}'. Copy status: {status.value}"
        )
