"""
Test fixtures and fakes for blob-relay tests.

This module provides a relay configuration fixture and in-memory stand-ins
for the object source, archive mover and SFTP transfer client, so the relay
service can be exercised without a storage backend or SFTP server.
"""

import io
import threading
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest

from blob_relay.exceptions import CopyVerificationFailed
from blob_relay.models import CopyOperation, CopyStatus, ObjectDescriptor, RelayConfig, StorageDescriptor

SOURCE_CONTAINER = "exportcontainer-live"
ARCHIVE_CONTAINER = "exportcontainer-archive"


class FakeObjectSource:
    """In-memory object source keyed by object name."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None, container: str = SOURCE_CONTAINER) -> None:
        self.container = container
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.deleted: List[str] = []
        self.download_errors: Dict[str, Exception] = {}
        self.list_error: Optional[Exception] = None

    def list_objects(self):
        if self.list_error is not None:
            raise self.list_error
        for name, data in list(self.objects.items()):
            yield ObjectDescriptor(name=name, container=self.container, size=len(data))

    def download_object(self, descriptor):
        if descriptor.name in self.download_errors:
            raise self.download_errors[descriptor.name]
        return io.BytesIO(self.objects[descriptor.name])

    def delete_object_if_exists(self, descriptor):
        if descriptor.name not in self.objects:
            return False
        del self.objects[descriptor.name]
        self.deleted.append(descriptor.name)
        return True


class FakeArchiveMover:
    """Archive mover that copies into a dict and settles with a configurable status."""

    def __init__(self, source: FakeObjectSource, statuses: Optional[Dict[str, CopyStatus]] = None) -> None:
        self.source = source
        self.statuses: Dict[str, CopyStatus] = dict(statuses or {})
        self.archive: Dict[str, bytes] = {}
        self.begin_errors: Dict[str, Exception] = {}
        self.await_errors: Dict[str, Exception] = {}
        self.copies: List[CopyOperation] = []

    def begin_copy(self, descriptor, destination_container, destination_name):
        if descriptor.name in self.begin_errors:
            raise self.begin_errors[descriptor.name]
        operation = CopyOperation(
            source_uri=descriptor.uri,
            source_name=descriptor.name,
            destination_container=destination_container,
            destination_name=destination_name,
            expected_size=descriptor.size,
        )
        self.copies.append(operation)
        return operation

    def await_copy_completion(self, operation, stop_event=None):
        if operation.source_name in self.await_errors:
            raise self.await_errors[operation.source_name]
        operation.polls += 1
        operation.status = self.statuses.get(operation.source_name, CopyStatus.SUCCESS)
        if operation.status is CopyStatus.SUCCESS:
            self.archive[operation.destination_name] = self.source.objects[operation.source_name]
        return operation.status

    def delete_source_if_verified(self, descriptor, operation):
        if operation.status is not CopyStatus.SUCCESS:
            raise CopyVerificationFailed(descriptor.name, operation.status.value, operation.destination_container)
        return self.source.delete_object_if_exists(descriptor)


class FakeTransferClient:
    """SFTP stand-in recording uploaded files in a shared dict."""

    def __init__(self, files: Dict[str, bytes], directories: List[str]) -> None:
        self.files = files
        self.directories = directories
        self.connected = False

    def connect(self):
        self.connected = True

    def ensure_directory(self, path):
        if path not in self.directories:
            self.directories.append(path)

    def upload(self, stream, remote_path):
        data = stream.read()
        self.files[remote_path] = data
        return len(data)

    def disconnect(self):
        self.connected = False

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()


class FakeSftpServer:
    """Factory producing FakeTransferClient sessions against shared state."""

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}
        self.directories: List[str] = []
        self.upload_errors: Dict[str, Exception] = {}
        self.sessions = 0

    def __call__(self) -> FakeTransferClient:
        self.sessions += 1
        server = self

        class _Client(FakeTransferClient):
            def upload(self, stream, remote_path):
                for name, error in server.upload_errors.items():
                    if remote_path.endswith("/" + name):
                        raise error
                return super().upload(stream, remote_path)

        return _Client(self.files, self.directories)


@pytest.fixture
def relay_config():
    """Relay configuration with fast polling."""
    return RelayConfig(
        storage=StorageDescriptor(region="us-east-1"),
        source_container=SOURCE_CONTAINER,
        archive_container=ARCHIVE_CONTAINER,
        sftp_host="sftp.example.com",
        sftp_username="relay",
        sftp_password="secret",
        copy_poll_interval=0.01,
        copy_poll_max_interval=0.01,
        copy_timeout=1.0,
        pipeline_name="test-pipeline",
    )


@pytest.fixture
def relay_environ():
    """Minimal environment with every required variable set."""
    return {
        "BLOB_CONNECTION_STRING": "EndpointUrl=http://minio:9000;Region=us-east-1;AccessKeyId=AK;SecretAccessKey=SK",
        "DESTINATION_CONTAINER_NAME": ARCHIVE_CONTAINER,
        "SFTP_HOST": "sftp.example.com",
        "SFTP_USER": "relay",
        "SFTP_PASSWORD": "secret",
    }


@pytest.fixture
def fake_source():
    """Empty in-memory object source."""
    return FakeObjectSource()


@pytest.fixture
def fake_mover(fake_source):
    """Archive mover copying from fake_source."""
    return FakeArchiveMover(fake_source)


@pytest.fixture
def fake_sftp():
    """In-memory SFTP server factory."""
    return FakeSftpServer()


@pytest.fixture
def stop_event():
    """Fresh cancellation event."""
    return threading.Event()


@pytest.fixture
def mock_s3_client():
    """Mock boto3 S3 client."""
    return Mock()


@pytest.fixture
def sample_descriptor():
    """Descriptor of a classifiable source object."""
    return ObjectDescriptor(name="Invoice_1001.pdf", container=SOURCE_CONTAINER, size=11, etag="abc123")
