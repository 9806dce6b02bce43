"""
Archive operations: server-side copy, copy status polling and verified delete.

The copy is issued with ``copy_object`` so the payload never travels through
the relay. A copy counts as settled once the destination object is visible;
it is verified against the ETag the backend reported for the copy and the
size of the source object.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import (
    CopyInitiationFailed,
    CopyTimedOut,
    CopyVerificationFailed,
    DestinationContainerUnresolved,
)
from ..models.copy import CopyOperation, CopyStatus
from ..models.objects import ObjectDescriptor
from ..protocols.storage_protocol import ObjectSourceProtocol
from ..utils.constants import (
    DEFAULT_COPY_POLL_INTERVAL,
    DEFAULT_COPY_TIMEOUT,
    MISSING_BUCKET_CODES,
    MISSING_OBJECT_CODES,
)
from ..utils.error_handling import handle_storage_error, is_transient_storage_error, storage_error_code

# Codes from head_bucket that only mean the role lacks s3:ListBucket
LIST_DENIED_CODES = ("403", "AccessDenied")


class S3ArchiveMover:
    """
    Copies objects to an archive bucket and deletes verified sources.

    Attributes:
        client: boto3 S3 client
        source: Object source used for deleting verified objects
        poll_interval: Initial seconds between status checks
        poll_backoff: Multiplier applied to the interval after each check
        poll_max_interval: Upper bound for the interval
        timeout: Maximum seconds to wait for a copy to settle
    """

    def __init__(
        self,
        client: Any,
        source: ObjectSourceProtocol,
        *,
        poll_interval: float = DEFAULT_COPY_POLL_INTERVAL,
        poll_backoff: float = 1.0,
        poll_max_interval: Optional[float] = None,
        timeout: float = DEFAULT_COPY_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.source = source
        self.poll_interval = poll_interval
        self.poll_backoff = poll_backoff
        self.poll_max_interval = max(poll_max_interval or poll_interval, poll_interval)
        self.timeout = timeout
        self._clock = clock

    def begin_copy(
        self, descriptor: ObjectDescriptor, destination_container: str, destination_name: str
    ) -> CopyOperation:
        """
        Start a server-side copy of an object into the archive container.

        Args:
            descriptor: Source object
            destination_container: Archive bucket name
            destination_name: Key for the copy (the source base name)

        Returns:
            CopyOperation in the pending state

        Raises:
            DestinationContainerUnresolved: If the archive bucket does not exist or is unreachable.
                A 403 from the existence check is tolerated and left to the copy itself.
            CopyInitiationFailed: If the backend rejects the copy request
        """
        try:
            self.client.head_bucket(Bucket=destination_container)
        except ClientError as e:
            code = storage_error_code(e)
            if code in MISSING_BUCKET_CODES:
                raise DestinationContainerUnresolved(
                    f"Archive container '{destination_container}' does not exist"
                ) from e
            if code in LIST_DENIED_CODES:
                logging.warning(
                    "Cannot check archive container %s (%s), attempting the copy anyway", destination_container, code
                )
            else:
                handle_storage_error(e, f"resolving archive container {destination_container}")
                raise DestinationContainerUnresolved(
                    f"Archive container '{destination_container}' cannot be resolved ({code}): {e}"
                ) from e
        except BotoCoreError as e:
            raise DestinationContainerUnresolved(
                f"Archive container '{destination_container}' unreachable: {e}"
            ) from e

        try:
            response = self.client.copy_object(
                Bucket=destination_container,
                Key=destination_name,
                CopySource={"Bucket": descriptor.container, "Key": descriptor.name},
            )
        except (ClientError, BotoCoreError) as e:
            handle_storage_error(e, f"copy of {descriptor.uri}")
            raise CopyInitiationFailed(f"Copy of {descriptor.uri} to '{destination_container}' rejected: {e}") from e

        etag = response.get("CopyObjectResult", {}).get("ETag")
        operation = CopyOperation(
            source_uri=descriptor.uri,
            source_name=descriptor.name,
            destination_container=destination_container,
            destination_name=destination_name,
            expected_etag=etag.strip('"') if etag else None,
            expected_size=descriptor.size,
        )
        logging.info("Started copy of %s to %s", operation.source_uri, operation.destination_uri)
        return operation

    def get_copy_status(self, operation: CopyOperation) -> CopyStatus:
        """
        Check the current status of a copy.

        Transient backend errors (throttling, 5xx, connection failures) are
        reported as pending; the polling timeout bounds how long they are
        tolerated. Any other error, such as a denied permission, fails the
        copy on the spot.

        Args:
            operation: Copy to check

        Returns:
            PENDING while the copy is not visible, SUCCESS when it matches, FAILED otherwise
        """
        operation.polls += 1
        try:
            head = self.client.head_object(Bucket=operation.destination_container, Key=operation.destination_name)
        except (ClientError, BotoCoreError) as e:
            if storage_error_code(e) in MISSING_OBJECT_CODES:
                return CopyStatus.PENDING
            if is_transient_storage_error(e):
                logging.warning("Status check for %s failed: %s", operation.destination_uri, e)
                return CopyStatus.PENDING
            handle_storage_error(e, f"status check of {operation.destination_uri}")
            return CopyStatus.FAILED

        etag = (head.get("ETag") or "").strip('"')
        size = head.get("ContentLength")
        if operation.expected_etag and etag != operation.expected_etag:
            logging.warning(
                "Copy %s has ETag %s, expected %s", operation.destination_uri, etag, operation.expected_etag
            )
            return CopyStatus.FAILED
        if operation.expected_size is not None and size != operation.expected_size:
            logging.warning(
                "Copy %s has %s bytes, expected %d", operation.destination_uri, size, operation.expected_size
            )
            return CopyStatus.FAILED
        return CopyStatus.SUCCESS

    def await_copy_completion(
        self, operation: CopyOperation, stop_event: Optional[threading.Event] = None
    ) -> CopyStatus:
        """
        Poll a copy until it leaves the pending state.

        Polls at ``poll_interval`` (growing by ``poll_backoff`` up to
        ``poll_max_interval``). Setting ``stop_event`` ends the wait early with
        status ABORTED.

        Args:
            operation: Copy to wait for; its status is updated in place
            stop_event: Optional cancellation event

        Returns:
            Terminal copy status

        Raises:
            CopyTimedOut: If the copy is still pending after ``timeout`` seconds
        """
        waiter = stop_event if stop_event is not None else threading.Event()
        start = self._clock()
        wait_time = self.poll_interval

        while True:
            if waiter.is_set():
                operation.status = CopyStatus.ABORTED
                logging.warning("Stopped waiting for copy %s (polls: %d)", operation.destination_uri, operation.polls)
                return operation.status

            operation.status = self.get_copy_status(operation)
            elapsed = self._clock() - start
            if operation.status.is_terminal:
                logging.info(
                    "Copy finished: %s (status: %s, total polls: %d, elapsed: %.1fs)",
                    operation.destination_uri,
                    operation.status.value,
                    operation.polls,
                    elapsed,
                )
                return operation.status

            if elapsed >= self.timeout:
                logging.error(
                    "Timed out waiting for copy %s after %.1f seconds (%d polls)",
                    operation.destination_uri,
                    elapsed,
                    operation.polls,
                )
                raise CopyTimedOut(
                    f"Copy to {operation.destination_uri} still pending after {self.timeout:.1f}s "
                    f"({operation.polls} polls)"
                )

            logging.debug(
                "Waiting for copy %s (poll #%d, elapsed: %.1fs, next wait: %.1fs)",
                operation.destination_uri,
                operation.polls,
                elapsed,
                wait_time,
            )
            waiter.wait(min(wait_time, self.timeout - elapsed))
            wait_time = min(wait_time * self.poll_backoff, self.poll_max_interval)

    def delete_source_if_verified(self, descriptor: ObjectDescriptor, operation: CopyOperation) -> bool:
        """
        Delete the source object only if its archive copy succeeded.

        Args:
            descriptor: Source object
            operation: Settled copy operation

        Returns:
            True if the source was deleted, False if it was already gone

        Raises:
            CopyVerificationFailed: If the copy status is anything but SUCCESS
        """
        if operation.status is not CopyStatus.SUCCESS:
            raise CopyVerificationFailed(descriptor.name, operation.status.value, operation.destination_container)
        return self.source.delete_object_if_exists(descriptor)


__all__ = ["S3ArchiveMover"]
