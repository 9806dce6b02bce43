"""
Relay service: drives one pass over the source container.

For every listed object: classify, download, upload over SFTP, copy to the
archive container, wait for the copy to settle and delete the source once the
copy is verified. Each stage returns a StageResult; a failed stage ends that
object's handling and the pass moves on to the next object.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from ..api.archive_mover import S3ArchiveMover
from ..api.object_source import S3ObjectSource
from ..api.sftp_client import SftpTransferClient
from ..classifier import classify
from ..exceptions import ObjectProcessingError, TransferUploadFailed
from ..models.config import RelayConfig
from ..models.copy import CopyOperation
from ..models.objects import ObjectDescriptor, PipelineStage, TaskOutcome, TransferTask
from ..models.results import ObjectResult, PassSummary, StageResult
from ..protocols.storage_protocol import ArchiveMoverProtocol, ObjectSourceProtocol, TransferClientProtocol
from ..reporting import log_pass_summary
from ..utils.error_handling import handle_generic_error, log_object_failure
from ..utils.logging_utils import log_operation_complete, log_operation_start
from ..utils.path_utils import build_remote_directory, build_remote_path, is_direct_child, object_base_name
from ..utils.session import create_storage_client

# Run-locks keyed by pipeline name, shared by every service in the process
_RUN_LOCKS: Dict[str, threading.Lock] = {}
_RUN_LOCKS_GUARD = threading.Lock()


def get_run_lock(pipeline_name: str) -> threading.Lock:
    """
    Get the process-wide run-lock for a pipeline.

    Args:
        pipeline_name: Pipeline name used as the lock key

    Returns:
        The lock guarding passes of that pipeline
    """
    with _RUN_LOCKS_GUARD:
        return _RUN_LOCKS.setdefault(pipeline_name, threading.Lock())


class RelayService:
    """
    Orchestrates relay passes.

    The service holds no per-pass state; everything a pass produces is in the
    returned PassSummary, so ``run_pass`` can be called repeatedly.

    Attributes:
        config: Immutable relay configuration
        object_source: Source container adapter
        archive_mover: Archive copy adapter
        transfer_client_factory: Callable returning a fresh transfer client per object
        classifier: Callable mapping an object name to a sub-path or None
        stop_event: Event that cancels the current pass when set
    """

    def __init__(
        self,
        config: RelayConfig,
        object_source: ObjectSourceProtocol,
        archive_mover: ArchiveMoverProtocol,
        transfer_client_factory: Callable[[], TransferClientProtocol],
        *,
        classifier: Callable[[str], Optional[str]] = classify,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.config = config
        self.object_source = object_source
        self.archive_mover = archive_mover
        self.transfer_client_factory = transfer_client_factory
        self.classifier = classifier
        self.stop_event = stop_event if stop_event is not None else threading.Event()

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        *,
        storage_client: Optional[Any] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> "RelayService":
        """
        Build a service wired to S3 and SFTP from configuration.

        Args:
            config: Relay configuration
            storage_client: Optional pre-built boto3 S3 client
            stop_event: Optional cancellation event

        Returns:
            Configured RelayService
        """
        client = storage_client if storage_client is not None else create_storage_client(config.storage)
        source = S3ObjectSource(client, config.source_container)
        mover = S3ArchiveMover(
            client,
            source,
            poll_interval=config.copy_poll_interval,
            poll_backoff=config.copy_poll_backoff,
            poll_max_interval=config.copy_poll_max_interval,
            timeout=config.copy_timeout,
        )
        return cls(
            config,
            source,
            mover,
            lambda: SftpTransferClient.from_config(config),
            stop_event=stop_event,
        )

    # ------------------------------------------------------------------
    # Pass handling
    # ------------------------------------------------------------------

    def run_pass(self) -> PassSummary:
        """
        Run one pass over the source container.

        Never raises for object-level failures. If another pass of the same
        pipeline is running in this process the call returns immediately with
        ``overlapped`` set.

        Returns:
            PassSummary with one result per listed object
        """
        summary = PassSummary(pipeline_name=self.config.pipeline_name)
        lock = get_run_lock(self.config.pipeline_name)
        if not lock.acquire(blocking=False):
            summary.overlapped = True
            summary.finish()
            log_pass_summary(summary)
            return summary

        try:
            log_operation_start(
                "relay pass",
                source=self.config.source_container,
                archive=self.config.archive_container,
            )
            self._process_listing(summary)
            log_operation_complete("relay pass", objects=summary.total)
        finally:
            lock.release()

        summary.finish()
        log_pass_summary(summary)
        return summary

    def _process_listing(self, summary: PassSummary) -> None:
        try:
            objects = iter(self.object_source.list_objects())
        except Exception as e:  # pylint: disable=broad-except
            handle_generic_error(e, f"listing of {self.config.source_container}")
            summary.listing_error = f"{type(e).__name__}: {e}"
            return

        while True:
            if self.stop_event.is_set():
                logging.warning("Stop requested, ending pass early")
                summary.cancelled = True
                return
            try:
                descriptor = next(objects)
            except StopIteration:
                return
            except Exception as e:  # pylint: disable=broad-except
                handle_generic_error(e, f"listing of {self.config.source_container}")
                summary.listing_error = f"{type(e).__name__}: {e}"
                return
            summary.add_result(self.process_object(descriptor))

    # ------------------------------------------------------------------
    # Object handling
    # ------------------------------------------------------------------

    def process_object(self, descriptor: ObjectDescriptor) -> ObjectResult:
        """
        Relay and archive a single object.

        Args:
            descriptor: Object to handle

        Returns:
            ObjectResult describing the outcome; never raises
        """
        task = TransferTask(descriptor=descriptor)
        logging.info("Processing object: %s", task.name)

        classified = self._run_stage(task, PipelineStage.CLASSIFYING, self.classifier, task.name)
        if not classified.ok:
            return self._fail(task, classified)
        if classified.value is None:
            logging.warning("Skipping %s: no matching folder", task.name)
            task.finish(TaskOutcome.SKIPPED)
            return ObjectResult(
                name=task.name,
                outcome=TaskOutcome.SKIPPED,
                stage=PipelineStage.CLASSIFYING,
                reason="no matching classification rule",
            )
        task.classified_path = classified.value
        remote_directory = build_remote_directory(self.config.sftp_base_path, classified.value)
        remote_path = build_remote_path(self.config.sftp_base_path, classified.value, task.name)
        archive_name = object_base_name(task.name)

        downloaded = self._run_stage(task, PipelineStage.DOWNLOADING, self.object_source.download_object, descriptor)
        if not downloaded.ok:
            return self._fail(task, downloaded, remote_path=remote_path)
        task.payload = downloaded.value

        uploaded = self._run_stage(
            task, PipelineStage.UPLOADING, self._upload, task, remote_directory, remote_path
        )
        task.release_payload()
        if not uploaded.ok:
            return self._fail(task, uploaded, remote_path=remote_path)

        archived = self._run_stage(task, PipelineStage.ARCHIVING, self._archive, descriptor, archive_name)
        if not archived.ok:
            return self._fail(task, archived, remote_path=remote_path, archive_name=archive_name)

        deleted = self._run_stage(
            task, PipelineStage.DELETING, self.archive_mover.delete_source_if_verified, descriptor, archived.value
        )
        if not deleted.ok:
            return self._fail(task, deleted, remote_path=remote_path, archive_name=archive_name)

        task.stage = PipelineStage.DONE
        task.finish(TaskOutcome.SUCCEEDED)
        logging.info("Relayed %s to %s and archived as %s", task.name, remote_path, archive_name)
        return ObjectResult(
            name=task.name,
            outcome=TaskOutcome.SUCCEEDED,
            classified_path=task.classified_path,
            remote_path=remote_path,
            archive_name=archive_name,
            stage=PipelineStage.DONE,
        )

    def _upload(self, task: TransferTask, remote_directory: str, remote_path: str) -> int:
        if not is_direct_child(remote_path, remote_directory):
            raise TransferUploadFailed(
                f"Object name '{task.name}' does not map to a file in {remote_directory}", object_name=task.name
            )
        with self.transfer_client_factory() as client:
            client.ensure_directory(remote_directory)
            return client.upload(task.payload, remote_path)

    def _archive(self, descriptor: ObjectDescriptor, archive_name: str) -> CopyOperation:
        operation = self.archive_mover.begin_copy(descriptor, self.config.archive_container, archive_name)
        self.archive_mover.await_copy_completion(operation, self.stop_event)
        return operation

    @staticmethod
    def _run_stage(task: TransferTask, stage: PipelineStage, func: Callable[..., Any], *args: Any) -> StageResult:
        task.stage = stage
        try:
            return StageResult.success(stage, func(*args))
        except Exception as e:  # pylint: disable=broad-except
            return StageResult.failure(stage, e)

    @staticmethod
    def _fail(task: TransferTask, result: StageResult, **fields: Optional[str]) -> ObjectResult:
        error = result.error
        if isinstance(error, ObjectProcessingError):
            if error.object_name is None:
                error.object_name = task.name
            kind, message = error.kind, error.message
        else:
            kind, message = type(error).__name__, str(error)

        log_object_failure(task.name, result.stage.value, error)
        task.finish(TaskOutcome.FAILED)
        return ObjectResult(
            name=task.name,
            outcome=TaskOutcome.FAILED,
            classified_path=task.classified_path,
            stage=result.stage,
            error_kind=kind,
            error_message=message,
            **fields,
        )


__all__ = ["RelayService", "get_run_lock"]
