"""Upload use-case service: queue draining, job lifecycle, cancel and resume."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from augmet_uploader.domain.entities import (
    FileToUpload,
    QueueFailure,
    QueueResult,
    ResumeUploadInfo,
    TransferJob,
    UploadSession,
)
from augmet_uploader.domain.errors import LocalFileNotFoundError, UploadRecordError
from augmet_uploader.domain.file_naming import build_object_key
from augmet_uploader.domain.ports import (
    ConnectivityProbe,
    FileUploadRecords,
    ObjectStoreGateway,
    UploadNotifier,
)
from augmet_uploader.domain.records import (
    AssignListResponse,
    AssociationListResponse,
    BulkAssignResult,
    BulkDeleteResult,
    BulkDownloadItem,
    FileUploadCreateRequest,
    FileUploadRecord,
    FileUploadUpdate,
    PatientAssignment,
    StatusListResponse,
)
from augmet_uploader.domain.upload_types import PartOutcome, UploadStatus, detect_file_type
from augmet_uploader.infrastructure.transfers.chunk_reader import ChunkReader, open_local_file
from augmet_uploader.infrastructure.transfers.part_transfer import PartTransfer
from augmet_uploader.infrastructure.transfers.runtime.in_flight_call_slot import InFlightCallSlot
from augmet_uploader.infrastructure.transfers.runtime.progress_bus import (
    ProgressBus,
    ProgressCallback,
    ProgressSubscription,
)
from augmet_uploader.infrastructure.transfers.runtime.transfer_queue import TransferQueue
from augmet_uploader.infrastructure.transfers.runtime.upload_session_store import (
    UploadSessionStore,
)

_DEFAULT_KEY_PREFIX = "augmet_uploader"
_PROCESSING_ERROR_MESSAGE = "Error while processing file upload"
_CREATE_ERROR_MESSAGE = "Error while creating file upload"

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """Drives queued jobs through initiate, part loop and complete, one at a time.

    Cancellation is cooperative: ``cancel_upload`` turns the job's continuation
    flag off, which the part loop checks before every part, and interrupts the
    single in-flight PUT through the call slot. A cancelled job never gets an
    error outcome, even when a failure surfaces after the cancel.
    """

    def __init__(
        self,
        records: FileUploadRecords,
        object_store: ObjectStoreGateway,
        part_transfer: PartTransfer,
        chunk_reader: ChunkReader,
        connectivity: ConnectivityProbe,
        notifier: UploadNotifier,
        queue: TransferQueue | None = None,
        sessions: UploadSessionStore | None = None,
        progress_bus: ProgressBus | None = None,
        in_flight: InFlightCallSlot | None = None,
        org_id: str | None = None,
        key_prefix: str = _DEFAULT_KEY_PREFIX,
    ) -> None:
        self._records = records
        self._object_store = object_store
        self._part_transfer = part_transfer
        self._chunk_reader = chunk_reader
        self._connectivity = connectivity
        self._notifier = notifier
        self._queue = queue or TransferQueue()
        self._sessions = sessions or UploadSessionStore()
        self._progress_bus = progress_bus or ProgressBus()
        self._in_flight = in_flight or InFlightCallSlot()
        self._org_id = org_id or ""
        self._key_prefix = key_prefix
        self._loop_running = False
        self._drain_task: asyncio.Task[None] | None = None

    @property
    def queue(self) -> TransferQueue:
        return self._queue

    @property
    def sessions(self) -> UploadSessionStore:
        return self._sessions

    @property
    def is_draining(self) -> bool:
        """Return True while a drain loop owns the queue."""

        return self._loop_running

    def on_part_uploaded(self, callback: ProgressCallback) -> ProgressSubscription:
        """Subscribe to part-stored notifications."""

        return self._progress_bus.subscribe(callback)

    async def add_files_to_queue(self, files: Iterable[FileToUpload]) -> QueueResult:
        """Create a record per file, queue the accepted ones and start draining."""

        result = QueueResult()
        try:
            for file_to_upload in files:
                try:
                    local_file = open_local_file(
                        file_to_upload.path,
                        name=file_to_upload.file_name,
                        content_type=file_to_upload.content_type,
                    )
                    record = await self._records.create_file_upload(
                        FileUploadCreateRequest(
                            file_name=file_to_upload.file_name,
                            original_file_name=(
                                file_to_upload.original_file_name or file_to_upload.path.name
                            ),
                            local_file_path=str(file_to_upload.path),
                            org_id=self._org_id,
                            patient_id=file_to_upload.patient_id or None,
                            visit_id=file_to_upload.visit_id or None,
                            sample_id=file_to_upload.sample_id or None,
                            file_type=(
                                file_to_upload.file_type
                                or str(detect_file_type(file_to_upload.file_name))
                            ),
                            file_size=local_file.size,
                        )
                    )
                except (LocalFileNotFoundError, UploadRecordError) as exc:
                    message = str(exc) or _CREATE_ERROR_MESSAGE
                    logger.warning("Could not queue %s: %s", file_to_upload.file_name, message)
                    await self._notifier.error("File Upload Error", message)
                    result.failed.append(
                        QueueFailure(file_name=file_to_upload.file_name, message=message)
                    )
                    continue

                self._sessions.register(record.id)
                self._queue.enqueue(
                    TransferJob(
                        file=local_file,
                        job_id=record.id,
                        file_name=file_to_upload.file_name,
                        owner_id=file_to_upload.patient_id or None,
                    )
                )
                result.queued.append(record.id)
                logger.info("Queued %s as job %s.", file_to_upload.file_name, record.id)
        finally:
            self._ensure_draining()
        return result

    async def resume_upload(self, resume_info: ResumeUploadInfo) -> TransferJob:
        """Rebuild the file handle from disk and queue the job at its stored part index."""

        try:
            local_file = open_local_file(
                resume_info.file_path,
                name=resume_info.file_name,
                content_type=resume_info.content_type,
            )
        except LocalFileNotFoundError:
            logger.warning(
                "Cannot resume job %s: %s is missing.", resume_info.job_id, resume_info.file_path
            )
            await self._notifier.error(
                "File Not Found", "File is not present in the stored location"
            )
            raise

        session = UploadSession(key=resume_info.key, upload_id=resume_info.upload_id)
        self._sessions.arm(resume_info.job_id, session)
        try:
            await self._records.update_file_upload(
                resume_info.job_id,
                FileUploadUpdate(status=UploadStatus.QUEUED, update_status=True),
            )
        except UploadRecordError:
            self._sessions.forget(resume_info.job_id)
            raise

        job = TransferJob(
            file=local_file,
            job_id=resume_info.job_id,
            file_name=resume_info.file_name,
            key=resume_info.key,
            upload_id=resume_info.upload_id,
            current_part_index=resume_info.current_part_index,
            resume=True,
        )
        self._queue.enqueue(job)
        logger.info(
            "Queued job %s for resume at part %s.", job.job_id, job.current_part_index + 1
        )
        self._ensure_draining()
        return job

    async def cancel_upload(self, job_id: str, current_status: str | None = None) -> int:
        """Cancel a queued or running job and return how many queue entries were dropped."""

        self._sessions.stop(job_id)
        removed = self._queue.remove_by(lambda job: job.job_id == job_id)
        if removed:
            logger.info("Removed %s queued entries for job %s.", removed, job_id)

        failure: UploadRecordError | None = None
        try:
            await self._records.cancel_file_upload(job_id)
        except UploadRecordError as exc:
            logger.warning("Control plane cancel for job %s failed: %s", job_id, exc)
            failure = exc

        if self._in_flight.cancel(job_id):
            logger.info("Interrupted in-flight part of job %s (status %s).", job_id, current_status)
        self._sessions.forget(job_id)

        if failure is not None:
            raise UploadRecordError(f"Could not cancel upload {job_id}: {failure}") from failure
        return removed

    async def process_queue(self) -> None:
        """Start a drain loop and wait for it; returns at once when a loop already runs."""

        if self._ensure_draining():
            await self.wait_until_idle()

    async def wait_until_idle(self) -> None:
        """Wait for the background drain loop, if any, to finish."""

        while self._drain_task is not None and not self._drain_task.done():
            await self._drain_task

    async def complete_upload(self, job_id: str, file_name: str) -> bool:
        """Finalize the open session of a job; a job without one is left untouched."""

        session = self._sessions.session(job_id)
        if session is None:
            logger.info("Job %s has no open session; nothing to complete.", job_id)
            return False

        try:
            await self._object_store.complete(session.key, session.upload_id, job_id)
        except Exception as exc:  # noqa: BLE001
            logger.error("Completing job %s failed: %s", job_id, exc)
            if self._was_cancelled_while_completing(job_id):
                return True
            await self._update_quietly(
                job_id,
                FileUploadUpdate(status=UploadStatus.COMPLETED_WITH_ERROR, file_progress="100%"),
            )
            await self.cancel_with_error(
                str(exc) or _PROCESSING_ERROR_MESSAGE,
                job_id,
                status=UploadStatus.COMPLETED_WITH_ERROR,
            )
            await self._notifier.upload_failed(file_name)
            return True

        if self._was_cancelled_while_completing(job_id):
            return True
        self._sessions.close_session(job_id)
        self._sessions.stop(job_id)
        await self._update_quietly(
            job_id,
            FileUploadUpdate(
                status=UploadStatus.COMPLETED,
                file_progress="100%",
                remote_file_path=session.key,
            ),
        )
        logger.info("Job %s completed at %s.", job_id, session.key)
        await self._notifier.upload_completed(file_name)
        return True

    async def cancel_with_error(
        self,
        message: str,
        job_id: str,
        status: UploadStatus = UploadStatus.ERROR,
    ) -> None:
        """Stop a failed job and release its remote session, best effort."""

        session = self._sessions.session(job_id)
        self._sessions.stop(job_id)
        logger.error("Upload %s failed: %s", job_id, message)
        try:
            await self._records.abort_file_upload(job_id, status, session, message)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Control plane cleanup for job %s failed: %s", job_id, exc)
        if session is not None:
            await self._abort_quietly(job_id, session)
        self._sessions.close_session(job_id)

    def has_active_uploads(self) -> bool:
        return self._sessions.has_active_uploads()

    def uploading_flags(self) -> dict[str, bool]:
        return self._sessions.uploading_flags()

    async def shutdown(self, cancel_active: bool = True) -> None:
        """Stop everything; report every tracked job through cancel-all when uploads are active."""

        job_ids = list(self._sessions.snapshot())
        open_sessions = self._sessions.open_sessions()
        active = self._sessions.has_active_uploads()

        self._queue.clear()
        for job_id in job_ids:
            self._sessions.stop(job_id)
        self._in_flight.cancel()

        if cancel_active and active:
            try:
                await self._records.cancel_all(job_ids, open_sessions)
            except UploadRecordError as exc:
                logger.warning("Cancel-all on shutdown failed: %s", exc)

        await self.wait_until_idle()
        for job_id in job_ids:
            self._sessions.forget(job_id)

    async def get_status_list(self, **params: Any) -> StatusListResponse:
        return await self._records.get_status_list(**params)

    async def retry_upload(self, job_id: str) -> FileUploadRecord:
        return await self._records.retry_file_upload(job_id)

    async def bulk_download(self, job_ids: Sequence[str]) -> list[BulkDownloadItem]:
        return await self._records.bulk_download(job_ids)

    async def bulk_delete(self, job_ids: Sequence[str]) -> BulkDeleteResult:
        return await self._records.bulk_delete(job_ids)

    async def get_assign_list(self, **params: Any) -> AssignListResponse:
        return await self._records.get_assign_list(**params)

    async def assign_patient(self, job_id: str, assignment: PatientAssignment) -> FileUploadRecord:
        return await self._records.assign_patient(job_id, assignment)

    async def bulk_assign_patient(
        self, job_ids: Sequence[str], assignment: PatientAssignment
    ) -> BulkAssignResult:
        return await self._records.bulk_assign_patient(job_ids, assignment)

    async def get_association_list(self, params: Mapping[str, Any]) -> AssociationListResponse:
        return await self._records.get_association_list(params)

    def _ensure_draining(self) -> bool:
        """Start a background drain loop unless one is running or nothing is queued."""

        if self._loop_running or self._queue.is_empty:
            return False
        self._loop_running = True
        self._drain_task = asyncio.create_task(self._drain(), name="upload-drain-loop")
        return True

    async def _drain(self) -> None:
        try:
            while True:
                job = self._queue.dequeue()
                if job is None:
                    break
                await self._run_job(job)
        finally:
            self._loop_running = False

    async def _run_job(self, job: TransferJob) -> None:
        """Run one job; failures end the job, never the loop."""

        try:
            if job.is_resume:
                await self._run_resume(job)
            else:
                await self._run_fresh(job)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            if not self._sessions.can_continue(job.job_id):
                logger.info("Job %s was cancelled; ignoring failure: %s", job.job_id, exc)
                return
            logger.exception("Job %s failed.", job.job_id)
            await self.cancel_with_error(f"{_PROCESSING_ERROR_MESSAGE}: {exc}", job.job_id)

    async def _run_fresh(self, job: TransferJob) -> None:
        if not self._sessions.can_continue(job.job_id):
            return
        total_parts = self._chunk_reader.part_count(job.file)
        if not await self._connectivity.is_online():
            await self._notifier.network_unavailable()
            return

        await self._records.update_file_upload(
            job.job_id,
            FileUploadUpdate(status=UploadStatus.IN_PROGRESS, file_progress="0%"),
        )
        key = build_object_key(self._key_prefix, job.owner_id or job.job_id, job.file_name)
        upload_id = await self._object_store.initiate(key)
        session = UploadSession(key=key, upload_id=upload_id)
        job.key = key
        job.upload_id = upload_id

        if not self._sessions.open_session(job.job_id, session) or not self._sessions.can_continue(
            job.job_id
        ):
            await self._discard_session(job.job_id, session)
            return

        await self._records.update_file_upload(
            job.job_id,
            FileUploadUpdate(aws_upload_id=upload_id, aws_key=key),
        )
        logger.info("Job %s uploading %s parts to %s.", job.job_id, total_parts, key)
        if await self._transfer_parts(job, session, 0, total_parts):
            await self.complete_upload(job.job_id, job.file_name)

    async def _run_resume(self, job: TransferJob) -> None:
        if not self._sessions.can_continue(job.job_id):
            return
        total_parts = self._chunk_reader.part_count(job.file)
        if not await self._connectivity.is_online():
            await self._notifier.network_unavailable()
            return

        await self._records.update_file_upload(
            job.job_id,
            FileUploadUpdate(status=UploadStatus.IN_PROGRESS, update_status=True),
        )
        session = UploadSession(key=job.key or "", upload_id=job.upload_id or "")
        if not self._sessions.open_session(job.job_id, session):
            logger.info("Job %s was cancelled before resuming.", job.job_id)
            return

        start_index = min(max(job.current_part_index, 0), total_parts)
        logger.info(
            "Job %s resuming at part %s of %s.", job.job_id, start_index + 1, total_parts
        )
        if await self._transfer_parts(job, session, start_index, total_parts):
            await self.complete_upload(job.job_id, job.file_name)

    async def _transfer_parts(
        self,
        job: TransferJob,
        session: UploadSession,
        start_index: int,
        total_parts: int,
    ) -> bool:
        """Send parts ``start_index..total_parts-1``; True when the job may complete."""

        for part_index in range(start_index, total_parts):
            if not await self._connectivity.is_online():
                await self._notifier.network_unavailable()
                return False
            if not self._sessions.can_continue(job.job_id):
                return False

            outcome = await self._part_transfer.transfer_part(
                job.file,
                part_index,
                total_parts,
                session.key,
                session.upload_id,
                job.job_id,
            )
            if outcome is PartOutcome.SUCCESS:
                job.current_part_index = part_index + 1
                continue
            if outcome is PartOutcome.OFFLINE:
                await self._notifier.network_unavailable()
                return False
            if self._sessions.can_continue(job.job_id):
                await self.cancel_with_error(
                    f"Part {part_index + 1} of {total_parts} was interrupted.", job.job_id
                )
            return False

        return self._sessions.can_continue(job.job_id)

    def _was_cancelled_while_completing(self, job_id: str) -> bool:
        """Keep a cancel that arrived during completion; drop the session only."""

        if self._sessions.can_continue(job_id):
            return False
        logger.info("Job %s was cancelled while completing; keeping the cancel.", job_id)
        self._sessions.close_session(job_id)
        return True

    async def _discard_session(self, job_id: str, session: UploadSession) -> None:
        """Release a session opened for a job that was cancelled meanwhile."""

        logger.info("Job %s was cancelled during initiation; releasing %s.", job_id, session.key)
        try:
            await self._records.abort_file_upload(
                job_id, UploadStatus.CANCEL, session, "Upload cancelled"
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Control plane cleanup for job %s failed: %s", job_id, exc)
        await self._abort_quietly(job_id, session)
        self._sessions.close_session(job_id)

    async def _abort_quietly(self, job_id: str, session: UploadSession) -> None:
        try:
            await self._object_store.abort(session)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Object store abort for job %s failed: %s", job_id, exc)

    async def _update_quietly(self, job_id: str, update: FileUploadUpdate) -> None:
        try:
            await self._records.update_file_upload(job_id, update)
        except UploadRecordError as exc:
            logger.warning("Record update for job %s failed: %s", job_id, exc)


__all__ = ["UploadOrchestrator"]
