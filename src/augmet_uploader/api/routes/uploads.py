"""Local routes the host shell uses to drive uploads."""

from __future__ import annotations

from pathlib import Path as FilePath
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from augmet_uploader.api.dependencies import get_upload_orchestrator
from augmet_uploader.application.services import UploadOrchestrator
from augmet_uploader.domain.api_models import (
    ActiveUploadsResponse,
    CancelUploadRequest,
    CancelUploadResponse,
    QueueFailureItem,
    QueueFilesRequest,
    QueueFilesResponse,
    ResumeUploadRequest,
    ResumeUploadResponse,
)
from augmet_uploader.domain.entities import FileToUpload, ResumeUploadInfo
from augmet_uploader.domain.errors import LocalFileNotFoundError, UploadError, UploadRecordError
from augmet_uploader.domain.file_naming import sanitize_file_name

router = APIRouter(prefix="/uploads", tags=["uploads"])


def _raise_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, LocalFileNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UploadRecordError):
        raise HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, UploadError):
        raise HTTPException(status_code=400, detail=str(exc))
    raise HTTPException(status_code=500, detail="Unexpected upload error")


def _active_uploads(orchestrator: UploadOrchestrator) -> ActiveUploadsResponse:
    return ActiveUploadsResponse(
        has_active_uploads=orchestrator.has_active_uploads(),
        draining=orchestrator.is_draining,
        queued=[job.job_id for job in orchestrator.queue.to_list()],
        uploading=orchestrator.uploading_flags(),
    )


@router.post("", response_model=QueueFilesResponse, status_code=202)
async def queue_files(
    body: QueueFilesRequest,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> QueueFilesResponse:
    """Register local files with the control plane and queue them."""

    files = [
        FileToUpload(
            path=FilePath(item.path),
            file_name=item.file_name or sanitize_file_name(FilePath(item.path).name),
            original_file_name=item.original_file_name,
            file_type=item.file_type,
            patient_id=item.patient_id,
            visit_id=item.visit_id,
            sample_id=item.sample_id,
            content_type=item.content_type,
        )
        for item in body.files
    ]
    try:
        result = await orchestrator.add_files_to_queue(files)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)
    return QueueFilesResponse(
        queued=result.queued,
        failed=[
            QueueFailureItem(file_name=failure.file_name, message=failure.message)
            for failure in result.failed
        ],
    )


@router.post("/{id}/resume", response_model=ResumeUploadResponse, status_code=202)
async def resume_upload(
    body: ResumeUploadRequest,
    id: str = Path(...),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> ResumeUploadResponse:
    """Queue an interrupted upload at its last confirmed part."""

    try:
        job = await orchestrator.resume_upload(
            ResumeUploadInfo(
                job_id=id,
                file_name=body.file_name,
                file_path=FilePath(body.file_path),
                key=body.key,
                upload_id=body.upload_id,
                current_part_index=body.current_part_index,
                content_type=body.content_type,
            )
        )
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)
    return ResumeUploadResponse(job_id=job.job_id, current_part_index=job.current_part_index)


@router.post("/{id}/cancel", response_model=CancelUploadResponse, status_code=200)
async def cancel_upload(
    id: str = Path(...),
    body: CancelUploadRequest | None = Body(default=None),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> CancelUploadResponse:
    """Cancel a queued or running upload."""

    current_status = None if body is None else body.status
    try:
        removed = await orchestrator.cancel_upload(id, current_status)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)
    return CancelUploadResponse(job_id=id, removed_from_queue=removed)


@router.get("/active", response_model=ActiveUploadsResponse, status_code=200)
async def active_uploads(
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> ActiveUploadsResponse:
    """Report whether exiting now would interrupt an upload."""

    return _active_uploads(orchestrator)


@router.post("/shutdown", response_model=ActiveUploadsResponse, status_code=200)
async def shutdown_uploads(
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> ActiveUploadsResponse:
    """Cancel everything before the host exits."""

    try:
        await orchestrator.shutdown()
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)
    return _active_uploads(orchestrator)


__all__ = ["router"]
