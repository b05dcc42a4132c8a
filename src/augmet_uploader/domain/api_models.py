"""Request and response models of the local host API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from augmet_uploader.domain.upload_types import UploadStatus


class ApiModel(BaseModel):
    """Base model for local API payloads."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class UploadFileRequest(ApiModel):
    """One local file to register and queue."""

    path: str
    file_name: str | None = None
    original_file_name: str | None = None
    file_type: str | None = None
    patient_id: str | None = None
    visit_id: str | None = None
    sample_id: str | None = None
    content_type: str = "application/octet-stream"


class QueueFilesRequest(ApiModel):
    """Batch of files to queue, processed in order."""

    files: list[UploadFileRequest] = Field(min_length=1)


class QueueFailureItem(ApiModel):
    """File that could not be registered."""

    file_name: str
    message: str


class QueueFilesResponse(ApiModel):
    """Job ids queued and files rejected by one call."""

    queued: list[str] = Field(default_factory=list)
    failed: list[QueueFailureItem] = Field(default_factory=list)


class ResumeUploadRequest(ApiModel):
    """Resume descriptor as stored on the control-plane record."""

    file_name: str
    file_path: str
    key: str
    upload_id: str
    current_part_index: int = Field(default=0, ge=0)
    content_type: str = "application/octet-stream"


class ResumeUploadResponse(ApiModel):
    """Job re-queued for resume."""

    job_id: str
    current_part_index: int
    status: UploadStatus = UploadStatus.QUEUED


class CancelUploadRequest(ApiModel):
    """Status the caller last saw for the job; informational only."""

    status: str | None = None


class CancelUploadResponse(ApiModel):
    """Result of a cancel request."""

    job_id: str
    removed_from_queue: int
    status: UploadStatus = UploadStatus.CANCEL


class BulkIdsRequest(ApiModel):
    """Record ids for a bulk download or delete."""

    ids: list[str] = Field(min_length=1)


class BulkAssignRequest(BulkIdsRequest):
    """Record ids and the patient they should be linked to."""

    patient_id: str = Field(min_length=1)
    visit_id: str | None = None
    sample_id: str | None = None


class ActiveUploadsResponse(ApiModel):
    """Exit check view for the host process."""

    has_active_uploads: bool
    draining: bool
    queued: list[str] = Field(default_factory=list)
    uploading: dict[str, bool] = Field(default_factory=dict)


__all__ = [
    "ActiveUploadsResponse",
    "ApiModel",
    "BulkAssignRequest",
    "BulkIdsRequest",
    "CancelUploadRequest",
    "CancelUploadResponse",
    "QueueFailureItem",
    "QueueFilesRequest",
    "QueueFilesResponse",
    "ResumeUploadRequest",
    "ResumeUploadResponse",
    "UploadFileRequest",
]
