"""Pydantic models mapped from control-plane file upload payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from augmet_uploader.domain.upload_types import UploadStatus


class RecordModel(BaseModel):
    """Base model for control-plane payloads; unknown server fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FileUploadCreateRequest(RecordModel):
    """Body of the create-record call made when a file is queued."""

    file_name: str
    original_file_name: str
    local_file_path: str = ""
    org_id: str = ""
    patient_id: str | None = None
    visit_id: str | None = None
    sample_id: str | None = None
    file_type: str | None = None
    file_size: int


class FileUploadUpdate(RecordModel):
    """Partial update of a file upload record."""

    status: UploadStatus | None = None
    file_progress: str | None = None
    tag: str | None = None
    current_index: int | None = Field(default=None, alias="currentIndex")
    update_status: bool | None = Field(default=None, alias="updateStatus")
    aws_upload_id: str | None = None
    aws_key: str | None = None
    remote_file_path: str | None = None


class FileUploadRecord(RecordModel):
    """File upload record as returned by the control plane."""

    id: str = Field(alias="_id")
    file_name: str | None = None
    original_file_name: str | None = None
    upload_status: UploadStatus | None = None
    file_progress: str | None = None
    file_type: str | None = None
    file_size: int | str | None = None
    aws_key: str | None = None
    aws_upload_id: str | None = None
    local_file_path: str | None = None
    current_part_index: int | None = Field(default=None, alias="currentPartIndex")
    patient_id: str | None = None
    visit_id: str | None = None
    sample_id: str | None = None
    created_at: str | None = None
    upload_completed_at: str | None = None
    download_url: str | None = None


class StatusListItem(FileUploadRecord):
    """Row of the status view, with the actions the server allows."""

    file_size_display: str | None = None
    actions: list[str] = Field(default_factory=list)
    status_color: str | None = None


class StatusListResponse(RecordModel):
    """Paged status list."""

    data: list[StatusListItem] = Field(default_factory=list)
    total: int = 0
    limit: int = 0
    skip: int = 0


class AssignListResponse(RecordModel):
    """Completed uploads that still have no patient association."""

    data: list[FileUploadRecord] = Field(default_factory=list)
    total: int = 0
    limit: int = 0
    skip: int = 0


class AssociationListItem(FileUploadRecord):
    """Upload joined with its patient association."""

    patient_mrn: str | None = None
    patient_name: str | None = None
    patient_assigned: bool = False


class AssociationListResponse(RecordModel):
    """DataTables-style association list."""

    data: list[AssociationListItem] = Field(default_factory=list)
    draw: str | int | None = None
    records_total: int = Field(default=0, alias="recordsTotal")
    records_filtered: int = Field(default=0, alias="recordsFiltered")


class PatientAssignment(RecordModel):
    """Deferred patient/visit/sample association for uploaded files."""

    patient_id: str
    visit_id: str | None = None
    sample_id: str | None = None


class BulkAssignResult(RecordModel):
    """Result of a bulk patient assignment."""

    assigned_count: int
    patient_id: str
    visit_id: str | None = None
    sample_id: str | None = None


class BulkDownloadItem(RecordModel):
    """Download URL (or per-file error) issued for one record."""

    id: str = Field(alias="_id")
    file_name: str | None = None
    download_url: str | None = None
    error: str | None = None


class BulkDeleteResult(RecordModel):
    """Result of a bulk delete."""

    deleted_count: int


__all__ = [
    "AssignListResponse",
    "AssociationListItem",
    "AssociationListResponse",
    "BulkAssignResult",
    "BulkDeleteResult",
    "BulkDownloadItem",
    "FileUploadCreateRequest",
    "FileUploadRecord",
    "FileUploadUpdate",
    "PatientAssignment",
    "RecordModel",
    "StatusListItem",
    "StatusListResponse",
]
