"""Ports for the control plane, object store, byte transport and host notifications."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from augmet_uploader.domain.entities import UploadSession
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
from augmet_uploader.domain.upload_types import UploadStatus


class FileUploadRecords(Protocol):
    """Metadata/control-plane service owning the durable upload records."""

    async def create_file_upload(self, request: FileUploadCreateRequest) -> FileUploadRecord:
        """Create a record and return it with its server-issued id."""

    async def update_file_upload(self, job_id: str, update: FileUploadUpdate) -> None:
        """Update status, progress, receipt or session fields."""

    async def cancel_file_upload(self, job_id: str) -> None:
        """Mark a record cancelled."""

    async def abort_file_upload(
        self,
        job_id: str,
        status: UploadStatus,
        session: UploadSession | None,
        error_message: str | None = None,
    ) -> None:
        """Abort/delete a record and its remote session, storing the error."""

    async def cancel_all(
        self,
        job_ids: Sequence[str],
        sessions: Mapping[str, UploadSession],
    ) -> None:
        """Cancel every listed record in one call."""

    async def retry_file_upload(self, job_id: str) -> FileUploadRecord:
        """Re-arm a failed or stalled record."""

    async def get_status_list(self, **params: Any) -> StatusListResponse:
        """Return the filtered, sorted, paged status list."""

    async def bulk_download(self, job_ids: Sequence[str]) -> list[BulkDownloadItem]:
        """Issue download URLs for several records."""

    async def bulk_delete(self, job_ids: Sequence[str]) -> BulkDeleteResult:
        """Delete several records."""

    async def get_assign_list(self, **params: Any) -> AssignListResponse:
        """Return completed uploads without a patient."""

    async def assign_patient(
        self, job_id: str, assignment: PatientAssignment
    ) -> FileUploadRecord:
        """Associate one record with a patient."""

    async def bulk_assign_patient(
        self, job_ids: Sequence[str], assignment: PatientAssignment
    ) -> BulkAssignResult:
        """Associate several records with a patient."""

    async def get_association_list(self, params: Mapping[str, Any]) -> AssociationListResponse:
        """Return the association list in DataTables format."""


class ObjectStoreGateway(Protocol):
    """Multipart-upload protocol of the remote object store."""

    async def initiate(self, key: str) -> str:
        """Open a multipart session and return its upload id."""

    async def part_url(self, key: str, upload_id: str, part_number: int) -> str:
        """Return a short-lived signed URL for one 1-based part number."""

    async def complete(self, key: str, upload_id: str, job_id: str) -> None:
        """Finalize the multipart session."""

    async def abort(self, session: UploadSession) -> None:
        """Release a multipart session that will never complete."""


class ChunkTransport(Protocol):
    """Byte transfer to a signed URL."""

    async def put_chunk(self, url: str, data: bytes, content_type: str) -> Mapping[str, str]:
        """Upload bytes and return the response headers."""


class ConnectivityProbe(Protocol):
    """Answers whether a network attempt is worth making right now."""

    async def is_online(self) -> bool:
        """Return False when the machine is offline."""


class UploadNotifier(Protocol):
    """Host-side notifications and error dialogs."""

    async def upload_completed(self, file_name: str) -> None:
        """Tell the user a file finished uploading."""

    async def upload_failed(self, file_name: str) -> None:
        """Tell the user a file failed to finalize."""

    async def network_unavailable(self) -> None:
        """Tell the user to reconnect before the upload can continue."""

    async def error(self, title: str, message: str) -> None:
        """Show an error the user has to acknowledge."""


__all__ = [
    "ChunkTransport",
    "ConnectivityProbe",
    "FileUploadRecords",
    "ObjectStoreGateway",
    "UploadNotifier",
]
