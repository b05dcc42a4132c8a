"""Control-plane record views and bulk actions exposed to the host UI."""

from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request

from augmet_uploader.api.dependencies import get_upload_orchestrator
from augmet_uploader.application.services import UploadOrchestrator
from augmet_uploader.domain.api_models import BulkAssignRequest, BulkIdsRequest
from augmet_uploader.domain.errors import UploadRecordError
from augmet_uploader.domain.records import (
    AssignListResponse,
    AssociationListResponse,
    BulkAssignResult,
    BulkDeleteResult,
    BulkDownloadItem,
    FileUploadRecord,
    PatientAssignment,
    StatusListResponse,
)

router = APIRouter(prefix="/uploads", tags=["upload records"])


def _raise_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, UploadRecordError):
        raise HTTPException(status_code=502, detail=str(exc))
    raise HTTPException(status_code=500, detail="Unexpected upload record error")


@router.get("/status", response_model=StatusListResponse, status_code=200)
async def list_upload_status(
    search: str | None = Query(default=None),
    file_type: str | None = Query(default=None),
    status: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    skip: int | None = Query(default=None, ge=0),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> StatusListResponse:
    """Page through upload records with their status view fields."""

    try:
        return await orchestrator.get_status_list(
            search=search, file_type=file_type, status=status, limit=limit, skip=skip
        )
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.get("/assign", response_model=AssignListResponse, status_code=200)
async def list_unassigned_uploads(
    search: str | None = Query(default=None),
    file_type: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    skip: int | None = Query(default=None, ge=0),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> AssignListResponse:
    """Page through uploads that still need a patient."""

    try:
        return await orchestrator.get_assign_list(
            search=search, file_type=file_type, limit=limit, skip=skip
        )
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.get("/association", response_model=AssociationListResponse, status_code=200)
async def list_associations(
    request: Request,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> AssociationListResponse:
    """Forward a DataTables query for the patient association view."""

    try:
        return await orchestrator.get_association_list(dict(request.query_params))
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post("/bulk-download", response_model=list[BulkDownloadItem], status_code=200)
async def bulk_download(
    body: BulkIdsRequest,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> list[BulkDownloadItem]:
    """Return download links for completed uploads."""

    try:
        return await orchestrator.bulk_download(body.ids)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post("/bulk-delete", response_model=BulkDeleteResult, status_code=200)
async def bulk_delete(
    body: BulkIdsRequest,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> BulkDeleteResult:
    try:
        return await orchestrator.bulk_delete(body.ids)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post("/bulk-assign", response_model=BulkAssignResult, status_code=200)
async def bulk_assign_patient(
    body: BulkAssignRequest,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> BulkAssignResult:
    """Link several uploads to one patient."""

    assignment = PatientAssignment(
        patient_id=body.patient_id, visit_id=body.visit_id, sample_id=body.sample_id
    )
    try:
        return await orchestrator.bulk_assign_patient(body.ids, assignment)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post("/{id}/retry", response_model=FileUploadRecord, status_code=200)
async def retry_upload(
    id: str = Path(...),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> FileUploadRecord:
    """Ask the control plane to retry a failed upload record."""

    try:
        return await orchestrator.retry_upload(id)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.post("/{id}/assign", response_model=FileUploadRecord, status_code=200)
async def assign_patient(
    body: PatientAssignment,
    id: str = Path(...),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> FileUploadRecord:
    """Link one upload to a patient."""

    try:
        return await orchestrator.assign_patient(id, body)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


__all__ = ["router"]
