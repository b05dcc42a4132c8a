"""HTTP client for the file upload control plane."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from augmet_uploader.domain.entities import UploadSession
from augmet_uploader.domain.errors import UploadRecordError
from augmet_uploader.domain.ports import FileUploadRecords
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
    RecordModel,
    StatusListResponse,
)
from augmet_uploader.domain.upload_types import UploadStatus

_RECORDS_PATH = "/api/v2/file-upload"
_MULTIPART_PATH = "/api/file-upload"

ModelT = TypeVar("ModelT", bound=RecordModel)


class ControlPlaneClientError(UploadRecordError):
    """Raised when control-plane calls fail."""


class ControlPlaneClient(FileUploadRecords):
    """Wrapper around the file upload record and multipart endpoints.

    Every response is expected in the ``{"success", "data", "message"}``
    envelope; ``success: false`` is treated like an HTTP error.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = self._normalize_base_url(base_url)
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def create_file_upload(self, request: FileUploadCreateRequest) -> FileUploadRecord:
        """Call `POST /api/v2/file-upload`."""

        data = await self._request("POST", _RECORDS_PATH, json_body=_dump(request))
        return _parse(FileUploadRecord, data, "Create file upload")

    async def update_file_upload(self, job_id: str, update: FileUploadUpdate) -> None:
        """Call `PUT /api/v2/file-upload/{id}`."""

        await self._request("PUT", self._record_path(job_id), json_body=_dump(update))

    async def cancel_file_upload(self, job_id: str) -> None:
        """Call `POST /api/v2/file-upload/{id}/cancel`."""

        await self._request("POST", self._record_path(job_id, "cancel"))

    async def retry_file_upload(self, job_id: str) -> FileUploadRecord:
        """Call `POST /api/v2/file-upload/{id}/retry`."""

        data = await self._request("POST", self._record_path(job_id, "retry"))
        return _parse(FileUploadRecord, data, f"Retry of {job_id}")

    async def get_status_list(self, **params: Any) -> StatusListResponse:
        """Call `GET /api/v2/file-upload/status`."""

        data = await self._request("GET", f"{_RECORDS_PATH}/status", params=params)
        return _parse(StatusListResponse, data, "Status list")

    async def bulk_download(self, job_ids: Sequence[str]) -> list[BulkDownloadItem]:
        """Call `POST /api/v2/file-upload/bulk-download`."""

        data = await self._request(
            "POST", f"{_RECORDS_PATH}/bulk-download", json_body={"ids": list(job_ids)}
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise ControlPlaneClientError("Bulk download returned an unexpected payload.")
        return [_parse(BulkDownloadItem, item, "Bulk download") for item in data]

    async def bulk_delete(self, job_ids: Sequence[str]) -> BulkDeleteResult:
        """Call `POST /api/v2/file-upload/bulk-delete`."""

        data = await self._request(
            "POST", f"{_RECORDS_PATH}/bulk-delete", json_body={"ids": list(job_ids)}
        )
        return _parse(BulkDeleteResult, data, "Bulk delete")

    async def get_assign_list(self, **params: Any) -> AssignListResponse:
        """Call `GET /api/v2/file-upload/assign`."""

        data = await self._request("GET", f"{_RECORDS_PATH}/assign", params=params)
        return _parse(AssignListResponse, data, "Assign list")

    async def assign_patient(
        self, job_id: str, assignment: PatientAssignment
    ) -> FileUploadRecord:
        """Call `POST /api/v2/file-upload/{id}/assign`."""

        data = await self._request(
            "POST", self._record_path(job_id, "assign"), json_body=_dump(assignment)
        )
        return _parse(FileUploadRecord, data, f"Assignment of {job_id}")

    async def bulk_assign_patient(
        self, job_ids: Sequence[str], assignment: PatientAssignment
    ) -> BulkAssignResult:
        """Call `POST /api/v2/file-upload/bulk-assign`."""

        body = {"ids": list(job_ids), **_dump(assignment)}
        data = await self._request("POST", f"{_RECORDS_PATH}/bulk-assign", json_body=body)
        return _parse(BulkAssignResult, data, "Bulk assign")

    async def get_association_list(self, params: Mapping[str, Any]) -> AssociationListResponse:
        """Call `GET /api/v2/file-upload/association` (DataTables body, no envelope)."""

        query = {
            name: json.dumps(value) if isinstance(value, Mapping | list) else value
            for name, value in params.items()
        }
        data = await self._request(
            "GET", f"{_RECORDS_PATH}/association", params=query, envelope=False
        )
        return _parse(AssociationListResponse, data, "Association list")

    async def initiate_multipart_upload(self, key: str) -> str:
        """Call `GET /api/file-upload/intiate-multipart-upload` and return the upload id."""

        data = await self._request(
            "GET", f"{_MULTIPART_PATH}/intiate-multipart-upload", params={"key": key}
        )
        upload_id = data.get("UploadId") if isinstance(data, dict) else None
        if not isinstance(upload_id, str) or not upload_id:
            raise ControlPlaneClientError(
                f"Initiate multipart upload for {key} returned no UploadId."
            )
        return upload_id

    async def generate_signed_url(self, key: str, upload_id: str, part_number: int) -> str:
        """Call `GET /api/file-upload/genrate-signed-urls` for one part."""

        data = await self._request(
            "GET",
            f"{_MULTIPART_PATH}/genrate-signed-urls",
            params={"key": key, "uploadId": upload_id, "PartNumber": part_number},
        )
        if not isinstance(data, str) or not data:
            raise ControlPlaneClientError(
                f"Signed URL request for part {part_number} of {key} returned no URL."
            )
        return data

    async def complete_signed_upload(self, key: str, upload_id: str, job_id: str) -> None:
        """Call `POST /api/file-upload/complete-signed-upload`."""

        await self._request(
            "POST",
            f"{_MULTIPART_PATH}/complete-signed-upload",
            json_body={"key": key, "uploadId": upload_id, "fileUploadId": job_id},
        )

    async def abort_file_upload(
        self,
        job_id: str,
        status: UploadStatus,
        session: UploadSession | None,
        error_message: str | None = None,
    ) -> None:
        """Call `POST /api/file-upload/cancel-delete/{id}`."""

        job_id_path = quote(job_id, safe="")
        await self._request(
            "POST",
            f"{_MULTIPART_PATH}/cancel-delete/{job_id_path}",
            json_body={
                "status": str(status),
                "key": None if session is None else session.key,
                "uploadId": None if session is None else session.upload_id,
                "errorMessage": error_message,
            },
        )

    async def cancel_all(
        self,
        job_ids: Sequence[str],
        sessions: Mapping[str, UploadSession],
    ) -> None:
        """Call `POST /api/file-upload/cancel-all`."""

        await self._request(
            "POST",
            f"{_MULTIPART_PATH}/cancel-all",
            json_body={
                "ids": list(job_ids),
                "keyObj": {
                    job_id: session.as_key_obj() for job_id, session in sessions.items()
                },
            },
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        envelope: bool = True,
    ) -> Any:
        url = self._endpoint(path)
        query = None
        if params is not None:
            query = {name: value for name, value in params.items() if value is not None}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
                headers=self._headers(),
            ) as http_client:
                response = await http_client.request(method, url, params=query, json=json_body)
        except httpx.HTTPError as exc:
            raise ControlPlaneClientError(f"{method} {url} failed: {exc}") from exc
        self._ensure_success(response)
        if not envelope:
            return self._json_body(response)
        return self._unwrap(response)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["api-key"] = self._api_key
        return headers

    def _record_path(self, job_id: str, action: str | None = None) -> str:
        job_id_path = quote(job_id, safe="")
        if action is None:
            return f"{_RECORDS_PATH}/{job_id_path}"
        return f"{_RECORDS_PATH}/{job_id_path}/{action}"

    def _endpoint(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _unwrap(self, response: httpx.Response) -> Any:
        payload = self._json_body(response)
        if not isinstance(payload, dict):
            return payload
        if payload.get("success") is False:
            message = payload.get("message") or "<no message>"
            raise ControlPlaneClientError(
                f"{response.request.method} {response.request.url} failed: {message}"
            )
        return payload.get("data")

    def _json_body(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ControlPlaneClientError(
                f"{response.request.method} {response.request.url} returned invalid JSON."
            ) from exc

    def _ensure_success(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        message = self._detail_from_response(response)
        raise ControlPlaneClientError(
            f"{response.request.method} {response.request.url} failed: "
            f"{response.status_code} {message}"
        )

    def _detail_from_response(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            text = response.text.strip()
            return text or "<no response body>"

        if isinstance(payload, dict):
            for field_name in ("message", "detail"):
                detail = payload.get(field_name)
                if isinstance(detail, str):
                    return detail
        return str(payload)

    def _normalize_base_url(self, base_url: str) -> str:
        normalized = base_url.strip().rstrip("/")
        if not normalized:
            raise ControlPlaneClientError("Control plane endpoint cannot be empty.")
        return normalized


def _dump(model: RecordModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _parse(model: type[ModelT], data: Any, operation: str) -> ModelT:
    """Validate a response payload; schema drift surfaces as a client error."""

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ControlPlaneClientError(
            f"{operation} returned an unexpected payload: {exc.error_count()} invalid field(s)."
        ) from exc


__all__ = ["ControlPlaneClient", "ControlPlaneClientError"]
