from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from augmet_uploader.domain.entities import UploadSession
from augmet_uploader.domain.errors import (
    SignedUrlError,
    UploadCompletionError,
    UploadInitiationError,
    UploadRecordError,
)
from augmet_uploader.domain.records import (
    FileUploadCreateRequest,
    FileUploadUpdate,
    PatientAssignment,
)
from augmet_uploader.domain.upload_types import UploadStatus
from augmet_uploader.infrastructure.control_plane import (
    ControlPlaneClient,
    ControlPlaneClientError,
)
from augmet_uploader.infrastructure.object_store import ControlPlaneObjectStore


def _client(
    requests: list[httpx.Request],
    payload: object = None,
    status_code: int = 200,
    api_key: str | None = "secret",
) -> ControlPlaneClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if payload is None:
            return httpx.Response(status_code=status_code)
        return httpx.Response(status_code=status_code, json=payload)

    return ControlPlaneClient(
        base_url="https://augmet.example.com/",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


def _query(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(urlsplit(str(request.url)).query)


def test_create_file_upload_posts_record_and_reads_envelope() -> None:
    requests: list[httpx.Request] = []
    client = _client(
        requests,
        {"success": True, "data": {"_id": "rec-1", "file_name": "s.bam"}, "message": "ok"},
    )

    record = asyncio.run(
        client.create_file_upload(
            FileUploadCreateRequest(
                file_name="s.bam",
                original_file_name="s.bam",
                local_file_path="/data/s.bam",
                org_id="org-1",
                file_type="bam",
                file_size=42,
            )
        )
    )

    assert record.id == "rec-1"
    [request] = requests
    assert request.method == "POST"
    assert str(request.url) == "https://augmet.example.com/api/v2/file-upload"
    assert request.headers["api-key"] == "secret"
    payload = json.loads(request.content.decode())
    assert payload["org_id"] == "org-1"
    assert payload["file_size"] == 42
    assert "patient_id" not in payload


def test_update_file_upload_uses_wire_field_names() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": None})

    asyncio.run(
        client.update_file_upload(
            "rec-1",
            FileUploadUpdate(file_progress="50.00%", tag="abc", current_index=2),
        )
    )

    [request] = requests
    assert request.method == "PUT"
    assert request.url.path == "/api/v2/file-upload/rec-1"
    assert json.loads(request.content.decode()) == {
        "file_progress": "50.00%",
        "tag": "abc",
        "currentIndex": 2,
    }


def test_client_omits_api_key_header_when_not_configured() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": None}, api_key=None)

    asyncio.run(client.cancel_file_upload("rec-1"))

    [request] = requests
    assert "api-key" not in request.headers
    assert request.url.path == "/api/v2/file-upload/rec-1/cancel"


def test_unsuccessful_envelope_raises_record_error() -> None:
    client = _client([], {"success": False, "message": "Record is locked"})

    with pytest.raises(ControlPlaneClientError, match="Record is locked") as exc_info:
        asyncio.run(client.retry_file_upload("rec-1"))

    assert isinstance(exc_info.value, UploadRecordError)


def test_http_error_status_includes_server_message() -> None:
    client = _client([], {"message": "Upload not found"}, status_code=404)

    with pytest.raises(ControlPlaneClientError, match="404 Upload not found"):
        asyncio.run(
            client.update_file_upload("rec-1", FileUploadUpdate(status=UploadStatus.ERROR))
        )


def test_transport_failure_raises_record_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ControlPlaneClient(
        base_url="https://augmet.example.com",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ControlPlaneClientError, match="connection refused"):
        asyncio.run(client.cancel_file_upload("rec-1"))


@pytest.mark.parametrize(
    "data",
    [None, {"file_name": "s.bam"}, {"_id": "rec-1", "upload_status": "PENDING"}],
)
def test_malformed_create_response_raises_record_error(data: object) -> None:
    client = _client([], {"success": True, "data": data})

    with pytest.raises(ControlPlaneClientError, match="unexpected payload") as exc_info:
        asyncio.run(
            client.create_file_upload(
                FileUploadCreateRequest(file_name="s.bam", original_file_name="s.bam", file_size=1)
            )
        )

    assert isinstance(exc_info.value, UploadRecordError)


def test_bulk_download_rejects_non_list_payload() -> None:
    client = _client([], {"success": True, "data": {"_id": "rec-1"}})

    with pytest.raises(ControlPlaneClientError, match="unexpected payload"):
        asyncio.run(client.bulk_download(["rec-1"]))

def test_empty_base_url_is_rejected() -> None:
    with pytest.raises(ControlPlaneClientError):
        ControlPlaneClient(base_url="  ")


def test_status_list_drops_unset_filters() -> None:
    requests: list[httpx.Request] = []
    client = _client(
        requests,
        {"success": True, "data": {"data": [{"_id": "rec-1", "actions": ["retry"]}], "total": 1}},
    )

    response = asyncio.run(client.get_status_list(limit=10, skip=0, search=None))

    assert response.total == 1
    assert response.data[0].actions == ["retry"]
    assert _query(requests[0]) == {"limit": ["10"], "skip": ["0"]}


def test_association_list_encodes_structured_params_without_envelope() -> None:
    requests: list[httpx.Request] = []
    client = _client(
        requests,
        {"data": [{"_id": "rec-1", "patient_assigned": True}], "draw": 2, "recordsTotal": 1},
    )

    response = asyncio.run(
        client.get_association_list({"draw": 2, "order": [{"column": 0, "dir": "asc"}]})
    )

    assert response.records_total == 1
    assert response.data[0].patient_assigned is True
    query = _query(requests[0])
    assert query["draw"] == ["2"]
    assert json.loads(query["order"][0]) == [{"column": 0, "dir": "asc"}]


def test_bulk_calls_send_id_lists() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": {"assigned_count": 2, "patient_id": "p"}})

    result = asyncio.run(
        client.bulk_assign_patient(["a", "b"], PatientAssignment(patient_id="p", visit_id="v"))
    )

    assert result.assigned_count == 2
    [request] = requests
    assert request.url.path == "/api/v2/file-upload/bulk-assign"
    assert json.loads(request.content.decode()) == {
        "ids": ["a", "b"],
        "patient_id": "p",
        "visit_id": "v",
    }


def test_initiate_multipart_upload_returns_upload_id() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": {"UploadId": "up-1", "Key": "k"}})

    upload_id = asyncio.run(client.initiate_multipart_upload("prefix/p_1/s.bam"))

    assert upload_id == "up-1"
    assert requests[0].url.path == "/api/file-upload/intiate-multipart-upload"
    assert _query(requests[0]) == {"key": ["prefix/p_1/s.bam"]}


def test_initiate_without_upload_id_raises() -> None:
    client = _client([], {"success": True, "data": {}})

    with pytest.raises(ControlPlaneClientError, match="no UploadId"):
        asyncio.run(client.initiate_multipart_upload("k"))


def test_generate_signed_url_sends_part_number() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": "https://bucket.example.com/k?sig=1"})

    url = asyncio.run(client.generate_signed_url("k", "up-1", 3))

    assert url == "https://bucket.example.com/k?sig=1"
    assert _query(requests[0]) == {"key": ["k"], "uploadId": ["up-1"], "PartNumber": ["3"]}


def test_abort_file_upload_sends_status_session_and_message() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": None})

    asyncio.run(
        client.abort_file_upload(
            "rec-1",
            UploadStatus.COMPLETED_WITH_ERROR,
            UploadSession(key="k", upload_id="up-1"),
            "part mismatch",
        )
    )

    [request] = requests
    assert request.url.path == "/api/file-upload/cancel-delete/rec-1"
    assert json.loads(request.content.decode()) == {
        "status": "COMPLETED_WITH_ERROR",
        "key": "k",
        "uploadId": "up-1",
        "errorMessage": "part mismatch",
    }


def test_cancel_all_sends_ids_and_key_objects() -> None:
    requests: list[httpx.Request] = []
    client = _client(requests, {"success": True, "data": None})

    asyncio.run(
        client.cancel_all(
            ["rec-1", "rec-2"],
            {"rec-1": UploadSession(key="k1", upload_id="up-1")},
        )
    )

    assert json.loads(requests[0].content.decode()) == {
        "ids": ["rec-1", "rec-2"],
        "keyObj": {"rec-1": {"key": "k1", "uploadId": "up-1"}},
    }


def test_control_plane_object_store_maps_client_errors() -> None:
    store = ControlPlaneObjectStore(_client([], {"success": False, "message": "denied"}))

    with pytest.raises(UploadInitiationError, match="denied"):
        asyncio.run(store.initiate("k"))
    with pytest.raises(SignedUrlError, match="part 2"):
        asyncio.run(store.part_url("k", "up-1", 2))
    with pytest.raises(UploadCompletionError):
        asyncio.run(store.complete("k", "up-1", "rec-1"))


def test_control_plane_object_store_completes_through_client() -> None:
    requests: list[httpx.Request] = []
    store = ControlPlaneObjectStore(_client(requests, {"success": True, "data": None}))

    asyncio.run(store.complete("k", "up-1", "rec-1"))
    asyncio.run(store.abort(UploadSession(key="k", upload_id="up-1")))

    [request] = requests
    assert request.url.path == "/api/file-upload/complete-signed-upload"
    assert json.loads(request.content.decode()) == {
        "key": "k",
        "uploadId": "up-1",
        "fileUploadId": "rec-1",
    }
