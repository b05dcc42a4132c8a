from __future__ import annotations

import asyncio
from typing import Any

import pytest

from augmet_uploader.domain.entities import UploadSession
from augmet_uploader.domain.errors import UploadCompletionError, UploadInitiationError
from augmet_uploader.infrastructure.object_store import S3ObjectStore


class FakeS3Client:
    """Fake S3 client that serves stored parts in pages."""

    def __init__(self, stored_parts: list[int] | None = None, page_size: int = 2) -> None:
        self.stored_parts = stored_parts or []
        self.page_size = page_size
        self.created: list[tuple[str, str]] = []
        self.presigned: list[tuple[str, dict[str, Any], int]] = []
        self.list_markers: list[int] = []
        self.completed: list[dict[str, Any]] = []
        self.aborted: list[tuple[str, str, str]] = []
        self.fail_abort = False

    def create_multipart_upload(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        self.created.append((Bucket, Key))
        return {"UploadId": "upload-1", "Bucket": Bucket, "Key": Key}

    def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: dict[str, Any],
        ExpiresIn: int,
    ) -> str:
        self.presigned.append((ClientMethod, Params, ExpiresIn))
        host = f"{Params['Bucket']}.s3.example.com"
        return f"https://{host}/{Params['Key']}?part={Params['PartNumber']}"

    def list_parts(
        self,
        *,
        Bucket: str,
        Key: str,
        UploadId: str,
        PartNumberMarker: int = 0,
    ) -> dict[str, Any]:
        self.list_markers.append(PartNumberMarker)
        remaining = sorted(number for number in self.stored_parts if number > PartNumberMarker)
        page = remaining[: self.page_size]
        truncated = len(remaining) > self.page_size
        return {
            "Parts": [{"PartNumber": number, "ETag": f'"etag-{number}"'} for number in page],
            "IsTruncated": truncated,
            "NextPartNumberMarker": page[-1] if truncated else 0,
        }

    def complete_multipart_upload(
        self,
        *,
        Bucket: str,
        Key: str,
        UploadId: str,
        MultipartUpload: dict[str, list[dict[str, str | int]]],
    ) -> dict[str, Any]:
        self.completed.append(
            {"Bucket": Bucket, "Key": Key, "UploadId": UploadId, **MultipartUpload}
        )
        return {}

    def abort_multipart_upload(self, *, Bucket: str, Key: str, UploadId: str) -> dict[str, Any]:
        if self.fail_abort:
            raise RuntimeError("NoSuchUpload")
        self.aborted.append((Bucket, Key, UploadId))
        return {}


def _store(client: FakeS3Client, expiry: int = 900) -> S3ObjectStore:
    return S3ObjectStore(
        bucket="augmet-bucket",
        region="eu-west-1",
        presigned_url_expiry_seconds=expiry,
        s3_client_factory=lambda _region: client,
    )


def test_initiate_creates_multipart_upload() -> None:
    client = FakeS3Client()

    upload_id = asyncio.run(_store(client).initiate("prefix/p_1/s.bam"))

    assert upload_id == "upload-1"
    assert client.created == [("augmet-bucket", "prefix/p_1/s.bam")]


def test_initiate_failure_raises_initiation_error() -> None:
    class BrokenClient(FakeS3Client):
        def create_multipart_upload(self, *, Bucket: str, Key: str) -> dict[str, Any]:
            raise RuntimeError("AccessDenied")

    with pytest.raises(UploadInitiationError, match="AccessDenied"):
        asyncio.run(_store(BrokenClient()).initiate("k"))


def test_part_url_presigns_upload_part() -> None:
    client = FakeS3Client()

    url = asyncio.run(_store(client).part_url("k", "upload-1", 4))

    assert url.endswith("?part=4")
    [(method, params, expiry)] = client.presigned
    assert method == "upload_part"
    assert params == {
        "Bucket": "augmet-bucket",
        "Key": "k",
        "UploadId": "upload-1",
        "PartNumber": 4,
    }
    assert expiry == 900


def test_complete_lists_all_pages_and_sorts_parts() -> None:
    client = FakeS3Client(stored_parts=[3, 1, 5, 2, 4])

    asyncio.run(_store(client).complete("k", "upload-1", "job-1"))

    assert client.list_markers == [0, 2, 4]
    [completed] = client.completed
    assert [part["PartNumber"] for part in completed["Parts"]] == [1, 2, 3, 4, 5]
    assert completed["Parts"][0]["ETag"] == '"etag-1"'


def test_complete_without_parts_raises() -> None:
    client = FakeS3Client()

    with pytest.raises(UploadCompletionError, match="No stored parts"):
        asyncio.run(_store(client).complete("k", "upload-1", "job-1"))

    assert client.completed == []


def test_abort_failure_is_logged_not_raised() -> None:
    client = FakeS3Client()
    store = _store(client)
    session = UploadSession(key="k", upload_id="upload-1")

    asyncio.run(store.abort(session))
    client.fail_abort = True
    asyncio.run(store.abort(session))

    assert client.aborted == [("augmet-bucket", "k", "upload-1")]


def test_client_is_built_once_per_store() -> None:
    client = FakeS3Client(stored_parts=[1])
    regions: list[str] = []

    def factory(region: str) -> FakeS3Client:
        regions.append(region)
        return client

    store = S3ObjectStore(bucket="augmet-bucket", region="eu-west-1", s3_client_factory=factory)
    asyncio.run(store.initiate("k"))
    asyncio.run(store.complete("k", "upload-1", "job-1"))

    assert regions == ["eu-west-1"]
