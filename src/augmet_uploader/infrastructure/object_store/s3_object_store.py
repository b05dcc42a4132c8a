"""Object store gateway that signs S3 part URLs locally with boto3."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol, cast

from augmet_uploader.domain.entities import UploadSession
from augmet_uploader.domain.errors import (
    SignedUrlError,
    UploadCompletionError,
    UploadInitiationError,
)
from augmet_uploader.domain.ports import ObjectStoreGateway

logger = logging.getLogger(__name__)

_DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS = 3600


class S3Client(Protocol):
    """Subset of S3 client operations used by the object store gateway."""

    def create_multipart_upload(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        """Start multipart upload."""

    def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: dict[str, Any],
        ExpiresIn: int,
    ) -> str:
        """Sign a URL for one client method."""

    def list_parts(
        self,
        *,
        Bucket: str,
        Key: str,
        UploadId: str,
        PartNumberMarker: int = 0,
    ) -> dict[str, Any]:
        """List stored parts of a multipart upload."""

    def complete_multipart_upload(
        self,
        *,
        Bucket: str,
        Key: str,
        UploadId: str,
        MultipartUpload: dict[str, list[dict[str, str | int]]],
    ) -> dict[str, Any]:
        """Finalize multipart upload."""

    def abort_multipart_upload(self, *, Bucket: str, Key: str, UploadId: str) -> dict[str, Any]:
        """Abort multipart upload."""


class S3ObjectStore(ObjectStoreGateway):
    """Multipart protocol against one bucket.

    - `initiate` calls `create_multipart_upload`.
    - `part_url` presigns `upload_part` for the browser-style PUT.
    - `complete` lists stored parts to build the part manifest.
    - `abort` releases the session; failures are logged.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        presigned_url_expiry_seconds: int = _DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS,
        s3_client_factory: Callable[[str], S3Client] | None = None,
    ) -> None:
        self._bucket = bucket
        self._region = region
        self._expiry_seconds = max(1, presigned_url_expiry_seconds)
        self._s3_client_factory = s3_client_factory or self._build_default_s3_client
        self._client: S3Client | None = None

    async def initiate(self, key: str) -> str:
        client = self._get_client()
        try:
            response = await asyncio.to_thread(
                client.create_multipart_upload,
                Bucket=self._bucket,
                Key=key,
            )
        except Exception as exc:  # noqa: BLE001
            raise UploadInitiationError(f"Could not initiate upload for {key}: {exc}") from exc

        upload_id = response.get("UploadId")
        if not isinstance(upload_id, str) or not upload_id:
            raise UploadInitiationError(f"create_multipart_upload returned no UploadId for {key}")
        return upload_id

    async def part_url(self, key: str, upload_id: str, part_number: int) -> str:
        client = self._get_client()
        try:
            return await asyncio.to_thread(
                client.generate_presigned_url,
                "upload_part",
                {
                    "Bucket": self._bucket,
                    "Key": key,
                    "UploadId": upload_id,
                    "PartNumber": part_number,
                },
                self._expiry_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            raise SignedUrlError(
                f"Could not presign part {part_number} of {key}: {exc}"
            ) from exc

    async def complete(self, key: str, upload_id: str, job_id: str) -> None:
        client = self._get_client()
        try:
            parts = await self._list_parts(client, key, upload_id)
            if not parts:
                raise UploadCompletionError(f"No stored parts found for {key}")
            await asyncio.to_thread(
                client.complete_multipart_upload,
                Bucket=self._bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={"Parts": parts},
            )
        except UploadCompletionError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise UploadCompletionError(
                f"Could not complete upload of job {job_id} for {key}: {exc}"
            ) from exc

    async def abort(self, session: UploadSession) -> None:
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.abort_multipart_upload,
                Bucket=self._bucket,
                Key=session.key,
                UploadId=session.upload_id,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Abort of multipart upload %s failed: %s", session.key, exc)

    async def _list_parts(
        self, client: S3Client, key: str, upload_id: str
    ) -> list[dict[str, str | int]]:
        """Collect every stored part, following the list pagination marker."""

        parts: list[dict[str, str | int]] = []
        marker = 0
        while True:
            response = await asyncio.to_thread(
                client.list_parts,
                Bucket=self._bucket,
                Key=key,
                UploadId=upload_id,
                PartNumberMarker=marker,
            )
            for part in response.get("Parts", []):
                parts.append({"ETag": part["ETag"], "PartNumber": int(part["PartNumber"])})
            if not response.get("IsTruncated"):
                break
            marker = int(response.get("NextPartNumberMarker", 0))
        parts.sort(key=lambda item: int(item["PartNumber"]))
        return parts

    def _get_client(self) -> S3Client:
        if self._client is None:
            self._client = self._s3_client_factory(self._region)
        return self._client

    def _build_default_s3_client(self, region: str) -> S3Client:
        """Create a boto3 S3 client lazily to avoid import-time hard dependency."""

        try:
            import boto3  # type: ignore[import-not-found]
        except ModuleNotFoundError as exc:
            raise RuntimeError(
                "boto3 is required for the S3 object store. Install project dependencies first."
            ) from exc

        client = boto3.client("s3", region_name=region)
        return cast(S3Client, client)


__all__ = ["S3Client", "S3ObjectStore"]
