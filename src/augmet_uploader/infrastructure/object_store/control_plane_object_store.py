"""Object store gateway backed by the control plane's signed-URL endpoints."""

from __future__ import annotations

import logging

from augmet_uploader.domain.entities import UploadSession
from augmet_uploader.domain.errors import (
    SignedUrlError,
    UploadCompletionError,
    UploadInitiationError,
)
from augmet_uploader.domain.ports import ObjectStoreGateway
from augmet_uploader.infrastructure.control_plane.client import (
    ControlPlaneClient,
    ControlPlaneClientError,
)

logger = logging.getLogger(__name__)


class ControlPlaneObjectStore(ObjectStoreGateway):
    """Multipart protocol where the backend talks to the bucket and signs part URLs."""

    def __init__(self, client: ControlPlaneClient) -> None:
        self._client = client

    async def initiate(self, key: str) -> str:
        try:
            return await self._client.initiate_multipart_upload(key)
        except ControlPlaneClientError as exc:
            raise UploadInitiationError(f"Could not initiate upload for {key}: {exc}") from exc

    async def part_url(self, key: str, upload_id: str, part_number: int) -> str:
        try:
            return await self._client.generate_signed_url(key, upload_id, part_number)
        except ControlPlaneClientError as exc:
            raise SignedUrlError(
                f"Could not get a signed URL for part {part_number} of {key}: {exc}"
            ) from exc

    async def complete(self, key: str, upload_id: str, job_id: str) -> None:
        try:
            await self._client.complete_signed_upload(key, upload_id, job_id)
        except ControlPlaneClientError as exc:
            raise UploadCompletionError(f"Could not complete upload for {key}: {exc}") from exc

    async def abort(self, session: UploadSession) -> None:
        """No-op: the backend aborts the session when the record is cancel-deleted."""

        logger.debug("Abort of %s left to the control plane cancel-delete call.", session.key)


__all__ = ["ControlPlaneObjectStore"]
