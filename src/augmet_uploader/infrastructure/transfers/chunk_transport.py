"""HTTP byte transport for signed part URLs."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from augmet_uploader.domain.errors import ChunkTransferError
from augmet_uploader.domain.ports import ChunkTransport


class HttpChunkTransport(ChunkTransport):
    """PUT chunk bytes to a signed URL and hand back the response headers."""

    def __init__(
        self,
        timeout_seconds: float = 600.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def put_chunk(self, url: str, data: bytes, content_type: str) -> Mapping[str, str]:
        """Upload one part; redirects are not followed."""

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
                follow_redirects=False,
            ) as http_client:
                response = await http_client.put(
                    url,
                    content=data,
                    headers={"Content-Type": content_type},
                )
        except httpx.HTTPError as exc:
            raise ChunkTransferError(f"PUT {_redact(url)} failed: {exc}") from exc

        if not response.is_success:
            detail = response.text.strip() or "<no response body>"
            raise ChunkTransferError(
                f"PUT {_redact(url)} failed: {response.status_code} {detail}"
            )
        return response.headers


def _redact(url: str) -> str:
    """Drop the signature query string before a URL reaches a log line."""

    return url.split("?", 1)[0]


__all__ = ["HttpChunkTransport"]
