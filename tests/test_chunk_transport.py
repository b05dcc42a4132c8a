from __future__ import annotations

import asyncio

import httpx
import pytest

from augmet_uploader.domain.errors import ChunkTransferError
from augmet_uploader.infrastructure.transfers import (
    HttpChunkTransport,
    HttpConnectivityProbe,
    StaticConnectivityProbe,
)

SIGNED_URL = "https://bucket.example.com/prefix/p_1/s.bam?partNumber=1&X-Amz-Signature=abc"


def test_put_chunk_sends_bytes_and_returns_headers() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code=200, headers={"ETag": '"abc123"'})

    transport = HttpChunkTransport(transport=httpx.MockTransport(handler))

    headers = asyncio.run(transport.put_chunk(SIGNED_URL, b"part-bytes", "application/x-bam"))

    assert headers["etag"] == '"abc123"'
    [request] = requests
    assert request.method == "PUT"
    assert request.content == b"part-bytes"
    assert request.headers["Content-Type"] == "application/x-bam"


def test_put_chunk_error_status_hides_signature() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=403, text="SignatureDoesNotMatch")

    transport = HttpChunkTransport(transport=httpx.MockTransport(handler))

    with pytest.raises(ChunkTransferError, match="403 SignatureDoesNotMatch") as exc_info:
        asyncio.run(transport.put_chunk(SIGNED_URL, b"x", "application/octet-stream"))

    assert "X-Amz-Signature" not in str(exc_info.value)


def test_put_chunk_does_not_follow_redirects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=307,
            headers={"Location": "https://elsewhere.example.com"},
        )

    transport = HttpChunkTransport(transport=httpx.MockTransport(handler))

    with pytest.raises(ChunkTransferError, match="307"):
        asyncio.run(transport.put_chunk(SIGNED_URL, b"x", "application/octet-stream"))


def test_put_chunk_network_failure_raises_transfer_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = HttpChunkTransport(transport=httpx.MockTransport(handler))

    with pytest.raises(ChunkTransferError, match="timed out"):
        asyncio.run(transport.put_chunk(SIGNED_URL, b"x", "application/octet-stream"))


def test_http_probe_is_online_for_any_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        return httpx.Response(status_code=503)

    probe = HttpConnectivityProbe(
        "https://augmet.example.com",
        transport=httpx.MockTransport(handler),
    )

    assert asyncio.run(probe.is_online()) is True


def test_http_probe_is_offline_when_connection_fails() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("network unreachable", request=request)

    probe = HttpConnectivityProbe(
        "https://augmet.example.com",
        transport=httpx.MockTransport(handler),
    )

    assert asyncio.run(probe.is_online()) is False


def test_static_probe_answer_can_be_flipped() -> None:
    probe = StaticConnectivityProbe()
    assert asyncio.run(probe.is_online()) is True

    probe.online = False
    assert asyncio.run(probe.is_online()) is False
