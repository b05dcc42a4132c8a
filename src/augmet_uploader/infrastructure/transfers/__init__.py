"""Transfer pipeline adapters."""

from augmet_uploader.infrastructure.transfers.chunk_reader import (
    DEFAULT_CHUNK_SIZE,
    MIN_CHUNK_SIZE,
    ChunkReader,
    open_local_file,
    part_count,
    part_range,
)
from augmet_uploader.infrastructure.transfers.chunk_transport import HttpChunkTransport
from augmet_uploader.infrastructure.transfers.connectivity import (
    HttpConnectivityProbe,
    StaticConnectivityProbe,
)
from augmet_uploader.infrastructure.transfers.part_transfer import (
    PartTransfer,
    format_progress,
    normalize_etag,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "MIN_CHUNK_SIZE",
    "ChunkReader",
    "HttpChunkTransport",
    "HttpConnectivityProbe",
    "PartTransfer",
    "StaticConnectivityProbe",
    "format_progress",
    "normalize_etag",
    "open_local_file",
    "part_count",
    "part_range",
]
