"""Infrastructure layer public API."""

from augmet_uploader.infrastructure.control_plane import (
    ControlPlaneClient,
    ControlPlaneClientError,
)
from augmet_uploader.infrastructure.notifications import LoggingUploadNotifier
from augmet_uploader.infrastructure.object_store import ControlPlaneObjectStore, S3ObjectStore
from augmet_uploader.infrastructure.transfers import (
    ChunkReader,
    HttpChunkTransport,
    HttpConnectivityProbe,
    PartTransfer,
    StaticConnectivityProbe,
)

__all__ = [
    "ChunkReader",
    "ControlPlaneClient",
    "ControlPlaneClientError",
    "ControlPlaneObjectStore",
    "HttpChunkTransport",
    "HttpConnectivityProbe",
    "LoggingUploadNotifier",
    "PartTransfer",
    "S3ObjectStore",
    "StaticConnectivityProbe",
]
