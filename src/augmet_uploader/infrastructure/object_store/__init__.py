"""Object store gateway adapters."""

from augmet_uploader.infrastructure.object_store.control_plane_object_store import (
    ControlPlaneObjectStore,
)
from augmet_uploader.infrastructure.object_store.s3_object_store import S3Client, S3ObjectStore

__all__ = ["ControlPlaneObjectStore", "S3Client", "S3ObjectStore"]
