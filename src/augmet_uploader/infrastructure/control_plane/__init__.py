"""Control-plane infrastructure adapters."""

from augmet_uploader.infrastructure.control_plane.client import (
    ControlPlaneClient,
    ControlPlaneClientError,
)

__all__ = ["ControlPlaneClient", "ControlPlaneClientError"]
