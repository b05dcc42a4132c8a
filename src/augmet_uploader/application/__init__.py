"""Application layer."""

from augmet_uploader.application.services import UploadOrchestrator

__all__ = ["UploadOrchestrator"]
