"""Application services public API."""

from augmet_uploader.application.services.upload_orchestrator import UploadOrchestrator

__all__ = ["UploadOrchestrator"]
