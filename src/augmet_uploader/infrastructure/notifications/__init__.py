"""Host notification adapters."""

from augmet_uploader.infrastructure.notifications.logging_upload_notifier import (
    LoggingUploadNotifier,
)

__all__ = ["LoggingUploadNotifier"]
