"""Notifier that writes host notifications to the log."""

from __future__ import annotations

import logging

from augmet_uploader.domain.ports import UploadNotifier

logger = logging.getLogger(__name__)


class LoggingUploadNotifier(UploadNotifier):
    """Default notifier for headless runs without a desktop shell."""

    async def upload_completed(self, file_name: str) -> None:
        logger.info("%s has been uploaded successfully.", file_name)

    async def upload_failed(self, file_name: str) -> None:
        logger.error("Failed to upload %s.", file_name)

    async def network_unavailable(self) -> None:
        logger.warning("No internet connection. Reconnect and resume the upload.")

    async def error(self, title: str, message: str) -> None:
        logger.error("%s: %s", title, message)


__all__ = ["LoggingUploadNotifier"]
