"""One step of the multipart protocol: move a single part and record the receipt."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from augmet_uploader.domain.entities import LocalFile
from augmet_uploader.domain.errors import MissingTransferReceiptError
from augmet_uploader.domain.ports import (
    ChunkTransport,
    ConnectivityProbe,
    FileUploadRecords,
    ObjectStoreGateway,
)
from augmet_uploader.domain.records import FileUploadUpdate
from augmet_uploader.domain.upload_types import PartOutcome
from augmet_uploader.infrastructure.transfers.chunk_reader import ChunkReader
from augmet_uploader.infrastructure.transfers.runtime.in_flight_call_slot import (
    InFlightCallCancelled,
    InFlightCallSlot,
)
from augmet_uploader.infrastructure.transfers.runtime.progress_bus import ProgressBus

logger = logging.getLogger(__name__)


def format_progress(parts_done: int, total_parts: int) -> str:
    """Return the two-decimal percentage string stored on the record."""

    return f"{parts_done * 100 / total_parts:.2f}%"


def normalize_etag(etag: str) -> str:
    """Strip the quote characters object stores wrap around an ETag."""

    return etag.replace('"', "")


class PartTransfer:
    """Signed URL, read, connectivity check, PUT, receipt, record update, publish."""

    def __init__(
        self,
        object_store: ObjectStoreGateway,
        records: FileUploadRecords,
        chunk_reader: ChunkReader,
        chunk_transport: ChunkTransport,
        connectivity: ConnectivityProbe,
        progress_bus: ProgressBus,
        in_flight: InFlightCallSlot,
        can_continue: Callable[[str], bool] | None = None,
    ) -> None:
        self._object_store = object_store
        self._records = records
        self._chunk_reader = chunk_reader
        self._chunk_transport = chunk_transport
        self._connectivity = connectivity
        self._progress_bus = progress_bus
        self._in_flight = in_flight
        self._can_continue = can_continue or _always_continue

    async def transfer_part(
        self,
        file: LocalFile,
        part_index: int,
        part_count: int,
        key: str,
        upload_id: str,
        job_id: str,
    ) -> PartOutcome:
        """Upload part ``part_index`` (0-based) of ``file`` into an open session.

        Offline and cancelled attempts are reported as outcomes. Protocol and
        receipt failures raise and end the job. A job stopped while the URL or
        chunk is pending is never sent, and one stopped during the PUT is never
        recorded.
        """

        part_number = part_index + 1
        url = await self._object_store.part_url(key, upload_id, part_number)
        data = await self._chunk_reader.read_part(file, part_index)
        if not self._can_continue(job_id):
            logger.info("Job %s stopped before part %s was sent.", job_id, part_number)
            return PartOutcome.CANCELLED

        if not await self._connectivity.is_online():
            logger.warning("Offline before part %s/%s of job %s.", part_number, part_count, job_id)
            return PartOutcome.OFFLINE

        try:
            headers = await self._in_flight.run(
                job_id,
                self._chunk_transport.put_chunk(url, data, file.content_type),
            )
        except InFlightCallCancelled:
            logger.info("Part %s of job %s cancelled in flight.", part_number, job_id)
            return PartOutcome.CANCELLED

        if not self._can_continue(job_id):
            logger.info("Job %s stopped; part %s is not recorded.", job_id, part_number)
            return PartOutcome.CANCELLED

        etag = _header(headers, "etag")
        if not etag:
            raise MissingTransferReceiptError(
                f"Part {part_number} of job {job_id} was stored without an ETag header. "
                "Check that the bucket CORS configuration exposes ETag."
            )

        await self._records.update_file_upload(
            job_id,
            FileUploadUpdate(
                file_progress=format_progress(part_number, part_count),
                tag=normalize_etag(etag),
                current_index=part_number,
            ),
        )
        logger.debug("Stored part %s/%s of job %s.", part_number, part_count, job_id)
        self._progress_bus.publish()
        return PartOutcome.SUCCESS


def _always_continue(job_id: str) -> bool:
    return True


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    for header_name, header_value in headers.items():
        if header_name.lower() == name:
            return header_value
    return None


__all__ = ["PartTransfer", "format_progress", "normalize_etag"]
