"""Application bootstrap/wiring."""

import logging

from augmet_uploader.application.services import UploadOrchestrator
from augmet_uploader.config import ObjectStoreBackend, Settings
from augmet_uploader.domain.ports import ConnectivityProbe, ObjectStoreGateway
from augmet_uploader.infrastructure.control_plane import ControlPlaneClient
from augmet_uploader.infrastructure.notifications import LoggingUploadNotifier
from augmet_uploader.infrastructure.object_store import ControlPlaneObjectStore, S3ObjectStore
from augmet_uploader.infrastructure.transfers import (
    ChunkReader,
    HttpChunkTransport,
    HttpConnectivityProbe,
    PartTransfer,
    StaticConnectivityProbe,
)
from augmet_uploader.infrastructure.transfers.runtime import (
    InFlightCallSlot,
    ProgressBus,
    TransferQueue,
    UploadSessionStore,
)

logger = logging.getLogger(__name__)


def _build_control_plane_client(settings: Settings) -> ControlPlaneClient:
    if not settings.api_key:
        logger.warning(
            "AUGMET_UPLOADER_API_KEY is not set. Control plane calls are sent unauthenticated."
        )
    return ControlPlaneClient(
        base_url=settings.api_url,
        api_key=settings.api_key,
        timeout_seconds=settings.control_plane_timeout_seconds,
    )


def _build_object_store(settings: Settings, client: ControlPlaneClient) -> ObjectStoreGateway:
    if settings.object_store_backend == ObjectStoreBackend.S3:
        if settings.s3_bucket is None:
            raise ValueError(
                "AUGMET_UPLOADER_S3_BUCKET is required when "
                "AUGMET_UPLOADER_OBJECT_STORE_BACKEND=s3."
            )
        return S3ObjectStore(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            presigned_url_expiry_seconds=settings.presigned_url_expiry_seconds,
        )
    return ControlPlaneObjectStore(client)


def _build_connectivity_probe(settings: Settings) -> ConnectivityProbe:
    if not settings.connectivity_check_enabled:
        return StaticConnectivityProbe(online=True)
    return HttpConnectivityProbe(
        url=settings.connectivity_check_url or settings.api_url,
        timeout_seconds=settings.connectivity_timeout_seconds,
    )


def build_upload_orchestrator(settings: Settings) -> UploadOrchestrator:
    """Compose service graph."""

    client = _build_control_plane_client(settings)
    object_store = _build_object_store(settings, client)
    connectivity = _build_connectivity_probe(settings)
    chunk_reader = ChunkReader(chunk_size=settings.chunk_size_bytes)
    progress_bus = ProgressBus()
    in_flight = InFlightCallSlot()
    sessions = UploadSessionStore()

    part_transfer = PartTransfer(
        object_store=object_store,
        records=client,
        chunk_reader=chunk_reader,
        chunk_transport=HttpChunkTransport(
            timeout_seconds=settings.chunk_upload_timeout_seconds,
        ),
        connectivity=connectivity,
        progress_bus=progress_bus,
        in_flight=in_flight,
        can_continue=sessions.can_continue,
    )
    logger.info(
        "Uploader wired against %s with %s object store and %s MiB parts.",
        client.base_url,
        settings.object_store_backend,
        settings.chunk_size_mb,
    )
    return UploadOrchestrator(
        records=client,
        object_store=object_store,
        part_transfer=part_transfer,
        chunk_reader=chunk_reader,
        connectivity=connectivity,
        notifier=LoggingUploadNotifier(),
        queue=TransferQueue(),
        sessions=sessions,
        progress_bus=progress_bus,
        in_flight=in_flight,
        org_id=settings.org_id,
        key_prefix=settings.key_prefix,
    )


__all__ = ["build_upload_orchestrator"]
