from __future__ import annotations

import pytest
from pydantic import ValidationError

from augmet_uploader.bootstrap import build_upload_orchestrator
from augmet_uploader.config import MIB, ObjectStoreBackend, Settings
from augmet_uploader.infrastructure.control_plane import ControlPlaneClient
from augmet_uploader.infrastructure.object_store import ControlPlaneObjectStore, S3ObjectStore
from augmet_uploader.infrastructure.transfers import HttpConnectivityProbe, StaticConnectivityProbe


def test_build_upload_orchestrator_uses_control_plane_object_store_by_default() -> None:
    settings = Settings(api_url="https://augmet.example.com/", api_key="secret", org_id="org-1")
    orchestrator = build_upload_orchestrator(settings)

    assert isinstance(orchestrator._records, ControlPlaneClient)
    assert orchestrator._records.base_url == "https://augmet.example.com"
    assert isinstance(orchestrator._object_store, ControlPlaneObjectStore)
    assert orchestrator._org_id == "org-1"
    assert orchestrator._chunk_reader.chunk_size == 100 * MIB


def test_build_upload_orchestrator_uses_s3_object_store_when_configured() -> None:
    settings = Settings(object_store_backend=ObjectStoreBackend.S3, s3_bucket="augmet-bucket")
    orchestrator = build_upload_orchestrator(settings)

    assert isinstance(orchestrator._object_store, S3ObjectStore)


def test_build_upload_orchestrator_shares_runtime_with_part_transfer() -> None:
    orchestrator = build_upload_orchestrator(Settings(chunk_size_mb=5))
    part_transfer = orchestrator._part_transfer

    assert part_transfer._progress_bus is orchestrator._progress_bus
    assert part_transfer._in_flight is orchestrator._in_flight
    assert part_transfer._chunk_reader is orchestrator._chunk_reader
    assert orchestrator._chunk_reader.chunk_size == 5 * MIB


def test_connectivity_probe_follows_settings() -> None:
    enabled = build_upload_orchestrator(Settings())
    disabled = build_upload_orchestrator(Settings(connectivity_check_enabled=False))

    assert isinstance(enabled._connectivity, HttpConnectivityProbe)
    assert isinstance(disabled._connectivity, StaticConnectivityProbe)


def test_settings_strip_key_prefix_slashes() -> None:
    assert Settings(key_prefix="/uploads/genomics/").key_prefix == "uploads/genomics"


def test_settings_require_s3_bucket_when_backend_is_s3() -> None:
    with pytest.raises(ValidationError):
        Settings(object_store_backend=ObjectStoreBackend.S3)


def test_settings_reject_chunk_size_below_object_store_minimum() -> None:
    with pytest.raises(ValidationError):
        Settings(chunk_size_mb=4)


@pytest.mark.parametrize(
    "field_name",
    [
        "control_plane_timeout_seconds",
        "chunk_upload_timeout_seconds",
        "connectivity_timeout_seconds",
        "presigned_url_expiry_seconds",
    ],
)
def test_settings_require_positive_timeouts(field_name: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field_name: 0})


def test_settings_reject_empty_api_url() -> None:
    with pytest.raises(ValidationError):
        Settings(api_url=" ")


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUGMET_UPLOADER_CHUNK_SIZE_MB", "8")
    monkeypatch.setenv("AUGMET_UPLOADER_OBJECT_STORE_BACKEND", "s3")
    monkeypatch.setenv("AUGMET_UPLOADER_S3_BUCKET", "env-bucket")

    settings = Settings()

    assert settings.chunk_size_bytes == 8 * MIB
    assert settings.object_store_backend == ObjectStoreBackend.S3
    assert settings.s3_bucket == "env-bucket"
