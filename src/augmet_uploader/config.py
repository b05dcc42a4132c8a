"""Application settings."""

from enum import StrEnum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024
MIN_CHUNK_SIZE_MB = 5


class ObjectStoreBackend(StrEnum):
    """Available adapters for the multipart-upload protocol."""

    CONTROL_PLANE = "control_plane"
    S3 = "s3"


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "AUGMET Uploader"
    api_prefix: str = ""
    host: str = "127.0.0.1"
    port: int = 8765
    log_level: str = "INFO"
    api_url: str = "http://localhost:3000"
    api_key: str | None = None
    org_id: str | None = None
    chunk_size_mb: int = 100
    key_prefix: str = "augmet_uploader"
    control_plane_timeout_seconds: float = 30.0
    chunk_upload_timeout_seconds: float = 600.0
    object_store_backend: ObjectStoreBackend = ObjectStoreBackend.CONTROL_PLANE
    s3_bucket: str | None = None
    aws_region: str = "us-east-1"
    presigned_url_expiry_seconds: int = 3600
    connectivity_check_enabled: bool = True
    connectivity_check_url: str | None = None
    connectivity_timeout_seconds: float = 5.0

    @field_validator("key_prefix", mode="before")
    @classmethod
    def strip_key_prefix(cls, value: object) -> object:
        """Drop surrounding slashes so object keys never hold empty segments."""

        if not isinstance(value, str):
            return value
        return value.strip().strip("/")

    @property
    def chunk_size_bytes(self) -> int:
        return self.chunk_size_mb * MIB

    @model_validator(mode="after")
    def validate_upload_settings(self) -> "Settings":
        """Ensure backend-specific settings are valid."""

        if self.chunk_size_mb < MIN_CHUNK_SIZE_MB:
            raise ValueError(f"AUGMET_UPLOADER_CHUNK_SIZE_MB must be >= {MIN_CHUNK_SIZE_MB}.")
        if self.object_store_backend == ObjectStoreBackend.S3 and not self.s3_bucket:
            raise ValueError(
                "AUGMET_UPLOADER_S3_BUCKET is required when "
                "AUGMET_UPLOADER_OBJECT_STORE_BACKEND=s3."
            )
        if self.control_plane_timeout_seconds <= 0:
            raise ValueError("AUGMET_UPLOADER_CONTROL_PLANE_TIMEOUT_SECONDS must be > 0.")
        if self.chunk_upload_timeout_seconds <= 0:
            raise ValueError("AUGMET_UPLOADER_CHUNK_UPLOAD_TIMEOUT_SECONDS must be > 0.")
        if self.connectivity_timeout_seconds <= 0:
            raise ValueError("AUGMET_UPLOADER_CONNECTIVITY_TIMEOUT_SECONDS must be > 0.")
        if self.presigned_url_expiry_seconds < 1:
            raise ValueError("AUGMET_UPLOADER_PRESIGNED_URL_EXPIRY_SECONDS must be >= 1.")
        if not self.api_url.strip():
            raise ValueError("AUGMET_UPLOADER_API_URL cannot be empty.")
        return self

    model_config = SettingsConfigDict(env_prefix="AUGMET_UPLOADER_", extra="ignore")


__all__ = ["MIB", "MIN_CHUNK_SIZE_MB", "ObjectStoreBackend", "Settings"]
