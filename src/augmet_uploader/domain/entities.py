"""Domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

_DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(slots=True, frozen=True)
class LocalFile:
    """Readable local byte source with a known size."""

    path: Path
    name: str
    size: int
    content_type: str = _DEFAULT_CONTENT_TYPE


@dataclass(slots=True, frozen=True)
class UploadSession:
    """Remote multipart-upload handle open between initiate and complete/abort."""

    key: str
    upload_id: str

    def as_key_obj(self) -> dict[str, str]:
        """Serialize using the control-plane ``keyObj`` field names."""

        return {"key": self.key, "uploadId": self.upload_id}


@dataclass(slots=True, frozen=True)
class JobState:
    """Immutable per-job flags; replaced as a whole on every change."""

    terminal: bool = False
    continuation: bool = True
    session: UploadSession | None = None


@dataclass(slots=True)
class TransferJob:
    """Unit of work held by the transfer queue."""

    file: LocalFile
    job_id: str
    file_name: str
    owner_id: str | None = None
    key: str | None = None
    upload_id: str | None = None
    current_part_index: int = 0
    resume: bool = False

    @property
    def is_resume(self) -> bool:
        """True when the job carries complete resume markers."""

        return self.resume and bool(self.key) and bool(self.upload_id)


@dataclass(slots=True, frozen=True)
class FileToUpload:
    """A local file accepted from the UI layer; patient fields are optional."""

    path: Path
    file_name: str
    original_file_name: str | None = None
    file_type: str | None = None
    patient_id: str | None = None
    visit_id: str | None = None
    sample_id: str | None = None
    content_type: str = _DEFAULT_CONTENT_TYPE


@dataclass(slots=True, frozen=True)
class ResumeUploadInfo:
    """Server-returned descriptor needed to resume an interrupted upload."""

    job_id: str
    file_name: str
    file_path: Path
    key: str
    upload_id: str
    current_part_index: int = 0
    content_type: str = _DEFAULT_CONTENT_TYPE


@dataclass(slots=True, frozen=True)
class QueueFailure:
    """One file that could not be registered with the control plane."""

    file_name: str
    message: str


@dataclass(slots=True)
class QueueResult:
    """Outcome of one ``add_files_to_queue`` call."""

    queued: list[str] = field(default_factory=list)
    failed: list[QueueFailure] = field(default_factory=list)


__all__ = [
    "FileToUpload",
    "JobState",
    "LocalFile",
    "QueueFailure",
    "QueueResult",
    "ResumeUploadInfo",
    "TransferJob",
    "UploadSession",
]
