"""Domain public API."""

from augmet_uploader.domain.entities import (
    FileToUpload,
    JobState,
    LocalFile,
    QueueFailure,
    QueueResult,
    ResumeUploadInfo,
    TransferJob,
    UploadSession,
)
from augmet_uploader.domain.errors import (
    ChunkTransferError,
    LocalFileNotFoundError,
    MissingTransferReceiptError,
    SignedUrlError,
    UploadCompletionError,
    UploadError,
    UploadInitiationError,
    UploadProtocolError,
    UploadRecordError,
)
from augmet_uploader.domain.file_naming import build_object_key, sanitize_file_name
from augmet_uploader.domain.ports import (
    ChunkTransport,
    ConnectivityProbe,
    FileUploadRecords,
    ObjectStoreGateway,
    UploadNotifier,
)
from augmet_uploader.domain.records import (
    AssignListResponse,
    AssociationListResponse,
    BulkAssignResult,
    BulkDeleteResult,
    BulkDownloadItem,
    FileUploadCreateRequest,
    FileUploadRecord,
    FileUploadUpdate,
    PatientAssignment,
    StatusListResponse,
)
from augmet_uploader.domain.upload_types import (
    TERMINAL_UPLOAD_STATUSES,
    GenomicFileType,
    PartOutcome,
    UploadStatus,
    detect_file_type,
)

__all__ = [
    "AssignListResponse",
    "AssociationListResponse",
    "BulkAssignResult",
    "BulkDeleteResult",
    "BulkDownloadItem",
    "ChunkTransferError",
    "ChunkTransport",
    "ConnectivityProbe",
    "FileToUpload",
    "FileUploadCreateRequest",
    "FileUploadRecord",
    "FileUploadRecords",
    "FileUploadUpdate",
    "GenomicFileType",
    "JobState",
    "LocalFile",
    "LocalFileNotFoundError",
    "MissingTransferReceiptError",
    "ObjectStoreGateway",
    "PartOutcome",
    "PatientAssignment",
    "QueueFailure",
    "QueueResult",
    "ResumeUploadInfo",
    "SignedUrlError",
    "StatusListResponse",
    "TERMINAL_UPLOAD_STATUSES",
    "TransferJob",
    "UploadCompletionError",
    "UploadError",
    "UploadInitiationError",
    "UploadNotifier",
    "UploadProtocolError",
    "UploadRecordError",
    "UploadSession",
    "UploadStatus",
    "build_object_key",
    "detect_file_type",
    "sanitize_file_name",
]
