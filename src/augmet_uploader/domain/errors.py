"""Domain exceptions for upload operations."""


class UploadError(Exception):
    """Base class for upload engine errors."""


class UploadProtocolError(UploadError):
    """Raised when a multipart protocol step fails."""


class UploadInitiationError(UploadProtocolError):
    """Raised when the object store does not open a multipart session."""


class SignedUrlError(UploadProtocolError):
    """Raised when no signed URL could be obtained for a part."""


class ChunkTransferError(UploadProtocolError):
    """Raised when the byte transfer to a signed URL fails."""


class UploadCompletionError(UploadProtocolError):
    """Raised when the multipart session cannot be finalized."""


class MissingTransferReceiptError(UploadError):
    """Raised when a stored part comes back without an ETag header.

    Usually the object store bucket does not list ``ETag`` in its CORS
    ``ExposeHeaders``. Completion would later fail with a part mismatch, so the
    job is failed immediately.
    """


class UploadRecordError(UploadError):
    """Raised when a control-plane record write fails."""


class LocalFileNotFoundError(UploadError):
    """Raised when a local file is missing at its stored location."""


__all__ = [
    "ChunkTransferError",
    "LocalFileNotFoundError",
    "MissingTransferReceiptError",
    "SignedUrlError",
    "UploadCompletionError",
    "UploadError",
    "UploadInitiationError",
    "UploadProtocolError",
    "UploadRecordError",
]
