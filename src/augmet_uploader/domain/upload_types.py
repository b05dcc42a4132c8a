"""Upload status and file type helpers."""

from enum import StrEnum


class UploadStatus(StrEnum):
    """Statuses stored on a control-plane file upload record."""

    NEW = "NEW"
    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    COMPLETED_WITH_ERROR = "COMPLETED_WITH_ERROR"
    ERROR = "ERROR"
    CANCEL = "CANCEL"
    RETRIED_IN_PROGRESS = "RETRIED_IN_PROGRESS"
    STALLED = "STALLED"
    DELETED = "DELETED"


class PartOutcome(StrEnum):
    """Result of one part transfer attempt."""

    SUCCESS = "SUCCESS"
    OFFLINE = "OFFLINE"
    CANCELLED = "CANCELLED"


class GenomicFileType(StrEnum):
    """File families accepted by the uploader."""

    FASTQ = "fastq"
    UNCOMPRESSED_FASTQ = "uncompressed_fastq"
    BAM = "bam"
    BAI = "bai"
    VCF = "vcf"
    OTHERS = "others"


TERMINAL_UPLOAD_STATUSES = frozenset(
    {
        UploadStatus.COMPLETED,
        UploadStatus.COMPLETED_WITH_ERROR,
        UploadStatus.ERROR,
        UploadStatus.CANCEL,
    }
)

FILE_TYPE_EXTENSIONS: dict[GenomicFileType, tuple[str, ...]] = {
    GenomicFileType.FASTQ: (".fq.gz", ".fastq.gz"),
    GenomicFileType.UNCOMPRESSED_FASTQ: (".fq", ".fastq"),
    GenomicFileType.BAM: (".bam",),
    GenomicFileType.BAI: (".bai", ".bam.bai"),
    GenomicFileType.VCF: (".vcf", ".vcf.idx", ".vcf.gz"),
}


def detect_file_type(file_name: str) -> GenomicFileType:
    """Infer the genomic file family from the last one or two extensions."""

    parts = file_name.lower().split(".")
    if len(parts) < 2:
        return GenomicFileType.OTHERS

    last_ext = f".{parts[-1]}"
    compound_ext = f".{parts[-2]}.{parts[-1]}" if len(parts) > 2 else None
    for file_type, extensions in FILE_TYPE_EXTENSIONS.items():
        if last_ext in extensions:
            return file_type
        if compound_ext is not None and compound_ext in extensions:
            return file_type
    return GenomicFileType.OTHERS


__all__ = [
    "FILE_TYPE_EXTENSIONS",
    "GenomicFileType",
    "PartOutcome",
    "TERMINAL_UPLOAD_STATUSES",
    "UploadStatus",
    "detect_file_type",
]
