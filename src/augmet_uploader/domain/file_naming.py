"""Object key and file name helpers."""

from __future__ import annotations

import re
from datetime import datetime

_COMPOUND_EXTENSIONS = (".fastq.gz", ".fq.gz", ".vcf.gz", ".vcf.idx", ".bam.bai")
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")
_UNSAFE_EXTENSIONLESS_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_file_name(file_name: str) -> str:
    """Replace anything but letters, digits, ``-`` and ``_`` in the base name.

    The extension is kept as-is, including compound genomic extensions such as
    ``.fastq.gz`` or ``.bam.bai``.
    """

    last_dot = file_name.rfind(".")
    if last_dot == -1:
        return _UNSAFE_EXTENSIONLESS_CHARS.sub("_", file_name)

    lowered = file_name.lower()
    extension = next(
        (file_name[-len(ext) :] for ext in _COMPOUND_EXTENSIONS if lowered.endswith(ext)),
        file_name[last_dot:],
    )
    base_name = file_name[: -len(extension)]
    return _UNSAFE_NAME_CHARS.sub("_", base_name) + extension


def upload_timestamp(moment: datetime | None = None) -> str:
    """Return the ``MMDDYY_HHMMSS`` stamp used in object key folders."""

    return (moment or datetime.now()).strftime("%m%d%y_%H%M%S")


def build_object_key(
    key_prefix: str,
    folder_identifier: str,
    file_name: str,
    moment: datetime | None = None,
) -> str:
    """Build ``{prefix}/{owner-or-job}_{timestamp}/{sanitized name}``."""

    prefix = key_prefix.strip().strip("/")
    folder = f"{folder_identifier}_{upload_timestamp(moment)}"
    name = sanitize_file_name(file_name)
    if not prefix:
        return f"{folder}/{name}"
    return f"{prefix}/{folder}/{name}"


__all__ = ["build_object_key", "sanitize_file_name", "upload_timestamp"]
