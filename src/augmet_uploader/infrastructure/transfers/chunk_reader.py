"""Fixed-size part arithmetic and byte-slice reads from local files."""

from __future__ import annotations

import asyncio
from pathlib import Path

from augmet_uploader.domain.entities import LocalFile
from augmet_uploader.domain.errors import LocalFileNotFoundError

_MIB = 1024 * 1024
MIN_CHUNK_SIZE = 5 * _MIB
DEFAULT_CHUNK_SIZE = 100 * _MIB


def part_count(size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Return ``ceil(size / chunk_size)``; an empty file still has one part."""

    if size < 0:
        raise ValueError("File size cannot be negative.")
    if chunk_size <= 0:
        raise ValueError("Chunk size must be > 0.")
    return max(1, -(-size // chunk_size))


def part_range(index: int, size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[int, int]:
    """Return ``(start, end_exclusive)`` byte offsets of part ``index``."""

    count = part_count(size, chunk_size)
    if index < 0 or index >= count:
        raise ValueError(f"Part index {index} is outside 0..{count - 1}.")
    start = index * chunk_size
    return start, min(start + chunk_size, size)


def open_local_file(
    path: str | Path,
    name: str | None = None,
    content_type: str = "application/octet-stream",
) -> LocalFile:
    """Stat ``path`` and return a file handle for it."""

    resolved = Path(path)
    try:
        stat_result = resolved.stat()
    except OSError as exc:
        raise LocalFileNotFoundError(f"File not found at stored location: {resolved}") from exc
    if not resolved.is_file():
        raise LocalFileNotFoundError(f"File not found at stored location: {resolved}")
    return LocalFile(
        path=resolved,
        name=name or resolved.name,
        size=stat_result.st_size,
        content_type=content_type,
    )


class ChunkReader:
    """Stateless reader for the byte slice of one part."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < MIN_CHUNK_SIZE:
            raise ValueError(f"Chunk size must be >= {MIN_CHUNK_SIZE} bytes.")
        self._chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def part_count(self, file: LocalFile) -> int:
        return part_count(file.size, self._chunk_size)

    async def read_part(self, file: LocalFile, index: int) -> bytes:
        """Read the bytes of part ``index`` off the event loop."""

        start, end = part_range(index, file.size, self._chunk_size)
        return await asyncio.to_thread(self._read_range, file.path, start, end)

    def _read_range(self, path: Path, start: int, end: int) -> bytes:
        try:
            with path.open("rb") as handle:
                handle.seek(start)
                return handle.read(end - start)
        except FileNotFoundError as exc:
            raise LocalFileNotFoundError(f"File not found at stored location: {path}") from exc


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "MIN_CHUNK_SIZE",
    "ChunkReader",
    "open_local_file",
    "part_count",
    "part_range",
]
