"""Chunk arithmetic for serving the watch face payload."""

from __future__ import annotations

from .commands import CHUNK_SIZE


def chunk_count(file_length: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Number of chunks needed to cover file_length bytes."""
    return -(-file_length // chunk_size)


def chunk_range(index: int, file_length: int, chunk_size: int = CHUNK_SIZE) -> tuple[int, int]:
    """Byte range [start, end) of chunk index.

    The last chunk is truncated so that end never exceeds file_length.

    Raises:
        ValueError: If the chunk starts at or past the end of the file
    """
    if index < 0:
        raise ValueError(f"Negative chunk index {index}")

    start = index * chunk_size
    if start >= file_length:
        raise ValueError(
            f"Chunk {index} starts at {start}, beyond file length {file_length}"
        )
    return start, min(start + chunk_size, file_length)


def chunk_slice(payload: bytes, index: int, chunk_size: int = CHUNK_SIZE) -> bytes:
    """Bytes of chunk index taken from payload."""
    start, end = chunk_range(index, len(payload), chunk_size)
    return payload[start:end]


def progress_percent(index: int, file_length: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Percentage reported when chunk index is served."""
    if file_length <= 0:
        return 0
    return index * chunk_size * 100 // file_length
