# usermigrate Hashing Utilities
# Content hashing for checksum verification and transfer resume

import hashlib
from pathlib import Path


def file_hash(
    path: Path,
    *,
    algorithm: str = "sha256",
    chunk_size: int = 65536,
    limit: int | None = None,
) -> str | None:
    """
    Calculate hash of file content.

    Args:
        path: Path to file.
        algorithm: Hash algorithm (default sha256).
        chunk_size: Chunk size for reading large files.
        limit: Only hash the first ``limit`` bytes.

    Returns:
        Hex digest of hash, or None if file doesn't exist.
    """
    if not path.is_file():
        return None

    hasher = hashlib.new(algorithm)
    remaining = limit

    with open(path, "rb") as f:
        while True:
            size = chunk_size if remaining is None else min(chunk_size, remaining)
            if size == 0:
                break
            chunk = f.read(size)
            if not chunk:
                break
            hasher.update(chunk)
            if remaining is not None:
                remaining -= len(chunk)

    return hasher.hexdigest()


def same_content(path1: Path, path2: Path) -> bool:
    """
    Compare two files by size, then checksum.

    Args:
        path1: First file.
        path2: Second file.

    Returns:
        True if contents are equal.
    """
    if path1.stat().st_size != path2.stat().st_size:
        return False
    return file_hash(path1) == file_hash(path2)


def is_prefix_of(partial: Path, source: Path) -> bool:
    """
    Check whether a staged partial file holds the leading bytes of source.

    Args:
        partial: Staging remnant of an interrupted transfer.
        source: Full source file.

    Returns:
        True if the remnant can be resumed rather than restarted.
    """
    size = partial.stat().st_size
    if size > source.stat().st_size:
        return False
    return file_hash(partial) == file_hash(source, limit=size)
