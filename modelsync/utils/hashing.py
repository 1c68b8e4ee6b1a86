# modelsync Hashing Utilities
# Content checksums for detecting model changes between syncs

import hashlib
from pathlib import Path


def file_hash(path: Path, *, algorithm: str = "sha256", chunk_size: int = 8192) -> str | None:
    """
    Calculate hash of file content.

    Args:
        path: Path to file.
        algorithm: Hash algorithm (default sha256).
        chunk_size: Chunk size for reading large files.

    Returns:
        Hex digest of hash, or None if file doesn't exist.
    """
    if not path.is_file():
        return None

    hasher = hashlib.new(algorithm)

    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()


def read_checksum(checksum_file: Path) -> str | None:
    """Read a stored checksum, or None if none has been saved."""
    if not checksum_file.is_file():
        return None
    value = checksum_file.read_text(encoding="utf-8").strip()
    return value or None


def write_checksum(source: Path, checksum_file: Path) -> str | None:
    """
    Store the checksum of ``source`` in ``checksum_file``.

    Returns:
        The stored checksum, or None if the source file does not exist
        (in which case nothing is written).
    """
    checksum = file_hash(source)
    if checksum is None:
        return None
    checksum_file.parent.mkdir(parents=True, exist_ok=True)
    checksum_file.write_text(checksum + "\n", encoding="utf-8")
    return checksum
