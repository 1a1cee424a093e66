"""Checksum validation utilities for manifest entries."""

import hashlib
import re
from pathlib import Path
from typing import Union

# SHA256SUMS lists bare lowercase hex digests
SHA256_PATTERN = re.compile(r"^[a-f0-9]{64}$")


def validate_digest(digest: str) -> bool:
    """Validate a SHA-256 hex digest as found in SHA256SUMS.

    Args:
        digest: Digest string to validate

    Returns:
        True if valid digest format
    """
    if not isinstance(digest, str):
        return False

    return SHA256_PATTERN.match(digest.lower()) is not None


def calculate_file_digest(path: Union[str, Path], chunk_size: int = 1024 * 1024) -> str:
    """Calculate the SHA-256 hex digest of a file.

    Args:
        path: File to hash
        chunk_size: Read block size

    Returns:
        Lowercase hex digest
    """
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def verify_file_digest(path: Union[str, Path], expected_digest: str) -> bool:
    """Verify a file matches the digest listed for it in the manifest.

    Raises:
        ValueError: If digest format is invalid
    """
    if not validate_digest(expected_digest):
        raise ValueError(f"Invalid digest format: {expected_digest}")

    return calculate_file_digest(path) == expected_digest.lower()
