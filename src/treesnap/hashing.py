"""Content hashing for the hash fingerprint strategy."""

from pathlib import Path
import hashlib

# Hex length of a SHA-256 digest
DIGEST_HEX_LENGTH = 64

_CHUNK_SIZE = 8192


def compute_file_digest(path: Path) -> str:
    """Compute SHA256 hash of file contents.

    Simple byte-for-byte hashing - any change invalidates the digest.

    Args:
        path: Path to file to hash

    Returns:
        Lowercase hex digest (64 characters)
    """
    sha256 = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


__all__ = [
    "DIGEST_HEX_LENGTH",
    "compute_file_digest",
]
