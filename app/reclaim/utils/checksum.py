"""SHA-256 file checksums."""

import hashlib

CHUNK_SIZE = 1024 * 1024


def sha256_file(path: str) -> str:
    """Return the SHA-256 hex digest of a file, read in 1 MiB chunks.

    Raises:
        OSError: If the file cannot be read.
    """
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def sha256_text(text: str) -> str:
    """Return the SHA-256 hex digest of a UTF-8 string."""
    return hashlib.sha256(text.encode()).hexdigest()
