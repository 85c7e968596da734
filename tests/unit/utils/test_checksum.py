"""Unit tests for checksum helpers."""

import hashlib
from pathlib import Path

from reclaim.utils.checksum import sha256_file, sha256_text


class TestChecksum:
    """Tests for the SHA-256 helpers."""

    def test_file_digest(self, tmp_path: Path) -> None:
        """File digests match hashlib."""
        path = tmp_path / "a.bin"
        payload = b"abc" * 100_000
        path.write_bytes(payload)
        assert sha256_file(str(path)) == hashlib.sha256(payload).hexdigest()

    def test_text_digest(self) -> None:
        """Text digests hash the UTF-8 encoding."""
        assert sha256_text("target") == hashlib.sha256(b"target").hexdigest()
