"""
Provides content-digest checks for downloaded and installed artifacts.
"""

import hashlib
import logging
import os
from pathlib import Path

from build_updater.exceptions import HashMismatch

log = logging.getLogger(__name__)

_CHUNK_SIZE = 1048576  # 1 MB


def file_sha256(path: str | os.PathLike) -> str:
    """Returns the lowercase hex SHA-256 digest of a file's content."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def _normalize_digest(value: str | None) -> str:
    return (value or "").strip().lower()


class ContentVerifier:
    """A collection of static methods for comparing files against expected digests."""

    @staticmethod
    def verify(path: str | os.PathLike, expected: str | None) -> None:
        """
        Checks a file against an expected SHA-256 digest.

        A blank expected value means the publisher did not ask for verification,
        and the check passes without reading the file.

        Args:
            path: Path to the file to check.
            expected: Expected hex digest, compared case-insensitively.

        Raises:
            HashMismatch: If the file's digest differs from the expected one.
        """
        wanted = _normalize_digest(expected)
        if not wanted:
            log.debug(f"No digest supplied for '{Path(path).name}', skipping check.")
            return

        actual = file_sha256(path)
        if actual != wanted:
            raise HashMismatch(expected=wanted, actual=actual, path=str(path))
        log.debug(f"Digest verified for '{Path(path).name}'.")

    @staticmethod
    def matches(path: str | os.PathLike, expected: str | None) -> bool:
        """
        Non-raising variant of verify() for probing installed files.

        A missing or unreadable file never matches a non-blank digest.
        """
        wanted = _normalize_digest(expected)
        if not wanted:
            return True
        try:
            return file_sha256(path) == wanted
        except OSError as e:
            log.debug(f"Could not hash '{path}': {e}")
            return False
