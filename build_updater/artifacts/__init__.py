"""
Artifact Processing Layer.

This package is responsible for everything done to a downloaded artifact before
it is installed: digest verification, text normalization, and archive extraction.
"""

from .archive import extract_archive, find_payload_root
from .integrity import ContentVerifier, file_sha256
from .normalizer import canonicalize_text, normalize_file

__all__ = [
    "ContentVerifier",
    "canonicalize_text",
    "extract_archive",
    "file_sha256",
    "find_payload_root",
    "normalize_file",
]
