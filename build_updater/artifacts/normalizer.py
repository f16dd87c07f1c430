"""
Re-encodes downloaded text artifacts into one canonical byte form.

Two copies of the same script may differ only in how a toolchain serialized them
(a UTF-8 byte-order mark, or UTF-16 output). Comparing raw bytes would then report
a change on every run, and a self-updater would replace and relaunch itself
forever. Every self-update candidate is therefore rewritten as UTF-8 without a
BOM before any comparison or installation.
"""

import codecs
import logging
import os

from build_updater.exceptions import UpdaterError

log = logging.getLogger(__name__)

CANONICAL_ENCODING = "utf-8"

# Longest marks first so UTF-32 LE is not mistaken for UTF-16 LE.
_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def detect_encoding(data: bytes) -> tuple[str, int]:
    """Returns the encoding implied by a leading BOM and the BOM's length."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return encoding, len(bom)
    return CANONICAL_ENCODING, 0


def canonicalize_text(data: bytes) -> bytes:
    """Decodes text in whatever encoding its BOM declares and re-encodes it canonically."""
    encoding, bom_length = detect_encoding(data)
    try:
        text = data[bom_length:].decode(encoding)
    except UnicodeDecodeError as e:
        raise UpdaterError(
            f"Artifact is not valid {encoding} text and cannot be normalized: {e}"
        ) from e
    return text.encode(CANONICAL_ENCODING)


def normalize_file(source: str | os.PathLike, destination: str | os.PathLike) -> None:
    """Writes the canonical form of the text file at source to destination."""
    with open(source, "rb") as f:
        raw = f.read()
    canonical = canonicalize_text(raw)
    if canonical != raw:
        log.debug(
            f"Normalized '{os.path.basename(source)}' "
            f"({len(raw)} -> {len(canonical)} bytes)."
        )
    with open(destination, "wb") as f:
        f.write(canonical)
