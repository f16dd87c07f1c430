"""
Extraction of downloaded build archives and normalization of their layout.
"""

import logging
import os
import tarfile
import zipfile
from pathlib import Path

from build_updater.exceptions import UpdaterError

log = logging.getLogger(__name__)


def extract_archive(archive_path: Path, destination: Path) -> None:
    """
    Extracts a zip or tar archive into destination, which is created if needed.

    The format is sniffed from the content, since build URLs do not always carry
    a meaningful extension.

    Raises:
        UpdaterError: If the file is not a supported archive or is corrupt.
    """
    destination.mkdir(parents=True, exist_ok=True)
    try:
        if zipfile.is_zipfile(archive_path):
            with zipfile.ZipFile(archive_path) as zf:
                for info in zf.infolist():
                    extracted = zf.extract(info, destination)
                    # Zip does not restore POSIX permissions on its own.
                    mode = (info.external_attr >> 16) & 0o777
                    if mode and not info.is_dir():
                        os.chmod(extracted, mode)
        elif tarfile.is_tarfile(archive_path):
            with tarfile.open(archive_path) as tf:
                tf.extractall(destination, filter="data")
        else:
            raise UpdaterError(
                f"'{archive_path.name}' is neither a zip nor a tar archive."
            )
    except (zipfile.BadZipFile, tarfile.TarError) as e:
        raise UpdaterError(f"Failed to extract '{archive_path.name}': {e}") from e
    log.debug(f"Extracted '{archive_path.name}' into '{destination}'.")


def find_payload_root(extract_dir: Path) -> Path:
    """
    Returns the directory holding the build payload.

    Archives are often packed with everything nested under a single top-level
    folder. When the extraction yields exactly one directory and no loose files,
    that directory is the real root; otherwise the extraction root is.
    """
    entries = list(extract_dir.iterdir())
    directories = [e for e in entries if e.is_dir()]
    if len(entries) == 1 and len(directories) == 1:
        log.debug(f"Archive payload is nested under '{directories[0].name}'.")
        return directories[0]
    return extract_dir
