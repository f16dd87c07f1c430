"""Shared fixtures for the build_updater test suite."""

from __future__ import annotations

import hashlib
import io
import json
import logging
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from build_updater.exceptions import TransferError, TransferErrorKind
from build_updater.models.config import UpdaterConfig

MANIFEST_URL = "https://updates.example.com/manifest.json"
BUILD_URL = "https://cdn.example.com/builds/app-2.zip"
UPDATER_URL = "https://cdn.example.com/updater/updater.py"


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_zip(files: dict[str, bytes], nested_under: str | None = None) -> bytes:
    """Builds a zip archive in memory, optionally nesting everything one level deep."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            arcname = f"{nested_under}/{name}" if nested_under else name
            zf.writestr(arcname, content)
    return buffer.getvalue()


class FakeTransfer:
    """
    Stands in for TransferClient: serves canned JSON and file bodies keyed by URL
    and records every request.
    """

    def __init__(
        self,
        json_docs: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> None:
        self.json_docs = dict(json_docs or {})
        self.files = dict(files or {})
        self.json_requests: list[str] = []
        self.file_requests: list[str] = []
        self.closed = False

    async def fetch_json(self, url: str) -> dict[str, Any]:
        self.json_requests.append(url)
        value = self.json_docs.get(url)
        if value is None:
            raise TransferError(f"No route for {url}", url, TransferErrorKind.UNREACHABLE)
        if isinstance(value, Exception):
            raise value
        return json.loads(json.dumps(value))

    async def fetch_to_file(self, url: str, destination: Path) -> Path:
        self.file_requests.append(url)
        value = self.files.get(url)
        if value is None:
            raise TransferError(f"No route for {url}", url, TransferErrorKind.UNREACHABLE)
        if isinstance(value, Exception):
            raise value
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(value)
        return destination

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def install_root(tmp_path: Path) -> Path:
    root = tmp_path / "install"
    root.mkdir()
    return root


@pytest.fixture()
def make_config(install_root: Path) -> Callable[..., UpdaterConfig]:
    """Factory for configs rooted in a temp install directory."""

    def _make(**overrides: Any) -> UpdaterConfig:
        settings: dict[str, Any] = {
            "manifest_url": MANIFEST_URL,
            "install_root": install_root,
            "self_path": install_root / "updater.py",
            "retry_base_delay": 0,
            "launch": False,
        }
        settings.update(overrides)
        return UpdaterConfig(**settings)

    return _make


@pytest.fixture()
def config(make_config: Callable[..., UpdaterConfig]) -> UpdaterConfig:
    return make_config()


@pytest.fixture()
def write_build(install_root: Path) -> Callable[..., Path]:
    """Creates a fake installed build directory with the given files."""

    def _write(files: dict[str, bytes], name: str = "Build") -> Path:
        build_dir = install_root / name
        build_dir.mkdir(parents=True, exist_ok=True)
        for file_name, content in files.items():
            (build_dir / file_name).write_bytes(content)
        return build_dir

    return _write


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Keeps handlers attached by the CLI from leaking between tests."""
    yield
    logger = logging.getLogger("build_updater")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
