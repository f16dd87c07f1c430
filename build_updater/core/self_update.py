"""
Keeps the updater's own code in step with the manifest's `updater` record.

A replacement is only ever installed when the canonical (normalized) content of
the download differs from what is already on disk. That comparison, not the
manifest comparison, is what decides whether the caller has to relaunch, so a
manifest that keeps disagreeing with the installed file cannot cause an endless
replace-and-relaunch cycle.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path

from build_updater.artifacts.integrity import ContentVerifier, file_sha256
from build_updater.artifacts.normalizer import normalize_file
from build_updater.exceptions import MissingRemoteFieldError, UpdaterError
from build_updater.models.config import UpdaterConfig
from build_updater.models.manifest import (
    LocalManifestRecord,
    ManifestDocument,
    needs_update,
)
from build_updater.transfer.client import TransferClient
from build_updater.utils.formatting import describe_version, short_digest
from build_updater.utils.path import create_dir, remove_path, remove_path_quietly

log = logging.getLogger(__name__)

STAGED_SUFFIX = ".new"


class SelfUpdateManager:
    """Downloads, verifies and installs a new copy of the updater itself."""

    def __init__(
        self,
        config: UpdaterConfig,
        transfer: TransferClient,
        verifier: ContentVerifier | None = None,
    ):
        self.self_path: Path = config.self_path
        self.work_dir: Path = config.scratch_dir / "self_update"
        self.transfer = transfer
        self.verifier = verifier or ContentVerifier()

    def needs_update(
        self, local: LocalManifestRecord, remote: ManifestDocument
    ) -> bool:
        """
        Decides whether the installed updater is stale.

        Besides the manifest comparison, a published digest that the file on disk
        does not match also counts as stale; this catches a local copy that was
        corrupted or edited after it was installed.
        """
        record = remote.declared_updater()
        if record is None:
            return False

        if needs_update(local.updater, record):
            log.info(
                f"Updater manifest changed: {describe_version(local.updater.version)}"
                f" -> {describe_version(record.version)}"
            )
            return True

        if record.sha256 and not self.verifier.matches(self.self_path, record.sha256):
            log.warning(
                f"Installed updater '{self.self_path.name}' does not match published "
                f"digest {short_digest(record.sha256)}; reinstalling."
            )
            return True
        return False

    async def update_if_needed(
        self, local: LocalManifestRecord, remote: ManifestDocument
    ) -> bool:
        """
        Replaces the updater's own file if it is stale.

        Returns:
            True if a new file was installed and the process must be relaunched.
        """
        if not await asyncio.to_thread(self.needs_update, local, remote):
            return False

        record = remote.declared_updater()
        if not record.url:
            raise MissingRemoteFieldError("updater.url")

        downloaded = self.work_dir / "updater.download"
        normalized = self.work_dir / "updater.normalized"
        try:
            await asyncio.to_thread(remove_path, self.work_dir)
            await asyncio.to_thread(create_dir, self.work_dir)

            log.info(f"Downloading updater {describe_version(record.version)}...")
            await self.transfer.fetch_to_file(record.url, downloaded)
            # The publisher hashed the file as served, so verify before normalizing.
            await asyncio.to_thread(self.verifier.verify, downloaded, record.sha256)
            await asyncio.to_thread(normalize_file, downloaded, normalized)

            if await asyncio.to_thread(self._is_installed_copy, normalized):
                log.info(
                    "Downloaded updater is identical to the installed copy; "
                    "nothing to replace."
                )
                return False

            await asyncio.to_thread(self._install, normalized)
        finally:
            await asyncio.to_thread(remove_path_quietly, self.work_dir)

        log.info(
            f"Updater {describe_version(record.version)} installed; relaunch required."
        )
        return True

    def _is_installed_copy(self, candidate: Path) -> bool:
        if not self.self_path.is_file():
            return False
        return file_sha256(candidate) == file_sha256(self.self_path)

    def _install(self, candidate: Path) -> None:
        """
        Stages the candidate beside the installed file and renames it into place,
        so the installed path is never missing or half-written.
        """
        staged = self.self_path.with_name(self.self_path.name + STAGED_SUFFIX)
        try:
            create_dir(self.self_path.parent)
            shutil.copyfile(candidate, staged)
            if self.self_path.exists():
                shutil.copymode(self.self_path, staged)
            os.replace(staged, self.self_path)
        except OSError as e:
            remove_path_quietly(staged)
            raise UpdaterError(
                f"Failed to install new updater at '{self.self_path}': {e}"
            ) from e
