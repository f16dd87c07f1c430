"""
Keeps the managed application's installed build in step with the manifest.
"""

import asyncio
import logging
from pathlib import Path
from urllib.parse import urlparse

from build_updater.artifacts.archive import extract_archive, find_payload_root
from build_updater.artifacts.integrity import ContentVerifier
from build_updater.exceptions import AppRunningError, MissingRemoteFieldError
from build_updater.models.config import UpdaterConfig
from build_updater.models.manifest import (
    LocalManifestRecord,
    ManifestDocument,
    needs_update,
)
from build_updater.transfer.client import TransferClient
from build_updater.utils.formatting import describe_version, format_size
from build_updater.utils.path import create_dir, remove_path, remove_path_quietly
from build_updater.utils.process import is_process_running

from .build_swap import BuildSwap
from .launch_selector import LaunchSelector

log = logging.getLogger(__name__)


def _archive_name(url: str) -> str:
    """Keeps the URL's file name where it has one; extraction sniffs the format."""
    name = Path(urlparse(url).path).name
    return name or "build.archive"


class BuildUpdateManager:
    """Downloads, verifies, extracts and swaps in a new application build."""

    def __init__(
        self,
        config: UpdaterConfig,
        transfer: TransferClient,
        selector: LaunchSelector,
        verifier: ContentVerifier | None = None,
    ):
        self.build_dir = config.build_dir
        self.work_dir = config.scratch_dir / "build_update"
        self.keep_previous_build = config.keep_previous_build
        self.transfer = transfer
        self.selector = selector
        self.verifier = verifier or ContentVerifier()
        self.swap = BuildSwap(
            active=config.build_dir,
            staging=config.staging_dir,
            previous=config.previous_dir,
        )

    def needs_update(
        self, local: LocalManifestRecord, remote: ManifestDocument
    ) -> bool:
        """
        A build is stale if the manifest record changed, or if no launchable
        executable can be found (a damaged install always gets refreshed).
        """
        record = remote.require_build()
        if needs_update(local.build, record):
            log.info(
                f"Build manifest changed: {describe_version(local.build.version)}"
                f" -> {describe_version(record.version)}"
            )
            return True
        if self.selector.find_main_executable(self.build_dir) is None:
            log.warning(
                f"No application executable found in '{self.build_dir.name}'; "
                "reinstalling the build."
            )
            return True
        return False

    def ensure_not_running(self) -> None:
        """
        Refuses to touch the build while its application is running.

        Raises:
            AppRunningError: If a process with the main executable's name exists.
        """
        current = self.selector.find_main_executable(self.build_dir)
        if current is not None and is_process_running(current.name):
            raise AppRunningError(current.name)

    async def update_if_needed(
        self, local: LocalManifestRecord, remote: ManifestDocument
    ) -> bool:
        """
        Replaces the active build directory if it is stale.

        Returns:
            True if a new build was swapped in.
        """
        record = remote.require_build()
        # A restored backup holds whatever build preceded the last swap, which
        # the local record no longer describes; it is only a fallback copy.
        restored = await asyncio.to_thread(self.swap.recover_interrupted)
        if restored:
            log.warning(
                f"Build {describe_version(record.version)} will be reinstalled "
                "over the restored backup."
            )
        elif not await asyncio.to_thread(self.needs_update, local, remote):
            log.info(f"Build {describe_version(record.version)} is up to date.")
            return False
        if not record.url:
            raise MissingRemoteFieldError("build.url")

        await asyncio.to_thread(self.ensure_not_running)

        archive = self.work_dir / _archive_name(record.url)
        extract_dir = self.work_dir / "extracted"
        try:
            await asyncio.to_thread(remove_path, self.work_dir)
            await asyncio.to_thread(create_dir, self.work_dir)

            log.info(f"Downloading build {describe_version(record.version)}...")
            await self.transfer.fetch_to_file(record.url, archive)
            log.info(f"Downloaded {format_size(archive.stat().st_size)}.")
            await asyncio.to_thread(self.verifier.verify, archive, record.sha256)

            await asyncio.to_thread(extract_archive, archive, extract_dir)
            payload_root = await asyncio.to_thread(find_payload_root, extract_dir)

            await asyncio.to_thread(self.swap.stage, payload_root)
            await asyncio.to_thread(self.swap.swap)
        finally:
            await asyncio.to_thread(remove_path_quietly, self.work_dir)
            await asyncio.to_thread(remove_path_quietly, self.swap.staging)

        if not self.keep_previous_build:
            await asyncio.to_thread(self.swap.discard_previous)

        log.info(f"Build {describe_version(record.version)} installed.")
        return True
