"""
The top-level sequence of one updater run:

resolve manifest -> self-update (may end the run) -> build update ->
locate executable -> persist local record -> launch.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from build_updater.exceptions import UpdaterError
from build_updater.models.config import UpdaterConfig
from build_updater.models.manifest import LocalManifestRecord
from build_updater.storage.run_history import RunHistory
from build_updater.storage.state_store import LocalStateStore
from build_updater.transfer.client import TransferClient
from build_updater.utils.formatting import format_duration
from build_updater.utils.path import create_dir, remove_path_quietly
from build_updater.utils.process import launch_detached

from .build_update import BuildUpdateManager
from .launch_selector import LaunchSelector
from .manifest_resolver import ManifestResolver
from .self_update import SelfUpdateManager

log = logging.getLogger(__name__)


class RunOutcome(Enum):
    """How a run ended. The values are the process exit codes."""

    LAUNCHED = 0
    FAILED = 1
    # The launching parent re-invokes the updater on this exact value.
    RELAUNCH = 3010

    @property
    def exit_code(self) -> int:
        return self.value


@dataclass
class RunReport:
    """What a completed run did, for the console summary and the run history."""

    outcome: RunOutcome
    manifest_url: str = ""
    build_version: str = ""
    updater_version: str = ""
    build_updated: bool = False
    executable: Path | None = None
    pid: int | None = None
    started_at: float = field(default_factory=time.monotonic)
    duration_s: float = 0.0


class Orchestrator:
    """Sequences the components of one updater run."""

    def __init__(
        self,
        config: UpdaterConfig,
        transfer: TransferClient | None = None,
        launcher: Callable[[Path], int] = launch_detached,
    ):
        self.config = config
        self.transfer = transfer or TransferClient.from_config(config)
        self.launcher = launcher
        self.state_store = LocalStateStore(config.state_path)
        self.history = RunHistory(config.history_path)
        self.selector = LaunchSelector(config.auxiliary_markers)
        self.resolver = ManifestResolver(self.transfer)
        self.self_update = SelfUpdateManager(config, self.transfer)
        self.build_update = BuildUpdateManager(config, self.transfer, self.selector)

    async def run(self) -> RunReport:
        """
        Executes one run. Errors propagate to the caller after being recorded in
        the run history; the local record is only written once everything else
        has succeeded.
        """
        report = RunReport(outcome=RunOutcome.FAILED)
        try:
            await self._run(report)
        except Exception as e:
            self._finish(report, error=str(e))
            raise
        finally:
            await self.transfer.close()
            await asyncio.to_thread(remove_path_quietly, self.config.scratch_dir)
        self._finish(report)
        return report

    async def _run(self, report: RunReport) -> None:
        config = self.config
        await asyncio.to_thread(create_dir, config.install_root)
        # Leftovers from a run that was killed are never reused.
        await asyncio.to_thread(remove_path_quietly, config.scratch_dir)

        local = await asyncio.to_thread(self.state_store.read)

        effective_url, remote = await self.resolver.resolve(config.manifest_url)
        report.manifest_url = effective_url
        if (updater := remote.declared_updater()) is not None:
            report.updater_version = updater.version

        if await self.self_update.update_if_needed(local, remote):
            report.outcome = RunOutcome.RELAUNCH
            return

        build = remote.require_build()
        report.build_version = build.version
        report.build_updated = await self.build_update.update_if_needed(local, remote)

        executable = self.selector.find_main_executable(config.build_dir)
        if executable is None:
            raise UpdaterError(
                f"No launchable executable found in '{config.build_dir}' "
                "after the build update."
            )
        report.executable = executable

        record = LocalManifestRecord.from_applied(effective_url, remote, local)
        await asyncio.to_thread(self.state_store.write, record)

        if config.launch:
            log.info(f"Launching '{executable.name}'...")
            report.pid = await asyncio.to_thread(self.launcher, executable)
        else:
            log.info(f"Launch skipped; '{executable.name}' is ready.")
        report.outcome = RunOutcome.LAUNCHED

    def _finish(self, report: RunReport, error: str | None = None) -> None:
        report.duration_s = time.monotonic() - report.started_at
        log.info(
            f"Run finished: {report.outcome.name.lower()} "
            f"(exit {report.outcome.exit_code}) in {format_duration(report.duration_s)}."
        )
        self.history.append(
            report.outcome.name.lower(),
            report.outcome.exit_code,
            manifest_url=report.manifest_url,
            build_version=report.build_version,
            updater_version=report.updater_version,
            build_updated=report.build_updated,
            duration_s=round(report.duration_s, 2),
            error=error,
        )
