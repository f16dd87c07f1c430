"""Tests for UpdaterConfig and the updater.ini loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from build_updater.exceptions import ConfigurationError
from build_updater.models.config import DEFAULT_AUXILIARY_MARKERS, UpdaterConfig
from build_updater.storage.config_manager import ConfigManager

from .conftest import MANIFEST_URL


def _load(root: Path, ini: str | None = None, **cli_options) -> UpdaterConfig:
    config_file = root / "updater.ini"
    if ini is not None:
        config_file.write_text(ini, encoding="utf-8")
    return ConfigManager(config_file).load_config(
        MANIFEST_URL, root, root / "updater.py", cli_options=cli_options
    )


class TestUpdaterConfig:
    def test_layout_is_derived_from_install_root(self, install_root: Path) -> None:
        config = UpdaterConfig(
            manifest_url=MANIFEST_URL, install_root=install_root, self_path="updater.py"
        )
        assert config.build_dir == install_root / "Build"
        assert config.staging_dir == install_root / "Build_new"
        assert config.previous_dir == install_root / "Build_old"
        assert config.state_path == install_root / "manifest.local.json"
        assert config.log_dir == install_root / "Log"
        assert config.history_path.parent == install_root / "Log"

    def test_relative_self_path_is_anchored(self, install_root: Path) -> None:
        config = UpdaterConfig(
            manifest_url=MANIFEST_URL, install_root=install_root, self_path="bin/up.py"
        )
        assert config.self_path == install_root / "bin" / "up.py"

    @pytest.mark.parametrize("url", ["ftp://example.com/m.json", "manifest.json", ""])
    def test_rejects_non_http_manifest(self, install_root: Path, url: str) -> None:
        with pytest.raises(ValidationError):
            UpdaterConfig(manifest_url=url, install_root=install_root, self_path="u.py")

    def test_ini_keys_are_the_tunable_settings(self) -> None:
        assert UpdaterConfig.get_ini_keys() == {
            "self_path",
            "keep_previous_build",
            "launch",
            "auxiliary_markers",
            "download_attempts",
            "retry_base_delay",
            "connect_timeout",
            "read_timeout",
        }

    def test_markers_are_lowercased(self, install_root: Path) -> None:
        config = UpdaterConfig(
            manifest_url=MANIFEST_URL,
            install_root=install_root,
            self_path="u.py",
            auxiliary_markers=[" Crash ", "", "BugSplat"],
        )
        assert config.auxiliary_markers == ["crash", "bugsplat"]


class TestConfigManager:
    def test_defaults_without_ini(self, install_root: Path) -> None:
        config = _load(install_root)
        assert config.keep_previous_build is True
        assert config.launch is True
        assert config.download_attempts == 3
        assert config.auxiliary_markers == DEFAULT_AUXILIARY_MARKERS
        assert config.self_path == install_root / "updater.py"

    def test_reads_ini_values(self, install_root: Path) -> None:
        config = _load(
            install_root,
            "[DEFAULT]\n"
            "keep_previous_build = no\n"
            "download_attempts = 5\n"
            "read_timeout = 30.5\n"
            "auxiliary_markers = crash, helper\n"
            "self_path = tools/updater.py\n",
        )
        assert config.keep_previous_build is False
        assert config.download_attempts == 5
        assert config.read_timeout == 30.5
        assert config.auxiliary_markers == ["crash", "helper"]
        assert config.self_path == install_root / "tools" / "updater.py"

    def test_cli_options_override_ini(self, install_root: Path) -> None:
        config = _load(
            install_root,
            "[DEFAULT]\nkeep_previous_build = no\nlaunch = yes\n",
            keep_previous_build=True,
            launch=False,
        )
        assert config.keep_previous_build is True
        assert config.launch is False

    def test_none_cli_options_are_ignored(self, install_root: Path) -> None:
        config = _load(
            install_root, "[DEFAULT]\nlaunch = no\n", launch=None, keep_previous_build=None
        )
        assert config.launch is False
        assert config.keep_previous_build is True

    def test_unknown_keys_are_ignored(self, install_root: Path) -> None:
        config = _load(install_root, "[DEFAULT]\ncolour = blue\n")
        assert not hasattr(config, "colour")

    @pytest.mark.parametrize(
        "ini",
        [
            "[DEFAULT]\ndownload_attempts = many\n",
            "[DEFAULT]\nlaunch = sometimes\n",
            "[DEFAULT]\ndownload_attempts = 0\n",
            "[DEFAULT]\nconnect_timeout = -1\n",
            "no section header\n",
        ],
    )
    def test_invalid_ini_raises_configuration_error(
        self, install_root: Path, ini: str
    ) -> None:
        with pytest.raises(ConfigurationError):
            _load(install_root, ini)
