"""
Loads the optional updater.ini file and merges it with command-line options.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from build_updater.exceptions import ConfigurationError
from build_updater.models.config import UpdaterConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Builds the run's UpdaterConfig from updater.ini and CLI overrides."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(
        self,
        manifest_url: str,
        install_root: Path,
        self_path: Path,
        cli_options: dict[str, Any] | None = None,
    ) -> UpdaterConfig:
        """
        Loads settings from the INI file if there is one, applies CLI overrides,
        and validates the result.

        Args:
            manifest_url: The initial manifest URL given on the command line.
            install_root: The installation root directory.
            self_path: Default location of the updater's own code.
            cli_options: Options given on the command line; None values are ignored.

        Returns:
            A validated UpdaterConfig object.

        Raises:
            ConfigurationError: If the file cannot be parsed or validation fails.
        """
        settings: dict[str, Any] = {"self_path": self_path}

        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
            settings.update(self._get_config_as_dict())
            log.debug(f"Loaded settings from '{self.config_file_path}'.")

        if cli_options:
            settings.update({k: v for k, v in cli_options.items() if v is not None})

        try:
            return UpdaterConfig(
                manifest_url=manifest_url, install_root=install_root, **settings
            )
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the keys present in the 'DEFAULT' section into a dictionary."""
        section = self._parser["DEFAULT"]
        known_keys = UpdaterConfig.get_ini_keys()

        for key in section:
            if key not in known_keys:
                log.warning(f"Ignoring unknown setting '{key}' in updater.ini.")

        getters = {
            "self_path": section.get,
            "keep_previous_build": section.getboolean,
            "launch": section.getboolean,
            "download_attempts": section.getint,
            "retry_base_delay": section.getfloat,
            "connect_timeout": section.getfloat,
            "read_timeout": section.getfloat,
            "auxiliary_markers": lambda key: [
                m.strip() for m in section.get(key, "").split(",") if m.strip()
            ],
        }

        values = {}
        for key, getter in getters.items():
            if key not in section:
                continue
            try:
                values[key] = getter(key)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for '{key}' in updater.ini: {e}"
                ) from e
        return values
