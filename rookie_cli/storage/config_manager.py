"""
Manages loading, validation, and migration of the INI settings file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

import pydantic

from rookie_cli.exceptions import ConfigError
from rookie_cli.models.settings import AppSettings

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI settings file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> AppSettings:
        """
        Loads settings from the INI file, applies CLI overrides, and validates them.

        A missing file is not an error: built-in defaults are used instead.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated AppSettings object.

        Raises:
            ConfigError: If the file cannot be parsed or validation fails.
        """
        config_from_file: dict[str, Any] = {}

        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigError(f"Error parsing configuration file: {e}") from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(
                f"No configuration file at '{self.config_file_path}', using defaults."
            )

        if cli_options:
            config_from_file.update(cli_options)

        try:
            return AppSettings(**config_from_file)
        except pydantic.ValidationError as e:
            raise ConfigError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save; missing keys get defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = AppSettings()
        for key in sorted(AppSettings.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            if value is not None:
                config["DEFAULT"][key] = self._format_value(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        try:
            return {
                "adb_path": section.get("adb_path", "adb"),
                "bridge_timeout": section.getfloat("bridge_timeout", 300.0),
                "downloads_dir": section.get("downloads_dir", "downloads"),
                "servers_config": section.get("servers_config", ""),
                "http_timeout": section.getfloat("http_timeout", 60.0),
            }
        except ValueError as e:
            raise ConfigError(f"Invalid value in configuration file: {e}") from e

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = AppSettings()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(AppSettings.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._format_value(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, float):
            return f"{value:g}"
        return str(value)

    def get_config_as_dict(self) -> dict[str, Any]:
        """The raw settings currently on disk, for display."""
        if not self.config_file_path.is_file():
            return {}
        self._parser.read(self.config_file_path, encoding="utf-8")
        return self._get_config_as_dict()
