"""
Logging-related settings for mythic-catalog.
"""

from pathlib import Path

from .types import SettingsSection

DEFAULT_LOG_FILE_PATH = "logs/mythic_catalog.csv"


class LoggingSettings(SettingsSection):
    """Console and rotating-file log output options."""

    # === CONSOLE ===

    @property
    def console_logging(self) -> bool:
        return self._get_bool("logging/console_enabled", True)

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        self._store("logging/console_enabled", bool(value))

    @property
    def console_log_level(self) -> str:
        """Level name applied to the console handler."""
        return self._get_str("logging/console_level", "INFO")

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        self._store_level("logging/console_level", value, self.console_log_level)

    @property
    def console_use_colors(self) -> bool:
        """Whether level names on the console are ANSI-colored."""
        return self._get_bool("logging/console_use_colors", True)

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        self._store("logging/console_use_colors", bool(value))

    # === FILE ===

    @property
    def file_logging(self) -> bool:
        return self._get_bool("logging/file_enabled", False)

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        self._store("logging/file_enabled", bool(value))

    @property
    def file_log_level(self) -> str:
        return self._get_str("logging/file_level", "DEBUG")

    @file_log_level.setter
    def file_log_level(self, value: str) -> None:
        self._store_level("logging/file_level", value, self.file_log_level)

    @property
    def log_file_path(self) -> str:
        """Log file location; relative paths resolve against the working directory."""
        return self._get_str("logging/file_path") or DEFAULT_LOG_FILE_PATH

    @log_file_path.setter
    def log_file_path(self, value: str) -> None:
        self._store("logging/file_path", str(value))

    @property
    def log_file_absolute_path(self) -> Path:
        return Path(self.log_file_path).resolve()
