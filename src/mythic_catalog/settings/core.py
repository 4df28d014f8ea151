"""
Core settings management for mythic-catalog.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QSettings

from .types import ConfigVersion, SettingsSection, ValidationResult
from .migration import SettingsMigrator
from .validation import SettingsValidator
from .paths import PathSettings
from .cache import CacheSettings
from .logging import LoggingSettings

logger = logging.getLogger(__name__)


class AppSettings(SettingsSection):
    """
    Persistent catalog configuration backed by QSettings.

    Values live under a per-profile group, either in the platform's native
    store or in an explicit INI file. The path, cache and logging
    subsystems are reachable directly and through flat delegating
    properties.
    """

    def __init__(
        self,
        profile: str = "default",
        settings_file: Optional[Union[str, Path]] = None,
    ):
        """Open the settings store for a profile.

        Args:
            profile: Group name separating independent configurations
            settings_file: INI file to use instead of the native store
        """
        if settings_file is not None:
            store = QSettings(str(settings_file), QSettings.Format.IniFormat)
        else:
            store = QSettings("mythic-catalog", "mythic_catalog")
        super().__init__(store)
        self.profile = profile
        self.settings.beginGroup(profile)

        self._paths = PathSettings(self.settings)
        self._cache = CacheSettings(self.settings)
        self._logging = LoggingSettings(self.settings)
        self._validator = SettingsValidator(self)

        SettingsMigrator(self.settings).ensure_version()
        logger.debug(f"Settings profile '{profile}' loaded from {self.settings.fileName()}")

    # === SUBSYSTEMS ===

    @property
    def paths(self) -> PathSettings:
        return self._paths

    @property
    def cache(self) -> CacheSettings:
        return self._cache

    @property
    def logging(self) -> LoggingSettings:
        return self._logging

    # === VERSION ===

    @property
    def version(self) -> str:
        """Settings schema version stamped by the migrator."""
        return self._get_str("app/version", ConfigVersion.CURRENT.value)

    # === PATHS ===

    @property
    def mobs_path(self) -> Optional[Path]:
        return self._paths.mobs_path

    @mobs_path.setter
    def mobs_path(self, value: Optional[Path]) -> None:
        self._paths.mobs_path = value

    @property
    def drop_tables_path(self) -> Optional[Path]:
        return self._paths.drop_tables_path

    @property
    def skills_path(self) -> Optional[Path]:
        return self._paths.skills_path

    @property
    def items_path(self) -> Optional[Path]:
        return self._paths.items_path

    # === CACHE ===

    @property
    def cache_ttl_seconds(self) -> float:
        return self._cache.ttl_seconds

    @cache_ttl_seconds.setter
    def cache_ttl_seconds(self, value: float) -> None:
        self._cache.ttl_seconds = value

    @property
    def scan_workers(self) -> int:
        return self._cache.scan_workers

    @scan_workers.setter
    def scan_workers(self, value: int) -> None:
        self._cache.scan_workers = value

    # === LOGGING ===

    @property
    def console_logging(self) -> bool:
        return self._logging.console_logging

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        self._logging.console_logging = value

    @property
    def console_log_level(self) -> str:
        return self._logging.console_log_level

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        self._logging.console_log_level = value

    @property
    def console_use_colors(self) -> bool:
        return self._logging.console_use_colors

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        self._logging.console_use_colors = value

    @property
    def file_logging(self) -> bool:
        return self._logging.file_logging

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        self._logging.file_logging = value

    @property
    def file_log_level(self) -> str:
        return self._logging.file_log_level

    @file_log_level.setter
    def file_log_level(self, value: str) -> None:
        self._logging.file_log_level = value

    @property
    def log_file_path(self) -> str:
        return self._logging.log_file_path

    @log_file_path.setter
    def log_file_path(self, value: str) -> None:
        self._logging.log_file_path = value

    @property
    def log_file_absolute_path(self) -> Path:
        return self._logging.log_file_absolute_path

    # === MAINTENANCE ===

    def validate(self) -> ValidationResult:
        """Check the stored paths and cache values; see SettingsValidator."""
        return self._validator.validate()

    def get_settings_file_path(self) -> str:
        return self.settings.fileName()

    def sync(self) -> None:
        self.settings.sync()
