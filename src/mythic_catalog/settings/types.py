"""
Configuration type definitions and exceptions for mythic-catalog.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigVersion(Enum):
    """Configuration version for migration support."""
    V1_0 = "1.0"
    V1_1 = "1.1"
    CURRENT = V1_1


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]


class SettingsSection:
    """Typed accessors over a QSettings store shared by settings subsystems.

    QSettings hands back strings for values read from INI files, so every
    getter coerces and falls back to the default on malformed input.
    """

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _get_str(self, key: str, default: str = "") -> str:
        value = self.settings.value(key, default)
        return str(value) if value is not None else default

    def _get_bool(self, key: str, default: bool = False) -> bool:
        value = self.settings.value(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "on")
        return bool(value) if value is not None else default

    def _get_float(self, key: str, default: float) -> float:
        try:
            return float(str(self.settings.value(key, default)))
        except (TypeError, ValueError):
            return default

    def _get_int(self, key: str, default: int) -> int:
        try:
            return int(str(self.settings.value(key, default)))
        except (TypeError, ValueError):
            return default

    def _store(self, key: str, value: Any) -> None:
        """Write one value and flush it to storage."""
        self.settings.setValue(key, value)
        self.settings.sync()

    def _store_level(self, key: str, value: str, current: str) -> None:
        """Store a logging level name, ignoring unknown names."""
        level = value.upper()
        if level not in LOG_LEVELS:
            logger.warning(f"Unknown log level '{value}' for {key}, keeping {current}")
            return
        self._store(key, level)
