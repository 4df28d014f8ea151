"""
Settings package for mythic-catalog.

Persistent configuration stored through Qt's QSettings, either in the
platform's native store or in an INI file.

Usage:
    from mythic_catalog.settings import AppSettings

    settings = AppSettings()
    settings.mobs_path = Path("/srv/minecraft/plugins/MythicMobs/Mobs")
    result = settings.validate()
"""

from .core import AppSettings
from .types import ConfigVersion, ValidationResult

__all__ = [
    "AppSettings",
    "ConfigVersion",
    "ValidationResult",
]
