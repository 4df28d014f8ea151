"""
Path-related settings for mythic-catalog.
"""

import os
from pathlib import Path
from typing import Optional

from .types import SettingsSection

# Environment variable consulted when no path is stored
MOBS_PATH_ENV = "MYTHICMOBS_MOBS_PATH"


class PathSettings(SettingsSection):
    """Manages the MythicMobs directory locations.

    Only the `Mobs` directory is stored; the other category roots are its
    siblings inside the plugin directory.
    """

    @property
    def mobs_path(self) -> Optional[Path]:
        """Get the MythicMobs `Mobs` directory path.

        Falls back to the MYTHICMOBS_MOBS_PATH environment variable when no
        path has been stored.
        """
        path_str = self._get_str("paths/mobs") or os.environ.get(MOBS_PATH_ENV, "")
        return Path(path_str) if path_str else None

    @mobs_path.setter
    def mobs_path(self, value: Optional[Path]) -> None:
        self._store("paths/mobs", str(value) if value else "")

    @property
    def plugin_path(self) -> Optional[Path]:
        """Get the MythicMobs plugin directory (parent of Mobs)."""
        mobs = self.mobs_path
        return mobs.parent if mobs else None

    def _sibling(self, name: str) -> Optional[Path]:
        plugin = self.plugin_path
        return plugin / name if plugin else None

    @property
    def drop_tables_path(self) -> Optional[Path]:
        return self._sibling("DropTables")

    @property
    def skills_path(self) -> Optional[Path]:
        return self._sibling("Skills")

    @property
    def items_path(self) -> Optional[Path]:
        return self._sibling("Items")
