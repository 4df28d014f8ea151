"""
Settings migration system for mythic-catalog.
"""

import logging
from pathlib import Path
from typing import Callable, Dict

from .types import ConfigVersion, SettingsSection

logger = logging.getLogger(__name__)


class SettingsMigrator(SettingsSection):
    """Stamps the configuration version and upgrades older stores.

    Each step upgrades exactly one version; steps are applied in order
    until the store reaches ConfigVersion.CURRENT.
    """

    def _steps(self) -> Dict[str, Callable[[], str]]:
        return {ConfigVersion.V1_0.value: self._migrate_1_0_to_1_1}

    def ensure_version(self) -> None:
        stored = self._get_str("app/version")
        target = ConfigVersion.CURRENT.value

        if not stored:
            logger.info("New settings store, stamping current version")
            self._store("app/version", target)
            return

        version = stored
        steps = self._steps()
        while version != target:
            step = steps.get(version)
            if step is None:
                logger.warning(f"No migration from settings version {version}, stamping {target}")
                break
            logger.info(f"Migrating settings from {version}")
            version = step()

        if stored != target:
            self.settings.setValue("app/migrated_from", stored)
            self._store("app/version", target)
            logger.info(f"Settings migrated from {stored} to {target}")

    def _migrate_1_0_to_1_1(self) -> str:
        """1.0 stored the plugin directory under `paths/plugin`; 1.1 stores Mobs."""
        legacy = self._get_str("paths/plugin")
        if legacy:
            plugin_path = Path(legacy)
            mobs_path = plugin_path if plugin_path.name == "Mobs" else plugin_path / "Mobs"
            if not mobs_path.is_dir():
                logger.warning(f"Migrated unverified Mobs path: {mobs_path}")
            self.settings.setValue("paths/mobs", str(mobs_path))
            self.settings.remove("paths/plugin")
            logger.debug(f"paths/plugin {plugin_path} -> paths/mobs {mobs_path}")
        return ConfigVersion.V1_1.value
