"""
Catalog cache settings for mythic-catalog.
"""

import logging

from .types import SettingsSection

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_SCAN_WORKERS = 8


class CacheSettings(SettingsSection):
    """Manages cache lifetime and scan parallelism."""

    @property
    def ttl_seconds(self) -> float:
        """Get the age after which a catalog is rescanned."""
        return self._get_float("cache/ttl_seconds", DEFAULT_TTL_SECONDS)

    @ttl_seconds.setter
    def ttl_seconds(self, value: float) -> None:
        if value < 0:
            logger.warning(f"Invalid cache TTL: {value}, keeping current: {self.ttl_seconds}")
            return
        self._store("cache/ttl_seconds", float(value))

    @property
    def scan_workers(self) -> int:
        """Get the number of threads used to parse documents."""
        return self._get_int("cache/scan_workers", DEFAULT_SCAN_WORKERS)

    @scan_workers.setter
    def scan_workers(self, value: int) -> None:
        if value <= 0:
            logger.warning(
                f"Invalid scan worker count: {value}, keeping current: {self.scan_workers}"
            )
            return
        self._store("cache/scan_workers", int(value))
