"""
Settings validation system for mythic-catalog.
"""

import logging
from typing import List, TYPE_CHECKING

from .types import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []

        # Validate Mobs path
        mobs_path = self.settings.mobs_path
        if mobs_path:
            if not mobs_path.exists():
                errors.append(f"Mobs path does not exist: {mobs_path}")
            elif not mobs_path.is_dir():
                errors.append(f"Mobs path is not a directory: {mobs_path}")
            else:
                # Sibling catalogs are optional, missing ones just stay empty
                for name, path in (
                    ("DropTables", self.settings.drop_tables_path),
                    ("Skills", self.settings.skills_path),
                    ("Items", self.settings.items_path),
                ):
                    if path is not None and not path.is_dir():
                        warnings.append(f"{name} directory not found: {path}")
        else:
            warnings.append("Mobs path not set")

        if self.settings.cache_ttl_seconds < 0:
            errors.append(f"Cache TTL must not be negative: {self.settings.cache_ttl_seconds}")
        if self.settings.scan_workers < 1:
            errors.append(f"Scan workers must be positive: {self.settings.scan_workers}")

        for message in errors:
            logger.debug(f"Settings error: {message}")

        return ValidationResult(
            is_valid=len(errors) == 0, errors=errors, warnings=warnings
        )
