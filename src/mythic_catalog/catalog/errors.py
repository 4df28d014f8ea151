"""
Exceptions raised between catalog layers.

The service facade never lets these escape: scans turn them into skipped
files, lookups into None and writes into a failed SaveResult.
"""

from pathlib import Path
from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class DocumentParseError(CatalogError):
    """Raised when a document cannot be read or parsed."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class EntityNotFoundError(CatalogError):
    """Raised when an id is not declared in any document of a root."""

    def __init__(self, entity_id: str, root: Optional[Path] = None):
        where = f" under {root}" if root else ""
        super().__init__(f"Entity '{entity_id}' not found{where}")
        self.entity_id = entity_id


class WriteFailure(CatalogError):
    """Raised when an entity cannot be written back to its document."""
    pass
