"""
Document loaders for MythicMobs configuration trees.

Handles recursive discovery of YAML documents under a category root and
parsing them in parallel using ThreadPoolExecutor. A file that cannot be
parsed is logged and skipped; the rest of the tree is still loaded.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional, cast

import yaml

from .errors import DocumentParseError
from .models import (
    DOCUMENT_EXTENSIONS,
    Document,
    DocumentScan,
    EntityLocation,
    RawDocument,
)


class DocumentStore:
    """Discovers and parses YAML documents under category roots."""

    def __init__(self, max_workers: int = 8):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.max_workers = max(1, max_workers)
        self.logger.debug("DocumentStore initialized")

    @staticmethod
    def is_configured(root: Optional[Path]) -> bool:
        """Return True if root exists and is a directory."""
        if root is None or not str(root):
            return False
        try:
            return root.exists() and root.is_dir()
        except OSError:
            return False

    @staticmethod
    def is_document(path: Path) -> bool:
        return path.is_file() and path.suffix.lower() in DOCUMENT_EXTENSIONS

    def discover(self, root: Path) -> List[Path]:
        """Return all document files under root, sorted by relative path."""
        files = [path for path in root.rglob("*") if self.is_document(path)]
        return sorted(files, key=lambda path: path.relative_to(root).as_posix())

    # === PARSING ===

    @staticmethod
    def read_text(path: Path) -> str:
        """Read a document as UTF-8 text."""
        return path.read_text(encoding="utf-8")

    def load_file(self, path: Path) -> RawDocument:
        """Parse one document into a mapping of entity id -> attributes.

        Args:
            path: Path to the YAML file

        Returns:
            Mapping of top-level keys (stringified) to their values. An empty
            file yields an empty mapping.

        Raises:
            DocumentParseError: If the file cannot be read, is not valid YAML
                or its top level is not a mapping
        """
        try:
            data = yaml.safe_load(self.read_text(path))
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentParseError(path, f"cannot read file: {e}") from e
        except yaml.YAMLError as e:
            raise DocumentParseError(path, f"invalid YAML: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DocumentParseError(
                path, f"top level is {type(data).__name__}, expected a mapping"
            )
        return {str(key): value for key, value in cast(Dict[Any, Any], data).items()}

    def enumerate(self, root: Optional[Path]) -> DocumentScan:
        """Parse every document under root.

        Files are parsed in parallel but returned in sorted path order, so
        that the entity discovered last for a duplicated id is deterministic.

        Args:
            root: Category root directory

        Returns:
            DocumentScan with parsed documents and the list of failed files
        """
        if root is None or not self.is_configured(root):
            self.logger.warning(f"Category root not configured or missing: {root}")
            return DocumentScan(root=root or Path(), configured=False)

        files = self.discover(root)
        scan = DocumentScan(root=root, configured=True)
        if not files:
            self.logger.info(f"No documents found under {root}")
            return scan

        self.logger.debug(f"Found {len(files)} documents under {root}")
        parsed: Dict[Path, RawDocument] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self.load_file, path): path for path in files
            }
            for future in as_completed(future_to_file):
                path = future_to_file[future]
                try:
                    parsed[path] = future.result()
                except DocumentParseError as e:
                    # Log parse/read errors but do not stop the whole scan
                    self.logger.error(f"Skipping document: {e}")
                    scan.failed.append(path.relative_to(root).as_posix())

        for path in files:
            entries = parsed.get(path)
            if entries:
                scan.documents.append(
                    Document(relative_path=path.relative_to(root).as_posix(), entries=entries)
                )

        scan.failed.sort()
        self.logger.info(
            f"Scanned {root}: {len(scan.documents)} documents, {len(scan.failed)} failed"
        )
        return scan

    # === SINGLE ENTITY ===

    def locate(self, root: Optional[Path], entity_id: str) -> Optional[Path]:
        """Return the document that owns entity_id (last declaration wins)."""
        if root is None or not self.is_configured(root):
            return None
        owner: Optional[Path] = None
        for path in self.discover(root):
            try:
                entries = self.load_file(path)
            except DocumentParseError as e:
                self.logger.debug(f"Ignoring unreadable document while locating: {e}")
                continue
            if entity_id in entries:
                owner = path
        return owner

    def read_single_entity(
        self, root: Optional[Path], entity_id: str, relative_path: Optional[str] = None
    ) -> Optional[EntityLocation]:
        """Read one entity together with its owning file.

        Args:
            root: Category root directory
            entity_id: Id of the entity (case-sensitive)
            relative_path: Owning file if already known (e.g. from the cache);
                the tree is searched when omitted or stale

        Returns:
            EntityLocation, or None if the id is not declared under root
        """
        if root is None or not self.is_configured(root):
            return None

        path: Optional[Path] = None
        if relative_path:
            candidate = root / relative_path
            if self.is_document(candidate):
                path = candidate
        if path is None:
            path = self.locate(root, entity_id)
        if path is None:
            return None

        try:
            text = self.read_text(path)
            entries = self.load_file(path)
        except (OSError, DocumentParseError) as e:
            self.logger.error(f"Failed to read entity '{entity_id}': {e}")
            return None

        if entity_id not in entries:
            if relative_path:
                # Cached location is stale, search the whole tree
                return self.read_single_entity(root, entity_id)
            return None

        return EntityLocation(
            id=entity_id,
            path=path,
            relative_path=path.relative_to(root).as_posix(),
            attributes=entries[entity_id],
            text=text,
        )
