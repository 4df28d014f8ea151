"""
Partial rewriting of one entity inside a shared YAML document.

The entity's top-level block is located in the file text and replaced by
a freshly dumped block, leaving every sibling block byte-identical. When
the block cannot be located unambiguously, or the spliced text does not
parse back to the expected mapping, the whole mapping is dumped instead
(comments and formatting of the file are then lost).

There is no locking: two concurrent saves to the same file race and the
later write wins, possibly based on a stale read.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, cast

import yaml

from .errors import DocumentParseError, EntityNotFoundError, WriteFailure
from .loaders import DocumentStore
from .models import RawDocument, SaveResult

_DOCUMENT_MARKERS = ("---", "...")


@dataclass
class TextBlock:
    """Line span [start, end) of one top-level key in a document."""

    key: str
    start: int
    end: int


def dump_entity(entity_id: str, attributes: Any) -> str:
    """Serialize a single `id: attributes` block."""
    return yaml.safe_dump(
        {entity_id: attributes},
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def dump_document(entries: RawDocument) -> str:
    return yaml.safe_dump(
        entries, sort_keys=False, allow_unicode=True, default_flow_style=False
    )


def _is_top_level(line: str) -> bool:
    if not line.strip() or line[0] in (" ", "\t", "#"):
        return False
    # Column-0 sequence items continue the key above them
    if line.startswith("-") and line[1:2] in ("", " ", "\t", "\n", "\r"):
        return False
    return not line.rstrip().startswith(_DOCUMENT_MARKERS)


def _key_of(line: str) -> Optional[str]:
    """Extract the mapping key of a top-level line (None if not a key line)."""
    if line.startswith(("-", "?", "[", "{")):
        return None

    if line[0] in ("'", '"'):
        quote = line[0]
        index = 1
        while index < len(line):
            if line[index] == "\\" and quote == '"':
                index += 2
                continue
            if line[index] == quote:
                if quote == "'" and line[index + 1:index + 2] == "'":
                    index += 2
                    continue
                break
            index += 1
        key_text = line[:index + 1]
        rest = line[index + 1:].lstrip()
        if not rest.startswith(":"):
            return None
    else:
        colon = line.find(":")
        while colon != -1 and colon + 1 < len(line) and not line[colon + 1].isspace():
            colon = line.find(":", colon + 1)
        if colon == -1:
            return None
        key_text = line[:colon].rstrip()

    try:
        key = yaml.safe_load(key_text)
    except yaml.YAMLError:
        return key_text
    return str(key)


def find_blocks(text: str) -> List[TextBlock]:
    """Split document text into top-level key blocks.

    Column-0 comments and blank lines directly above a key belong to that
    key's neighbourhood, not to the preceding block.
    """
    lines = text.splitlines(keepends=True)
    starts: List[tuple[int, str]] = []
    for index, line in enumerate(lines):
        if _is_top_level(line):
            key = _key_of(line)
            if key is None:
                return []
            starts.append((index, key))

    blocks: List[TextBlock] = []
    for position, (start, key) in enumerate(starts):
        end = starts[position + 1][0] if position + 1 < len(starts) else len(lines)
        while end - 1 > start and (not lines[end - 1].strip() or lines[end - 1].startswith("#")):
            end -= 1
        blocks.append(TextBlock(key=key, start=start, end=end))
    return blocks


def extract_entity_text(text: str, entity_id: str) -> Optional[str]:
    """Return the exact source text of one entity's block, if locatable."""
    matches = [block for block in find_blocks(text) if block.key == entity_id]
    if len(matches) != 1:
        return None
    lines = text.splitlines(keepends=True)
    return "".join(lines[matches[0].start:matches[0].end])


class ConfigWriter:
    """Replaces one entity's attribute block inside its owning document."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.store = store or DocumentStore()

    def save(
        self,
        root: Optional[Path],
        entity_id: str,
        attributes: Any,
        relative_path: Optional[str] = None,
        allow_list: bool = False,
    ) -> SaveResult:
        """Write new attributes for entity_id back to its document.

        Args:
            root: Category root directory
            entity_id: Id of the entity to replace
            attributes: New attribute mapping (or list, see allow_list)
            relative_path: Owning file if already known
            allow_list: Accept a bare list, as used by drop tables and
                skill groups written in list form

        Returns:
            SaveResult; failures are reported, never raised
        """
        try:
            path = self._save(root, entity_id, attributes, relative_path, allow_list)
        except (WriteFailure, EntityNotFoundError, DocumentParseError) as e:
            self.logger.error(f"Failed to save '{entity_id}': {e}")
            return SaveResult(success=False, error=str(e))

        relative = path.relative_to(root).as_posix() if root else str(path)
        self.logger.info(f"Saved '{entity_id}' to {relative}")
        return SaveResult(success=True, file=relative)

    def _save(
        self,
        root: Optional[Path],
        entity_id: str,
        attributes: Any,
        relative_path: Optional[str],
        allow_list: bool = False,
    ) -> Path:
        accepted = (dict, list) if allow_list else (dict,)
        if not isinstance(attributes, accepted):
            expected = "a mapping or a list" if allow_list else "a mapping"
            raise WriteFailure(
                f"attributes must be {expected}, got {type(attributes).__name__}"
            )
        if root is None or not self.store.is_configured(root):
            raise WriteFailure(f"category root not configured: {root}")

        location = self.store.read_single_entity(root, entity_id, relative_path)
        if location is None:
            raise EntityNotFoundError(entity_id, root)

        entries = self.store.load_file(location.path)
        try:
            new_text = self.render(location.text, entries, entity_id, attributes)
        except yaml.YAMLError as e:
            raise WriteFailure(f"cannot serialize attributes: {e}") from e

        try:
            location.path.write_text(new_text, encoding="utf-8")
        except OSError as e:
            raise WriteFailure(f"cannot write {location.path}: {e}") from e
        return location.path

    def render(
        self, text: str, entries: RawDocument, entity_id: str, attributes: Any
    ) -> str:
        """Produce the new document text with entity_id replaced."""
        expected: Dict[str, Any] = dict(entries)
        expected[entity_id] = yaml.safe_load(dump_entity(entity_id, attributes))[entity_id]

        spliced = self._splice(text, entity_id, attributes)
        if spliced is not None and self._parses_to(spliced, expected):
            return spliced

        self.logger.warning(
            f"Could not rewrite '{entity_id}' in place, re-serializing the whole document"
        )
        rewritten = dict(entries)
        rewritten[entity_id] = attributes
        return dump_document(rewritten)

    @staticmethod
    def _splice(text: str, entity_id: str, attributes: Any) -> Optional[str]:
        blocks = [block for block in find_blocks(text) if block.key == entity_id]
        if len(blocks) != 1:
            return None
        block = blocks[0]
        lines = text.splitlines(keepends=True)
        replacement = dump_entity(entity_id, attributes)
        if block.end < len(lines) and not replacement.endswith("\n"):
            replacement += "\n"
        return "".join(lines[:block.start]) + replacement + "".join(lines[block.end:])

    @staticmethod
    def _parses_to(text: str, expected: Dict[str, Any]) -> bool:
        try:
            parsed = yaml.safe_load(text)
        except yaml.YAMLError:
            return False
        if not isinstance(parsed, dict):
            return False
        normalized = {str(k): v for k, v in cast(Dict[Any, Any], parsed).items()}
        return normalized == expected
