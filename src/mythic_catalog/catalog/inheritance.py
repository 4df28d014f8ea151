"""
Template inheritance resolution for MythicMobs mobs.

A mob may name another mob as its `Template`; the child inherits every
attribute it does not override. Chains are walked for a bounded number of
hops instead of detecting cycles, so a cyclic declaration yields a truncated
chain rather than an error.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, cast

from .models import MAX_TEMPLATE_DEPTH, RawConfig, TemplateInfo

TEMPLATE_KEY = "Template"

# Nested blocks merged key by key instead of being replaced wholesale
MERGED_BLOCKS = ("Options", "LevelModifiers", "BossBar")


class TemplateResolver:
    """Parent/child index over mob Template declarations.

    Built once per mob cache generation and never mutated afterwards.
    """

    def __init__(self, declarations: Iterable[Tuple[str, Optional[str]]],
                 max_depth: int = MAX_TEMPLATE_DEPTH):
        """Build the parent map and the reverse child index.

        Args:
            declarations: (mob_id, declared parent id or None) pairs
            max_depth: Maximum number of entries returned by chain()
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.max_depth = max_depth

        # First pass: id -> parent
        self._parents: Dict[str, Optional[str]] = {}
        for mob_id, parent in declarations:
            self._parents[mob_id] = parent or None

        # Second pass: parent -> children
        self._children: Dict[str, List[str]] = {}
        for mob_id, parent in self._parents.items():
            if parent:
                self._children.setdefault(parent, []).append(mob_id)
        for children in self._children.values():
            children.sort()

    def __contains__(self, mob_id: object) -> bool:
        return mob_id in self._parents

    def parent(self, mob_id: str) -> Optional[str]:
        return self._parents.get(mob_id)

    def children(self, mob_id: str) -> List[str]:
        return list(self._children.get(mob_id, []))

    def chain(self, mob_id: str) -> List[str]:
        """Return [mob_id, parent, grandparent, ...].

        The walk stops when a mob has no parent, when the parent is not a
        known mob (it is still listed), or after max_depth entries.
        """
        if mob_id not in self._parents:
            return []

        chain = [mob_id]
        current = self._parents.get(mob_id)
        while current and len(chain) < self.max_depth:
            chain.append(current)
            current = self._parents.get(current)

        if current and len(chain) >= self.max_depth:
            self.logger.debug(
                f"Template chain of '{mob_id}' truncated at {self.max_depth} entries"
            )
        return chain

    def info(self, mob_id: str) -> Optional[TemplateInfo]:
        """Return parent, children and depth of a mob, or None if unknown."""
        if mob_id not in self._parents:
            return None
        return TemplateInfo(
            mob_id=mob_id,
            parent=self._parents.get(mob_id),
            children=self.children(mob_id),
            depth=len(self.chain(mob_id)) - 1,
        )

    def merged_config(
        self, mob_id: str, lookup: Callable[[str], Optional[RawConfig]]
    ) -> Optional[RawConfig]:
        """Merge attributes down the template chain.

        Args:
            mob_id: Mob to resolve
            lookup: Returns the raw attribute mapping of a mob id

        Returns:
            Attributes with inherited fields filled in, or None if the mob
            itself cannot be looked up
        """
        chain = self.chain(mob_id)
        if not chain:
            return None

        own = lookup(mob_id)
        if own is None:
            return None

        merged: RawConfig = {}
        # Root-most ancestor first, the mob itself last
        for ancestor in reversed(chain[1:]):
            parent_config = lookup(ancestor)
            if parent_config is not None:
                merged = self._merge(merged, parent_config)
        merged = self._merge(merged, own)
        merged.pop(TEMPLATE_KEY, None)
        return merged

    @staticmethod
    def _merge(parent: RawConfig, child: RawConfig) -> RawConfig:
        """Overlay child on parent; known nested blocks merge key-wise."""
        merged = parent.copy()
        for key, value in child.items():
            if key in MERGED_BLOCKS and isinstance(value, dict) and isinstance(merged.get(key), dict):
                block = cast(Dict[str, Any], merged[key]).copy()
                block.update(cast(Dict[str, Any], value))
                merged[key] = block
            else:
                merged[key] = value
        return merged
