"""
TTL-bounded cache of catalog generations.

A generation is a complete, immutable snapshot of one category. Readers
always get a whole generation: a rebuild runs to completion under the
category lock and only then replaces the reference. A rebuild that was
running when the category got invalidated is handed to its own caller but
never installed, so the next read rescans.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from .models import DEFAULT_CACHE_TTL_SECONDS, Category, DuplicateEntry

T = TypeVar("T")


@dataclass(frozen=True)
class CacheGeneration(Generic[T]):
    """One atomically swapped snapshot of a category catalog.

    Attributes:
        category: Category the snapshot belongs to
        entries: Read-only mapping of entity id -> typed entry
        created_at: Clock value at which the rebuild completed
        duplicates: Ids declared more than once during the scan
        failed_files: Documents skipped because they could not be parsed
        payload: Category specific extras (e.g. the template resolver)
    """

    category: Category
    entries: Mapping[str, T]
    created_at: float
    duplicates: List[DuplicateEntry] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    payload: Any = None

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, entity_id: str) -> Optional[T]:
        return self.entries.get(entity_id)

    def values(self) -> List[T]:
        return list(self.entries.values())


@dataclass
class BuildResult(Generic[T]):
    """What a category builder hands back to the cache."""

    entries: Dict[str, T]
    duplicates: List[DuplicateEntry] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    payload: Any = None


Builder = Callable[[], BuildResult[Any]]


class EntityCache:
    """Per-category cache generations with a fixed time-to-live."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize an empty cache.

        Args:
            ttl_seconds: Age after which a generation is rebuilt
            clock: Monotonic time source (overridable for tests)
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._builders: Dict[Category, Builder] = {}
        self._generations: Dict[Category, CacheGeneration[Any]] = {}
        self._locks: Dict[Category, threading.Lock] = {
            category: threading.Lock() for category in Category
        }
        # Bumped by invalidate(); a rebuild that overlaps a bump is not installed
        self._epochs: Dict[Category, int] = {category: 0 for category in Category}
        self._state_lock = threading.Lock()

    def register(self, category: Category, builder: Builder) -> None:
        """Register the function that performs a full rescan of a category."""
        self._builders[category] = builder

    def is_fresh(self, generation: Optional[CacheGeneration[Any]]) -> bool:
        if generation is None or len(generation) == 0:
            return False
        return self._clock() - generation.created_at <= self.ttl_seconds

    def peek(self, category: Category) -> Optional[CacheGeneration[Any]]:
        """Return the current generation without triggering a rebuild."""
        return self._generations.get(category)

    def get(self, category: Category) -> CacheGeneration[Any]:
        """Return a fresh generation, rebuilding it if stale or empty."""
        generation = self._generations.get(category)
        if self.is_fresh(generation):
            return generation  # type: ignore[return-value]

        with self._locks[category]:
            # Another reader may have rebuilt while we waited
            generation = self._generations.get(category)
            if self.is_fresh(generation):
                return generation  # type: ignore[return-value]
            return self._rebuild(category)

    def _rebuild(self, category: Category) -> CacheGeneration[Any]:
        builder = self._builders.get(category)
        if builder is None:
            raise KeyError(f"No builder registered for category '{category.value}'")

        epoch = self._epochs[category]
        started = self._clock()
        result = builder()
        generation: CacheGeneration[Any] = CacheGeneration(
            category=category,
            entries=MappingProxyType(dict(result.entries)),
            created_at=self._clock(),
            duplicates=list(result.duplicates),
            failed_files=list(result.failed_files),
            payload=result.payload,
        )
        with self._state_lock:
            if self._epochs[category] != epoch:
                self.logger.debug(
                    f"{category.value} cache invalidated during rebuild, not installing"
                )
                return generation
            self._generations[category] = generation
        self.logger.info(
            f"Rebuilt {category.value} cache: {len(generation)} entries "
            f"in {generation.created_at - started:.3f}s"
        )
        return generation

    def invalidate(self, category: Optional[Category] = None) -> None:
        """Drop one generation, or all of them when category is None."""
        with self._state_lock:
            if category is None:
                for known in self._epochs:
                    self._epochs[known] += 1
                self._generations.clear()
            else:
                self._epochs[category] += 1
                self._generations.pop(category, None)
        if category is None:
            self.logger.debug("All cache generations invalidated")
        else:
            self.logger.debug(f"{category.value} cache generation invalidated")

    def age(self, category: Category) -> int:
        """Whole seconds since the generation was built, or -1 if none."""
        generation = self._generations.get(category)
        if generation is None:
            return -1
        return int(self._clock() - generation.created_at)
