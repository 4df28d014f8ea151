"""
Main service for reading MythicMobs configuration.

Provides the high-level API consumed by the dashboard: listing, lookup,
search and detail views for mobs, items, drop tables and skill groups,
raw YAML retrieval, saving, validation and cache status. Errors never
propagate to the caller: a missing root yields empty catalogs, an unknown id
yields None and a failed save yields a failed SaveResult.
"""

import logging
import time
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import orjson

from .cache import BuildResult, CacheGeneration, EntityCache
from .errors import DocumentParseError
from .extractors import (
    DropTableExtractor,
    ItemExtractor,
    MobExtractor,
    SkillGroupExtractor,
    drop_item_reference,
    skill_group_references,
)
from .inheritance import TemplateResolver
from .loaders import DocumentStore
from .models import (
    DEFAULT_CACHE_TTL_SECONDS,
    CatalogStatus,
    Category,
    DropTable,
    DropTableDetail,
    DuplicateEntry,
    ItemDefinition,
    ItemDetail,
    MobDefinition,
    MobDetail,
    RawDocument,
    SaveResult,
    SkillGroupDefinition,
    SkillGroupDetail,
    TemplateInfo,
    ValidationReport,
)
from .skill_parser import SkillStringParser
from .textutil import contains_keyword
from .validator import ConfigValidator
from .writer import ConfigWriter, dump_entity, extract_entity_text

if TYPE_CHECKING:
    from ..settings import AppSettings

# Sibling directories of the Mobs root
CATEGORY_DIRECTORIES = {
    Category.DROP_TABLE: "DropTables",
    Category.SKILL_GROUP: "Skills",
    Category.ITEM: "Items",
}

# Categories whose entries may be a bare list instead of a mapping
LIST_FORM_CATEGORIES = (Category.DROP_TABLE, Category.SKILL_GROUP)

Extract = Callable[[str, Any, str], Any]


class MythicCatalogService:
    """Service for working with MythicMobs configuration catalogs.

    Holds one cache generation per category. Construct it once with the
    Mobs directory and pass it to consumers; it is safe to share between
    request handlers.
    """

    def __init__(
        self,
        mobs_path: Optional[str | Path] = None,
        settings: Optional["AppSettings"] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the service.

        Args:
            mobs_path: Path to the MythicMobs `Mobs` directory. Falls back to
                the path stored in settings.
            settings: App settings providing path and cache configuration.
            ttl_seconds: Cache time-to-live override.
            clock: Monotonic time source for the cache.
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.settings = settings

        if mobs_path is None and settings is not None:
            mobs_path = settings.mobs_path
        if ttl_seconds is None:
            ttl_seconds = settings.cache_ttl_seconds if settings else DEFAULT_CACHE_TTL_SECONDS
        max_workers = settings.scan_workers if settings else 8

        # Initialize components
        self.store = DocumentStore(max_workers=max_workers)
        self.parser = SkillStringParser()
        self.mob_extractor = MobExtractor(self.parser)
        self.item_extractor = ItemExtractor()
        self.drop_table_extractor = DropTableExtractor(self.parser)
        self.skill_group_extractor = SkillGroupExtractor(self.parser)
        self.writer = ConfigWriter(self.store)
        self.validator = ConfigValidator()

        self.cache = EntityCache(ttl_seconds=ttl_seconds, clock=clock)
        self.cache.register(Category.MOB, self._build_mobs)
        self.cache.register(
            Category.ITEM, lambda: self._build(Category.ITEM, self.item_extractor.extract)
        )
        self.cache.register(
            Category.DROP_TABLE,
            lambda: self._build(Category.DROP_TABLE, self.drop_table_extractor.extract),
        )
        self.cache.register(
            Category.SKILL_GROUP,
            lambda: self._build(Category.SKILL_GROUP, self.skill_group_extractor.extract),
        )

        self._mobs_path: Optional[Path] = Path(mobs_path) if mobs_path else None
        self.logger.info(f"Initializing MythicCatalogService with path: {self._mobs_path}")

    # === CONFIGURATION ===

    def is_configured(self) -> bool:
        """Check whether the Mobs directory exists."""
        return self.store.is_configured(self._mobs_path)

    def get_config_path(self) -> str:
        return str(self._mobs_path) if self._mobs_path else ""

    def set_config_path(self, new_path: str | Path) -> None:
        """Point the service at another Mobs directory and clear all caches."""
        self._mobs_path = Path(new_path) if new_path else None
        if self.settings is not None:
            self.settings.mobs_path = self._mobs_path
        self.clear_cache()
        self.logger.info(f"Config path changed to: {self._mobs_path}")

    def root_for(self, category: Category) -> Optional[Path]:
        """Return the directory holding documents of a category."""
        if self._mobs_path is None:
            return None
        if category is Category.MOB:
            return self._mobs_path
        return self._mobs_path.parent / CATEGORY_DIRECTORIES[category]

    def clear_cache(self) -> None:
        self.cache.invalidate()

    def refresh(self) -> None:
        """Force every catalog to be rescanned on next access."""
        self.logger.info("Refreshing MythicMobs catalogs")
        self.cache.invalidate()

    # === CACHE BUILDERS ===

    def _build(self, category: Category, extract: Extract) -> BuildResult[Any]:
        """Rescan a category root and extract every entry.

        When an id is declared more than once, the declaration discovered
        last (sorted path order) wins and the collision is reported.
        """
        scan = self.store.enumerate(self.root_for(category))
        entries: Dict[str, Any] = {}
        duplicates: List[DuplicateEntry] = []

        for document in scan.documents:
            for entity_id, config in document.entries.items():
                try:
                    entry = extract(entity_id, config, document.relative_path)
                except Exception as e:
                    self.logger.error(
                        f"Failed to parse {category.value} '{entity_id}' "
                        f"in {document.relative_path}: {e}"
                    )
                    continue
                if entry is None:
                    continue

                previous = entries.get(entity_id)
                if previous is not None:
                    self.logger.warning(
                        f"Duplicate {category.value} id '{entity_id}': "
                        f"{document.relative_path} overrides {previous.file}"
                    )
                    duplicates.append(
                        DuplicateEntry(
                            id=entity_id,
                            kept_file=document.relative_path,
                            dropped_file=previous.file,
                        )
                    )
                entries[entity_id] = entry

        return BuildResult(entries=entries, duplicates=duplicates, failed_files=scan.failed)

    def _build_mobs(self) -> BuildResult[Any]:
        result = self._build(Category.MOB, self.mob_extractor.extract)
        result.payload = TemplateResolver(
            (mob.id, mob.template) for mob in result.entries.values()
        )
        return result

    def _generation(self, category: Category) -> Optional[CacheGeneration[Any]]:
        if not self.is_configured():
            return None
        return self.cache.get(category)

    def _values(self, category: Category) -> List[Any]:
        generation = self._generation(category)
        return generation.values() if generation else []

    def _lookup(self, category: Category, entity_id: str) -> Any:
        generation = self._generation(category)
        return generation.get(entity_id) if generation else None

    def _raw_lookup(self, category: Category) -> Callable[[str], Any]:
        """Return a lookup of raw attribute values, reading each file once."""
        generation = self._generation(category)
        root = self.root_for(category)
        documents: Dict[str, RawDocument] = {}

        def lookup(entity_id: str) -> Any:
            entry = generation.get(entity_id) if generation else None
            if entry is None or root is None:
                return None
            if entry.file not in documents:
                try:
                    documents[entry.file] = self.store.load_file(root / entry.file)
                except DocumentParseError as e:
                    self.logger.error(f"Failed to reload {entry.file}: {e}")
                    documents[entry.file] = {}
            return documents[entry.file].get(entity_id)

        return lookup

    def _raw_config(self, category: Category, entity_id: str) -> Any:
        entry = self._lookup(category, entity_id)
        if entry is None:
            return None
        location = self.store.read_single_entity(
            self.root_for(category), entity_id, entry.file
        )
        return location.attributes if location else None

    # === MOBS ===

    def get_all_mobs(self) -> List[MobDefinition]:
        """Return every mob, rescanning the Mobs directory when stale."""
        if not self.is_configured():
            self.logger.warning(f"MythicMobs path not set or invalid: {self._mobs_path}")
            return []
        return self._values(Category.MOB)

    def get_mob_by_id(self, mob_id: str) -> Optional[MobDefinition]:
        return self._lookup(Category.MOB, mob_id)

    def has_mob(self, mob_id: str) -> bool:
        return self.get_mob_by_id(mob_id) is not None

    def get_mob_ids(self) -> List[str]:
        return [mob.id for mob in self.get_all_mobs()]

    def get_mobs_by_type(self, mob_type: str) -> List[MobDefinition]:
        wanted = mob_type.upper()
        return [mob for mob in self.get_all_mobs() if mob.type.upper() == wanted]

    def search_mobs(self, keyword: str) -> List[MobDefinition]:
        """Search mobs by id or display name (case-insensitive)."""
        return [
            mob for mob in self.get_all_mobs()
            if contains_keyword(keyword, mob.id, mob.display_name)
        ]

    def get_mob_type_stats(self) -> Dict[str, int]:
        return dict(Counter(mob.type.upper() for mob in self.get_all_mobs()))

    def get_mob_detail(self, mob_id: str) -> Optional[MobDetail]:
        """Return the full configuration of a mob, re-read from its file."""
        mob = self.get_mob_by_id(mob_id)
        if mob is None:
            return None
        config = self._raw_config(Category.MOB, mob_id)
        if config is None:
            return None
        return self.mob_extractor.detail(mob_id, config, mob.file)

    def get_mob_detail_enhanced(self, mob_id: str) -> Optional[MobDetail]:
        """Return mob detail with template inheritance and references expanded.

        Fields are computed from the attributes merged down the template
        chain; `raw_config` stays the mob's own block.
        """
        generation = self._generation(Category.MOB)
        mob = generation.get(mob_id) if generation else None
        if mob is None or generation is None:
            return None

        resolver: TemplateResolver = generation.payload
        lookup = self._raw_lookup(Category.MOB)
        own_config = lookup(mob_id)
        if not isinstance(own_config, dict):
            return None

        def mapping_lookup(entity_id: str) -> Optional[Dict[str, Any]]:
            value = lookup(entity_id)
            return value if isinstance(value, dict) else None

        merged = resolver.merged_config(mob_id, mapping_lookup) or own_config
        detail = self.mob_extractor.detail(mob_id, merged, mob.file)
        if detail is None:
            return None

        detail.raw_config = own_config
        detail.template = mob.template
        detail.template_info = resolver.info(mob_id)
        detail.template_chain = resolver.chain(mob_id)
        detail.inherited_config = merged
        if detail.drops_table:
            detail.resolved_drop_table = self.get_drop_table(detail.drops_table)

        groups: Dict[str, SkillGroupDefinition] = {}
        for name in skill_group_references(detail.parsed_skills):
            group = self.get_skill_group(name)
            if group is not None:
                groups[name] = group
        detail.referenced_skill_groups = groups
        return detail

    def get_all_mobs_detailed(self) -> List[MobDetail]:
        details: List[MobDetail] = []
        for mob in self.get_all_mobs():
            detail = self.get_mob_detail(mob.id)
            if detail is not None:
                details.append(detail)
        return details

    def get_template_info(self, mob_id: str) -> Optional[TemplateInfo]:
        generation = self._generation(Category.MOB)
        if generation is None:
            return None
        return generation.payload.info(mob_id)

    def get_inheritance_chain(self, mob_id: str) -> List[str]:
        generation = self._generation(Category.MOB)
        if generation is None:
            return []
        return generation.payload.chain(mob_id)

    def get_mob_raw_yaml(self, mob_id: str) -> Optional[str]:
        return self.get_raw_yaml(Category.MOB, mob_id)

    def save_mob_config(self, mob_id: str, config: Any) -> SaveResult:
        return self.save_config(Category.MOB, mob_id, config)

    # === ITEMS ===

    def get_all_items(self) -> List[ItemDefinition]:
        return self._values(Category.ITEM)

    def get_item(self, item_id: str) -> Optional[ItemDefinition]:
        return self._lookup(Category.ITEM, item_id)

    def search_items(self, keyword: str) -> List[ItemDefinition]:
        """Search items by id, display name or material."""
        return [
            item for item in self.get_all_items()
            if contains_keyword(keyword, item.id, item.display_name, item.material)
        ]

    def get_item_material_stats(self) -> Dict[str, int]:
        return dict(Counter(item.material for item in self.get_all_items()))

    def get_item_detail(self, item_id: str) -> Optional[ItemDetail]:
        item = self.get_item(item_id)
        if item is None:
            return None
        config = self._raw_config(Category.ITEM, item_id)
        if config is None:
            return None
        return self.item_extractor.detail(item_id, config, item.file)

    def get_item_detail_enhanced(self, item_id: str) -> Optional[ItemDetail]:
        """Return item detail plus the mobs and drop tables that drop it."""
        detail = self.get_item_detail(item_id)
        if detail is None:
            return None

        dropped_by: List[str] = []
        for table in self.get_all_drop_tables():
            if any(drop_item_reference(self.parser, d) == item_id for d in table.drops):
                dropped_by.append(f"droptable:{table.id}")

        lookup = self._raw_lookup(Category.MOB)
        for mob in self.get_all_mobs():
            config = lookup(mob.id)
            if not isinstance(config, dict):
                continue
            mob_detail = self.mob_extractor.detail(mob.id, config, mob.file)
            if mob_detail and any(
                drop_item_reference(self.parser, d) == item_id for d in mob_detail.drops
            ):
                dropped_by.append(f"mob:{mob.id}")

        detail.dropped_by = dropped_by
        return detail

    def get_item_raw_yaml(self, item_id: str) -> Optional[str]:
        return self.get_raw_yaml(Category.ITEM, item_id)

    def save_item_config(self, item_id: str, config: Any) -> SaveResult:
        return self.save_config(Category.ITEM, item_id, config)

    # === DROP TABLES ===

    def get_all_drop_tables(self) -> List[DropTable]:
        return self._values(Category.DROP_TABLE)

    def get_drop_table(self, table_id: str) -> Optional[DropTable]:
        return self._lookup(Category.DROP_TABLE, table_id)

    def search_drop_tables(self, keyword: str) -> List[DropTable]:
        return [t for t in self.get_all_drop_tables() if contains_keyword(keyword, t.id)]

    def get_drop_table_detail(
        self, table_id: str, enhanced: bool = False
    ) -> Optional[DropTableDetail]:
        """Return a drop table; enhanced adds resolved items and using mobs."""
        table = self.get_drop_table(table_id)
        if table is None:
            return None
        detail = DropTableDetail(
            table=table, raw_config=self._raw_config(Category.DROP_TABLE, table_id)
        )
        if not enhanced:
            return detail

        resolved: Dict[str, ItemDefinition] = {}
        for drop in table.drops:
            reference = drop_item_reference(self.parser, drop)
            item = self.get_item(reference) if reference else None
            if item is not None and reference is not None:
                resolved[reference] = item
        detail.resolved_items = resolved

        lookup = self._raw_lookup(Category.MOB)
        used_by: List[str] = []
        for mob in self.get_all_mobs():
            config = lookup(mob.id)
            if isinstance(config, dict) and str(config.get("DropsTable", "")) == table_id:
                used_by.append(mob.id)
        detail.used_by = used_by
        return detail

    def get_drop_table_raw_yaml(self, table_id: str) -> Optional[str]:
        return self.get_raw_yaml(Category.DROP_TABLE, table_id)

    def save_drop_table_config(self, table_id: str, config: Any) -> SaveResult:
        return self.save_config(Category.DROP_TABLE, table_id, config)

    # === SKILL GROUPS ===

    def get_all_skill_groups(self) -> List[SkillGroupDefinition]:
        return self._values(Category.SKILL_GROUP)

    def get_skill_group(self, group_id: str) -> Optional[SkillGroupDefinition]:
        return self._lookup(Category.SKILL_GROUP, group_id)

    def search_skill_groups(self, keyword: str) -> List[SkillGroupDefinition]:
        return [g for g in self.get_all_skill_groups() if contains_keyword(keyword, g.id)]

    def get_skill_group_detail(
        self, group_id: str, enhanced: bool = False
    ) -> Optional[SkillGroupDetail]:
        """Return a skill group; enhanced adds called groups and callers."""
        group = self.get_skill_group(group_id)
        if group is None:
            return None
        detail = SkillGroupDetail(
            group=group, raw_config=self._raw_config(Category.SKILL_GROUP, group_id)
        )
        if not enhanced:
            return detail

        referenced: Dict[str, SkillGroupDefinition] = {}
        for name in skill_group_references(group.skills):
            called = self.get_skill_group(name)
            if called is not None:
                referenced[name] = called
        detail.referenced_groups = referenced

        used_by: List[str] = []
        for other in self.get_all_skill_groups():
            if other.id != group_id and group_id in skill_group_references(other.skills):
                used_by.append(f"skillgroup:{other.id}")
        for mob in self.get_all_mobs():
            parsed = [self.parser.parse_skill(s) for s in mob.skills]
            if group_id in skill_group_references(parsed):
                used_by.append(f"mob:{mob.id}")
        detail.used_by = used_by
        return detail

    def get_skill_group_raw_yaml(self, group_id: str) -> Optional[str]:
        return self.get_raw_yaml(Category.SKILL_GROUP, group_id)

    def save_skill_group_config(self, group_id: str, config: Any) -> SaveResult:
        return self.save_config(Category.SKILL_GROUP, group_id, config)

    # === RAW YAML / WRITES / VALIDATION ===

    def get_raw_yaml(self, category: Category, entity_id: str) -> Optional[str]:
        """Return the YAML text of one entity as it appears in its file.

        Falls back to a fresh dump when the block cannot be cut out of the
        file text (e.g. flow-style documents).
        """
        root = self.root_for(category)
        entry = self._lookup(category, entity_id)
        location = self.store.read_single_entity(
            root, entity_id, entry.file if entry is not None else None
        )
        if location is None:
            return None
        text = extract_entity_text(location.text, entity_id)
        return text if text is not None else dump_entity(entity_id, location.attributes)

    def save_config(self, category: Category, entity_id: str, config: Any) -> SaveResult:
        """Replace one entity's attributes in its owning document.

        Drop tables and skill groups may also be written as a bare list of
        drop or skill lines. The category cache is invalidated only when the
        write succeeds.
        """
        current = self.cache.peek(category)
        entry = current.get(entity_id) if current is not None else None
        result = self.writer.save(
            self.root_for(category),
            entity_id,
            config,
            relative_path=entry.file if entry is not None else None,
            allow_list=category in LIST_FORM_CATEGORIES,
        )
        if result.success:
            self.cache.invalidate(category)
        return result

    def validate_yaml_config(self, text: Any) -> ValidationReport:
        return self.validator.validate(text)

    # === STATUS / EXPORT ===

    def get_status(self) -> CatalogStatus:
        """Report configuration and mob cache state."""
        generations = [self.cache.peek(category) for category in Category]
        mobs = self.cache.peek(Category.MOB)
        return CatalogStatus(
            configured=self.is_configured(),
            path=self.get_config_path(),
            cache_size=len(mobs) if mobs is not None else 0,
            cache_age=self.cache.age(Category.MOB),
            duplicates=sum(len(g.duplicates) for g in generations if g is not None),
            failed_files=sorted(
                {f for g in generations if g is not None for f in g.failed_files}
            ),
        )

    def export_json(self, category: Category) -> bytes:
        """Serialize a whole catalog to JSON."""
        return orjson.dumps(
            self._values(category),
            option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
        )
