"""
Data models for MythicMobs configuration catalogs.

Contains the typed entries produced by the extractors and the small result
objects returned by the service. Models are plain dataclasses: no file-system
or cache logic lives here. Every entity keeps an `extra` dict holding the
attributes the extractors do not know about, so unknown keys survive a
round trip through the catalog.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, TypeAlias

# Type aliases for clarity
RawConfig: TypeAlias = Dict[str, Any]
"""Attribute mapping of a single entity as parsed from YAML."""

RawDocument: TypeAlias = Dict[str, RawConfig]
"""Top-level mapping of one document: entity id -> attribute mapping."""

SkillParam: TypeAlias = Tuple[str, str]
"""One `key=value` pair of a `{...}` parameter block."""


# Recognised document extensions
DOCUMENT_EXTENSIONS = (".yml", ".yaml")

# Positional equipment slots, in declaration order
EQUIPMENT_SLOTS = ("MAINHAND", "OFFHAND", "HEAD", "CHEST", "LEGS", "FEET")

# Template chains are walked for at most this many entries
MAX_TEMPLATE_DEPTH = 10

DEFAULT_CACHE_TTL_SECONDS = 60.0


class Category(str, Enum):
    """Catalog categories, one cache generation each."""

    MOB = "mob"
    ITEM = "item"
    DROP_TABLE = "droptable"
    SKILL_GROUP = "skillgroup"


# =============================================================================
# Skill grammar
# =============================================================================


@dataclass
class ParsedCondition:
    """A `~name{...}` / `~!name{...}` gate attached to a skill."""

    raw: str
    type: str
    params: List[SkillParam] = field(default_factory=list)
    negated: bool = False
    # Trailing action in condition lists, e.g. "true", "false", "power 2"
    action: Optional[str] = None


@dataclass
class ParsedTargeter:
    """A `?name{...}` target selector."""

    raw: str
    type: str
    params: List[SkillParam] = field(default_factory=list)


@dataclass
class ParsedSkill:
    """One skill line broken down into its fields.

    Every skill string yields exactly one ParsedSkill, even when most of the
    fields could not be recognised; leftovers are kept in `unparsed`.
    """

    raw: str
    mechanic: Optional[str] = None
    params: List[SkillParam] = field(default_factory=list)
    trigger: Optional[str] = None
    trigger_argument: Optional[str] = None
    trigger_threshold: Optional[float] = None
    conditions: List[ParsedCondition] = field(default_factory=list)
    targeter: Optional[ParsedTargeter] = None
    chance: Optional[float] = None
    cooldown: Optional[float] = None
    health_modifier: Optional[str] = None
    unparsed: List[str] = field(default_factory=list)

    def param(self, *keys: str) -> Optional[str]:
        """Return the first mechanic parameter matching any key (case-insensitive)."""
        wanted = {key.lower() for key in keys}
        for key, value in self.params:
            if key.lower() in wanted:
                return value
        return None


@dataclass
class ParsedDrop:
    """A drop line: `item [amount] [chance]`."""

    raw: str
    item: Optional[str] = None
    amount: Optional[str] = None
    chance: Optional[float] = None


# =============================================================================
# Mobs
# =============================================================================


@dataclass
class EquipmentEntry:
    """Equipment item bound to a positional slot."""

    slot: str
    item: str


@dataclass
class BossBarConfig:
    """Boss bar display block (`BossBar: true` implies enabled only)."""

    enabled: bool = True
    title: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None


@dataclass
class TemplateInfo:
    """Inheritance relationships of one mob.

    `parent` is a lookup-only reference; it may name a mob that does not
    exist in the catalog.
    """

    mob_id: str
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)
    depth: int = 0


@dataclass
class MobDefinition:
    """List-level information about a mob, as held in the cache."""

    id: str
    display_name: str
    type: str = "ZOMBIE"
    health: float = 20.0
    damage: float = 5.0
    armor: float = 0.0
    movement_speed: Optional[float] = None
    knockback_resistance: Optional[float] = None
    skills: List[str] = field(default_factory=list)
    options: Optional[RawConfig] = None
    template: Optional[str] = None
    file: str = ""
    extra: RawConfig = field(default_factory=dict)


@dataclass
class MobDetail(MobDefinition):
    """Full mob configuration, computed per request."""

    raw_config: RawConfig = field(default_factory=dict)
    parsed_skills: List[ParsedSkill] = field(default_factory=list)
    drops: List[ParsedDrop] = field(default_factory=list)
    drops_table: Optional[str] = None
    equipment: List[EquipmentEntry] = field(default_factory=list)
    ai_goals: Optional[List[str]] = None
    ai_targets: Optional[List[str]] = None
    disguise: Optional[str] = None
    level_modifiers: Optional[Any] = None
    faction: Optional[str] = None
    boss_bar: Optional[BossBarConfig] = None
    hearing_range: Optional[float] = None
    follow_range: Optional[float] = None
    prevent_other_drops: Optional[bool] = None
    prevent_random_equipment: Optional[bool] = None
    prevent_leashing: Optional[bool] = None
    prevent_sunburn: Optional[bool] = None

    # Filled only by the enhanced detail request
    template_info: Optional[TemplateInfo] = None
    template_chain: Optional[List[str]] = None
    inherited_config: Optional[RawConfig] = None
    resolved_drop_table: Optional["DropTable"] = None
    referenced_skill_groups: Optional[Dict[str, "SkillGroupDefinition"]] = None


# =============================================================================
# Drop tables and skill groups
# =============================================================================


@dataclass
class DropTable:
    """Named list of drops from the DropTables directory."""

    id: str
    drops: List[ParsedDrop] = field(default_factory=list)
    total_weight: Optional[float] = None
    conditions: List[ParsedCondition] = field(default_factory=list)
    file: str = ""
    extra: RawConfig = field(default_factory=dict)


@dataclass
class DropTableDetail:
    """Drop table plus, when enhanced, the items and mobs it relates to."""

    table: DropTable
    raw_config: Any = None
    resolved_items: Optional[Dict[str, "ItemDefinition"]] = None
    used_by: Optional[List[str]] = None


@dataclass
class SkillGroupDefinition:
    """Named metaskill from the Skills directory."""

    id: str
    skills: List[ParsedSkill] = field(default_factory=list)
    cooldown: Optional[float] = None
    conditions: List[ParsedCondition] = field(default_factory=list)
    file: str = ""
    extra: RawConfig = field(default_factory=dict)


@dataclass
class SkillGroupDetail:
    """Skill group plus, when enhanced, the groups it calls and its users."""

    group: SkillGroupDefinition
    raw_config: Any = None
    referenced_groups: Optional[Dict[str, SkillGroupDefinition]] = None
    used_by: Optional[List[str]] = None


# =============================================================================
# Items
# =============================================================================


@dataclass
class Enchantment:
    name: str
    level: int = 1


@dataclass
class AttributeModifier:
    """Attribute modifier, e.g. `DAMAGE 10 ADD MAINHAND`."""

    attribute: str
    amount: float = 0.0
    operation: Optional[str] = None
    slot: Optional[str] = None


@dataclass
class ItemDefinition:
    """List-level information about a MythicMobs item."""

    id: str
    display_name: str
    material: str = "STONE"
    amount: int = 1
    model_data: Optional[int] = None
    lore: List[str] = field(default_factory=list)
    enchantments: List[Enchantment] = field(default_factory=list)
    attributes: List[AttributeModifier] = field(default_factory=list)
    unbreakable: bool = False
    hide_flags: List[str] = field(default_factory=list)
    file: str = ""
    extra: RawConfig = field(default_factory=dict)


@dataclass
class ItemDetail(ItemDefinition):
    """Full item configuration including the raw document fragment."""

    raw_config: RawConfig = field(default_factory=dict)
    color: Optional[str] = None
    potion_effects: List[str] = field(default_factory=list)
    skull_texture: Optional[str] = None
    nbt: Optional[Any] = None
    options: Optional[RawConfig] = None

    # Filled only by the enhanced detail request
    dropped_by: Optional[List[str]] = None


# =============================================================================
# Documents and results
# =============================================================================


@dataclass
class Document:
    """One parsed document file."""

    relative_path: str
    entries: RawDocument


@dataclass
class DocumentScan:
    """Result of enumerating a category root."""

    root: Path
    configured: bool
    documents: List[Document] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class EntityLocation:
    """Where an entity lives, with enough context to rewrite it later."""

    id: str
    path: Path
    relative_path: str
    attributes: Any
    text: str


@dataclass
class DuplicateEntry:
    """An id declared in more than one document; `kept_file` won."""

    id: str
    kept_file: str
    dropped_file: str


@dataclass
class ValidationReport:
    """Outcome of validating a YAML text."""

    valid: bool
    error: Optional[str] = None
    parsed: Any = None
    line: Optional[int] = None
    column: Optional[int] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class SaveResult:
    """Outcome of a ConfigWriter save."""

    success: bool
    error: Optional[str] = None
    file: Optional[str] = None


@dataclass
class CatalogStatus:
    """Service status as reported to the dashboard."""

    configured: bool
    path: str
    cache_size: int
    cache_age: int
    duplicates: int = 0
    failed_files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used by the HTTP layer."""
        return {
            "configured": self.configured,
            "path": self.path,
            "cacheSize": self.cache_size,
            "cacheAge": self.cache_age,
            "duplicates": self.duplicates,
            "failedFiles": list(self.failed_files),
        }
