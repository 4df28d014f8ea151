"""
Extractors mapping raw YAML entries to typed catalog entries.

Each extractor knows the attribute names of one MythicMobs category and
copies unknown attributes into the entry's `extra` dict. Extraction is
best-effort: missing or malformed values fall back to defaults.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from .models import (
    EQUIPMENT_SLOTS,
    AttributeModifier,
    BossBarConfig,
    DropTable,
    Enchantment,
    EquipmentEntry,
    ItemDefinition,
    ItemDetail,
    MobDefinition,
    MobDetail,
    ParsedCondition,
    ParsedDrop,
    ParsedSkill,
    RawConfig,
    SkillGroupDefinition,
)
from .skill_parser import SkillStringParser
from .textutil import (
    as_bool,
    as_str_list,
    optional_str,
    parse_float,
    parse_int,
    parse_number,
    strip_color_codes,
)


def _first(config: RawConfig, *keys: str) -> Any:
    """Return the first present, non-None value among keys."""
    for key in keys:
        value = config.get(key)
        if value is not None:
            return value
    return None


def _extra(config: RawConfig, known: frozenset[str]) -> RawConfig:
    return {key: value for key, value in config.items() if key not in known}


def _as_mapping(value: Any) -> Optional[RawConfig]:
    if isinstance(value, dict):
        return {str(k): v for k, v in cast(Dict[Any, Any], value).items()}
    return None


class MobExtractor:
    """Maps a mob entry to MobDefinition / MobDetail."""

    BASIC_KEYS = frozenset(
        {"Display", "DisplayName", "Type", "Health", "Damage", "Armor",
         "Options", "Skills", "Template"}
    )
    DETAIL_KEYS = BASIC_KEYS | frozenset(
        {"Drops", "DropsTable", "Equipment", "AIGoalSelectors",
         "AITargetSelectors", "Disguise", "LevelModifiers", "Faction", "BossBar"}
    )

    def __init__(self, parser: Optional[SkillStringParser] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.parser = parser or SkillStringParser()

    def extract(self, mob_id: str, config: Any, file: str) -> Optional[MobDefinition]:
        """Build the list-level definition of a mob.

        Returns:
            MobDefinition, or None when the entry is not a mapping
        """
        mapping = _as_mapping(config)
        if mapping is None:
            self.logger.debug(f"Skipping mob '{mob_id}' in {file}: not a mapping")
            return None
        return MobDefinition(**self._basic_fields(mob_id, mapping, file))

    def _basic_fields(self, mob_id: str, config: RawConfig, file: str) -> Dict[str, Any]:
        display = _first(config, "Display", "DisplayName")
        options = _as_mapping(config.get("Options"))
        template = optional_str(config.get("Template"))

        fields: Dict[str, Any] = {
            "id": mob_id,
            "display_name": strip_color_codes(display) if display is not None else mob_id,
            "type": str(config.get("Type") or "ZOMBIE"),
            "health": parse_number(config.get("Health"), 20.0),
            "damage": parse_number(config.get("Damage"), 5.0),
            "armor": parse_number(config.get("Armor"), 0.0),
            "skills": as_str_list(config.get("Skills")),
            "options": options,
            "template": template.strip() or None if template else None,
            "file": file,
            "extra": _extra(config, self.DETAIL_KEYS),
        }
        if options is not None:
            fields["movement_speed"] = parse_number(options.get("MovementSpeed"), 0.2)
            fields["knockback_resistance"] = parse_number(
                options.get("KnockbackResistance"), 0.0
            )
        return fields

    def detail(self, mob_id: str, config: Any, file: str) -> Optional[MobDetail]:
        """Build the full detail of a mob, parsing skills, drops and equipment."""
        mapping = _as_mapping(config)
        if mapping is None:
            return None

        detail = MobDetail(**self._basic_fields(mob_id, mapping, file))
        detail.raw_config = mapping
        detail.parsed_skills = [self.parser.parse_skill(s) for s in detail.skills]
        detail.drops = [self.parser.parse_drop(d) for d in as_str_list(mapping.get("Drops"))]
        if mapping.get("DropsTable"):
            detail.drops_table = str(mapping["DropsTable"])
        detail.equipment = self.parse_equipment(mapping.get("Equipment"))

        if isinstance(mapping.get("AIGoalSelectors"), list):
            detail.ai_goals = as_str_list(mapping["AIGoalSelectors"])
        if isinstance(mapping.get("AITargetSelectors"), list):
            detail.ai_targets = as_str_list(mapping["AITargetSelectors"])

        detail.disguise = optional_str(mapping.get("Disguise")) or None
        detail.level_modifiers = mapping.get("LevelModifiers") or None
        detail.faction = optional_str(mapping.get("Faction")) or None
        detail.boss_bar = self.parse_boss_bar(mapping.get("BossBar"))

        options = detail.options
        if options is not None:
            detail.hearing_range = parse_number(options.get("HearingRange"), None)
            detail.follow_range = parse_number(options.get("FollowRange"), None)
            detail.prevent_other_drops = as_bool(options.get("PreventOtherDrops"))
            detail.prevent_random_equipment = as_bool(options.get("PreventRandomEquipment"))
            detail.prevent_leashing = as_bool(options.get("PreventLeashing"))
            detail.prevent_sunburn = as_bool(options.get("PreventSunburn"))

        return detail

    @staticmethod
    def parse_equipment(value: Any) -> List[EquipmentEntry]:
        """Assign equipment entries to slots by position.

        Entries beyond the six known slots get a synthetic `SLOT_<index>`;
        empty entries keep their position but are not listed.
        """
        if not isinstance(value, list):
            return []
        entries: List[EquipmentEntry] = []
        for index, item in enumerate(cast(List[Any], value)):
            if not item:
                continue
            slot = EQUIPMENT_SLOTS[index] if index < len(EQUIPMENT_SLOTS) else f"SLOT_{index}"
            entries.append(EquipmentEntry(slot=slot, item=str(item)))
        return entries

    @staticmethod
    def parse_boss_bar(value: Any) -> Optional[BossBarConfig]:
        """Parse a BossBar block; `BossBar: true` means enabled with defaults."""
        if value is True:
            return BossBarConfig(enabled=True)
        mapping = _as_mapping(value)
        if mapping is None:
            return None
        return BossBarConfig(
            enabled=as_bool(mapping.get("Enabled"), True) is not False,
            title=optional_str(mapping.get("Title")),
            color=optional_str(mapping.get("Color")),
            style=optional_str(mapping.get("Style")),
        )


class ItemExtractor:
    """Maps an item entry to ItemDefinition / ItemDetail."""

    BASIC_KEYS = frozenset(
        {"Display", "DisplayName", "Id", "Material", "Amount", "Model",
         "CustomModelData", "Lore", "Enchantments", "Attributes", "Unbreakable",
         "HideFlags"}
    )
    DETAIL_KEYS = BASIC_KEYS | frozenset(
        {"Color", "PotionEffects", "SkullTexture", "Texture", "NBT", "Options"}
    )

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def extract(self, item_id: str, config: Any, file: str) -> Optional[ItemDefinition]:
        mapping = _as_mapping(config)
        if mapping is None:
            self.logger.debug(f"Skipping item '{item_id}' in {file}: not a mapping")
            return None
        return ItemDefinition(**self._basic_fields(item_id, mapping, file))

    def _basic_fields(self, item_id: str, config: RawConfig, file: str) -> Dict[str, Any]:
        display = _first(config, "Display", "DisplayName")
        model = _first(config, "Model", "CustomModelData")
        model_number = parse_number(model, None)
        return {
            "id": item_id,
            "display_name": strip_color_codes(display) if display is not None else item_id,
            "material": str(_first(config, "Id", "Material") or "STONE").upper(),
            "amount": parse_int(config.get("Amount"), 1),
            "model_data": int(model_number) if model_number is not None else None,
            "lore": [strip_color_codes(line) for line in as_str_list(config.get("Lore"))],
            "enchantments": self.parse_enchantments(config.get("Enchantments")),
            "attributes": self.parse_attributes(config.get("Attributes")),
            "unbreakable": bool(as_bool(config.get("Unbreakable"), False)),
            "hide_flags": self._parse_hide_flags(config.get("HideFlags")),
            "file": file,
            "extra": _extra(config, self.DETAIL_KEYS),
        }

    def detail(self, item_id: str, config: Any, file: str) -> Optional[ItemDetail]:
        mapping = _as_mapping(config)
        if mapping is None:
            return None
        detail = ItemDetail(**self._basic_fields(item_id, mapping, file))
        detail.raw_config = mapping
        detail.color = optional_str(mapping.get("Color"))
        detail.potion_effects = as_str_list(mapping.get("PotionEffects"))
        detail.skull_texture = optional_str(_first(mapping, "SkullTexture", "Texture"))
        detail.nbt = mapping.get("NBT")
        detail.options = _as_mapping(mapping.get("Options"))
        return detail

    @staticmethod
    def _parse_hide_flags(value: Any) -> List[str]:
        # HideFlags may be a list of flag names or a plain boolean
        if isinstance(value, bool):
            return ["ALL"] if value else []
        return as_str_list(value)

    @staticmethod
    def parse_enchantments(value: Any) -> List[Enchantment]:
        """Parse `NAME:LEVEL` entries; a bare name is level 1."""
        enchantments: List[Enchantment] = []
        for entry in as_str_list(value):
            name, _, level = entry.strip().partition(":")
            if not name:
                continue
            enchantments.append(
                Enchantment(name=name.strip().upper(), level=parse_int(level.strip() or None, 1))
            )
        return enchantments

    def parse_attributes(self, value: Any) -> List[AttributeModifier]:
        """Parse attribute modifiers.

        Accepts a list of `ATTR AMOUNT [OP] [SLOT]` strings, a list of
        mappings with Attribute/Amount/Operation/Slot keys, or a
        slot -> {attribute: amount} mapping.
        """
        modifiers: List[AttributeModifier] = []
        if isinstance(value, list):
            for entry in cast(List[Any], value):
                mapping = _as_mapping(entry)
                if mapping is not None:
                    modifier = self._attribute_from_mapping(mapping)
                else:
                    modifier = self._attribute_from_string(str(entry))
                if modifier:
                    modifiers.append(modifier)
            return modifiers

        slots = _as_mapping(value)
        if slots:
            for slot, attributes in slots.items():
                attribute_map = _as_mapping(attributes)
                if attribute_map is None:
                    continue
                for attribute, amount in attribute_map.items():
                    modifiers.append(
                        AttributeModifier(
                            attribute=attribute,
                            amount=parse_number(amount, 0.0) or 0.0,
                            slot=slot,
                        )
                    )
        return modifiers

    @staticmethod
    def _attribute_from_string(entry: str) -> Optional[AttributeModifier]:
        parts = entry.split()
        if not parts:
            return None
        amount = parse_number(parts[1], 0.0) if len(parts) > 1 else 0.0
        return AttributeModifier(
            attribute=parts[0],
            amount=amount or 0.0,
            operation=parts[2] if len(parts) > 2 else None,
            slot=parts[3] if len(parts) > 3 else None,
        )

    @staticmethod
    def _attribute_from_mapping(entry: RawConfig) -> Optional[AttributeModifier]:
        attribute = _first(entry, "Attribute", "Type", "Name")
        if attribute is None:
            return None
        return AttributeModifier(
            attribute=str(attribute),
            amount=parse_number(entry.get("Amount"), 0.0) or 0.0,
            operation=optional_str(entry.get("Operation")),
            slot=optional_str(entry.get("Slot")),
        )


class DropTableExtractor:
    """Maps a DropTables entry (list or block form) to DropTable."""

    KNOWN_KEYS = frozenset({"Drops", "TotalWeight", "Conditions"})

    def __init__(self, parser: Optional[SkillStringParser] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.parser = parser or SkillStringParser()

    def extract(self, table_id: str, config: Any, file: str) -> Optional[DropTable]:
        if isinstance(config, list):
            return DropTable(id=table_id, drops=self._drops(config), file=file)

        mapping = _as_mapping(config)
        if mapping is None:
            self.logger.debug(f"Skipping drop table '{table_id}' in {file}: unsupported value")
            return None
        return DropTable(
            id=table_id,
            drops=self._drops(mapping.get("Drops")),
            total_weight=parse_float(mapping.get("TotalWeight")),
            conditions=self._conditions(mapping.get("Conditions")),
            file=file,
            extra=_extra(mapping, self.KNOWN_KEYS),
        )

    def _drops(self, value: Any) -> List[ParsedDrop]:
        return [self.parser.parse_drop(drop) for drop in as_str_list(value)]

    def _conditions(self, value: Any) -> List[ParsedCondition]:
        return [self.parser.parse_condition(c) for c in as_str_list(value)]


class SkillGroupExtractor:
    """Maps a Skills-directory entry (metaskill) to SkillGroupDefinition."""

    KNOWN_KEYS = frozenset({"Skills", "Cooldown", "Conditions"})

    def __init__(self, parser: Optional[SkillStringParser] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.parser = parser or SkillStringParser()

    def extract(self, group_id: str, config: Any, file: str) -> Optional[SkillGroupDefinition]:
        if isinstance(config, list):
            return SkillGroupDefinition(
                id=group_id,
                skills=[self.parser.parse_skill(s) for s in as_str_list(config)],
                file=file,
            )

        mapping = _as_mapping(config)
        if mapping is None:
            self.logger.debug(f"Skipping skill group '{group_id}' in {file}: unsupported value")
            return None
        return SkillGroupDefinition(
            id=group_id,
            skills=[self.parser.parse_skill(s) for s in as_str_list(mapping.get("Skills"))],
            cooldown=parse_number(mapping.get("Cooldown"), None),
            conditions=[
                self.parser.parse_condition(c) for c in as_str_list(mapping.get("Conditions"))
            ],
            file=file,
            extra=_extra(mapping, self.KNOWN_KEYS),
        )


# Mechanics that call another skill group, and the parameters naming it
SKILL_CALL_MECHANICS = frozenset({"skill", "metaskill", "randomskill", "skills"})
SKILL_CALL_PARAMS = ("arg", "s", "skill", "skills", "meta", "metaskill", "m")


def skill_group_references(skills: List[ParsedSkill]) -> List[str]:
    """Return skill group names called from a list of parsed skills.

    Covers `skill{s=Name}`, `metaskill{skill=Name}`, `randomskill{skills=A}`
    and the `skill:Name` shorthand, in first-seen order.
    """
    names: List[str] = []
    for skill in skills:
        if not skill.mechanic or skill.mechanic.lower() not in SKILL_CALL_MECHANICS:
            continue
        value = skill.param(*SKILL_CALL_PARAMS)
        if not value:
            continue
        for name in value.split(","):
            name = name.strip()
            if name and name not in names:
                names.append(name)
    return names


def drop_item_reference(parser: SkillStringParser, drop: ParsedDrop) -> Optional[str]:
    """Return the item id a drop refers to.

    `mythicitem{item=Blade}` and `Blade` both refer to item `Blade`.
    """
    if not drop.item:
        return None
    name, params = parser.parse_reference(drop.item)
    for key, value in params:
        if key.lower() in ("item", "i", "type", "t"):
            return value
    return name or None
