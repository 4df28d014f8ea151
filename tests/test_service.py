"""Tests for the MythicCatalogService facade."""

from pathlib import Path

import orjson
import yaml

from mythic_catalog.catalog import MythicCatalogService
from mythic_catalog.catalog.models import Category


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestMobs:
    """Test mob listing, lookup and search."""

    def test_every_listed_id_round_trips(self, mobs_dir: Path) -> None:
        """Test get(id) returns an entry whose id equals the lookup key."""
        service = MythicCatalogService(mobs_dir)
        mobs = service.get_all_mobs()

        assert sorted(mob.id for mob in mobs) == ["ArcherGrunt", "BaseBoss", "Grunt", "SkeletonKing"]
        for mob in mobs:
            found = service.get_mob_by_id(mob.id)
            assert found is not None
            assert found.id == mob.id

    def test_basic_fields(self, mobs_dir: Path) -> None:
        king = MythicCatalogService(mobs_dir).get_mob_by_id("SkeletonKing")
        assert king is not None
        assert king.display_name == "Skeleton King"
        assert king.health == 150.0
        assert king.movement_speed == 0.3
        assert king.template == "BaseBoss"
        assert king.file == "bosses.yml"

    def test_lookup_is_case_sensitive(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        assert service.has_mob("Grunt") is True
        assert service.has_mob("grunt") is False
        assert service.get_mob_by_id("grunt") is None

    def test_search_type_and_stats(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        assert sorted(m.id for m in service.search_mobs("grunt")) == ["ArcherGrunt", "Grunt"]
        assert [m.id for m in service.search_mobs("skeleton king")] == ["SkeletonKing"]
        assert sorted(m.id for m in service.get_mobs_by_type("skeleton")) == ["ArcherGrunt", "BaseBoss"]
        assert service.get_mob_type_stats() == {"WITHER_SKELETON": 1, "SKELETON": 2, "ZOMBIE": 1}
        assert sorted(service.get_mob_ids()) == ["ArcherGrunt", "BaseBoss", "Grunt", "SkeletonKing"]

    def test_not_configured(self, tmp_path: Path) -> None:
        service = MythicCatalogService(tmp_path / "missing")
        assert service.is_configured() is False
        assert service.get_all_mobs() == []
        assert service.get_mob_by_id("Grunt") is None
        assert service.get_all_items() == []
        assert service.get_inheritance_chain("Grunt") == []

    def test_unset_path(self) -> None:
        service = MythicCatalogService()
        assert service.is_configured() is False
        assert service.get_config_path() == ""
        assert service.get_all_mobs() == []

    def test_duplicate_ids_last_wins(self, mobs_dir: Path) -> None:
        (mobs_dir / "zz_override.yml").write_text("Grunt:\n  Type: HUSK\n", encoding="utf-8")
        service = MythicCatalogService(mobs_dir)

        grunt = service.get_mob_by_id("Grunt")
        assert grunt is not None
        assert grunt.type == "HUSK"
        assert grunt.file == "zz_override.yml"
        assert service.get_status().duplicates == 1


class TestMobDetail:
    """Test detail and enhanced detail views."""

    def test_detail(self, mobs_dir: Path) -> None:
        detail = MythicCatalogService(mobs_dir).get_mob_detail("SkeletonKing")
        assert detail is not None
        assert detail.drops_table == "KingLoot"
        assert [d.item for d in detail.drops] == ["KingBlade", "exp"]
        assert [(e.slot, e.item) for e in detail.equipment] == [
            ("MAINHAND", "KingBlade"),
            ("OFFHAND", "SHIELD"),
        ]
        assert detail.boss_bar is not None and detail.boss_bar.title == "The King"
        assert detail.parsed_skills[0].trigger_threshold == 0.5
        assert detail.parsed_skills[0].conditions[0].negated is True
        assert detail.prevent_sunburn is True
        assert detail.template_chain is None

    def test_detail_unknown(self, mobs_dir: Path) -> None:
        assert MythicCatalogService(mobs_dir).get_mob_detail("Nobody") is None

    def test_enhanced_detail_inherits_from_template(self, mobs_dir: Path) -> None:
        detail = MythicCatalogService(mobs_dir).get_mob_detail_enhanced("SkeletonKing")
        assert detail is not None

        assert detail.template_chain == ["SkeletonKing", "BaseBoss"]
        assert detail.template_info is not None
        assert detail.template_info.parent == "BaseBoss"
        assert detail.template_info.depth == 1
        # Own values win, missing ones come from BaseBoss
        assert detail.type == "WITHER_SKELETON"
        assert detail.health == 150.0
        assert detail.armor == 5.0
        assert detail.faction == "Undead"
        assert detail.knockback_resistance == 1.0
        assert detail.movement_speed == 0.3
        assert "Faction" not in detail.raw_config
        assert detail.inherited_config is not None
        assert detail.inherited_config["Faction"] == "Undead"
        assert detail.template == "BaseBoss"

        assert detail.resolved_drop_table is not None
        assert detail.resolved_drop_table.id == "KingLoot"
        assert detail.referenced_skill_groups is not None
        assert list(detail.referenced_skill_groups) == ["KingRage"]

    def test_template_info_and_chain(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        info = service.get_template_info("Grunt")
        assert info is not None
        assert info.children == ["ArcherGrunt"]
        assert info.depth == 0
        assert service.get_inheritance_chain("ArcherGrunt") == ["ArcherGrunt", "Grunt"]
        assert service.get_template_info("Nobody") is None

    def test_all_mobs_detailed(self, mobs_dir: Path) -> None:
        details = MythicCatalogService(mobs_dir).get_all_mobs_detailed()
        assert len(details) == 4


class TestOtherCategories:
    """Test items, drop tables and skill groups."""

    def test_items(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        blade = service.get_item("KingBlade")
        assert blade is not None
        assert blade.material == "DIAMOND_SWORD"
        assert blade.display_name == "Blade of the King"
        assert [i.id for i in service.search_items("bone")] == ["BoneShard"]
        assert service.get_item_material_stats() == {"DIAMOND_SWORD": 1, "BONE": 1}

    def test_item_detail_enhanced(self, mobs_dir: Path) -> None:
        detail = MythicCatalogService(mobs_dir).get_item_detail_enhanced("KingBlade")
        assert detail is not None
        assert detail.raw_config["Id"] == "diamond_sword"
        assert detail.dropped_by == [
            "droptable:KingLoot",
            "droptable:SimpleLoot",
            "mob:SkeletonKing",
        ]

    def test_drop_tables(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        loot = service.get_drop_table("KingLoot")
        assert loot is not None
        assert loot.total_weight == 10.0
        assert [d.item for d in loot.drops] == ["mythicitem{item=KingBlade}", "gold_nugget"]
        assert [t.id for t in service.search_drop_tables("simple")] == ["SimpleLoot"]

        plain = service.get_drop_table_detail("KingLoot")
        assert plain is not None
        assert plain.used_by is None

        detail = service.get_drop_table_detail("KingLoot", enhanced=True)
        assert detail is not None
        assert list(detail.resolved_items or {}) == ["KingBlade"]
        assert detail.used_by == ["SkeletonKing"]

    def test_skill_groups(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        rage = service.get_skill_group("KingRage")
        assert rage is not None
        assert rage.cooldown == 10.0
        assert rage.skills[1].params == [("m", "The king is angry")]

        detail = service.get_skill_group_detail("KingRage", enhanced=True)
        assert detail is not None
        assert list(detail.referenced_groups or {}) == ["KingSlam"]
        assert detail.used_by == ["mob:SkeletonKing"]

        slam = service.get_skill_group_detail("KingSlam", enhanced=True)
        assert slam is not None
        assert slam.used_by == ["skillgroup:KingRage"]
        assert [g.id for g in service.search_skill_groups("slam")] == ["KingSlam"]


class TestRawYamlAndSave:
    """Test raw text retrieval and writes through the facade."""

    def test_raw_yaml(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        raw = service.get_mob_raw_yaml("ArcherGrunt")
        assert raw == "ArcherGrunt:\n  Type: SKELETON\n  Template: Grunt\n"
        assert service.get_item_raw_yaml("BoneShard") == "BoneShard:\n  Material: BONE\n  Amount: 3\n"
        assert service.get_mob_raw_yaml("Nobody") is None

    def test_raw_yaml_drop_tables_and_skill_groups(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        assert service.get_drop_table_raw_yaml("SimpleLoot") == "SimpleLoot:\n- KingBlade 1 0.1\n"
        raw = service.get_skill_group_raw_yaml("KingSlam")
        assert raw == "KingSlam:\n  Skills:\n  - damage{amount=20} @target\n"
        assert service.get_skill_group_raw_yaml("Missing") is None

    def test_save_round_trip_invalidates_cache(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        before = (mobs_dir / "minions.yml").read_text(encoding="utf-8")
        archer_before = service.get_mob_raw_yaml("ArcherGrunt")

        result = service.save_mob_config("Grunt", {"Type": "HUSK", "Health": 40})

        assert result.success is True
        assert result.file == "minions.yml"
        assert service.cache.peek(Category.MOB) is None
        grunt = service.get_mob_by_id("Grunt")
        assert grunt is not None
        assert grunt.type == "HUSK"
        assert yaml.safe_load(service.get_mob_raw_yaml("Grunt") or "") == {
            "Grunt": {"Type": "HUSK", "Health": 40}
        }
        assert service.get_mob_raw_yaml("ArcherGrunt") == archer_before
        assert (mobs_dir / "minions.yml").read_text(encoding="utf-8") != before

    def test_failed_save_keeps_cache(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        service.get_all_mobs()
        generation = service.cache.peek(Category.MOB)

        result = service.save_mob_config("Nobody", {"Type": "COW"})

        assert result.success is False
        assert result.error
        assert service.cache.peek(Category.MOB) is generation

    def test_save_other_categories(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        assert service.save_item_config("BoneShard", {"Material": "BONE_MEAL"}).success
        assert service.get_item("BoneShard").material == "BONE_MEAL"  # type: ignore[union-attr]
        assert service.save_drop_table_config("SimpleLoot", {"Drops": ["bone"]}).success
        assert service.save_skill_group_config("KingSlam", {"Skills": ["heal"]}).success
        assert service.get_skill_group("KingSlam").skills[0].mechanic == "heal"  # type: ignore[union-attr]

    def test_save_list_form_drop_table_and_skill_group(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        result = service.save_drop_table_config("SimpleLoot", ["BoneShard 2 1.0", "exp 5"])
        assert result.success is True
        table = service.get_drop_table("SimpleLoot")
        assert table is not None
        assert [d.item for d in table.drops] == ["BoneShard", "exp"]
        assert table.drops[0].chance == 1.0
        assert service.get_drop_table_raw_yaml("SimpleLoot") == (
            "SimpleLoot:\n- BoneShard 2 1.0\n- exp 5\n"
        )

        assert service.save_skill_group_config("KingSlam", ["heal{amount=5}"]).success
        group = service.get_skill_group("KingSlam")
        assert group is not None and group.skills[0].mechanic == "heal"

        assert service.save_mob_config("Grunt", ["not", "a", "mob"]).success is False

    def test_validate_yaml_config(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        assert service.validate_yaml_config("A: 1").valid is True
        assert service.validate_yaml_config("A: [").valid is False


class TestStatusAndLifecycle:
    """Test status, TTL behaviour and reconfiguration."""

    def test_status_before_and_after_scan(self, mobs_dir: Path) -> None:
        clock = FakeClock()
        service = MythicCatalogService(mobs_dir, clock=clock)

        status = service.get_status()
        assert status.to_dict() == {
            "configured": True,
            "path": str(mobs_dir),
            "cacheSize": 0,
            "cacheAge": -1,
            "duplicates": 0,
            "failedFiles": [],
        }

        service.get_all_mobs()
        clock.now += 5
        status = service.get_status()
        assert status.cache_size == 4
        assert status.cache_age == 5
        assert status.failed_files == ["broken.yml"]

    def test_ttl(self, mobs_dir: Path) -> None:
        clock = FakeClock()
        service = MythicCatalogService(mobs_dir, ttl_seconds=60, clock=clock)
        service.get_all_mobs()
        first = service.cache.peek(Category.MOB)

        (mobs_dir / "new.yml").write_text("Bat:\n  Type: BAT\n", encoding="utf-8")
        clock.now += 30
        assert service.get_mob_by_id("Bat") is None
        assert service.cache.peek(Category.MOB) is first

        clock.now += 31
        assert service.get_mob_by_id("Bat") is not None
        assert service.cache.peek(Category.MOB) is not first

    def test_refresh_forces_rescan(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        service.get_all_mobs()
        (mobs_dir / "new.yml").write_text("Bat:\n  Type: BAT\n", encoding="utf-8")
        service.refresh()
        assert service.has_mob("Bat") is True

    def test_set_config_path_clears_everything(self, mobs_dir: Path, tmp_path: Path, tree_writer) -> None:
        service = MythicCatalogService(mobs_dir)
        service.get_all_mobs()
        service.get_all_items()

        other = tmp_path / "Other" / "Mobs"
        tree_writer(other, {"cow.yml": "Cow:\n  Type: COW\n"})
        service.set_config_path(other)

        assert all(service.cache.peek(category) is None for category in Category)
        assert service.get_config_path() == str(other)
        assert service.get_mob_ids() == ["Cow"]
        assert service.get_all_items() == []

    def test_export_json(self, mobs_dir: Path) -> None:
        service = MythicCatalogService(mobs_dir)
        exported = orjson.loads(service.export_json(Category.MOB))
        assert sorted(mob["id"] for mob in exported) == ["ArcherGrunt", "BaseBoss", "Grunt", "SkeletonKing"]
        king = next(mob for mob in exported if mob["id"] == "SkeletonKing")
        assert king["display_name"] == "Skeleton King"
        assert king["health"] == 150.0
