"""Shared fixtures: a small MythicMobs plugin directory built in tmp_path."""

import textwrap
from pathlib import Path
from typing import Dict

import pytest

SAMPLE_TREE: Dict[str, str] = {
    "Mobs/bosses.yml": """
        # Boss mobs
        SkeletonKing:
          Display: '&6Skeleton King'
          Type: WITHER_SKELETON
          Template: BaseBoss
          Health: 100-200
          Damage: 10
          Options:
            MovementSpeed: 0.3
            PreventSunburn: true
          Skills:
          - skill{s=KingRage} @onDamaged 0.5 ~!hasAura{aura=rage}
          - damage{amount=10;element=fire} @onAttack ?target{range=10} chance=0.5
          Drops:
          - KingBlade 1 0.05
          - exp 100
          DropsTable: KingLoot
          Equipment:
          - KingBlade
          - SHIELD
          BossBar:
            Enabled: true
            Title: The King
            Color: RED

        BaseBoss:
          Type: SKELETON
          Health: 500
          Armor: 5
          Faction: Undead
          Options:
            KnockbackResistance: 1
        """,
    "Mobs/minions.yml": """
        Grunt:
          Display: "&cGrunt&r"
          Type: ZOMBIE
          Health: 30

        # Ranged variant
        ArcherGrunt:
          Type: SKELETON
          Template: Grunt
        """,
    "Mobs/broken.yml": """
        Bad: [unclosed
        """,
    "Items/weapons.yml": """
        KingBlade:
          Id: diamond_sword
          Display: '&bBlade of the King'
          Lore:
          - '&7Forged in bone'
          Enchantments:
          - SHARPNESS:5
          - UNBREAKING
          Attributes:
          - GENERIC_ATTACK_DAMAGE 12 ADD MAINHAND
          Unbreakable: true
        BoneShard:
          Material: BONE
          Amount: 3
        """,
    "DropTables/loot.yml": """
        KingLoot:
          TotalWeight: 10
          Drops:
          - mythicitem{item=KingBlade} 1 1
          - gold_nugget 1-5 0.5
          Conditions:
          - playerwithin{d=30} true
        SimpleLoot:
        - KingBlade 1 0.1
        """,
    "Skills/king.yml": """
        KingRage:
          Cooldown: 10
          Skills:
          - skill{s=KingSlam}
          - message{m="The king is angry"} @PlayersInRadius{r=20}
        KingSlam:
          Skills:
          - damage{amount=20} @target
        """,
}


def write_tree(root: Path, files: Dict[str, str]) -> None:
    """Write dedented documents below root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    """MythicMobs plugin directory with Mobs, Items, DropTables and Skills."""
    root = tmp_path / "MythicMobs"
    write_tree(root, SAMPLE_TREE)
    return root


@pytest.fixture
def mobs_dir(plugin_dir: Path) -> Path:
    return plugin_dir / "Mobs"


@pytest.fixture
def tree_writer():
    """Return the helper that writes a document tree below a root."""
    return write_tree
