"""Tests for the skill line grammar."""

from mythic_catalog.catalog.skill_parser import (
    SkillStringParser,
    split_top_level,
    split_words,
)


class TestParseSkill:
    """Test parsing of complete skill lines."""

    def setup_method(self) -> None:
        self.parser = SkillStringParser()

    def test_full_skill_line(self) -> None:
        """Test every field of a typical skill line."""
        skill = self.parser.parse_skill(
            "damage{amount=10;element=fire} @onAttack ~hasAura{aura=burn} "
            "?target{range=10} chance=0.5 cooldown=5"
        )

        assert skill.mechanic == "damage"
        assert skill.params == [("amount", "10"), ("element", "fire")]
        assert skill.trigger == "onAttack"
        assert len(skill.conditions) == 1
        assert skill.conditions[0].type == "hasAura"
        assert skill.conditions[0].negated is False
        assert skill.conditions[0].params == [("aura", "burn")]
        assert skill.targeter is not None
        assert skill.targeter.type == "target"
        assert skill.targeter.params == [("range", "10")]
        assert skill.chance == 0.5
        assert skill.cooldown == 5.0
        assert skill.unparsed == []

    def test_field_order_does_not_matter(self) -> None:
        skill = self.parser.parse_skill(
            "heal{amount=5} ?self chance=0.2 @onTimer:40 ~!inCombat"
        )
        assert skill.mechanic == "heal"
        assert skill.targeter is not None and skill.targeter.type == "self"
        assert skill.trigger == "onTimer"
        assert skill.trigger_argument == "40"
        assert skill.chance == 0.2
        assert skill.conditions[0].type == "inCombat"
        assert skill.conditions[0].negated is True

    def test_list_marker_and_raw_text(self) -> None:
        skill = self.parser.parse_skill("- ignite @target")
        assert skill.raw == "- ignite @target"
        assert skill.mechanic == "ignite"
        assert skill.trigger == "target"

    def test_trigger_threshold(self) -> None:
        """Test a bare number right after the trigger is its threshold."""
        skill = self.parser.parse_skill("skill{s=Enrage} @onDamaged 0.5")
        assert skill.trigger == "onDamaged"
        assert skill.trigger_threshold == 0.5

    def test_trigger_interval_split_from_name(self) -> None:
        skill = self.parser.parse_skill("heal{amount=5} @onTimer:40")
        assert skill.trigger == "onTimer"
        assert skill.trigger_argument == "40"
        assert skill.unparsed == []

        plain = self.parser.parse_skill("heal @onAttack")
        assert plain.trigger_argument is None

    def test_spaced_keywords(self) -> None:
        """Test `chance = 0.5` and `cooldown =3` are read like `chance=0.5`."""
        skill = self.parser.parse_skill("damage @onAttack chance = 0.5 cooldown =3")
        assert skill.chance == 0.5
        assert skill.cooldown == 3.0
        assert skill.unparsed == []

    def test_incomplete_keyword_left_unparsed(self) -> None:
        skill = self.parser.parse_skill("damage chance = ?target")
        assert skill.chance is None
        assert skill.unparsed == ["chance", "="]
        assert skill.targeter is not None and skill.targeter.type == "target"

    def test_conditions_collected_in_order(self) -> None:
        skill = self.parser.parse_skill(
            "shoot ~isNight ~!raining ~distance{d=<10}"
        )
        assert [c.type for c in skill.conditions] == ["isNight", "raining", "distance"]
        assert [c.negated for c in skill.conditions] == [False, True, False]
        assert skill.conditions[2].params == [("d", "<10")]

    def test_only_first_targeter_kept(self) -> None:
        skill = self.parser.parse_skill("pull ?target ?self")
        assert skill.targeter is not None
        assert skill.targeter.type == "target"
        assert skill.unparsed == ["?self"]

    def test_health_modifier_kept_as_text(self) -> None:
        skill = self.parser.parse_skill("summon{type=Minion} @onDamaged =25%-50%")
        assert skill.health_modifier == "25%-50%"

    def test_bare_flag_defaults_to_true(self) -> None:
        skill = self.parser.parse_skill("effect:particles{p=flame;repeat;a=10}")
        assert skill.mechanic == "effect"
        assert skill.params == [
            ("arg", "particles"),
            ("p", "flame"),
            ("repeat", "true"),
            ("a", "10"),
        ]

    def test_comma_separated_params(self) -> None:
        skill = self.parser.parse_skill("damage{a=1,b=2}")
        assert skill.params == [("a", "1"), ("b", "2")]

    def test_chance_in_mechanic_params_wins(self) -> None:
        skill = self.parser.parse_skill("heal{amount=2;chance=0.1} chance=0.9")
        assert skill.chance == 0.1

    def test_keyword_is_case_insensitive_and_accepts_colon(self) -> None:
        skill = self.parser.parse_skill("heal Cooldown:3")
        assert skill.cooldown == 3.0

    def test_nested_braces_in_values(self) -> None:
        """Test values containing braces and sigils stay intact."""
        skill = self.parser.parse_skill(
            "message{m=\"Hi @everyone ~ {friend}?\";delay=5} @onSpawn ?PlayersInRadius{r=10}"
        )
        assert skill.mechanic == "message"
        assert skill.params == [("m", "Hi @everyone ~ {friend}?"), ("delay", "5")]
        assert skill.trigger == "onSpawn"
        assert skill.targeter is not None
        assert skill.targeter.type == "PlayersInRadius"

    def test_nested_skill_block(self) -> None:
        skill = self.parser.parse_skill(
            "projectile{onTick=[ - effect:particles{p=flame} ];v=8} @target"
        )
        assert skill.mechanic == "projectile"
        assert skill.param("ontick") == "[ - effect:particles{p=flame} ]"
        assert skill.param("v") == "8"
        assert skill.trigger == "target"

    def test_unterminated_block_does_not_raise(self) -> None:
        skill = self.parser.parse_skill("damage{amount=10 @onAttack")
        assert skill.mechanic == "damage"
        assert skill.trigger is None

    def test_non_string_input(self) -> None:
        skill = self.parser.parse_skill(123)
        assert skill.raw == "123"
        assert skill.mechanic == "123"


class TestConditionsAndDrops:
    """Test condition, targeter and drop entries."""

    def setup_method(self) -> None:
        self.parser = SkillStringParser()

    def test_condition_with_action(self) -> None:
        condition = self.parser.parse_condition("- health{h=<50%} true")
        assert condition.type == "health"
        assert condition.params == [("h", "<50%")]
        assert condition.action == "true"

    def test_targeter_with_at_prefix(self) -> None:
        targeter = self.parser.parse_targeter("@EntitiesInRadius{r=5;type=ZOMBIE}")
        assert targeter.type == "EntitiesInRadius"
        assert targeter.params == [("r", "5"), ("type", "ZOMBIE")]

    def test_drop_fields(self) -> None:
        drop = self.parser.parse_drop("gold_nugget 1-5 0.5")
        assert drop.item == "gold_nugget"
        assert drop.amount == "1-5"
        assert drop.chance == 0.5

    def test_drop_item_block_with_spaces(self) -> None:
        drop = self.parser.parse_drop("mythicitem{item=Blade of Dawn} 2")
        assert drop.item == "mythicitem{item=Blade of Dawn}"
        assert drop.amount == "2"
        assert drop.chance is None

    def test_parse_reference(self) -> None:
        name, params = self.parser.parse_reference("mythicitem{item=KingBlade}")
        assert name == "mythicitem"
        assert params == [("item", "KingBlade")]


class TestSplitting:
    """Test the brace-aware splitting helpers."""

    def test_split_top_level_ignores_nested_separators(self) -> None:
        assert split_top_level("a=1;b={c=2;d=3},e") == ["a=1", "b={c=2;d=3}", "e"]

    def test_apostrophe_inside_word_is_not_a_quote(self) -> None:
        assert split_top_level("m=King's;d=1") == ["m=King's", "d=1"]

    def test_split_words_keeps_blocks(self) -> None:
        assert split_words("a{x = 1} b  c") == ["a{x = 1}", "b", "c"]
