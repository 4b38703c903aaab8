"""Tests for src/tile_rpg/mechanics/leveling.py."""
from __future__ import annotations

import pytest

from tile_rpg.mechanics.leveling import (
    apply_level,
    apply_rewards,
    next_entry,
    xp_for_level,
)
from tile_rpg.models.party import HitPoints, LevelEntry, PartyMember
from tile_rpg.models.spell import Spell, SpellKind

TABLE = [
    LevelEntry(level=2, xp=60, hp_gain=5, attack_bonus_gain=1, armor_class_gain=0, mp_gain=4),
    LevelEntry(level=3, xp=140, hp_gain=6, attack_bonus_gain=0, armor_class_gain=1, mp_gain=4),
    LevelEntry(level=4, xp=260, hp_gain=7, attack_bonus_gain=1, armor_class_gain=1),
]

SPELLS = [
    Spell(id="spark", name="Spark", level_required=1),
    Spell(id="mend", name="Mend", kind=SpellKind.HEAL, level_required=2),
    Spell(id="frost", name="Frost", level_required=3),
    Spell(id="storm", name="Storm", level_required=4),
]


@pytest.fixture
def member() -> PartyMember:
    return PartyMember(
        name="Tess",
        hp=HitPoints(current=12, max=20),
        attack_bonus=2,
        armor_class=10,
        known_spells=["spark"],
    )


class TestTableLookups:
    @pytest.mark.parametrize("level, xp", [(1, 0), (2, 60), (3, 140), (4, 260), (9, 0)])
    def test_xp_for_level(self, level, xp):
        assert xp_for_level(level, TABLE) == xp

    def test_next_entry_handles_unsorted_table(self):
        assert next_entry(1, list(reversed(TABLE))).level == 2

    def test_next_entry_exhausted(self):
        assert next_entry(4, TABLE) is None


class TestApplyRewards:
    def test_gold_added_without_level_up(self, member):
        outcome = apply_rewards(member, 10, 25, TABLE, SPELLS)
        assert member.gold == 25
        assert member.xp == 10
        assert member.level == 1
        assert not outcome.leveled_up

    def test_cascades_through_several_levels(self, member):
        outcome = apply_rewards(member, 260, 0, TABLE, SPELLS)

        assert member.level == 4
        assert [lu.level for lu in outcome.level_ups] == [2, 3, 4]
        assert member.hp.max == 20 + 5 + 6 + 7
        assert member.hp.current == 12 + 5 + 6 + 7
        assert member.attack_bonus == 2 + 1 + 0 + 1
        assert member.armor_class == 10 + 0 + 1 + 1
        assert member.known_spells == ["spark", "mend", "frost", "storm"]
        assert outcome.new_spells == ["mend", "frost", "storm"]

    def test_exact_threshold_levels_once(self, member):
        outcome = apply_rewards(member, 60, 0, TABLE, SPELLS)
        assert member.level == 2
        assert len(outcome.level_ups) == 1

        again = apply_rewards(member, 0, 0, TABLE, SPELLS)
        assert member.level == 2
        assert not again.leveled_up
        assert member.hp.max == 25
        assert member.known_spells.count("mend") == 1

    def test_one_short_of_threshold(self, member):
        apply_rewards(member, 59, 0, TABLE, SPELLS)
        assert member.level == 1

    def test_incremental_awards_match_single_award(self, member):
        other = member.model_copy(deep=True)
        apply_rewards(member, 260, 0, TABLE, SPELLS)
        for xp in (50, 50, 50, 50, 60):
            apply_rewards(other, xp, 0, TABLE, SPELLS)
        assert other.level == member.level
        assert other.hp.max == member.hp.max
        assert other.attack_bonus == member.attack_bonus
        assert other.known_spells == member.known_spells

    def test_table_exhausted_keeps_xp(self, member):
        apply_rewards(member, 10_000, 0, TABLE, SPELLS)
        assert member.level == 4
        assert member.xp == 10_000

    def test_healing_from_level_clamped(self):
        member = PartyMember(name="Full", hp=HitPoints(current=20, max=20))
        apply_rewards(member, 60, 0, TABLE)
        assert member.hp.current == member.hp.max == 25

    def test_mana_grows_with_level(self, member):
        member.mp.spend(3)
        outcome = apply_rewards(member, 140, 0, TABLE, SPELLS)
        assert [lu.mp_gain for lu in outcome.level_ups] == [4, 4]
        assert member.mp.max == 10 + 4 + 4
        assert member.mp.current == 7 + 4 + 4

    def test_already_known_spell_not_duplicated(self, member):
        member.known_spells.append("mend")
        outcome = apply_rewards(member, 60, 0, TABLE, SPELLS)
        assert member.known_spells.count("mend") == 1
        assert outcome.new_spells == []

    @pytest.mark.parametrize("xp, gold", [(-1, 0), (0, -1)])
    def test_negative_rewards_rejected(self, member, xp, gold):
        with pytest.raises(ValueError):
            apply_rewards(member, xp, gold, TABLE)
        assert member.gold == 0
        assert member.xp == 0


class TestApplyLevel:
    def test_skipping_a_level_is_an_error(self, member):
        with pytest.raises(ValueError):
            apply_level(member, TABLE[1])
        assert member.level == 1
