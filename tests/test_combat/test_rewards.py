"""Tests for src/tile_rpg/combat/rewards.py."""
from __future__ import annotations

import pytest

from tile_rpg.combat.rewards import distribute_rewards, roll_drops
from tile_rpg.mechanics.inventory import quantity_of
from tile_rpg.models.party import HitPoints, PartyMember


@pytest.fixture
def sidekick() -> PartyMember:
    return PartyMember(id="sidekick", name="Bram", hp=HitPoints(current=18, max=18))


class TestRollDrops:
    def test_chance_below_threshold_drops(self, goblin, scripted_rng):
        assert roll_drops(goblin, scripted_rng(chances=[0.19, 0.09])) == ["potion", "firebomb"]

    def test_nothing_dropped(self, goblin, scripted_rng):
        assert roll_drops(goblin, scripted_rng(chances=[0.5, 0.5])) == []


class TestDistributeRewards:
    def test_totals_from_all_defeated(self, hero, goblin, content, scripted_rng):
        slime = content.monster("slime")
        spoils = distribute_rewards([hero], [goblin, slime], content.levels, rng=scripted_rng())
        assert spoils.xp == 75
        assert spoils.gold == 15
        assert hero.xp == 75
        assert hero.gold == 15
        assert [r.monster_id for r in spoils.reports] == ["goblin", "slime"]

    def test_every_survivor_gets_xp_leader_gets_gold(self, hero, sidekick, goblin, content, scripted_rng):
        spoils = distribute_rewards([hero, sidekick], [goblin], content.levels, rng=scripted_rng(chances=[0.1]))
        assert hero.xp == sidekick.xp == 50
        assert hero.gold == 10
        assert sidekick.gold == 0
        assert quantity_of(hero.inventory, "potion") == 3
        assert quantity_of(sidekick.inventory, "potion") == 0
        assert len(spoils.outcomes) == 2

    def test_fallen_members_get_nothing(self, hero, sidekick, goblin, content, scripted_rng):
        hero.hp.current = 0
        distribute_rewards([hero, sidekick], [goblin], content.levels, rng=scripted_rng())
        assert hero.xp == 0
        assert sidekick.xp == 50
        assert sidekick.gold == 10

    def test_ac_discovery_per_species(self, goblin, hero, content, scripted_rng):
        slime = content.monster("slime")
        spoils = distribute_rewards(
            [hero], [goblin, slime], content.levels, ac_discovered={"goblin"}, rng=scripted_rng(),
        )
        discovered = {r.monster_id: r.ac_discovered for r in spoils.reports}
        assert discovered == {"goblin": True, "slime": False}

    def test_level_up_reported(self, hero, content, scripted_rng):
        dragon = content.monster("dragon")
        spoils = distribute_rewards([hero], [dragon], content.levels, content.spells.values(), rng=scripted_rng())
        outcome = spoils.outcomes[0]
        assert outcome.leveled_up
        assert hero.level == 4
        assert "magic_missile" in outcome.new_spells
        assert "healing_word" in outcome.new_spells

    def test_no_survivors(self, hero, goblin, content, scripted_rng):
        hero.hp.current = 0
        spoils = distribute_rewards([hero], [goblin], content.levels, rng=scripted_rng())
        assert spoils.outcomes == []
        assert hero.gold == 0
