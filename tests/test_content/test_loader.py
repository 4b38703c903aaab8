"""Tests for content loading: validates all shipped TOML content."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from tile_rpg.content.loader import (
    ContentRegistry,
    load_all_monsters,
    load_all_spells,
    load_content,
    load_level_table,
    new_party_member,
)
from tile_rpg.mechanics.dice import parse_notation
from tile_rpg.models.item import ItemKind


@pytest.fixture(scope="module")
def registry() -> ContentRegistry:
    return load_content()


class TestMonsters:
    def test_loaded(self, registry):
        assert {"slime", "goblin", "troll", "dragon"} <= set(registry.monsters)

    def test_dice_are_valid(self, registry):
        for monster in registry.monsters.values():
            parse_notation(monster.damage)
            for ability in monster.abilities:
                parse_notation(ability.dice)

    def test_drops_reference_items(self, registry):
        for monster in registry.monsters.values():
            for drop in monster.drops:
                assert drop.item_id in registry.items, f"{monster.id} drops unknown {drop.item_id}"
                assert 0 <= drop.chance <= 1

    def test_bosses(self, registry):
        bosses = {m.id for m in registry.monsters.values() if m.is_boss}
        assert bosses == {"troll", "dragon"}


class TestSpellsAndItems:
    def test_spell_dice_valid(self, registry):
        for spell in registry.spells.values():
            parse_notation(spell.dice)
            assert spell.level_required >= 1
            assert spell.mp_cost > 0

    def test_non_escape_items_have_dice(self, registry):
        for item in registry.items.values():
            if item.kind != ItemKind.ESCAPE:
                parse_notation(item.dice)


class TestBiomesAndLevels:
    def test_biome_rosters_reference_monsters(self, registry):
        for biome in registry.biomes.values():
            for monster_id in biome.monsters:
                assert monster_id in registry.monsters

    def test_level_table_sorted_and_increasing(self):
        table = load_level_table()
        levels = [e.level for e in table]
        xps = [e.xp for e in table]
        assert levels == sorted(levels)
        assert levels[0] == 2
        assert xps == sorted(xps)


class TestRegistryLookups:
    @pytest.mark.parametrize("method", ["monster", "spell", "item", "biome"])
    def test_unknown_id_raises_key_error(self, registry, method):
        with pytest.raises(KeyError):
            getattr(registry, method)("nope")

    def test_known_ids(self, registry):
        assert registry.monster("goblin").name == "Goblin"
        assert registry.item("potion").kind == ItemKind.HEAL
        assert registry.biome("forest").pack_size == 2


class TestLoaderEdgeCases:
    def test_missing_directory_is_empty(self, tmp_path):
        registry = load_content(tmp_path)
        assert registry.monsters == {}
        assert registry.levels == []

    def test_invalid_monster_rejected(self, tmp_path):
        (tmp_path / "monsters.toml").write_text(
            '[[monsters]]\nid = "blob"\nname = "Blob"\nhp = 0\n'
        )
        with pytest.raises(ValidationError):
            load_all_monsters(tmp_path)

    @pytest.mark.parametrize("field", ["xp_reward", "gold_reward"])
    def test_negative_reward_rejected(self, tmp_path, field):
        (tmp_path / "monsters.toml").write_text(
            f'[[monsters]]\nid = "imp"\nname = "Imp"\nhp = 1\n{field} = -5\n'
        )
        with pytest.raises(ValidationError):
            load_all_monsters(tmp_path)

    def test_negative_mp_cost_rejected(self, tmp_path):
        (tmp_path / "spells.toml").write_text(
            '[[spells]]\nid = "drain"\nname = "Drain"\nmp_cost = -1\n'
        )
        with pytest.raises(ValidationError):
            load_all_spells(tmp_path)


class TestNewPartyMember:
    def test_starting_hero(self, registry):
        hero = new_party_member("Aria", registry)
        assert hero.level == 1
        assert hero.hp.current == hero.hp.max
        assert hero.mp.current == hero.mp.max == 10
        assert set(hero.known_spells) == {"fire_bolt", "cure_wounds"}
        assert hero.inventory[0].item_id == "potion"
        assert hero.inventory[0].quantity == 2
