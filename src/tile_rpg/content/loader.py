from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from tile_rpg.models.item import Item, ItemStack
from tile_rpg.models.monster import Biome, MonsterTemplate
from tile_rpg.models.party import AbilityScores, HitPoints, LevelEntry, ManaPoints, PartyMember
from tile_rpg.models.spell import Spell

CONTENT_DIR = Path(__file__).parent


def load_toml(filepath: Path) -> dict[str, Any]:
    with open(filepath, "rb") as f:
        return tomllib.load(f)


def _load_list(filepath: Path, key: str) -> list[dict[str, Any]]:
    if not filepath.exists():
        return []
    return load_toml(filepath).get(key, [])


class ContentRegistry(BaseModel):
    """Static game content indexed by id."""

    monsters: dict[str, MonsterTemplate] = Field(default_factory=dict)
    spells: dict[str, Spell] = Field(default_factory=dict)
    items: dict[str, Item] = Field(default_factory=dict)
    biomes: dict[str, Biome] = Field(default_factory=dict)
    levels: list[LevelEntry] = Field(default_factory=list)

    def monster(self, monster_id: str) -> MonsterTemplate:
        try:
            return self.monsters[monster_id]
        except KeyError:
            raise KeyError(f"Unknown monster: {monster_id}") from None

    def spell(self, spell_id: str) -> Spell:
        try:
            return self.spells[spell_id]
        except KeyError:
            raise KeyError(f"Unknown spell: {spell_id}") from None

    def item(self, item_id: str) -> Item:
        try:
            return self.items[item_id]
        except KeyError:
            raise KeyError(f"Unknown item: {item_id}") from None

    def biome(self, biome_id: str) -> Biome:
        try:
            return self.biomes[biome_id]
        except KeyError:
            raise KeyError(f"Unknown biome: {biome_id}") from None


def load_all_monsters(content_dir: Path = CONTENT_DIR) -> dict[str, MonsterTemplate]:
    monsters = {}
    for data in _load_list(content_dir / "monsters.toml", "monsters"):
        monster = MonsterTemplate.model_validate(data)
        monsters[monster.id] = monster
    return monsters


def load_all_spells(content_dir: Path = CONTENT_DIR) -> dict[str, Spell]:
    spells = {}
    for data in _load_list(content_dir / "spells.toml", "spells"):
        spell = Spell.model_validate(data)
        spells[spell.id] = spell
    return spells


def load_all_items(content_dir: Path = CONTENT_DIR) -> dict[str, Item]:
    items = {}
    for data in _load_list(content_dir / "items.toml", "items"):
        item = Item.model_validate(data)
        items[item.id] = item
    return items


def load_all_biomes(content_dir: Path = CONTENT_DIR) -> dict[str, Biome]:
    biomes = {}
    for data in _load_list(content_dir / "biomes.toml", "biomes"):
        biome = Biome.model_validate(data)
        biomes[biome.id] = biome
    return biomes


def load_level_table(content_dir: Path = CONTENT_DIR) -> list[LevelEntry]:
    entries = [LevelEntry.model_validate(d) for d in _load_list(content_dir / "levels.toml", "levels")]
    return sorted(entries, key=lambda e: e.level)


def load_content(content_dir: Path = CONTENT_DIR) -> ContentRegistry:
    return ContentRegistry(
        monsters=load_all_monsters(content_dir),
        spells=load_all_spells(content_dir),
        items=load_all_items(content_dir),
        biomes=load_all_biomes(content_dir),
        levels=load_level_table(content_dir),
    )


def new_party_member(name: str, content: ContentRegistry) -> PartyMember:
    """A fresh level-1 hero with the level-1 spells and two potions."""
    starting_spells = [s.id for s in content.spells.values() if s.level_required <= 1]
    inventory = [ItemStack(item_id="potion", quantity=2)] if "potion" in content.items else []
    return PartyMember(
        name=name,
        level=1,
        xp=0,
        gold=50,
        hp=HitPoints(current=30, max=30),
        mp=ManaPoints(current=10, max=10),
        attack_bonus=3,
        armor_class=12,
        ability_scores=AbilityScores(
            strength=14, dexterity=12, constitution=14,
            intelligence=12, wisdom=10, charisma=8,
        ),
        damage_dice="1d8",
        known_spells=starting_spells,
        inventory=inventory,
    )
