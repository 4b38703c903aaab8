"""Shared fixtures for the tile_rpg test suite."""
from __future__ import annotations

import random
from typing import Callable

import pytest

from tile_rpg.content.loader import ContentRegistry, load_content
from tile_rpg.models.item import ItemStack
from tile_rpg.models.monster import MonsterTemplate
from tile_rpg.models.party import AbilityScores, HitPoints, PartyMember


class ScriptedRng:
    """A dice source that returns queued values.

    ``rolls`` feed ``randint`` in order; ``chances`` feed ``random``. When the
    roll queue runs dry ``default`` is used (clamped to the die), or the test
    fails loudly if there is no default. Unscripted ``random()`` calls return
    0.999, so drops and monster specials never trigger by accident.
    """

    def __init__(self, rolls=(), chances=(), default: int | None = None):
        self.rolls = list(rolls)
        self.chances = list(chances)
        self.default = default
        self.calls: list[tuple[int, int, int]] = []

    def randint(self, a: int, b: int) -> int:
        if self.rolls:
            value = self.rolls.pop(0)
        elif self.default is not None:
            value = min(max(self.default, a), b)
        else:
            raise AssertionError(f"Unscripted randint({a}, {b})")
        assert a <= value <= b, f"Scripted {value} outside [{a}, {b}]"
        self.calls.append((a, b, value))
        return value

    def random(self) -> float:
        if self.chances:
            return self.chances.pop(0)
        return 0.999


@pytest.fixture
def seeded_rng():
    """Seed the global random module for reproducible tests."""
    state = random.getstate()
    random.seed(42)
    yield
    random.setstate(state)


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRng]:
    return ScriptedRng


@pytest.fixture(scope="session")
def content() -> ContentRegistry:
    return load_content()


@pytest.fixture
def hero() -> PartyMember:
    """Level 1 fighter: attack +4, STR +2, DEX +1, INT +1, 30 HP, AC 12."""
    return PartyMember(
        id="hero",
        name="Aria",
        hp=HitPoints(current=30, max=30),
        attack_bonus=4,
        armor_class=12,
        ability_scores=AbilityScores(
            strength=14, dexterity=12, constitution=14,
            intelligence=12, wisdom=10, charisma=8,
        ),
        damage_dice="1d8",
        known_spells=["fire_bolt", "cure_wounds"],
        inventory=[ItemStack(item_id="potion", quantity=2)],
    )


@pytest.fixture
def goblin(content) -> MonsterTemplate:
    return content.monster("goblin")


@pytest.fixture
def troll(content) -> MonsterTemplate:
    return content.monster("troll")
