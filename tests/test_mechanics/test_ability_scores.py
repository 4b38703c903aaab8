"""Tests for src/tile_rpg/mechanics/ability_scores.py."""
from __future__ import annotations

import pytest

from tile_rpg.mechanics.ability_scores import ABILITY_NAMES, modifier, modifiers_for


class TestModifier:
    @pytest.mark.parametrize("score, expected", [
        (1, -5), (8, -1), (9, -1), (10, 0), (11, 0),
        (12, 1), (14, 2), (15, 2), (18, 4), (20, 5),
    ])
    def test_modifier_table(self, score, expected):
        assert modifier(score) == expected


class TestModifiersFor:
    def test_maps_every_ability(self):
        scores = dict.fromkeys(ABILITY_NAMES, 10)
        scores["strength"] = 16
        mods = modifiers_for(scores)
        assert set(mods) == set(ABILITY_NAMES)
        assert mods["strength"] == 3
        assert mods["wisdom"] == 0

    def test_empty(self):
        assert modifiers_for({}) == {}
