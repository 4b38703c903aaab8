"""Ability score math: pure functions, no I/O."""
from __future__ import annotations

ABILITY_NAMES = ["strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma"]


def modifier(score: int) -> int:
    """Calculate ability modifier from score."""
    return (score - 10) // 2


def modifiers_for(scores: dict[str, int]) -> dict[str, int]:
    """Map every ability in ``scores`` to its modifier."""
    return {name: modifier(value) for name, value in scores.items()}
