"""XP, gold and level-up mechanics: pure math, no I/O."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from tile_rpg.models.party import LevelEntry, PartyMember
from tile_rpg.models.spell import Spell

logger = logging.getLogger(__name__)


@dataclass
class LevelUp:
    level: int
    hp_gain: int = 0
    attack_bonus_gain: int = 0
    armor_class_gain: int = 0
    mp_gain: int = 0
    new_spells: list[str] = field(default_factory=list)


@dataclass
class RewardOutcome:
    member: PartyMember
    xp_gained: int = 0
    gold_gained: int = 0
    level_ups: list[LevelUp] = field(default_factory=list)

    @property
    def leveled_up(self) -> bool:
        return bool(self.level_ups)

    @property
    def new_spells(self) -> list[str]:
        return [sid for lu in self.level_ups for sid in lu.new_spells]


def sorted_table(level_table: Iterable[LevelEntry]) -> list[LevelEntry]:
    return sorted(level_table, key=lambda e: e.level)


def xp_for_level(level: int, level_table: Iterable[LevelEntry]) -> int:
    """Cumulative XP required to reach the given level (0 for level 1 or unknown)."""
    for entry in level_table:
        if entry.level == level:
            return entry.xp
    return 0


def next_entry(level: int, level_table: Iterable[LevelEntry]) -> LevelEntry | None:
    """The table entry for ``level + 1``, or None when the table is exhausted."""
    for entry in sorted_table(level_table):
        if entry.level == level + 1:
            return entry
    return None


def apply_level(member: PartyMember, entry: LevelEntry, spells: Iterable[Spell] = ()) -> LevelUp:
    """Raise ``member`` to ``entry.level`` and grant that level's stats and spells."""
    if entry.level != member.level + 1:
        raise ValueError(f"Cannot apply level {entry.level} to a level {member.level} member")

    member.level = entry.level
    member.hp.grow(entry.hp_gain)
    member.mp.grow(entry.mp_gain)
    member.attack_bonus += entry.attack_bonus_gain
    member.armor_class += entry.armor_class_gain

    learned: list[str] = []
    for spell in spells:
        if spell.level_required == entry.level and spell.id not in member.known_spells:
            member.known_spells.append(spell.id)
            learned.append(spell.id)

    logger.info("%s reached level %d", member.name, member.level)
    return LevelUp(
        level=entry.level,
        hp_gain=entry.hp_gain,
        attack_bonus_gain=entry.attack_bonus_gain,
        armor_class_gain=entry.armor_class_gain,
        mp_gain=entry.mp_gain,
        new_spells=learned,
    )


def apply_rewards(
    member: PartyMember,
    xp_gained: int,
    gold_gained: int,
    level_table: Iterable[LevelEntry],
    spells: Iterable[Spell] = (),
) -> RewardOutcome:
    """Add gold and XP, then climb the level table as far as the XP reaches.

    A single large award cascades through several levels; each level's grants
    are applied exactly once because the member's level only moves forward.
    """
    if xp_gained < 0 or gold_gained < 0:
        raise ValueError(f"Rewards cannot be negative (xp={xp_gained}, gold={gold_gained})")

    table = sorted_table(level_table)
    spell_list = list(spells)

    member.gold += gold_gained
    member.xp += xp_gained
    outcome = RewardOutcome(member=member, xp_gained=xp_gained, gold_gained=gold_gained)

    entry = next_entry(member.level, table)
    while entry is not None and member.xp >= entry.xp:
        outcome.level_ups.append(apply_level(member, entry, spell_list))
        entry = next_entry(member.level, table)

    return outcome
