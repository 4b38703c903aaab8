"""Victory payout: XP, gold, item drops and bestiary reports."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from tile_rpg.mechanics import inventory
from tile_rpg.mechanics.dice import RandomSource
from tile_rpg.mechanics.leveling import RewardOutcome, apply_rewards
from tile_rpg.models.monster import MonsterTemplate
from tile_rpg.models.party import LevelEntry, PartyMember
from tile_rpg.models.spell import Spell

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefeatReport:
    """Sent to bestiary listeners once per defeated monster."""

    monster_id: str
    ac_discovered: bool
    dropped_item_ids: tuple[str, ...] = ()


@dataclass
class VictorySpoils:
    xp: int = 0
    gold: int = 0
    drops: list[str] = field(default_factory=list)
    outcomes: list[RewardOutcome] = field(default_factory=list)
    reports: list[DefeatReport] = field(default_factory=list)


def roll_drops(template: MonsterTemplate, rng: RandomSource | None = None) -> list[str]:
    source = rng if rng is not None else random
    return [d.item_id for d in template.drops if source.random() < d.chance]


def distribute_rewards(
    members: Sequence[PartyMember],
    defeated: Iterable[MonsterTemplate],
    level_table: Iterable[LevelEntry],
    spells: Iterable[Spell] = (),
    ac_discovered: Iterable[str] = (),
    rng: RandomSource | None = None,
) -> VictorySpoils:
    """Pay out the defeated monsters to the surviving members.

    Every survivor gets the full XP. Gold and drops go to the first survivor,
    who holds the party purse and pack.
    """
    survivors = [m for m in members if m.is_alive]
    table = list(level_table)
    spell_list = list(spells)
    discovered = set(ac_discovered)
    spoils = VictorySpoils()

    for template in defeated:
        dropped = roll_drops(template, rng)
        spoils.xp += template.xp_reward
        spoils.gold += template.gold_reward
        spoils.drops.extend(dropped)
        spoils.reports.append(DefeatReport(
            monster_id=template.id,
            ac_discovered=template.id in discovered,
            dropped_item_ids=tuple(dropped),
        ))

    if not survivors:
        logger.warning("Victory with no surviving party members; rewards dropped")
        return spoils

    leader = survivors[0]
    for member in survivors:
        gold = spoils.gold if member is leader else 0
        spoils.outcomes.append(apply_rewards(member, spoils.xp, gold, table, spell_list))
    for item_id in spoils.drops:
        inventory.add_item(leader.inventory, item_id)

    logger.info("Victory spoils: %d XP, %d gold, drops=%s", spoils.xp, spoils.gold, spoils.drops)
    return spoils
