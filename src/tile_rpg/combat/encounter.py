"""Turns an exploration encounter (species + biome) into a running battle."""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from tile_rpg.combat.battle import BattleSession, BestiaryListener
from tile_rpg.combat.pacing import Scheduler
from tile_rpg.config import CombatConfig
from tile_rpg.content.loader import ContentRegistry
from tile_rpg.mechanics.dice import RandomSource
from tile_rpg.models.monster import MonsterTemplate
from tile_rpg.models.party import PartyMember

logger = logging.getLogger(__name__)


def spawn_enemies(content: ContentRegistry, species_id: str, biome_id: str | None = None) -> list[MonsterTemplate]:
    """Templates for one encounter. Bosses always come alone."""
    template = content.monster(species_id)
    if biome_id is None:
        return [template]

    biome = content.biome(biome_id)
    if species_id not in biome.monsters:
        logger.warning("%s does not normally live in %s", template.name, biome.name)
    count = 1 if template.is_boss else biome.pack_size
    return [template] * count


def start_encounter(
    content: ContentRegistry,
    party: Sequence[PartyMember],
    species_id: str,
    biome_id: str | None = None,
    config: CombatConfig | None = None,
    rng: RandomSource | None = None,
    scheduler: Scheduler | None = None,
    listeners: Iterable[BestiaryListener] = (),
) -> BattleSession:
    """Build and start a battle. Unknown species or biome ids raise KeyError."""
    living_party = [m for m in party if m.is_alive]
    if not living_party:
        raise ValueError("No party member is able to fight")

    enemies = spawn_enemies(content, species_id, biome_id)
    session = BattleSession(
        living_party,
        enemies,
        content=content,
        config=config,
        rng=rng,
        scheduler=scheduler,
        listeners=listeners,
    )
    session.start()
    return session
