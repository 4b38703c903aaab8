"""Initiative ordering for a battle.

Initiative is rolled once at battle start (1d20 + initiative modifier) and the
resulting order is kept for the whole fight. When combatants fall they are
dropped from the order; the survivors keep their relative positions.
"""
from __future__ import annotations

import logging
from typing import Iterable

from tile_rpg.mechanics.combat_math import determine_turn_order, initiative_roll
from tile_rpg.mechanics.dice import RandomSource
from tile_rpg.models.combatant import Combatant

logger = logging.getLogger(__name__)


class TurnOrder:
    def __init__(self, combatants: Iterable[Combatant], initiative: dict[str, int] | None = None):
        self._order: list[Combatant] = [c for c in combatants if c.is_alive]
        self.initiative: dict[str, int] = dict(initiative or {})
        self._index = 0
        self._landed: bool | None = None

    @classmethod
    def roll(cls, combatants: Iterable[Combatant], rng: RandomSource | None = None) -> TurnOrder:
        """Roll initiative for every living combatant and sort highest first.

        Ties keep insertion order, so callers list the party before enemies.
        """
        living = [c for c in combatants if c.is_alive]
        initiative: dict[str, int] = {}
        for c in living:
            initiative[c.id] = initiative_roll(c.initiative_modifier, rng).total

        ordered_ids = determine_turn_order([(c.id, initiative[c.id]) for c in living])
        by_id = {c.id: c for c in living}
        logger.debug("Initiative: %s", ", ".join(f"{cid}={initiative[cid]}" for cid in ordered_ids))
        return cls([by_id[cid] for cid in ordered_ids], initiative)

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self):
        return iter(self._order)

    @property
    def combatants(self) -> list[Combatant]:
        return list(self._order)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Combatant | None:
        if not self._order:
            return None
        return self._order[self._index]

    def advance(self) -> bool:
        """Move to the next combatant. Returns True when a new round begins."""
        if not self._order:
            return False
        if self._landed is not None:
            # recompute() already moved onto the fallen actor's successor.
            wrapped, self._landed = self._landed, None
            return wrapped
        self._index += 1
        if self._index >= len(self._order):
            self._index = 0
            return True
        return False

    def recompute(self) -> None:
        """Drop defeated combatants, keeping the pointer on the same actor."""
        if all(c.is_alive for c in self._order):
            return

        current = self.current
        if current is not None and current.is_alive:
            self._order = [c for c in self._order if c.is_alive]
            self._index = self._position(current.id)
            return

        # The acting combatant itself fell: the next advance() lands on its successor.
        successor = None
        wrapped = False
        for offset in range(1, len(self._order) + 1):
            candidate = self._order[(self._index + offset) % len(self._order)]
            if candidate.is_alive:
                successor = candidate
                wrapped = self._index + offset >= len(self._order)
                break
        self._order = [c for c in self._order if c.is_alive]
        if successor is None:
            self._index = 0
            self._landed = None
            return
        self._index = self._position(successor.id)
        self._landed = wrapped

    def _position(self, combatant_id: str) -> int:
        for i, c in enumerate(self._order):
            if c.id == combatant_id:
                return i
        raise ValueError(f"{combatant_id} is not in the turn order")
