"""Dice rolling engine: pure math, no I/O."""
from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from typing import Protocol

from tile_rpg.errors import MalformedDiceNotation

logger = logging.getLogger(__name__)

# Pattern: NdM, optional +/-X
_DICE_RE = re.compile(r"^(\d+)d(\d+)([+-]\d+)?$", re.IGNORECASE)


class RandomSource(Protocol):
    """The slice of ``random.Random`` combat uses. The ``random`` module qualifies."""

    def randint(self, a: int, b: int) -> int: ...

    def random(self) -> float: ...


@dataclass
class DiceResult:
    expression: str
    individual_rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0

    @property
    def natural(self) -> int:
        """First die face, used for natural 20 / natural 1 checks."""
        return self.individual_rolls[0] if self.individual_rolls else 0


def parse_notation(expression: str) -> tuple[int, int, int]:
    """Split '2d6+2' into (count, sides, modifier).

    Raises MalformedDiceNotation for anything outside the grammar, including a
    zero count or zero-sided dice.
    """
    expr = (expression or "").replace(" ", "")
    m = _DICE_RE.match(expr)
    if not m:
        raise MalformedDiceNotation(f"Invalid dice expression: {expression!r}")

    count = int(m.group(1))
    sides = int(m.group(2))
    modifier = int(m.group(3)) if m.group(3) else 0
    if count == 0 or sides == 0:
        raise MalformedDiceNotation(f"Dice expression needs at least one die with sides: {expression!r}")
    return count, sides, modifier


def roll_detailed(expression: str, rng: RandomSource | None = None) -> DiceResult:
    """Roll dice from an expression like '2d6+3' or '1d20'.

    Bad content never stops a fight: malformed notation rolls a flat 0.
    """
    try:
        count, sides, modifier = parse_notation(expression)
    except MalformedDiceNotation as e:
        logger.warning("%s; rolling 0", e)
        return DiceResult(expression=expression or "", total=0)

    source = rng if rng is not None else random
    rolls = [source.randint(1, sides) for _ in range(count)]
    total = sum(rolls) + modifier
    logger.debug("Rolled %s: %s %+d = %d", expression, rolls, modifier, total)
    return DiceResult(
        expression=expression,
        individual_rolls=rolls,
        modifier=modifier,
        total=total,
    )


def roll(expression: str, rng: RandomSource | None = None) -> int:
    """Roll dice and return only the total."""
    return roll_detailed(expression, rng).total


def roll_d20(modifier: int = 0, rng: RandomSource | None = None) -> DiceResult:
    """Convenience: roll 1d20 + modifier."""
    r = roll_detailed("1d20", rng)
    r.modifier = modifier
    r.total = r.individual_rolls[0] + modifier
    return r


def roll_range(expression: str) -> tuple[int, int]:
    """Lowest and highest possible totals for an expression, (0, 0) if malformed."""
    try:
        count, sides, modifier = parse_notation(expression)
    except MalformedDiceNotation:
        return 0, 0
    return count + modifier, count * sides + modifier
