"""Combat math: pure functions, no I/O."""
from __future__ import annotations

from tile_rpg.mechanics.dice import DiceResult, RandomSource, roll_d20, roll_detailed

FLEE_DC = 12
DEFEND_AC_BONUS = 2


def attack_roll(
    attack_bonus: int,
    target_ac: int,
    criticals: bool = True,
    rng: RandomSource | None = None,
) -> tuple[bool, bool, DiceResult]:
    """Make an attack roll. Returns (hit, is_critical, dice_result).

    With criticals on, a natural 20 always hits and is critical and a natural 1
    always misses. Without them the total alone decides.
    """
    result = roll_d20(attack_bonus, rng)
    natural = result.natural

    if criticals:
        if natural == 1:
            return False, False, result
        if natural == 20:
            return True, True, result

    hit = result.total >= target_ac
    return hit, False, result


def is_fumble(result: DiceResult, criticals: bool = True) -> bool:
    return criticals and result.natural == 1


def damage_roll(
    damage_dice: str,
    damage_modifier: int,
    is_critical: bool = False,
    rng: RandomSource | None = None,
) -> DiceResult:
    """Roll damage. A critical doubles the total, and the total never drops below 0."""
    result = roll_detailed(damage_dice, rng)
    total = result.total + damage_modifier
    if is_critical:
        total *= 2
    result.modifier += damage_modifier
    result.total = max(total, 0)
    return result


def effect_roll(dice: str, bonus: int = 0, minimum: int = 0, rng: RandomSource | None = None) -> DiceResult:
    """Roll a guaranteed effect (spell, item, monster ability) with a floor."""
    result = roll_detailed(dice, rng)
    result.modifier += bonus
    result.total = max(result.total + bonus, minimum)
    return result


def initiative_roll(initiative_modifier: int, rng: RandomSource | None = None) -> DiceResult:
    """Roll initiative: 1d20 + initiative modifier."""
    return roll_d20(modifier=initiative_modifier, rng=rng)


def determine_turn_order(combatants: list[tuple[str, int]]) -> list[str]:
    """Sort combatants by initiative, highest first.

    Ties keep their input order, so the result is reproducible for a fixed
    sequence of rolls.

    Args:
        combatants: list of (combatant_id, initiative_total)
    Returns:
        list of combatant ids sorted by initiative
    """
    ordered = sorted(combatants, key=lambda c: c[1], reverse=True)
    return [cid for cid, _ in ordered]


def flee_check(
    evasion_modifier: int,
    dc: int = FLEE_DC,
    rng: RandomSource | None = None,
) -> tuple[bool, DiceResult]:
    """Attempt to flee: 1d20 + evasion modifier against a fixed DC."""
    result = roll_d20(evasion_modifier, rng)
    return result.total >= dc, result
