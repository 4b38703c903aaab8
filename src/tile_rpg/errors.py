"""Combat error taxonomy.

None of these are fatal: the battle session turns every ``CombatError`` into a
failed ``ActionResult`` and leaves its state untouched.
"""
from __future__ import annotations


class CombatError(Exception):
    """Base class for rejected combat requests."""


class InvalidAction(CombatError):
    """Action requested in the wrong phase, or the actor lacks the resource."""


class IllegalEscape(InvalidAction):
    """Fleeing a boss, or escaping outside of an awaiting phase."""


class MalformedDiceNotation(CombatError, ValueError):
    """Dice notation that does not match ``<count>d<sides>[+|-<modifier>]``."""
