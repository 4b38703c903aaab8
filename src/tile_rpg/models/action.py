from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ActionKind(str, Enum):
    ATTACK = "attack"
    SPELL = "spell"
    ITEM = "item"
    DEFEND = "defend"
    FLEE = "flee"


@dataclass
class Action:
    kind: ActionKind
    actor_id: str
    target_id: str | None = None
    spell_id: str | None = None
    item_id: str | None = None


@dataclass
class DiceRoll:
    dice_expression: str = ""
    rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0
    purpose: str = ""


@dataclass
class Resolution:
    """What one resolved action did. Produced by the resolver, applied by the session."""

    kind: ActionKind
    actor_id: str
    target_id: str | None = None
    messages: list[str] = field(default_factory=list)
    dice_rolls: list[DiceRoll] = field(default_factory=list)
    hit: bool = False
    critical: bool = False
    damage: int = 0
    healing: int = 0
    mp_spent: int = 0
    escaped: bool = False
    defeated_ids: list[str] = field(default_factory=list)


@dataclass
class ActionResult:
    """Returned to the caller of every battle entry point."""

    success: bool = False
    messages: list[str] = field(default_factory=list)
    error: Exception | None = None
    resolution: Resolution | None = None
