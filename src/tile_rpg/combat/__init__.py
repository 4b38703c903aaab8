from __future__ import annotations

from tile_rpg.combat.actions import ActionResolver
from tile_rpg.combat.battle import BattlePhase, BattleSession, BattleView
from tile_rpg.combat.encounter import start_encounter
from tile_rpg.combat.pacing import ImmediateScheduler, ManualScheduler
from tile_rpg.combat.rewards import DefeatReport, VictorySpoils
from tile_rpg.combat.turn_order import TurnOrder

__all__ = [
    "ActionResolver",
    "BattlePhase",
    "BattleSession",
    "BattleView",
    "DefeatReport",
    "ImmediateScheduler",
    "ManualScheduler",
    "TurnOrder",
    "VictorySpoils",
    "start_encounter",
]
