"""Battle session: the combat state machine.

A session is built per encounter, driven one action at a time, and thrown
away once it reaches Victory, Defeat or Escaped.
"""
from __future__ import annotations

import logging
import random
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, Sequence

from tile_rpg.combat.actions import ActionResolver, living
from tile_rpg.combat.pacing import ImmediateScheduler, PendingCall, Scheduler
from tile_rpg.combat.rewards import DefeatReport, VictorySpoils, distribute_rewards
from tile_rpg.combat.turn_order import TurnOrder
from tile_rpg.config import CombatConfig
from tile_rpg.content.loader import ContentRegistry
from tile_rpg.errors import CombatError, IllegalEscape, InvalidAction
from tile_rpg.mechanics.dice import RandomSource
from tile_rpg.models.action import Action, ActionKind, ActionResult, Resolution
from tile_rpg.models.combatant import Combatant, Side
from tile_rpg.models.item import ItemKind
from tile_rpg.models.monster import MonsterTemplate
from tile_rpg.models.party import PartyMember

logger = logging.getLogger(__name__)

BestiaryListener = Callable[[DefeatReport], None]


class BattlePhase(str, Enum):
    INITIALIZING = "initializing"
    AWAITING_PLAYER = "awaiting_player"
    AWAITING_ENEMY = "awaiting_enemy"
    VICTORY = "victory"
    DEFEAT = "defeat"
    ESCAPED = "escaped"


TERMINAL_PHASES = frozenset({BattlePhase.VICTORY, BattlePhase.DEFEAT, BattlePhase.ESCAPED})


class BattleLog:
    """The newest ``size`` battle messages, oldest first."""

    def __init__(self, size: int = 10):
        self._entries: deque[str] = deque(maxlen=size)

    def append(self, message: str) -> None:
        self._entries.append(message)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def tail(self, n: int) -> list[str]:
        if n <= 0:
            return []
        return list(self._entries)[-n:]

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class CombatantView:
    id: str
    name: str
    side: Side
    hp: int
    max_hp: int
    mp: int
    max_mp: int
    is_boss: bool
    defeated: bool
    defending: bool


@dataclass(frozen=True)
class BattleView:
    """Read-only snapshot for the UI.

    ``log`` holds only what happened in the battle. A rejected request changes
    nothing, so its reason travels back in ``ActionResult.messages`` instead.
    """

    phase: BattlePhase
    round: int
    log: tuple[str, ...]
    combatants: tuple[CombatantView, ...]
    active_id: str | None
    available_actions: tuple[ActionKind, ...]


def _instance_ids(templates: Sequence[MonsterTemplate]) -> list[str]:
    counts: dict[str, int] = {}
    for t in templates:
        counts[t.id] = counts.get(t.id, 0) + 1
    seen: dict[str, int] = {}
    ids = []
    for t in templates:
        if counts[t.id] == 1:
            ids.append(t.id)
            continue
        seen[t.id] = seen.get(t.id, 0) + 1
        ids.append(f"{t.id}-{seen[t.id]}")
    return ids


class BattleSession:
    def __init__(
        self,
        party: Sequence[PartyMember],
        enemies: Sequence[MonsterTemplate],
        content: ContentRegistry | None = None,
        config: CombatConfig | None = None,
        rng: RandomSource | None = None,
        scheduler: Scheduler | None = None,
        listeners: Iterable[BestiaryListener] = (),
    ):
        if not party:
            raise ValueError("A battle needs at least one party member")
        if not enemies:
            raise ValueError("A battle needs at least one enemy")

        self.content = content or ContentRegistry()
        self.config = config or CombatConfig()
        self.rng = rng if rng is not None else random
        self.scheduler = scheduler or ImmediateScheduler()
        self.listeners = list(listeners)
        self.resolver = ActionResolver(self.config, self.content.items, self.rng)

        spellbook = list(self.content.spells.values())
        self.members: list[PartyMember] = list(party)
        self.party: list[Combatant] = [Combatant.from_party_member(m, spellbook) for m in self.members]
        # Enemies are independent snapshots; templates stay untouched.
        self._templates: dict[str, MonsterTemplate] = {}
        self.enemies: list[Combatant] = []
        for instance_id, template in zip(_instance_ids(enemies), enemies):
            self._templates[instance_id] = template
            self.enemies.append(Combatant.from_template(template, instance_id))

        self.phase = BattlePhase.INITIALIZING
        self.round = 1
        self.log = BattleLog(self.config.log_size)
        self.turn_order = TurnOrder(self.combatants)
        self.spoils: VictorySpoils | None = None
        self._hit_templates: set[str] = set()
        self._pending: PendingCall | None = None
        self._enemy_token = 0
        self._captured: list[str] | None = None

    # -- Read-only state --

    @property
    def combatants(self) -> list[Combatant]:
        return self.party + self.enemies

    @property
    def is_over(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def active(self) -> Combatant | None:
        if self.is_over or self.phase == BattlePhase.INITIALIZING:
            return None
        return self.turn_order.current

    def combatant(self, combatant_id: str) -> Combatant | None:
        for c in self.combatants:
            if c.id == combatant_id:
                return c
        return None

    def available_actions(self) -> list[ActionKind]:
        actor = self.active
        if self.phase != BattlePhase.AWAITING_PLAYER or actor is None:
            return []
        actions = [ActionKind.ATTACK]
        if any(actor.can_cast(s) for s in actor.spells):
            actions.append(ActionKind.SPELL)
        if any(s.item_id in self.content.items and s.quantity > 0 for s in actor.items):
            actions.append(ActionKind.ITEM)
        actions.append(ActionKind.DEFEND)
        if not any(e.is_boss for e in living(self.enemies)):
            actions.append(ActionKind.FLEE)
        return actions

    def view(self) -> BattleView:
        active = self.active
        return BattleView(
            phase=self.phase,
            round=self.round,
            log=tuple(self.log.entries),
            combatants=tuple(
                CombatantView(
                    id=c.id, name=c.name, side=c.side,
                    hp=c.hp.current, max_hp=c.hp.max,
                    mp=c.mp.current, max_mp=c.mp.max,
                    is_boss=c.is_boss, defeated=c.is_defeated, defending=c.defending,
                )
                for c in self.combatants
            ),
            active_id=active.id if active else None,
            available_actions=tuple(self.available_actions()),
        )

    # -- Lifecycle --

    def start(self) -> list[str]:
        """Roll initiative and hand the first turn to whoever won it."""
        if self.phase != BattlePhase.INITIALIZING:
            return []
        with self._capture() as captured:
            if len(self.enemies) == 1:
                self._log(f"A wild {self.enemies[0].name} appears!")
            else:
                self._log(f"{', '.join(e.name for e in self.enemies)} appear!")

            self.turn_order = TurnOrder.roll(self.combatants, self.rng)
            first = self.turn_order.current
            logger.info(
                "Battle started: %s vs %s",
                [c.name for c in self.party], [c.name for c in self.enemies],
            )
            self._log(f"{first.name} acts first!")
            self._enter_turn()
        return captured

    def abort(self) -> bool:
        """End the battle from outside (e.g. a game reset). No rewards are paid."""
        if self.is_over:
            return False
        with self._capture():
            self._log("The battle was interrupted.")
            self._finish(BattlePhase.ESCAPED)
        return True

    # -- Player entry points --

    def attack(self, target_id: str | None = None) -> ActionResult:
        return self.submit(self._player_action(ActionKind.ATTACK, target_id=target_id))

    def cast_spell(self, spell_id: str, target_id: str | None = None) -> ActionResult:
        return self.submit(self._player_action(ActionKind.SPELL, target_id=target_id, spell_id=spell_id))

    def use_item(self, item_id: str, target_id: str | None = None) -> ActionResult:
        return self.submit(self._player_action(ActionKind.ITEM, target_id=target_id, item_id=item_id))

    def defend(self) -> ActionResult:
        return self.submit(self._player_action(ActionKind.DEFEND))

    def flee(self) -> ActionResult:
        return self.submit(self._player_action(ActionKind.FLEE))

    def submit(self, action: Action) -> ActionResult:
        """Resolve one player action. Anything invalid is a no-op with a reason."""
        if self.phase != BattlePhase.AWAITING_PLAYER:
            return self._reject(action, self._wrong_phase_error(action))

        actor = self.turn_order.current
        if actor is None or actor.side != Side.PARTY or action.actor_id != actor.id:
            return self._reject(action, InvalidAction("It is not that combatant's turn."))

        try:
            resolution = self.resolver.resolve(action, actor, self.combatants)
        except CombatError as e:
            return self._reject(action, e)

        with self._capture() as captured:
            self._apply(resolution)
        return ActionResult(success=True, messages=captured, resolution=resolution)

    # -- Internals --

    def _player_action(self, kind: ActionKind, **kwargs) -> Action:
        actor = self.turn_order.current if self.phase == BattlePhase.AWAITING_PLAYER else None
        return Action(kind=kind, actor_id=actor.id if actor else "", **kwargs)

    def _wrong_phase_error(self, action: Action) -> CombatError:
        message = f"No action accepted while the battle is {self.phase.value}."
        if action.kind == ActionKind.FLEE:
            return IllegalEscape(message)
        if action.kind == ActionKind.ITEM and action.item_id in self.content.items:
            if self.content.items[action.item_id].kind == ItemKind.ESCAPE:
                return IllegalEscape(message)
        return InvalidAction(message)

    @staticmethod
    def _reject(action: Action, error: CombatError) -> ActionResult:
        logger.info("Rejected %s: %s", action.kind.value, error)
        return ActionResult(success=False, messages=[str(error)], error=error)

    @contextmanager
    def _capture(self) -> Iterator[list[str]]:
        if self._captured is not None:
            yield self._captured
            return
        self._captured = []
        try:
            yield self._captured
        finally:
            self._captured = None

    def _log(self, message: str) -> None:
        self.log.append(message)
        if self._captured is not None:
            self._captured.append(message)

    def _apply(self, resolution: Resolution) -> None:
        """Record a resolved action, then move the battle on."""
        for message in resolution.messages:
            self._log(message)
        if resolution.hit and resolution.target_id in self._templates:
            self._hit_templates.add(self._templates[resolution.target_id].id)

        if resolution.escaped:
            self._finish(BattlePhase.ESCAPED)
            return
        if resolution.defeated_ids:
            self.turn_order.recompute()

        if not living(self.enemies):
            self._victory()
            return
        if not living(self.party):
            self._defeat()
            return

        if self.turn_order.advance():
            self._end_round()
        self._enter_turn()

    def _end_round(self) -> None:
        self.round += 1
        logger.debug("Round %d begins", self.round)

    def _enter_turn(self) -> None:
        current = self.turn_order.current
        # A defensive stance holds until its owner acts again.
        current.defending = False
        if current.side == Side.PARTY:
            self.phase = BattlePhase.AWAITING_PLAYER
            return

        self.phase = BattlePhase.AWAITING_ENEMY
        self._enemy_token += 1
        token = self._enemy_token
        call = self.scheduler.call_later(self.config.enemy_delay, lambda: self._enemy_turn(token))
        if call.active:
            self._pending = call

    def _enemy_turn(self, token: int) -> None:
        if token != self._enemy_token or self.phase != BattlePhase.AWAITING_ENEMY:
            logger.debug("Dropping stale enemy turn %d", token)
            return
        self._pending = None
        actor = self.turn_order.current
        with self._capture():
            try:
                resolution = self.resolver.enemy_turn(actor, self.combatants)
            except CombatError as e:
                logger.info("%s skips its turn: %s", actor.name, e)
                resolution = Resolution(kind=ActionKind.DEFEND, actor_id=actor.id)
            self._apply(resolution)

    def _cancel_pending(self) -> None:
        self._enemy_token += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _finish(self, phase: BattlePhase) -> None:
        self._cancel_pending()
        self.phase = phase
        for c in self.combatants:
            c.defending = False
        logger.info("Battle ended: %s after %d round(s)", phase.value, self.round)

    def _victory(self) -> None:
        self._finish(BattlePhase.VICTORY)
        self._log("Victory!")
        if self.spoils is not None:
            return

        defeated = [self._templates[e.id] for e in self.enemies if e.is_defeated]
        self.spoils = distribute_rewards(
            self.members,
            defeated,
            self.content.levels,
            self.content.spells.values(),
            self._hit_templates,
            self.rng,
        )
        self._log(f"Gained {self.spoils.xp} XP and {self.spoils.gold} gold!")
        for item_id in self.spoils.drops:
            name = self.content.items[item_id].name if item_id in self.content.items else item_id
            self._log(f"Found {name}!")
        for outcome in self.spoils.outcomes:
            for level_up in outcome.level_ups:
                self._log(f"{outcome.member.name} reached level {level_up.level}!")
                for spell_id in level_up.new_spells:
                    name = self.content.spells[spell_id].name if spell_id in self.content.spells else spell_id
                    self._log(f"{outcome.member.name} learned {name}!")

        for report in self.spoils.reports:
            for listener in self.listeners:
                listener(report)

    def _defeat(self) -> None:
        self._finish(BattlePhase.DEFEAT)
        self._log("Defeat... darkness claims the party.")
