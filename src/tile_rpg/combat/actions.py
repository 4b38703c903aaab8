"""Action resolution: one entry point for every kind of combat action."""
from __future__ import annotations

import logging
import random
from typing import Sequence

from tile_rpg.config import CombatConfig
from tile_rpg.errors import IllegalEscape, InvalidAction
from tile_rpg.mechanics import inventory
from tile_rpg.mechanics.combat_math import attack_roll, damage_roll, effect_roll, flee_check, is_fumble
from tile_rpg.mechanics.dice import DiceResult, RandomSource
from tile_rpg.models.action import Action, ActionKind, DiceRoll, Resolution
from tile_rpg.models.combatant import Combatant, Side
from tile_rpg.models.item import Item, ItemKind
from tile_rpg.models.monster import AbilityKind, MonsterAbility
from tile_rpg.models.spell import Spell, SpellKind

logger = logging.getLogger(__name__)


def _dice_roll(result: DiceResult, purpose: str) -> DiceRoll:
    return DiceRoll(
        dice_expression=result.expression,
        rolls=list(result.individual_rolls),
        modifier=result.modifier,
        total=result.total,
        purpose=purpose,
    )


def living(combatants: Sequence[Combatant], side: Side | None = None) -> list[Combatant]:
    return [c for c in combatants if c.is_alive and (side is None or c.side == side)]


def opponents_of(actor: Combatant, combatants: Sequence[Combatant]) -> list[Combatant]:
    return [c for c in combatants if c.is_alive and c.side != actor.side]


class ActionResolver:
    """Resolves one action against the current combatants.

    Every check that can reject the action runs before the first roll, so a
    rejected action leaves HP, inventory and the dice stream untouched.
    """

    def __init__(
        self,
        config: CombatConfig | None = None,
        items: dict[str, Item] | None = None,
        rng: RandomSource | None = None,
    ):
        self.config = config or CombatConfig()
        self.items = items or {}
        self.rng = rng if rng is not None else random

    def resolve(self, action: Action, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        if actor.is_defeated:
            raise InvalidAction(f"{actor.name} is defeated and cannot act.")

        handlers = {
            ActionKind.ATTACK: self._attack,
            ActionKind.SPELL: self._cast_spell,
            ActionKind.ITEM: self._use_item,
            ActionKind.DEFEND: self._defend,
            ActionKind.FLEE: self._flee,
        }
        handler = handlers.get(action.kind)
        if handler is None:
            raise InvalidAction(f"Unknown action: {action.kind}")
        logger.debug("%s resolves %s", actor.name, action.kind.value)
        return handler(action, actor, combatants)

    # -- Targeting --

    def _find(self, target_id: str, combatants: Sequence[Combatant]) -> Combatant:
        for c in combatants:
            if c.id == target_id:
                return c
        raise InvalidAction(f"No combatant named {target_id!r} in this battle.")

    def _enemy_target(self, actor: Combatant, target_id: str | None, combatants: Sequence[Combatant]) -> Combatant:
        if target_id is None:
            foes = opponents_of(actor, combatants)
            if not foes:
                raise InvalidAction("There is no one left to target.")
            return foes[0]
        target = self._find(target_id, combatants)
        if target.side == actor.side:
            raise InvalidAction(f"{target.name} is on your side.")
        if target.is_defeated:
            raise InvalidAction(f"{target.name} is already defeated.")
        return target

    def _ally_target(self, actor: Combatant, target_id: str | None, combatants: Sequence[Combatant]) -> Combatant:
        if target_id is None or target_id == actor.id:
            return actor
        target = self._find(target_id, combatants)
        if target.side != actor.side:
            raise InvalidAction(f"{target.name} is not an ally.")
        if target.is_defeated:
            raise InvalidAction(f"{target.name} is beyond healing.")
        return target

    @staticmethod
    def _check_escape_allowed(combatants: Sequence[Combatant]) -> None:
        bosses = [c for c in combatants if c.is_boss and c.is_alive]
        if bosses:
            raise IllegalEscape(f"There is no escape from {bosses[0].name}!")

    # -- Applying effects --

    def _hurt(self, target: Combatant, amount: int, res: Resolution) -> int:
        dealt = target.take_damage(amount)
        res.damage += dealt
        if target.is_defeated and target.id not in res.defeated_ids:
            res.defeated_ids.append(target.id)
        return dealt

    @staticmethod
    def _pay(actor: Combatant, spell: Spell, res: Resolution) -> None:
        # Affordability was checked before any target or roll.
        actor.mp.spend(spell.mp_cost)
        res.mp_spent = spell.mp_cost

    @staticmethod
    def _defeat_lines(res: Resolution, combatants: Sequence[Combatant]) -> None:
        by_id = {c.id: c for c in combatants}
        for cid in res.defeated_ids:
            res.messages.append(f"{by_id[cid].name} is defeated!")

    # -- Player-selectable actions --

    def _attack(self, action: Action, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        target = self._enemy_target(actor, action.target_id, combatants)
        return self.weapon_attack(actor, target, combatants)

    def weapon_attack(self, actor: Combatant, target: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        res = Resolution(kind=ActionKind.ATTACK, actor_id=actor.id, target_id=target.id)
        criticals = self.config.critical_hits
        target_ac = target.effective_ac(self.config.defend_ac_bonus)

        hit, is_critical, atk = attack_roll(actor.attack_bonus, target_ac, criticals, self.rng)
        res.dice_rolls.append(_dice_roll(atk, "attack_roll"))

        if is_fumble(atk, criticals):
            res.messages.append(f"Critical miss! {actor.name}'s attack goes wild!")
            return res

        if not hit:
            res.messages.append(f"{actor.name} misses {target.name}! (rolled {atk.total} vs AC {target_ac})")
            return res

        dmg = damage_roll(actor.damage_dice, actor.damage_modifier, is_critical, self.rng)
        res.dice_rolls.append(_dice_roll(dmg, "damage"))
        res.hit = True
        res.critical = is_critical
        dealt = self._hurt(target, dmg.total, res)
        if is_critical:
            res.messages.append(f"CRITICAL HIT! {actor.name} strikes {target.name} for {dealt} damage!")
        else:
            res.messages.append(
                f"{actor.name} hits {target.name} for {dealt} damage! (rolled {atk.total} vs AC {target_ac})"
            )
        self._defeat_lines(res, combatants)
        return res

    def _cast_spell(self, action: Action, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        if not action.spell_id or action.spell_id not in actor.known_spells:
            raise InvalidAction(f"{actor.name} does not know that spell.")
        spell = actor.spell(action.spell_id)
        if spell is None:
            raise InvalidAction(f"{actor.name} does not know that spell.")
        if actor.level < spell.level_required:
            raise InvalidAction(
                f"{spell.name} requires level {spell.level_required} (you are level {actor.level})."
            )
        if actor.mp.current < spell.mp_cost:
            raise InvalidAction(
                f"Not enough MP! {spell.name} costs {spell.mp_cost} MP (you have {actor.mp.current})."
            )

        bonus = actor.stat_modifier(spell.modifier_key)
        if spell.kind == SpellKind.HEAL:
            target = self._ally_target(actor, action.target_id, combatants)
            res = Resolution(kind=ActionKind.SPELL, actor_id=actor.id, target_id=target.id)
            self._pay(actor, spell, res)
            amount = effect_roll(spell.dice, bonus, rng=self.rng)
            res.dice_rolls.append(_dice_roll(amount, "healing"))
            res.healing = target.heal(amount.total)
            res.messages.append(f"{actor.name} casts {spell.name}! {target.name} recovers {res.healing} HP!")
            return res

        target = self._enemy_target(actor, action.target_id, combatants)
        res = Resolution(kind=ActionKind.SPELL, actor_id=actor.id, target_id=target.id)
        self._pay(actor, spell, res)
        amount = effect_roll(spell.dice, bonus, rng=self.rng)
        res.dice_rolls.append(_dice_roll(amount, "damage"))
        dealt = self._hurt(target, amount.total, res)
        res.messages.append(f"{actor.name} casts {spell.name}! {target.name} takes {dealt} damage!")
        self._defeat_lines(res, combatants)
        return res

    def _use_item(self, action: Action, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        if not action.item_id or inventory.quantity_of(actor.items, action.item_id) <= 0:
            raise InvalidAction(f"{actor.name} has no {action.item_id or 'item'} left.")
        item = self.items.get(action.item_id)
        if item is None:
            raise InvalidAction(f"{action.item_id} cannot be used in battle.")

        if item.kind == ItemKind.ESCAPE:
            self._check_escape_allowed(combatants)
            inventory.remove_item(actor.items, item.id)
            res = Resolution(kind=ActionKind.ITEM, actor_id=actor.id, escaped=True)
            res.messages.append(f"{actor.name} uses {item.name} and slips away!")
            return res

        if item.kind == ItemKind.HEAL:
            target = self._ally_target(actor, action.target_id, combatants)
            res = Resolution(kind=ActionKind.ITEM, actor_id=actor.id, target_id=target.id)
            amount = effect_roll(item.dice, minimum=1, rng=self.rng)
            res.dice_rolls.append(_dice_roll(amount, "healing"))
            inventory.remove_item(actor.items, item.id)
            res.healing = target.heal(amount.total)
            res.messages.append(f"{actor.name} uses {item.name}! {target.name} recovers {res.healing} HP!")
            return res

        target = self._enemy_target(actor, action.target_id, combatants)
        res = Resolution(kind=ActionKind.ITEM, actor_id=actor.id, target_id=target.id)
        amount = effect_roll(item.dice, rng=self.rng)
        res.dice_rolls.append(_dice_roll(amount, "damage"))
        inventory.remove_item(actor.items, item.id)
        dealt = self._hurt(target, amount.total, res)
        res.messages.append(f"{actor.name} throws {item.name}! {target.name} takes {dealt} damage!")
        self._defeat_lines(res, combatants)
        return res

    def _defend(self, action: Action, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        actor.defending = True
        res = Resolution(kind=ActionKind.DEFEND, actor_id=actor.id)
        res.messages.append(f"{actor.name} takes a defensive stance!")
        return res

    def _flee(self, action: Action, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        self._check_escape_allowed(combatants)
        dc = self.config.flee_dc
        escaped, check = flee_check(actor.evasion_modifier, dc, self.rng)
        res = Resolution(kind=ActionKind.FLEE, actor_id=actor.id, escaped=escaped)
        res.dice_rolls.append(_dice_roll(check, "flee"))
        if escaped:
            res.messages.append(f"{actor.name} escapes! (rolled {check.total} vs DC {dc})")
        else:
            res.messages.append(f"{actor.name} failed to escape! (rolled {check.total}, needed {dc})")
        return res

    # -- Enemy AI --

    def enemy_turn(self, actor: Combatant, combatants: Sequence[Combatant]) -> Resolution:
        """Fixed policy: attack the party leader, unless a special ability triggers."""
        if actor.is_defeated:
            raise InvalidAction(f"{actor.name} is defeated and cannot act.")
        foes = opponents_of(actor, combatants)
        if not foes:
            raise InvalidAction("There is no one left to target.")
        target = foes[0]

        if self.config.monster_abilities:
            for ability in actor.abilities:
                if self.rng.random() < ability.chance:
                    return self.monster_ability(actor, ability, target, combatants)

        return self.weapon_attack(actor, target, combatants)

    def monster_ability(
        self,
        actor: Combatant,
        ability: MonsterAbility,
        target: Combatant,
        combatants: Sequence[Combatant],
    ) -> Resolution:
        """Special abilities bypass AC, like breath weapons."""
        amount = effect_roll(ability.dice, rng=self.rng)
        if ability.kind == AbilityKind.HEAL:
            res = Resolution(kind=ActionKind.SPELL, actor_id=actor.id, target_id=actor.id)
            res.dice_rolls.append(_dice_roll(amount, ability.name))
            res.healing = actor.heal(amount.total)
            res.messages.append(f"{actor.name} uses {ability.name}! Recovers {res.healing} HP!")
            return res

        res = Resolution(kind=ActionKind.SPELL, actor_id=actor.id, target_id=target.id)
        res.dice_rolls.append(_dice_roll(amount, ability.name))
        dealt = self._hurt(target, amount.total, res)
        message = f"{actor.name} uses {ability.name}! {target.name} takes {dealt} damage!"
        if ability.self_heal:
            res.healing = actor.heal(dealt)
            message += f" {actor.name} absorbs the life force!"
        res.messages.append(message)
        self._defeat_lines(res, combatants)
        return res
