"""Typer CLI application."""
from __future__ import annotations

import random
import time
from typing import Optional

import typer

from tile_rpg.cli.display import ACTION_LABELS, BattleDisplay, menu_entries, setup_logging
from tile_rpg.combat.battle import BattlePhase, BattleSession
from tile_rpg.combat.encounter import start_encounter
from tile_rpg.combat.pacing import ManualScheduler
from tile_rpg.config import load_config
from tile_rpg.content.loader import load_content, new_party_member
from tile_rpg.mechanics import inventory
from tile_rpg.mechanics.leveling import apply_rewards, xp_for_level
from tile_rpg.models.action import ActionKind, ActionResult
from tile_rpg.models.spell import SpellKind

app = typer.Typer(
    name="tile-rpg",
    help="Turn-based dice combat from a tile-based JRPG, in your terminal",
    no_args_is_help=True,
)


def _pick(display: BattleDisplay, title: str, choices: list[tuple[str, str]]) -> str | None:
    """Numbered prompt. Returns the chosen id, or None for 0 / back."""
    if not choices:
        display.console.print("  [dim]Nothing to choose from.[/dim]")
        return None
    display.show_choices(title, choices)
    raw = typer.prompt("Choose (0 to go back)", default="0")
    try:
        index = int(raw)
    except ValueError:
        return None
    if 1 <= index <= len(choices):
        return choices[index - 1][0]
    return None


def _player_turn(session: BattleSession, display: BattleDisplay) -> ActionResult | None:
    view = session.view()
    entries = dict(menu_entries(view))
    choice = typer.prompt("Action", default="1")
    kind = entries.get(choice.strip())
    if kind is None:
        display.console.print(f"  [dim]Pick one of: {', '.join(entries)}[/dim]")
        return None

    actor = session.active
    enemies = [(e.id, e.name) for e in session.enemies if e.is_alive]

    if kind == ActionKind.ATTACK:
        target = enemies[0][0] if len(enemies) == 1 else _pick(display, "Target", enemies)
        return session.attack(target) if target else None

    if kind == ActionKind.SPELL:
        spells = [(s.id, f"{s.name} ({s.dice}, {s.mp_cost} MP)") for s in actor.spells if actor.can_cast(s)]
        spell_id = _pick(display, "Spells", spells)
        if spell_id is None:
            return None
        spell = actor.spell(spell_id)
        if spell.kind == SpellKind.HEAL:
            return session.cast_spell(spell_id)
        target = enemies[0][0] if len(enemies) == 1 else _pick(display, "Target", enemies)
        return session.cast_spell(spell_id, target) if target else None

    if kind == ActionKind.ITEM:
        items = [
            (s.item_id, f"{session.content.items[s.item_id].name} x{s.quantity}")
            for s in actor.items
            if s.item_id in session.content.items and s.quantity > 0
        ]
        item_id = _pick(display, "Items", items)
        return session.use_item(item_id) if item_id else None

    if kind == ActionKind.DEFEND:
        return session.defend()
    return session.flee()


@app.command()
def fight(
    species: str = typer.Argument(..., help="Monster id, see `tile-rpg monsters`"),
    biome: Optional[str] = typer.Option(None, "--biome", "-b", help="Biome the encounter happens in"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for reproducible dice"),
    level: int = typer.Option(1, "--level", "-l", min=1, help="Starting hero level"),
    name: str = typer.Option("Hero", "--name", "-n", help="Hero name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Fight one encounter against SPECIES."""
    config = load_config()
    setup_logging("DEBUG" if verbose else config.logging.level)

    content = load_content()
    if species not in content.monsters:
        raise typer.BadParameter(f"Unknown monster {species!r}", param_hint="SPECIES")
    if biome is not None and biome not in content.biomes:
        raise typer.BadParameter(f"Unknown biome {biome!r}", param_hint="--biome")

    hero = new_party_member(name, content)
    if level > 1:
        apply_rewards(hero, xp_for_level(level, content.levels), 0, content.levels, content.spells.values())

    rng = random.Random(seed) if seed is not None else None
    scheduler = ManualScheduler()
    display = BattleDisplay()

    session = start_encounter(
        content, [hero], species, biome,
        config=config.combat, rng=rng, scheduler=scheduler,
    )
    display.show_battle_start(session.view())

    try:
        while not session.is_over:
            if session.phase == BattlePhase.AWAITING_ENEMY:
                time.sleep(config.combat.enemy_delay)
                scheduler.advance(config.combat.enemy_delay)
                continue
            display.show_battle(session.view())
            result = _player_turn(session, display)
            if result is not None:
                display.show_messages(result.messages)
    except (KeyboardInterrupt, typer.Abort):
        session.abort()
        display.console.print()

    view = session.view()
    display.show_battle(view)
    display.show_result(view, session.spoils)

    potions = inventory.quantity_of(hero.inventory, "potion")
    display.console.print(
        f"[dim]{hero.name}: level {hero.level}, {hero.xp} XP, {hero.gold} gold, "
        f"{hero.hp.current}/{hero.hp.max} HP, {hero.mp.current}/{hero.mp.max} MP, {potions} potion(s)[/dim]"
    )


@app.command()
def monsters() -> None:
    """List every monster the game knows about."""
    BattleDisplay().show_monsters(load_content())


@app.command()
def actions() -> None:
    """List the combat actions and what they do."""
    display = BattleDisplay()
    config = load_config().combat
    notes = {
        ActionKind.ATTACK: "1d20 + attack bonus vs AC",
        ActionKind.SPELL: "guaranteed effect, costs MP, needs the spell and its level",
        ActionKind.ITEM: "potions heal, bombs hurt, smoke bombs escape",
        ActionKind.DEFEND: f"+{config.defend_ac_bonus} AC until your next turn",
        ActionKind.FLEE: f"1d20 + DEX vs DC {config.flee_dc}, never against a boss",
    }
    for kind, label in ACTION_LABELS.items():
        display.console.print(f"  [cyan bold]{label:<11}[/cyan bold] {notes[kind]}")


if __name__ == "__main__":
    app()
