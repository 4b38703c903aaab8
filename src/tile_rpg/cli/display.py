"""Rich terminal rendering for battles, plus the logging handler."""
from __future__ import annotations

import logging

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tile_rpg.combat.battle import BattlePhase, BattleView, CombatantView
from tile_rpg.combat.rewards import VictorySpoils
from tile_rpg.content.loader import ContentRegistry
from tile_rpg.mechanics.dice import roll_range
from tile_rpg.models.action import ActionKind
from tile_rpg.models.combatant import Side

console = Console()

ACTION_LABELS = {
    ActionKind.ATTACK: "Attack",
    ActionKind.SPELL: "Cast Spell",
    ActionKind.ITEM: "Use Item",
    ActionKind.DEFEND: "Defend",
    ActionKind.FLEE: "Flee",
}


def setup_logging(level: str | int = logging.WARNING, target: Console | None = None) -> None:
    """Route all logging through a RichHandler on stderr."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(
        console=target or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def hp_color(current: int, maximum: int) -> str:
    pct = current / maximum if maximum > 0 else 0
    if pct > 0.5:
        return "green"
    if pct > 0.25:
        return "yellow"
    return "red"


def hp_bar(current: int, maximum: int, width: int = 12) -> str:
    """Markup for a block HP bar, e.g. ``[green]████[/green][dim]░░[/dim]``."""
    filled = int(max(current, 0) / maximum * width) if maximum > 0 else 0
    filled = min(filled, width)
    color = hp_color(current, maximum)
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * (width - filled)}[/dim]"


def menu_entries(view: BattleView) -> list[tuple[str, ActionKind]]:
    """Numbered menu keys for the actions currently on offer."""
    return [(str(i), kind) for i, kind in enumerate(view.available_actions, start=1)]


class BattleDisplay:
    def __init__(self, target: Console | None = None) -> None:
        self.console = target or console

    def show_battle_start(self, view: BattleView) -> None:
        enemies = [c for c in view.combatants if c.side == Side.ENEMY]
        boss = any(c.is_boss for c in enemies)
        label = "[bold magenta]BOSS FIGHT[/bold magenta]" if boss else "[bold red]BATTLE![/bold red]"
        names = ", ".join(c.name for c in enemies)
        self.console.print(Panel(
            f"{label}\n\nHostile creatures engage: {names}",
            border_style="magenta" if boss else "red", box=box.HEAVY,
        ))

    def _combatant_line(self, content: Text, c: CombatantView, active_id: str | None) -> None:
        marker = ">" if c.id == active_id else " "
        color = hp_color(c.hp, c.max_hp)
        tags = ""
        if c.defeated:
            tags = " [dim]defeated[/dim]"
        elif c.defending:
            tags = " [cyan]defending[/cyan]"
        mana = f" [blue]MP {c.mp}/{c.max_mp}[/blue]" if c.max_mp > 0 else ""
        content.append_text(Text.from_markup(
            f" {marker} {c.name:<16} {hp_bar(c.hp, c.max_hp)} [{color}]{c.hp}/{c.max_hp}[/{color}]{mana}{tags}\n"
        ))

    def show_battle(self, view: BattleView, log_lines: int = 5) -> None:
        content = Text()
        content.append(f"  Round {view.round}\n\n", style="bold yellow")

        for c in view.combatants:
            if c.side == Side.ENEMY:
                self._combatant_line(content, c, view.active_id)
        content.append("\n")
        for c in view.combatants:
            if c.side == Side.PARTY:
                self._combatant_line(content, c, view.active_id)

        tail = view.log[-log_lines:] if log_lines > 0 else ()
        if tail:
            content.append("\n")
            for line in tail:
                content.append(f"  {line}\n", style="dim")

        if view.phase == BattlePhase.AWAITING_PLAYER:
            content.append("\n")
            for key, kind in menu_entries(view):
                content.append_text(Text.from_markup(f"  [cyan bold][{key}][/cyan bold] {ACTION_LABELS[kind]}\n"))

        self.console.print(Panel(content, border_style="red", box=box.ROUNDED, width=56))

    def show_messages(self, messages: list[str]) -> None:
        for message in messages:
            self.console.print(f"  {message}", markup=False)

    def show_choices(self, title: str, choices: list[tuple[str, str]]) -> None:
        self.console.print(f"\n[bold]{title}[/bold]")
        for i, (_, label) in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{i}.[/cyan] {label}")

    def show_result(self, view: BattleView, spoils: VictorySpoils | None = None) -> None:
        if view.phase == BattlePhase.VICTORY:
            content = "[bold green]Victory![/bold green]\n"
            if spoils is not None:
                content += f"\nXP Gained: {spoils.xp}"
                if spoils.gold:
                    content += f"\nGold: +{spoils.gold} gp"
                if spoils.drops:
                    content += f"\nLoot: {', '.join(spoils.drops)}"
                for outcome in spoils.outcomes:
                    if outcome.leveled_up:
                        content += f"\n{outcome.member.name} is now level {outcome.member.level}!"
            self.console.print(Panel(content, border_style="green", box=box.HEAVY))
        elif view.phase == BattlePhase.DEFEAT:
            self.console.print(Panel(
                "[bold red]Defeat...[/bold red]\n\nDarkness claims you...",
                border_style="red", box=box.HEAVY,
            ))
        elif view.phase == BattlePhase.ESCAPED:
            self.console.print(Panel(
                "[bold yellow]Escaped![/bold yellow]\nYou leave the battle behind.",
                border_style="yellow", box=box.HEAVY,
            ))

    def show_monsters(self, content: ContentRegistry) -> None:
        table = Table(title="Bestiary", box=box.SIMPLE_HEAVY)
        table.add_column("Id", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("HP", justify="right")
        table.add_column("AC", justify="right")
        table.add_column("Damage")
        table.add_column("XP", justify="right")
        table.add_column("Gold", justify="right")
        table.add_column("Found in")

        for monster in content.monsters.values():
            low, high = roll_range(monster.damage)
            biomes = ", ".join(b.name for b in content.biomes.values() if monster.id in b.monsters)
            name = f"{monster.name} [magenta](boss)[/magenta]" if monster.is_boss else monster.name
            table.add_row(
                monster.id, name, str(monster.hp), str(monster.ac),
                f"{monster.damage} ({low}-{high})",
                str(monster.xp_reward), str(monster.gold_reward), biomes or "-",
            )
        self.console.print(table)
