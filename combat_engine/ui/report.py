"""
Report module for the combat engine.

Renders combatant status, the combat log and the battle result to the
console with rich.
"""

from rich.table import Table

from combat_engine.combat.log import LogEntry
from combat_engine.combat.session import BattleResult
from combat_engine.combat.state import BattleState
from combat_engine.core.constants import LogType
from combat_engine.core.utils import cprint, crule, make_bar

_LOG_STYLES: dict[LogType, str] = {
    LogType.PHASE: "bold white",
    LogType.DAMAGE: "red",
    LogType.CRITICAL: "bold red",
    LogType.DODGE: "dim white",
    LogType.HEAL: "green",
    LogType.STATUS: "magenta",
    LogType.STATUS_TICK: "magenta",
    LogType.STATUS_EXPIRED: "dim magenta",
    LogType.SKIP: "cyan",
    LogType.ABILITY: "bold yellow",
    LogType.SKILL: "bold magenta",
    LogType.BOSS_PHASE: "bold red",
    LogType.DEFEATED: "bold red",
    LogType.INVALID: "bold yellow",
    LogType.ESCAPE: "yellow",
    LogType.ESCAPE_DECLINED: "yellow",
}


def format_entry(entry: LogEntry) -> str:
    """Formats a log entry as a rich markup line."""
    style = _LOG_STYLES.get(entry.type, "white")
    text = entry.message or f"{entry.type.display_name} {entry.amount}"
    return f"[dim]T{entry.turn:>3}[/] [{style}]{text}[/]"


def status_table(state: BattleState) -> Table:
    """
    Builds a table with the hp, mp and status effects of every combatant.

    Args:
        state (BattleState): The battle state.

    Returns:
        Table: The status table.

    """
    table = Table(title=f"Turn {state.turn}", pad_edge=False)
    table.add_column("Name", style="bold")
    table.add_column("HP")
    table.add_column("MP")
    table.add_column("Effects")
    for combatant in state.combatants.values():
        stats = combatant.stats
        hp_bar = make_bar(stats.hp, stats.max_hp, color="green")
        mp = (
            f"{make_bar(stats.mp, stats.max_mp, color='blue')} {stats.mp}/{stats.max_mp}"
            if stats.max_mp
            else ""
        )
        effects = ", ".join(str(e) for e in state.ledger.effects(combatant.id))
        table.add_row(
            f"{combatant.side.emoji} {combatant.colored_name}",
            f"{hp_bar} {stats.hp}/{stats.max_hp}",
            mp,
            effects,
        )
    return table


def print_log(entries: list[LogEntry] | tuple[LogEntry, ...]) -> None:
    """Prints every entry of a combat log."""
    for entry in entries:
        cprint(format_entry(entry))


def print_result(result: BattleResult) -> None:
    """Prints the outcome, summary and rewards of a finished battle."""
    outcome = result.outcome
    crule(f"[{outcome.color}]{outcome.display_name}[/]", characters="=")
    summary = result.summary
    table = Table(title="Summary", pad_edge=False, show_header=False)
    table.add_column("Stat", style="bold")
    table.add_column("Value")
    table.add_row("Turns", str(summary.turns_taken))
    table.add_row("Damage dealt", str(summary.damage_dealt))
    table.add_row("Damage taken", str(summary.damage_taken))
    table.add_row("Enemies defeated", str(summary.enemies_defeated))
    table.add_row("Boss phases", str(summary.phases_completed))
    rewards = result.rewards
    if not rewards.is_empty:
        table.add_row("Experience", str(rewards.exp))
        table.add_row("Gold", str(rewards.gold))
        table.add_row("Items", ", ".join(rewards.items) or "-")
        table.add_row("Bonuses", ", ".join(rewards.bonuses) or "-")
    for companion_id, earned in result.companion_rewards.items():
        table.add_row(
            companion_id,
            f"+{earned.exp_gained} exp, loyalty {earned.loyalty_change:+d}",
        )
    cprint(table)
