"""
User interface module for the combat engine.

Provides the console controller that lets a person choose the player's
actions, using rich tables for the menus and prompt_toolkit for input.
"""

from typing import TYPE_CHECKING, Any

from prompt_toolkit import ANSI, PromptSession
from rich.table import Table

from combat_engine.ai.decision import Decision
from combat_engine.core.constants import ActionKind
from combat_engine.core.utils import ccapture, make_bar
from combat_engine.entities.combatant import Combatant

if TYPE_CHECKING:
    from combat_engine.abilities.registry import AbilityRegistry
    from combat_engine.combat.state import BattleState


class PlayerInterface:
    """
    Command-line controller for the player.

    Shows rich table menus for the action, the skill and the target, and
    reads the choice with prompt_toolkit, accepting digits for entries and
    'q' to go back.
    """

    def __init__(self, session: PromptSession | None = None) -> None:
        """
        Initialize the interface.

        Args:
            session (PromptSession | None): The prompt session to read from;
                one keeping its own history is created when absent.

        """
        self.session = session or PromptSession(erase_when_done=True)

    def decide(
        self, state: "BattleState", actor: Combatant, registry: "AbilityRegistry"
    ) -> Decision:
        """
        Asks the user for the player's action.

        Args:
            state (BattleState): The battle state.
            actor (Combatant): The player.
            registry (AbilityRegistry): Used to list the ready skills.

        Returns:
            Decision: The chosen action.

        """
        while True:
            kind = self.choose_action(actor)
            if kind in (ActionKind.DEFEND, ActionKind.ITEM, ActionKind.ESCAPE):
                return Decision(kind=kind, target_id=actor.id)
            ability_id = None
            if kind == ActionKind.SKILL:
                ability_id = self.choose_skill(actor, registry, state)
                if ability_id is None:
                    continue
            target = self.choose_target(state.opponents_of(actor))
            if target is None:
                continue
            return Decision(kind=kind, target_id=target.id, ability_id=ability_id)

    def choose_action(self, actor: Combatant) -> ActionKind:
        """Choose the kind of action to perform."""
        kinds = list(ActionKind)
        table = Table(title="Actions", pad_edge=False)
        table.add_column("#", style="cyan")
        table.add_column("Action", style="bold")
        table.add_column("Notes", style="dim")
        for i, kind in enumerate(kinds, 1):
            notes = f"{actor.items} left" if kind == ActionKind.ITEM else ""
            table.add_row(str(i), f"[{kind.color}]{kind.display_name}[/]", notes)
        while True:
            index = self.get_digit_choice(self._ask(table, "Action > ")) - 1
            if 0 <= index < len(kinds):
                return kinds[index]

    def choose_skill(
        self, actor: Combatant, registry: "AbilityRegistry", state: "BattleState"
    ) -> str | None:
        """Choose one of the player's ready skills, None to go back."""
        ready = registry.ready_skills(actor, state)
        if not ready:
            return None
        table = Table(title="Skills", pad_edge=False)
        table.add_column("#", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("MP", style="blue")
        table.add_column("Cooldown", style="magenta")
        for i, skill_id in enumerate(ready, 1):
            ability = registry.catalog.get(skill_id)
            table.add_row(str(i), ability.name, str(ability.mp_cost), str(ability.cooldown))
        table.add_row("q", "Back", "", "")
        while True:
            answer = self._ask(table, "Skill > ")
            if answer.lower() == "q":
                return None
            index = self.get_digit_choice(answer) - 1
            if 0 <= index < len(ready):
                return ready[index]

    def choose_target(self, targets: list[Combatant]) -> Combatant | None:
        """Choose a target among the living opponents, None to go back."""
        if not targets:
            return None
        table = Table(title="Targets", pad_edge=False)
        table.add_column("#", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("HP", style="green")
        table.add_column("Element")
        for i, target in enumerate(targets, 1):
            table.add_row(
                str(i),
                target.colored_name,
                f"{make_bar(target.stats.hp, target.stats.max_hp, color='green')} "
                f"{target.stats.hp}/{target.stats.max_hp}",
                target.element.colored_name,
            )
        table.add_row("q", "Back", "", "")
        while True:
            answer = self._ask(table, "Target > ")
            if answer.lower() == "q":
                return None
            index = self.get_digit_choice(answer) - 1
            if 0 <= index < len(targets):
                return targets[index]

    def _ask(self, table: Table, question: str) -> str:
        answer = self.session.prompt(ANSI("\n" + ccapture(table) + "\n" + question))
        return answer.strip() if isinstance(answer, str) else ""

    @staticmethod
    def get_digit_choice(answer: Any) -> int:
        """
        Convert a single digit string input to its integer value.

        Args:
            answer (Any): User input string to parse.

        Returns:
            int: The integer value of the digit (0-9), or -1 if invalid input.

        """
        if isinstance(answer, str) and len(answer) == 1 and answer.isdigit():
            return int(answer)
        return -1
