"""
Controller module for the combat engine.

A controller supplies the decisions of the player-side combatant. The
interactive console front-end is one controller; the automatic controller
lets the engine play the player with a behavior pattern.
"""

from typing import TYPE_CHECKING, Protocol

from combat_engine.ai.decision import BattleContext, Decision, decide_action
from combat_engine.ai.patterns import get_pattern
from combat_engine.entities.combatant import Combatant

if TYPE_CHECKING:
    from combat_engine.abilities.registry import AbilityRegistry

    from .state import BattleState


class PlayerController(Protocol):
    """Anything able to pick the player's action for a turn."""

    def decide(
        self, state: "BattleState", actor: Combatant, registry: "AbilityRegistry"
    ) -> Decision: ...


def build_context(
    state: "BattleState", actor: Combatant, registry: "AbilityRegistry"
) -> BattleContext:
    """Builds the battle snapshot a combatant decides from."""
    return BattleContext(
        opponents=state.opponents_of(actor),
        allies=state.allies_of(actor),
        damage_dealt=dict(state.damage_dealt),
        ready_skills=registry.ready_skills(actor, state),
    )


class AutoPlayerController:
    """Plays the player with a fixed behavior pattern."""

    def __init__(self, pattern: str = "balanced") -> None:
        self.pattern = get_pattern(pattern)

    def decide(
        self, state: "BattleState", actor: Combatant, registry: "AbilityRegistry"
    ) -> Decision:
        context = build_context(state, actor, registry)
        return decide_action(self.pattern, actor, context, state.rng)
