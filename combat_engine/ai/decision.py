"""
AI decision module for the combat engine.

Chooses the action and the target of a non-player combatant from its
behavior pattern and a snapshot of the battle.
"""

import random

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.core.constants import ActionKind, TargetPriority
from combat_engine.core.logging import log_debug
from combat_engine.entities.combatant import Combatant

from .patterns import BehaviorPattern


class BattleContext(BaseModel):
    """What a combatant knows about the battle when it decides."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    opponents: list[Combatant] = Field(description="Living opponents.")
    allies: list[Combatant] = Field(default_factory=list, description="Living allies.")
    damage_dealt: dict[str, int] = Field(
        default_factory=dict, description="Damage dealt so far, per combatant id."
    )
    ready_skills: list[str] = Field(
        default_factory=list,
        description="Skills off cooldown that the combatant can afford.",
    )


class Decision(BaseModel):
    """An action chosen for a turn."""

    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    target_id: str | None = None
    ability_id: str | None = None


def choose_target(
    priority: TargetPriority,
    opponents: list[Combatant],
    damage_dealt: dict[str, int],
    rng: random.Random,
) -> Combatant | None:
    """
    Picks the opponent to act against.

    Args:
        priority (TargetPriority): How to rank the opponents.
        opponents (list[Combatant]): The candidates.
        damage_dealt (dict[str, int]): Damage dealt so far, per combatant id.
        rng (random.Random): The random source of the session.

    Returns:
        Combatant | None: The chosen opponent, None without candidates.

    """
    candidates = [c for c in opponents if c.is_alive]
    if not candidates:
        return None
    if priority == TargetPriority.LOWEST_HP:
        return min(candidates, key=lambda c: c.stats.hp)
    if priority == TargetPriority.HIGHEST_DAMAGE:
        return max(
            candidates, key=lambda c: (damage_dealt.get(c.id, 0), c.stats.attack)
        )
    return rng.choice(candidates)


def _draw_kind(pattern: BehaviorPattern, rng: random.Random) -> ActionKind:
    roll = rng.random() * pattern.total_weight
    cumulative = 0.0
    for kind, weight in pattern.weights:
        cumulative += weight
        if roll < cumulative:
            return kind
    # Only reachable through float rounding on the last bucket.
    return ActionKind.ATTACK


def decide_action(
    pattern: BehaviorPattern,
    combatant: Combatant,
    context: BattleContext,
    rng: random.Random,
) -> Decision:
    """
    Decides the action of a combatant for its turn.

    The action kind is a weighted draw from the pattern. A drawn skill is
    used only when one is ready and the combatant still holds enough mana
    for the pattern's usage threshold; a drawn item needs a potion and
    missing hp. Both otherwise fall back to a plain attack.

    Args:
        pattern (BehaviorPattern): The active behavior pattern.
        combatant (Combatant): The combatant deciding.
        context (BattleContext): The battle snapshot.
        rng (random.Random): The random source of the session.

    Returns:
        Decision: The chosen action and target.

    """
    kind = _draw_kind(pattern, rng)
    ability_id: str | None = None

    if kind == ActionKind.SKILL:
        if context.ready_skills and combatant.mp_ratio >= 1.0 - pattern.skill_usage_threshold:
            ability_id = context.ready_skills[0]
        else:
            log_debug(
                "Skill unavailable, attacking instead.",
                {"combatant": combatant.id, "pattern": pattern.name},
            )
            kind = ActionKind.ATTACK
    elif kind == ActionKind.ITEM:
        if combatant.items <= 0 or combatant.stats.hp >= combatant.stats.max_hp:
            kind = ActionKind.ATTACK

    if kind in (ActionKind.DEFEND, ActionKind.ITEM):
        return Decision(kind=kind, target_id=combatant.id)

    target = choose_target(
        pattern.target_priority, context.opponents, context.damage_dealt, rng
    )
    if target is None:
        return Decision(kind=ActionKind.DEFEND, target_id=combatant.id)
    return Decision(kind=kind, target_id=target.id, ability_id=ability_id)
