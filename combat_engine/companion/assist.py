"""
Companion assist module for the combat engine.

Runs the turn of a companion with the same primitives the other combatants
use, adjusted by the companion's mood, and computes what a companion earns
or loses from a battle.
"""

import math
import random
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.ai.decision import choose_target
from combat_engine.combat.damage import HitResult, mitigate, resolve_hit
from combat_engine.combat.log import LogEntry
from combat_engine.core.config import CombatConfig, CompanionConfig, EngineSettings
from combat_engine.core.constants import ActionKind, LogType, TargetPriority
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats

from .mood import effective_stats, mood_modifier


class CompanionTurnContext(BaseModel):
    """Everything a companion turn needs."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    companion: Combatant
    enemies: list[Combatant]
    rng: random.Random
    turn: int = Field(1)
    settings: EngineSettings = Field(default_factory=EngineSettings)
    stats_of: Callable[[Combatant], Stats] | None = Field(
        None,
        description="Effective stats lookup of the battle; mood only when absent.",
    )


class CompanionTurnResult(BaseModel):
    """The outcome of a companion turn."""

    model_config = ConfigDict(frozen=True)

    action: ActionKind | None = Field(None, description="None when it could not act.")
    companion_hp: int
    enemies: list[Combatant] = Field(description="Enemies after the turn.")
    hits: tuple[HitResult, ...] = Field(default_factory=tuple)
    animations: tuple[LogEntry, ...] = Field(default_factory=tuple)


class CompanionRewards(BaseModel):
    """What a companion earns from a battle."""

    model_config = ConfigDict(frozen=True)

    exp_gained: int = Field(0)
    loyalty_change: int = Field(0)


def process_companion_turn(context: CompanionTurnContext) -> CompanionTurnResult:
    """
    Runs one assist turn of a companion.

    The companion drinks a potion when badly hurt and carrying one, and
    otherwise attacks the living enemy with the lowest hp. The given
    combatants are not modified: the result holds updated copies, and the
    resolved hits so that a battle can apply them to its own state.

    Args:
        context (CompanionTurnContext): The companion, the enemies and the
            random source.

    Returns:
        CompanionTurnResult: The companion hp, the enemies after the turn,
        the hits and the log entries to animate.

    """
    companion = context.companion.model_copy(deep=True)
    enemies = [enemy.model_copy(deep=True) for enemy in context.enemies]
    combat = context.settings.combat

    if not companion.is_alive:
        return CompanionTurnResult(companion_hp=companion.stats.hp, enemies=enemies)

    if companion.hp_ratio < context.settings.companion.potion_hp_ratio and companion.items > 0:
        companion.items -= 1
        restored = companion.heal(int(companion.stats.max_hp * combat.item_heal_ratio))
        entry = LogEntry(
            turn=context.turn,
            type=LogType.ITEM,
            actor_id=companion.id,
            target_id=companion.id,
            amount=restored,
            detail="potion",
            message=f"{companion.name} drinks a potion and recovers {restored} hp",
        )
        return CompanionTurnResult(
            action=ActionKind.ITEM,
            companion_hp=companion.stats.hp,
            enemies=enemies,
            animations=(entry,),
        )

    target = choose_target(TargetPriority.LOWEST_HP, enemies, {}, context.rng)
    if target is None:
        return CompanionTurnResult(companion_hp=companion.stats.hp, enemies=enemies)

    if context.stats_of is not None:
        attacker_stats = context.stats_of(context.companion)
        original_target = next(e for e in context.enemies if e.id == target.id)
        defender_stats = context.stats_of(original_target)
    else:
        attacker_stats = effective_stats(companion, context.settings.companion)
        defender_stats = target.stats
    hit = resolve_hit(
        companion,
        target,
        context.rng,
        attacker_stats=attacker_stats,
        defender_stats=defender_stats,
        config=combat,
    )
    if hit.hit:
        target.take_damage(hit.damage)
    return CompanionTurnResult(
        action=ActionKind.ATTACK,
        companion_hp=companion.stats.hp,
        enemies=enemies,
        hits=(hit,),
        animations=(hit.to_log_entry(context.turn, "assist"),),
    )


def process_companion_damage(
    companion: Combatant,
    raw_damage: float,
    config: CombatConfig | None = None,
    companion_config: CompanionConfig | None = None,
) -> tuple[int, int]:
    """
    Applies incoming damage to a companion after its defense.

    Args:
        companion (Combatant): The companion being hit.
        raw_damage (float): The damage before mitigation.
        config (CombatConfig | None): Formula constants.
        companion_config (CompanionConfig | None): Mood table.

    Returns:
        tuple[int, int]: The damage taken and the companion hp left, never
        below zero.

    """
    defense = effective_stats(companion, companion_config).defense
    final_damage = mitigate(raw_damage, defense, config)
    companion.take_damage(final_damage)
    return final_damage, companion.stats.hp


def process_companion_rewards(
    companion: Combatant,
    victory: bool,
    enemies_defeated: int,
    config: CompanionConfig | None = None,
) -> CompanionRewards:
    """
    Computes the experience and loyalty a companion gets from a battle.

    A victory grants experience per defeated enemy, scaled by mood, and a
    capped loyalty gain. A defeat grants nothing and costs loyalty.

    Args:
        companion (Combatant): The companion.
        victory (bool): Whether the battle was won.
        enemies_defeated (int): Enemies defeated in the battle.
        config (CompanionConfig | None): Reward constants.

    Returns:
        CompanionRewards: The experience gained and the loyalty change.

    """
    config = config or CompanionConfig()
    if not victory:
        return CompanionRewards(exp_gained=0, loyalty_change=-config.defeat_loyalty_loss)
    exp_gain = mood_modifier(companion.mood, config).exp_gain
    return CompanionRewards(
        exp_gained=math.floor(enemies_defeated * config.exp_per_enemy * exp_gain),
        loyalty_change=min(
            config.max_loyalty_gain, enemies_defeated * config.loyalty_per_enemy
        ),
    )
