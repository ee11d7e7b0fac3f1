"""
Reward calculator module for the combat engine.

Turns a finished battle into experience, gold and item drops. Bonus
multipliers stack multiplicatively, and a boss that drops nothing still
leaves its most common item behind.
"""

import math
import random
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.core.config import RewardConfig
from combat_engine.core.constants import BattlePhase, Difficulty
from combat_engine.core.logging import log_debug
from combat_engine.entities.combatant import Combatant

if TYPE_CHECKING:
    from combat_engine.combat.state import BattleState


def _floor(value: float) -> int:
    # Tolerate float noise such as 130 * 1.5 * 1.2 = 233.99999...
    return math.floor(value + 1e-9)


class RewardBundle(BaseModel):
    """Immutable rewards of a battle."""

    model_config = ConfigDict(frozen=True)

    exp: int = Field(0)
    gold: int = Field(0)
    items: tuple[str, ...] = Field(default_factory=tuple)
    bonuses: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.exp or self.gold or self.items)


def bonus_multipliers(bonuses: list[str], config: RewardConfig) -> tuple[float, float]:
    """
    Combines bonus multipliers.

    Bonuses are multiplied in the order of the configured bonus table, so
    the result does not depend on the order they were earned in.

    Args:
        bonuses (list[str]): Names of the earned bonuses.
        config (RewardConfig): The bonus table.

    Returns:
        tuple[float, float]: The experience and gold multipliers.

    """
    earned = set(bonuses)
    exp_mult = 1.0
    gold_mult = 1.0
    for name, bonus in config.bonuses.items():
        if name in earned:
            exp_mult *= bonus.exp
            gold_mult *= bonus.gold
    return exp_mult, gold_mult


def earned_bonuses(state: "BattleState", first_time: bool, config: RewardConfig) -> list[str]:
    """Returns the names of the bonuses a won battle qualifies for."""
    bonuses = []
    if state.damage_taken.get(state.player.id, 0) == 0:
        bonuses.append("perfectVictory")
    if state.turn < config.speed_turn_threshold:
        bonuses.append("speedBonus")
    if state.overkill:
        bonuses.append("overkill")
    if state.best_combo >= config.combo_threshold:
        bonuses.append("comboBonus")
    if first_time:
        bonuses.append("firstTime")
    return [name for name in bonuses if name in config.bonuses]


def roll_drops(enemy: Combatant, rng: random.Random, config: RewardConfig) -> list[str]:
    """
    Rolls the drop table of one defeated enemy.

    Each entry rolls independently against its base rate times the tier
    chance. When a boss rolls nothing, its highest-rate item is granted
    as a final step.

    Args:
        enemy (Combatant): The defeated enemy.
        rng (random.Random): The random source of the session.
        config (RewardConfig): Tier drop chances.

    Returns:
        list[str]: The dropped item ids.

    """
    tier_chance = config.drop_chances.get(enemy.tier, 0.0)
    dropped = []
    for entry in enemy.drops:
        if rng.random() < min(1.0, entry.rate * tier_chance):
            dropped.append(entry.item)
    if not dropped and enemy.tier.is_boss and enemy.drops:
        fallback = max(enemy.drops, key=lambda entry: entry.rate)
        log_debug(
            "Boss dropped nothing, granting its most common item.",
            {"enemy": enemy.id, "item": fallback.item},
        )
        dropped.append(fallback.item)
    return dropped


def compute_rewards(
    outcome: BattlePhase,
    state: "BattleState",
    difficulty: Difficulty,
    rng: random.Random,
    first_time: bool = False,
    config: RewardConfig | None = None,
) -> RewardBundle:
    """
    Computes the rewards of a finished battle.

    Args:
        outcome (BattlePhase): How the battle ended.
        state (BattleState): The final battle state.
        difficulty (Difficulty): The selected difficulty.
        rng (random.Random): The random source of the session.
        first_time (bool): Whether this encounter was won for the first time.
        config (RewardConfig | None): Reward constants.

    Returns:
        RewardBundle: The rewards, empty unless the battle was won.

    """
    config = config or RewardConfig()
    if outcome != BattlePhase.VICTORY:
        return RewardBundle()

    difficulty_mult = config.difficulty_multipliers.get(difficulty, 1.0)
    base_exp = 0.0
    base_gold = 0.0
    items: list[str] = []
    for enemy in state.enemies_defeated:
        base_exp += config.exp_base + config.exp_per_level * enemy.level
        base_gold += (config.gold_base + config.gold_per_level * enemy.level) * rng.uniform(
            config.gold_variance_min, config.gold_variance_max
        )
        items.extend(roll_drops(enemy, rng, config))

    bonuses = earned_bonuses(state, first_time, config)
    exp_mult, gold_mult = bonus_multipliers(bonuses, config)
    return RewardBundle(
        exp=_floor(base_exp * difficulty_mult * exp_mult),
        gold=_floor(base_gold * difficulty_mult * gold_mult),
        items=tuple(items),
        bonuses=tuple(bonuses),
    )
