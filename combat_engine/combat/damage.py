"""
Damage module for the combat engine.

Resolves a single hit: the accuracy roll, the critical roll, the elemental
matchup, defense mitigation and the final variance. The resolver never
changes hit points; the caller subtracts the returned damage.
"""

import math
import random

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.core.config import CombatConfig
from combat_engine.core.constants import Element, LogType
from combat_engine.core.utils import clamp
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats

from .log import LogEntry


class HitResult(BaseModel):
    """The outcome of one resolved hit."""

    model_config = ConfigDict(frozen=True)

    attacker_id: str
    defender_id: str
    hit: bool = Field(description="False when the defender dodged.")
    critical: bool = Field(False)
    damage: int = Field(0, description="Damage to subtract, 0 on a miss.")
    element_multiplier: float = Field(1.0)

    def to_log_entry(self, turn: int, detail: str = "") -> LogEntry:
        """
        Builds the combat log entry describing this hit.

        Args:
            turn (int): The current round.
            detail (str): The attack or ability that produced the hit.

        Returns:
            LogEntry: A `dodge`, `critical` or `damage` entry.

        """
        if not self.hit:
            log_type = LogType.DODGE
            message = f"{self.defender_id} dodged the attack of {self.attacker_id}"
        elif self.critical:
            log_type = LogType.CRITICAL
            message = (
                f"{self.attacker_id} lands a critical hit on {self.defender_id} "
                f"for {self.damage} damage"
            )
        else:
            log_type = LogType.DAMAGE
            message = f"{self.attacker_id} hits {self.defender_id} for {self.damage} damage"
        return LogEntry(
            turn=turn,
            type=log_type,
            actor_id=self.attacker_id,
            target_id=self.defender_id,
            amount=self.damage,
            detail=detail,
            message=message,
        )


def element_multiplier(
    attacker: Element, defender: Element, config: CombatConfig | None = None
) -> float:
    """
    Returns the damage multiplier of an elemental matchup.

    Args:
        attacker (Element): The element of the attacker.
        defender (Element): The element of the defender.
        config (CombatConfig | None): Multipliers to use.

    Returns:
        float: The strong multiplier, the weak multiplier, or 1.0.

    """
    config = config or CombatConfig()
    if attacker.is_strong_against(defender):
        return config.strong_multiplier
    if attacker.is_weak_against(defender):
        return config.weak_multiplier
    return 1.0


def hit_chance(
    attacker: Stats, defender: Stats, config: CombatConfig | None = None
) -> float:
    """Returns the probability that an attack lands."""
    config = config or CombatConfig()
    return clamp(
        config.base_accuracy + attacker.accuracy - defender.dodge,
        config.min_accuracy,
        config.max_accuracy,
    )


def crit_chance(attacker: Stats, config: CombatConfig | None = None) -> float:
    """Returns the probability that a landed attack is critical."""
    config = config or CombatConfig()
    return clamp(config.base_crit_rate + attacker.crit_rate, 0.0, config.max_crit_rate)


def mitigate(raw_damage: float, defense: float, config: CombatConfig | None = None) -> int:
    """
    Applies defense mitigation to damage computed outside the resolver.

    Args:
        raw_damage (float): The incoming damage.
        defense (float): The defense of the receiver.
        config (CombatConfig | None): Formula constants.

    Returns:
        int: The mitigated damage, at least the minimum damage.

    """
    config = config or CombatConfig()
    return max(
        config.min_damage,
        math.floor(raw_damage - defense * config.defense_effectiveness),
    )


def resolve_hit(
    attacker: Combatant,
    defender: Combatant,
    rng: random.Random,
    base_value: float | None = None,
    multiplier: float = 1.0,
    attacker_stats: Stats | None = None,
    defender_stats: Stats | None = None,
    config: CombatConfig | None = None,
) -> HitResult:
    """
    Resolves one hit of an attacker against a defender.

    The rolls happen in a fixed order: accuracy, then critical, then the
    damage variance. The elemental multiplier scales the base value before
    the defender's defense is subtracted.

    Args:
        attacker (Combatant): The attacking combatant.
        defender (Combatant): The defending combatant.
        rng (random.Random): The random source of the session.
        base_value (float | None): Damage base, defaults to the attack stat.
        multiplier (float): Extra multiplier of the base, e.g. from an ability.
        attacker_stats (Stats | None): Effective stats of the attacker after
            modifiers, defaults to its raw stats.
        defender_stats (Stats | None): Effective stats of the defender after
            modifiers, defaults to its raw stats.
        config (CombatConfig | None): Formula constants.

    Returns:
        HitResult: Whether it hit, whether it was critical, and the damage.

    """
    config = config or CombatConfig()
    a_stats = attacker_stats or attacker.stats
    d_stats = defender_stats or defender.stats
    elem = element_multiplier(attacker.element, defender.element, config)

    if rng.random() >= hit_chance(a_stats, d_stats, config):
        return HitResult(
            attacker_id=attacker.id,
            defender_id=defender.id,
            hit=False,
            element_multiplier=elem,
        )

    critical = rng.random() < crit_chance(a_stats, config)

    base = a_stats.attack if base_value is None else base_value
    raw = max(
        1.0,
        base * elem * multiplier - d_stats.defense * config.defense_effectiveness,
    )
    if critical:
        raw *= clamp(
            a_stats.crit_damage,
            config.min_crit_multiplier,
            config.max_crit_multiplier,
        )
    variance = rng.uniform(1.0 - config.damage_variance, 1.0 + config.damage_variance)
    damage = max(config.min_damage, math.floor(raw * variance))

    return HitResult(
        attacker_id=attacker.id,
        defender_id=defender.id,
        hit=True,
        critical=critical,
        damage=damage,
        element_multiplier=elem,
    )
