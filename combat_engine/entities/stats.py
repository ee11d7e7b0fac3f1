"""
Stats module for the combat engine.

Defines the numeric stat block of a combatant and the only sanctioned way of
reading and writing a stat by kind.
"""

import math
from typing import Any

from pydantic import BaseModel, Field

from combat_engine.core.constants import StatKind

# Exhaustive map from stat kind to the field that stores it.
_STAT_FIELDS: dict[StatKind, str] = {
    StatKind.HP: "hp",
    StatKind.MAX_HP: "max_hp",
    StatKind.MP: "mp",
    StatKind.MAX_MP: "max_mp",
    StatKind.ATTACK: "attack",
    StatKind.DEFENSE: "defense",
    StatKind.SPEED: "speed",
    StatKind.CRIT_RATE: "crit_rate",
    StatKind.CRIT_DAMAGE: "crit_damage",
    StatKind.DODGE: "dodge",
    StatKind.ACCURACY: "accuracy",
}

_INTEGER_STATS = frozenset(
    {
        StatKind.HP,
        StatKind.MAX_HP,
        StatKind.MP,
        StatKind.MAX_MP,
        StatKind.ATTACK,
        StatKind.DEFENSE,
        StatKind.SPEED,
    }
)

if set(_STAT_FIELDS) != set(StatKind):
    missing = sorted(str(kind) for kind in set(StatKind) - set(_STAT_FIELDS))
    raise RuntimeError(f"Stat kinds without a field: {missing}")


class Stats(BaseModel):
    """The numeric stats of a combatant."""

    hp: int = Field(description="Current hit points.")
    max_hp: int = Field(description="Maximum hit points.")
    mp: int = Field(0, description="Current mana points.")
    max_mp: int = Field(0, description="Maximum mana points.")
    attack: int = Field(description="Base damage of a normal attack.")
    defense: int = Field(description="Damage mitigation.")
    speed: int = Field(description="Turn order priority.")
    crit_rate: float = Field(0.0, description="Bonus chance of a critical hit.")
    crit_damage: float = Field(1.5, description="Multiplier of a critical hit.")
    dodge: float = Field(0.0, description="Chance subtracted from incoming hits.")
    accuracy: float = Field(0.0, description="Chance added to outgoing hits.")

    def model_post_init(self, _: Any) -> None:
        if self.max_hp <= 0:
            raise ValueError(f"max_hp must be positive, got {self.max_hp}")
        if self.hp > self.max_hp:
            self.hp = self.max_hp
        if self.max_mp < 0:
            raise ValueError(f"max_mp must not be negative, got {self.max_mp}")
        if self.mp > self.max_mp:
            self.mp = self.max_mp

    def get(self, kind: StatKind) -> float:
        """
        Reads a stat by kind.

        Args:
            kind (StatKind): The stat to read.

        Returns:
            float: The stat value.

        """
        return getattr(self, _STAT_FIELDS[kind])

    def set(self, kind: StatKind, value: float) -> None:
        """
        Writes a stat by kind, truncating integer stats.

        Args:
            kind (StatKind): The stat to write.
            value (float): The new value.

        """
        if kind in _INTEGER_STATS:
            # Tolerate float noise such as 20 * 0.6 = 11.999...
            value = math.floor(value + 1e-9)
        setattr(self, _STAT_FIELDS[kind], value)

    def with_value(self, kind: StatKind, value: float) -> "Stats":
        """Returns a copy of the stats with one stat replaced."""
        copy = self.model_copy()
        copy.set(kind, value)
        return copy

    def scaled(self, multipliers: dict[StatKind, float]) -> "Stats":
        """
        Returns a copy of the stats with some stats multiplied.

        Args:
            multipliers (dict[StatKind, float]): Multiplier per stat kind.

        Returns:
            Stats: The scaled copy.

        """
        copy = self.model_copy()
        for kind, multiplier in multipliers.items():
            copy.set(kind, copy.get(kind) * multiplier)
        return copy
