"""
Ability module for the combat engine.

Defines special abilities and the ordered effect steps they execute. Both
are validated when content is loaded so a malformed ability can never reach
a running battle.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.core.constants import (
    MODIFIABLE_STATS,
    EffectSpecType,
    EffectTarget,
    EffectType,
    StatKind,
    Trigger,
)


class EffectSpec(BaseModel):
    """
    One step of an ability.

    `value` is an absolute amount (damage base, heal amount, damage per tick,
    number of hits) while `multiplier` scales something the step already
    knows (attack, max hp, a modified stat).
    """

    model_config = ConfigDict(frozen=True)

    type: EffectSpecType = Field(description="What the step does.")
    target: EffectTarget = Field(EffectTarget.ENEMY, description="Who it affects.")
    value: float | None = Field(None, description="Absolute amount.")
    multiplier: float | None = Field(None, description="Relative amount.")
    duration: int | None = Field(None, description="Duration of applied effects.")
    status: EffectType | None = Field(None, description="Status applied.")
    stat: StatKind | None = Field(None, description="Stat buffed or debuffed.")
    max_stacks: int | None = Field(None, description="Stack cap override.")

    def model_post_init(self, _: Any) -> None:
        if self.value is not None and self.value < 0:
            raise ValueError(f"{self.type} value must not be negative.")
        if self.multiplier is not None and self.multiplier < 0:
            raise ValueError(f"{self.type} multiplier must not be negative.")
        if self.duration is not None and self.duration < 0:
            raise ValueError(f"{self.type} duration must not be negative.")
        if self.max_stacks is not None and self.max_stacks < 1:
            raise ValueError(f"{self.type} max_stacks must be at least 1.")

        if self.type == EffectSpecType.STATUS_APPLY:
            if self.status is None:
                raise ValueError("statusApply needs a status.")
            if not self.duration:
                raise ValueError("statusApply needs a positive duration.")
            if self.status.is_modifier:
                self._check_modifier(f"statusApply of {self.status}")
        elif self.type in (EffectSpecType.BUFF, EffectSpecType.DEBUFF):
            if not self.duration:
                raise ValueError(f"{self.type} needs a positive duration.")
            self._check_modifier(str(self.type))
        elif self.type == EffectSpecType.MULTI_HIT:
            if self.value is not None and self.value < 1:
                raise ValueError("multiHit needs at least one hit.")

    def _check_modifier(self, label: str) -> None:
        if self.stat is None:
            raise ValueError(f"{label} needs a stat.")
        if self.stat not in MODIFIABLE_STATS:
            raise ValueError(f"Stat {self.stat} cannot be modified.")
        if self.magnitude <= 0:
            raise ValueError(f"{label} needs a positive multiplier.")

    @property
    def magnitude(self) -> float:
        """Strength of a status or modifier applied by this step."""
        if self.multiplier is not None:
            return self.multiplier
        return self.value or 0.0


class Ability(BaseModel):
    """A special ability fired by a trigger or used as a skill."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier of the ability.")
    name: str = Field(description="Display name of the ability.")
    description: str = Field("", description="Flavour text.")
    trigger: Trigger = Field(description="Event that fires the ability.")
    chance: float = Field(1.0, description="Probability of firing when triggered.")
    cooldown: int = Field(0, description="Rounds before it can fire again.")
    mp_cost: int = Field(0, description="Mana paid when it fires.")
    effects: tuple[EffectSpec, ...] = Field(description="Ordered effect steps.")

    def model_post_init(self, _: Any) -> None:
        if not self.id:
            raise ValueError("Ability id must not be empty.")
        if not 0.0 <= self.chance <= 1.0:
            raise ValueError(f"Ability {self.id} chance must be within [0, 1].")
        if self.cooldown < 0:
            raise ValueError(f"Ability {self.id} cooldown must not be negative.")
        if self.mp_cost < 0:
            raise ValueError(f"Ability {self.id} mp_cost must not be negative.")
        if not self.effects:
            raise ValueError(f"Ability {self.id} has no effects.")

    @property
    def is_skill(self) -> bool:
        """Skills are used on demand instead of firing on an event."""
        return self.trigger == Trigger.ALWAYS
