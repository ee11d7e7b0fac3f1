"""
Status effect module for the combat engine.

Defines timed status effects (damage over time, incapacitation, stat
modifiers and regeneration), the per-type rules that govern them, and the
result of a single ledger tick.
"""

from typing import Any

from pydantic import BaseModel, Field

from combat_engine.core.constants import (
    MODIFIABLE_STATS,
    EffectCategory,
    EffectType,
    StatKind,
    TickPhase,
)


class StatusRule(BaseModel):
    """How every effect of one type behaves."""

    category: EffectCategory
    tick_phase: TickPhase = Field(description="Phase that decrements the duration.")
    max_stacks: int = Field(1, ge=1, description="1 means refresh-only.")


STATUS_RULES: dict[EffectType, StatusRule] = {
    EffectType.POISON: StatusRule(
        category=EffectCategory.DEBUFF, tick_phase=TickPhase.START, max_stacks=3
    ),
    EffectType.BURN: StatusRule(
        category=EffectCategory.DEBUFF, tick_phase=TickPhase.START
    ),
    EffectType.FREEZE: StatusRule(
        category=EffectCategory.DEBUFF, tick_phase=TickPhase.START
    ),
    EffectType.STUN: StatusRule(
        category=EffectCategory.DEBUFF, tick_phase=TickPhase.START
    ),
    EffectType.BUFF: StatusRule(
        category=EffectCategory.BUFF, tick_phase=TickPhase.END, max_stacks=3
    ),
    EffectType.DEBUFF: StatusRule(
        category=EffectCategory.DEBUFF, tick_phase=TickPhase.END, max_stacks=3
    ),
    EffectType.REGENERATION: StatusRule(
        category=EffectCategory.BUFF, tick_phase=TickPhase.START
    ),
}


class StatusEffect(BaseModel):
    """
    A timed status effect carried by a combatant.

    The effect is active while its duration is positive. `magnitude` is the
    damage per tick for poison and burn, the healing per tick for
    regeneration, and the stat multiplier for buffs and debuffs.
    """

    id: str = Field("", description="Instance id, assigned by the ledger.")
    type: EffectType = Field(description="The kind of status effect.")
    magnitude: float = Field(0.0, description="Strength of the effect.")
    stat: StatKind | None = Field(None, description="Stat scaled by a modifier.")
    duration: int = Field(description="Remaining ticks of its phase.")
    source_id: str | None = Field(None, description="Combatant that applied it.")
    stacks: int = Field(1, ge=1, description="Current stack count.")
    max_stacks: int | None = Field(
        None, description="Override of the per-type stack cap."
    )

    def model_post_init(self, _: Any) -> None:
        if self.duration <= 0:
            raise ValueError(
                f"Duration of {self.type} must be a positive integer, "
                f"got {self.duration}."
            )
        if self.type.is_modifier:
            if self.stat is None:
                raise ValueError(f"A {self.type} effect needs a stat to modify.")
            if self.stat not in MODIFIABLE_STATS:
                raise ValueError(f"Stat {self.stat} cannot be modified.")
            if self.magnitude <= 0:
                raise ValueError("A modifier magnitude must be positive.")
        elif self.magnitude < 0:
            raise ValueError(f"Magnitude of {self.type} must not be negative.")
        if self.max_stacks is not None and self.max_stacks < 1:
            raise ValueError("max_stacks must be at least 1.")

    @property
    def rule(self) -> StatusRule:
        return STATUS_RULES[self.type]

    @property
    def category(self) -> EffectCategory:
        return self.rule.category

    @property
    def tick_phase(self) -> TickPhase:
        return self.rule.tick_phase

    @property
    def stack_cap(self) -> int:
        return self.max_stacks or self.rule.max_stacks

    @property
    def is_active(self) -> bool:
        return self.duration > 0

    @property
    def key(self) -> tuple[EffectType, StatKind | None, str | None]:
        """Identity used to detect a re-application of the same effect."""
        return (self.type, self.stat, self.source_id)

    @property
    def modifier(self) -> float:
        """The stat multiplier contributed by this effect."""
        if not self.type.is_modifier:
            return 1.0
        return self.magnitude**self.stacks

    def __str__(self) -> str:
        label = f"{self.type.emoji} {self.type.display_name}"
        if self.stat is not None:
            label += f" ({self.stat.display_name} x{self.modifier:.2f})"
        if self.stacks > 1:
            label += f" x{self.stacks}"
        return f"{label} [{self.duration}]"


class TickResult(BaseModel):
    """What a single effect did during a ledger tick."""

    combatant_id: str
    effect_id: str
    type: EffectType
    source_id: str | None = None
    damage: int = Field(0, description="Damage the bearer must take.")
    heal: int = Field(0, description="Healing the bearer must receive.")
    blocks_turn: bool = Field(False, description="The bearer loses its turn.")
    remaining: int = Field(description="Duration left after the tick.")

    @property
    def expired(self) -> bool:
        return self.remaining <= 0
