"""
Combatant module for the combat engine.

Defines the content-side definition of a fighter and the session-owned
combatant built from it at the start of a battle.
"""

from typing import Any

from pydantic import BaseModel, Field

from combat_engine.core.config import DifficultyScaling
from combat_engine.core.constants import (
    Difficulty,
    EffectType,
    Element,
    Mood,
    Side,
    StatKind,
    Tier,
)

from .stats import Stats


class DropEntry(BaseModel):
    """An item a monster may leave behind."""

    item: str = Field(description="Identifier of the dropped item.")
    rate: float = Field(description="Base drop rate before the tier chance.")

    def model_post_init(self, _: Any) -> None:
        if not 0.0 <= self.rate <= 1.0:
            raise ValueError(f"Drop rate of {self.item} must be within [0, 1].")


class CombatantDefinition(BaseModel):
    """Static description of a fighter, loaded from content data."""

    id: str = Field(description="Content identifier.")
    name: str = Field(description="Display name.")
    level: int = Field(1, ge=1)
    tier: Tier = Field(Tier.COMMON)
    element: Element = Field(Element.NORMAL)
    base_stats: Stats = Field(description="Stats before any scaling.")
    ai_pattern: str | None = Field(None, description="Behavior pattern name.")
    abilities: list[str] = Field(
        default_factory=list, description="Trigger-driven ability ids."
    )
    skills: list[str] = Field(
        default_factory=list, description="Ability ids usable as a skill action."
    )
    items: int = Field(0, ge=0, description="Healing potions carried.")
    immunities: set[EffectType] = Field(default_factory=set)
    drops: list[DropEntry] = Field(default_factory=list)
    mood: Mood | None = Field(None, description="Mood of a companion.")
    loyalty: int = Field(0)


class Combatant(BaseModel):
    """A fighter taking part in one battle session."""

    id: str = Field(description="Identifier unique within the session.")
    name: str
    side: Side
    level: int = Field(1, ge=1)
    element: Element = Field(Element.NORMAL)
    stats: Stats
    tier: Tier = Field(Tier.COMMON)
    ai_pattern: str | None = Field(None)
    abilities: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    items: int = Field(0, ge=0)
    immunities: set[EffectType] = Field(default_factory=set)
    drops: list[DropEntry] = Field(default_factory=list)
    mood: Mood | None = Field(None)
    loyalty: int = Field(0)
    defending: bool = Field(False, description="Defending until its next turn.")

    @classmethod
    def from_definition(
        cls,
        definition: CombatantDefinition,
        side: Side,
        instance_id: str | None = None,
        difficulty: Difficulty = Difficulty.NORMAL,
        scaling: DifficultyScaling | None = None,
    ) -> "Combatant":
        """
        Builds a fresh combatant from a content definition.

        Enemies are scaled by their tier and by the difficulty; players and
        companions keep their base stats.

        Args:
            definition (CombatantDefinition): The content definition.
            side (Side): The side the combatant fights for.
            instance_id (str | None): Session identifier, defaults to the
                definition id.
            difficulty (Difficulty): The selected difficulty.
            scaling (DifficultyScaling | None): Scaling tables to use.

        Returns:
            Combatant: The new combatant, at full hp.

        """
        stats = definition.base_stats.model_copy()
        if side == Side.ENEMY:
            scaling = scaling or DifficultyScaling()
            by_difficulty = scaling.difficulty[difficulty]
            by_tier = scaling.tier[definition.tier]
            hp_mult = by_difficulty.hp * by_tier.hp
            stats = stats.scaled(
                {
                    StatKind.MAX_HP: hp_mult,
                    StatKind.ATTACK: by_difficulty.attack * by_tier.attack,
                    StatKind.DEFENSE: by_difficulty.defense * by_tier.defense,
                    StatKind.SPEED: by_difficulty.speed * by_tier.speed,
                }
            )
            stats.max_hp = max(1, stats.max_hp)
        stats.hp = stats.max_hp
        stats.mp = stats.max_mp
        return cls(
            id=instance_id or definition.id,
            name=definition.name,
            side=side,
            level=definition.level,
            element=definition.element,
            stats=stats,
            tier=definition.tier,
            ai_pattern=definition.ai_pattern,
            abilities=list(definition.abilities),
            skills=list(definition.skills),
            items=definition.items,
            immunities=set(definition.immunities),
            drops=[drop.model_copy() for drop in definition.drops],
            mood=definition.mood,
            loyalty=definition.loyalty,
        )

    @property
    def is_alive(self) -> bool:
        return self.stats.hp > 0

    @property
    def hp_ratio(self) -> float:
        return self.stats.hp / self.stats.max_hp

    @property
    def mp_ratio(self) -> float:
        """Share of mana left, 1.0 for combatants without mana."""
        if self.stats.max_mp <= 0:
            return 1.0
        return self.stats.mp / self.stats.max_mp

    @property
    def colored_name(self) -> str:
        return self.side.colorize(self.name)

    def take_damage(self, amount: int) -> int:
        """
        Removes hit points, never going below zero.

        Args:
            amount (int): The damage to take.

        Returns:
            int: The hit points actually lost.

        """
        lost = min(self.stats.hp, max(0, amount))
        self.stats.hp -= lost
        return lost

    def heal(self, amount: int) -> int:
        """
        Restores hit points, never going above the maximum.

        Args:
            amount (int): The amount to heal.

        Returns:
            int: The hit points actually restored.

        """
        if not self.is_alive:
            return 0
        restored = min(self.stats.max_hp - self.stats.hp, max(0, amount))
        self.stats.hp += restored
        return restored

    def spend_mp(self, amount: int) -> bool:
        """Pays a mana cost, returning False if the combatant cannot afford it."""
        if amount > self.stats.mp:
            return False
        self.stats.mp -= amount
        return True
