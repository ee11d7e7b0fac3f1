"""
Behavior pattern module for the combat engine.

Defines the static weight tables that drive the decisions of non-player
combatants.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.core.constants import ActionKind, TargetPriority
from combat_engine.core.errors import ConfigurationError


class BehaviorPattern(BaseModel):
    """A named weighted-action profile."""

    model_config = ConfigDict(frozen=True)

    name: str
    attack_weight: float = Field(ge=0)
    skill_weight: float = Field(ge=0)
    defend_weight: float = Field(ge=0)
    item_weight: float = Field(ge=0)
    target_priority: TargetPriority
    skill_usage_threshold: float = Field(
        ge=0,
        le=1,
        description="Share of its mana the combatant is willing to spend on skills.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.total_weight <= 0:
            raise ValueError(f"Pattern {self.name} has no positive weight.")

    @property
    def weights(self) -> list[tuple[ActionKind, float]]:
        return [
            (ActionKind.ATTACK, self.attack_weight),
            (ActionKind.SKILL, self.skill_weight),
            (ActionKind.DEFEND, self.defend_weight),
            (ActionKind.ITEM, self.item_weight),
        ]

    @property
    def total_weight(self) -> float:
        return self.attack_weight + self.skill_weight + self.defend_weight + self.item_weight


def _pattern(
    name: str,
    attack: float,
    skill: float,
    defend: float,
    item: float,
    priority: TargetPriority,
    threshold: float,
) -> BehaviorPattern:
    return BehaviorPattern(
        name=name,
        attack_weight=attack,
        skill_weight=skill,
        defend_weight=defend,
        item_weight=item,
        target_priority=priority,
        skill_usage_threshold=threshold,
    )


BEHAVIOR_PATTERNS: dict[str, BehaviorPattern] = {
    p.name: p
    for p in (
        _pattern("aggressive", 0.7, 0.2, 0.05, 0.05, TargetPriority.LOWEST_HP, 0.8),
        _pattern("defensive", 0.3, 0.2, 0.4, 0.1, TargetPriority.HIGHEST_DAMAGE, 0.5),
        _pattern("balanced", 0.5, 0.3, 0.15, 0.05, TargetPriority.RANDOM, 0.6),
        _pattern("support", 0.2, 0.5, 0.2, 0.1, TargetPriority.LOWEST_HP, 0.7),
        _pattern("boss", 0.4, 0.5, 0.05, 0.05, TargetPriority.HIGHEST_DAMAGE, 0.9),
        # Tables swapped in by the later boss phases.
        _pattern("berserk", 0.55, 0.45, 0.0, 0.0, TargetPriority.HIGHEST_DAMAGE, 1.0),
        _pattern("desperate", 0.3, 0.6, 0.0, 0.1, TargetPriority.LOWEST_HP, 1.0),
    )
}


def get_pattern(name: str) -> BehaviorPattern:
    """
    Returns the behavior pattern with the given name.

    Raises:
        ConfigurationError: If no pattern has this name.

    """
    try:
        return BEHAVIOR_PATTERNS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown behavior pattern '{name}'",
            {"known": ", ".join(sorted(BEHAVIOR_PATTERNS))},
        ) from None
