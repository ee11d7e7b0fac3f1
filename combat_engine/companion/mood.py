"""
Mood module for the combat engine.

Maps the mood of a companion to the multipliers it applies to effective
attack, defense, speed and experience gain.
"""

from combat_engine.core.config import CompanionConfig, MoodModifier
from combat_engine.core.constants import Mood, StatKind
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats


def mood_modifier(mood: Mood | None, config: CompanionConfig | None = None) -> MoodModifier:
    """Returns the multipliers of a mood; no mood behaves like a normal one."""
    config = config or CompanionConfig()
    return config.moods.get(mood or Mood.NORMAL, MoodModifier())


def apply_mood(
    stats: Stats, mood: Mood | None, config: CompanionConfig | None = None
) -> Stats:
    """Returns a copy of the stats scaled by the mood multipliers."""
    modifier = mood_modifier(mood, config)
    return stats.scaled(
        {
            StatKind.ATTACK: modifier.attack,
            StatKind.DEFENSE: modifier.defense,
            StatKind.SPEED: modifier.speed,
        }
    )


def effective_stats(companion: Combatant, config: CompanionConfig | None = None) -> Stats:
    """
    Returns the stats a companion fights with given its mood.

    Args:
        companion (Combatant): The companion.
        config (CompanionConfig | None): The mood table to use.

    Returns:
        Stats: A mood-adjusted copy of the companion stats.

    """
    return apply_mood(companion.stats, companion.mood, config)
