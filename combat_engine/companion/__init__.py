"""
Companion module for the combat engine.

Contains the mood table and the processor that runs companion assist turns
and companion rewards.
"""

from .assist import (
    CompanionRewards,
    CompanionTurnContext,
    CompanionTurnResult,
    process_companion_damage,
    process_companion_rewards,
    process_companion_turn,
)
from .mood import apply_mood, effective_stats, mood_modifier

__all__ = [
    # Import from assist.py
    "CompanionRewards",
    "CompanionTurnContext",
    "CompanionTurnResult",
    "process_companion_damage",
    "process_companion_rewards",
    "process_companion_turn",
    # Import from mood.py
    "apply_mood",
    "effective_stats",
    "mood_modifier",
]
