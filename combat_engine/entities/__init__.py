"""
Entities module for the combat engine.

Contains the stat block and the combatants that take part in a battle.
"""

from .combatant import Combatant, CombatantDefinition, DropEntry
from .stats import Stats

__all__ = [
    # Import from combatant.py
    "Combatant",
    "CombatantDefinition",
    "DropEntry",
    # Import from stats.py
    "Stats",
]
