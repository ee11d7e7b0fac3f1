"""
Abilities module for the combat engine.

Contains the ability definitions, the shared catalog that holds them, and
the per-session cooldown tracker. The registry that executes abilities
lives in `combat_engine.abilities.registry`.
"""

from .ability import Ability, EffectSpec
from .catalog import AbilityCatalog
from .cooldowns import CooldownTracker

__all__ = [
    # Import from ability.py
    "Ability",
    "EffectSpec",
    # Import from catalog.py
    "AbilityCatalog",
    # Import from cooldowns.py
    "CooldownTracker",
]
