"""
Turn-based combat resolution engine.

Resolves JRPG style battles: damage and elemental matchups, timed status
effects, cooldown-gated abilities chosen by AI behavior patterns, a
speed-ordered turn scheduler, rewards, and companion assist turns.
"""

__version__ = "0.1.0"
