"""
Rewards module for the combat engine.

Computes experience, gold and item drops at the end of a battle.
"""

from .calculator import RewardBundle, compute_rewards

__all__ = [
    "RewardBundle",
    "compute_rewards",
]
