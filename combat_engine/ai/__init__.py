"""
AI module for the combat engine.

Contains the behavior patterns, the boss phase tracking and the decision
making of non-player combatants.
"""

from .boss import BOSS_PHASES, BossPhase, BossPhaseTracker, phase_for_ratio
from .decision import BattleContext, Decision, choose_target, decide_action
from .patterns import BEHAVIOR_PATTERNS, BehaviorPattern, get_pattern

__all__ = [
    # Import from boss.py
    "BOSS_PHASES",
    "BossPhase",
    "BossPhaseTracker",
    "phase_for_ratio",
    # Import from decision.py
    "BattleContext",
    "Decision",
    "choose_target",
    "decide_action",
    # Import from patterns.py
    "BEHAVIOR_PATTERNS",
    "BehaviorPattern",
    "get_pattern",
]
