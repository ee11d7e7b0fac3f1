"""
Core system module for the combat engine.

This module contains the fundamental components shared by the rest of the
engine: constants and enumerations, configuration, errors, logging, and
console utilities.
"""

from .config import (
    CombatConfig,
    CompanionConfig,
    DifficultyScaling,
    EngineSettings,
    EscapeConfig,
    RewardConfig,
    default_settings,
    load_settings,
)
from .constants import (
    ActionKind,
    BattlePhase,
    Difficulty,
    EffectCategory,
    EffectSpecType,
    EffectTarget,
    EffectType,
    Element,
    LogType,
    Mood,
    Side,
    StatKind,
    TargetPriority,
    TickPhase,
    Tier,
    Trigger,
)
from .errors import CombatEngineError, ConfigurationError, InvalidAction
from .logging import setup_logging
from .utils import ccapture, clamp, cprint, crule, make_bar, make_rng

__all__ = [
    # Import from config.py
    "CombatConfig",
    "CompanionConfig",
    "DifficultyScaling",
    "EngineSettings",
    "EscapeConfig",
    "RewardConfig",
    "default_settings",
    "load_settings",
    # Import from constants.py
    "ActionKind",
    "BattlePhase",
    "Difficulty",
    "EffectCategory",
    "EffectSpecType",
    "EffectTarget",
    "EffectType",
    "Element",
    "LogType",
    "Mood",
    "Side",
    "StatKind",
    "TargetPriority",
    "TickPhase",
    "Tier",
    "Trigger",
    # Import from errors.py
    "CombatEngineError",
    "ConfigurationError",
    "InvalidAction",
    # Import from logging.py
    "setup_logging",
    # Import from utils.py
    "ccapture",
    "clamp",
    "cprint",
    "crule",
    "make_bar",
    "make_rng",
]
