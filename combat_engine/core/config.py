"""
Configuration module for the combat engine.

Holds every tunable number of the engine as pydantic models whose defaults
reproduce the shipped game balance. A fresh `EngineSettings` is built per
session, so two sessions never share mutable configuration.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .constants import Difficulty, Mood, Tier
from .errors import ConfigurationError


class CombatConfig(BaseModel):
    """Numbers used by the damage resolver and the turn scheduler."""

    base_accuracy: float = Field(0.95, description="Hit chance before stats.")
    min_accuracy: float = Field(0.5, description="Lowest possible hit chance.")
    max_accuracy: float = Field(1.0, description="Highest possible hit chance.")
    base_crit_rate: float = Field(0.05, description="Crit chance before stats.")
    max_crit_rate: float = Field(0.5, description="Highest possible crit chance.")
    min_crit_multiplier: float = Field(1.5, description="Lower clamp of crit damage.")
    max_crit_multiplier: float = Field(3.0, description="Upper clamp of crit damage.")
    defense_effectiveness: float = Field(
        0.5, description="Share of the defender's defense subtracted from damage."
    )
    damage_variance: float = Field(0.1, description="Relative damage jitter.")
    min_damage: int = Field(1, description="Damage dealt by any landed hit at least.")
    strong_multiplier: float = Field(1.5, description="Favourable element matchup.")
    weak_multiplier: float = Field(0.7, description="Unfavourable element matchup.")
    max_turns: int = Field(100, description="Rounds before the battle is lost.")
    modifier_floor: float = Field(0.1, description="Lowest combined stat modifier.")
    defend_multiplier: float = Field(2.0, description="Defense bonus while defending.")
    item_heal_ratio: float = Field(0.3, description="Share of max hp a potion heals.")
    default_heal_ratio: float = Field(
        0.3, description="Share of max hp healed by a heal effect without a value."
    )
    default_drain_ratio: float = Field(
        0.5, description="Damage multiplier of a life drain without a multiplier."
    )
    default_hit_count: int = Field(2, description="Hits of a multi hit without value.")


class EscapeConfig(BaseModel):
    """Numbers used to resolve escape attempts."""

    base_chance: float = Field(0.5, description="Escape chance on even terms.")
    speed_bonus: float = Field(0.002, description="Chance gained per speed point.")
    level_penalty: float = Field(0.05, description="Chance lost per enemy level.")
    min_chance: float = Field(0.05)
    max_chance: float = Field(0.95)
    max_attempts: int = Field(3, description="Escape attempts allowed per battle.")
    cooldown: int = Field(2, description="Rounds between two escape attempts.")


class RewardBonus(BaseModel):
    """Multipliers granted by a single reward bonus."""

    exp: float = Field(1.0)
    gold: float = Field(1.0)


class RewardConfig(BaseModel):
    """Numbers used by the reward calculator."""

    exp_base: int = Field(100)
    exp_per_level: int = Field(10)
    gold_base: int = Field(50)
    gold_per_level: int = Field(5)
    gold_variance_min: float = Field(0.8)
    gold_variance_max: float = Field(1.2)
    difficulty_multipliers: dict[Difficulty, float] = Field(
        default_factory=lambda: {
            Difficulty.EASY: 0.8,
            Difficulty.NORMAL: 1.0,
            Difficulty.HARD: 1.5,
            Difficulty.NIGHTMARE: 2.0,
        }
    )
    bonuses: dict[str, RewardBonus] = Field(
        default_factory=lambda: {
            "perfectVictory": RewardBonus(exp=1.5, gold=1.5),
            "speedBonus": RewardBonus(exp=1.2, gold=1.2),
            "overkill": RewardBonus(exp=1.3, gold=1.1),
            "comboBonus": RewardBonus(exp=1.1, gold=1.1),
            "firstTime": RewardBonus(exp=2.0, gold=2.0),
        }
    )
    speed_turn_threshold: int = Field(
        10, description="Battles won in fewer rounds earn the speed bonus."
    )
    overkill_margin: int = Field(
        50, description="Excess damage on a killing blow that counts as overkill."
    )
    combo_threshold: int = Field(
        5, description="Consecutive player hits that count as a combo."
    )
    drop_chances: dict[Tier, float] = Field(
        default_factory=lambda: {
            Tier.COMMON: 0.3,
            Tier.ELITE: 0.5,
            Tier.BOSS: 0.8,
            Tier.LEGENDARY: 1.0,
        }
    )


class StatScaling(BaseModel):
    """Multipliers applied to an enemy's stats when it is built."""

    hp: float = Field(1.0)
    attack: float = Field(1.0)
    defense: float = Field(1.0)
    speed: float = Field(1.0)


class DifficultyScaling(BaseModel):
    """Enemy pre-scaling by difficulty and by tier."""

    difficulty: dict[Difficulty, StatScaling] = Field(
        default_factory=lambda: {
            Difficulty.EASY: StatScaling(hp=0.7, attack=0.7, defense=0.7, speed=0.8),
            Difficulty.NORMAL: StatScaling(),
            Difficulty.HARD: StatScaling(hp=1.5, attack=1.3, defense=1.3, speed=1.2),
            Difficulty.NIGHTMARE: StatScaling(
                hp=2.0, attack=1.8, defense=1.6, speed=1.5
            ),
        }
    )
    tier: dict[Tier, StatScaling] = Field(
        default_factory=lambda: {
            Tier.COMMON: StatScaling(),
            Tier.ELITE: StatScaling(hp=1.2, attack=1.2, defense=1.2),
            Tier.BOSS: StatScaling(hp=1.5, attack=1.5, defense=1.5),
            Tier.LEGENDARY: StatScaling(hp=2.0, attack=2.0, defense=2.0),
        }
    )
    boss_phases_disabled: set[Difficulty] = Field(
        default_factory=lambda: {Difficulty.EASY}
    )


class MoodModifier(BaseModel):
    """Multipliers a mood applies to a companion."""

    attack: float = Field(1.0)
    defense: float = Field(1.0)
    speed: float = Field(1.0)
    exp_gain: float = Field(1.0)


class CompanionConfig(BaseModel):
    """Numbers used by the companion assist processor."""

    moods: dict[Mood, MoodModifier] = Field(
        default_factory=lambda: {
            Mood.HAPPY: MoodModifier(attack=1.2, defense=1.1, speed=1.15, exp_gain=1.3),
            Mood.NORMAL: MoodModifier(),
            Mood.SAD: MoodModifier(attack=0.8, defense=0.9, speed=0.85, exp_gain=0.7),
            Mood.TIRED: MoodModifier(attack=0.7, defense=0.8, speed=0.6, exp_gain=0.5),
            Mood.HUNGRY: MoodModifier(
                attack=0.75, defense=0.85, speed=0.7, exp_gain=0.6
            ),
        }
    )
    exp_per_enemy: int = Field(20)
    loyalty_per_enemy: int = Field(2)
    max_loyalty_gain: int = Field(10)
    defeat_loyalty_loss: int = Field(5)
    potion_hp_ratio: float = Field(
        0.3, ge=0.0, le=1.0, description="Companions drink a potion below this share of max hp."
    )


class EngineSettings(BaseModel):
    """All engine tunables grouped by concern."""

    combat: CombatConfig = Field(default_factory=CombatConfig)
    escape: EscapeConfig = Field(default_factory=EscapeConfig)
    rewards: RewardConfig = Field(default_factory=RewardConfig)
    scaling: DifficultyScaling = Field(default_factory=DifficultyScaling)
    companion: CompanionConfig = Field(default_factory=CompanionConfig)


def default_settings() -> EngineSettings:
    """Returns a fresh settings object holding the shipped balance."""
    return EngineSettings()


def load_settings(path: Path) -> EngineSettings:
    """
    Loads engine settings from a JSON file.

    Keys missing from the file keep their default value.

    Args:
        path (Path): The JSON file holding the overrides.

    Returns:
        EngineSettings: The validated settings.

    Raises:
        ConfigurationError: If the file is missing, is not valid JSON, or
            holds values of the wrong type.

    """
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected an object in {path}, got {type(data).__name__}"
        )
    try:
        return EngineSettings.model_validate(data)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e
