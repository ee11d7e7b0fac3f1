"""
Tests for companion moods, assist turns and companion rewards.
"""

import random

import pytest

from combat_engine.companion.assist import (
    CompanionTurnContext,
    process_companion_damage,
    process_companion_rewards,
    process_companion_turn,
)
from combat_engine.companion.mood import effective_stats, mood_modifier
from combat_engine.core.config import CompanionConfig, EngineSettings
from combat_engine.core.constants import ActionKind, LogType, Mood, Side
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats


def make_combatant(cid, side, hp=100, attack=20, defense=10, speed=20, **fields):
    return Combatant(
        id=cid,
        name=cid.title(),
        side=side,
        stats=Stats(hp=hp, max_hp=100, attack=attack, defense=defense, speed=speed),
        **fields,
    )


@pytest.fixture
def bruno():
    return make_combatant("bruno", Side.COMPANION, mood=Mood.TIRED, items=1)


@pytest.fixture
def enemies():
    return [
        make_combatant("slime", Side.ENEMY, hp=40, defense=0),
        make_combatant("goblin", Side.ENEMY, hp=25, defense=0),
    ]


def test_tired_companion_is_slower(bruno):
    stats = effective_stats(bruno)
    assert stats.speed == 12
    assert stats.attack == 14
    assert bruno.stats.speed == 20


def test_missing_mood_behaves_like_normal():
    assert mood_modifier(None) == mood_modifier(Mood.NORMAL)


def test_assist_attacks_the_weakest_enemy(mocker, bruno, enemies):
    rng = random.Random(2)
    mocker.patch.object(rng, "random", side_effect=[0.0, 0.99])
    mocker.patch.object(rng, "uniform", return_value=1.0)
    result = process_companion_turn(
        CompanionTurnContext(companion=bruno, enemies=enemies, rng=rng, turn=4)
    )
    assert result.action == ActionKind.ATTACK
    [hit] = result.hits
    assert hit.defender_id == "goblin"
    # Tired attack of 14 against no defense.
    assert hit.damage == 14
    after = {enemy.id: enemy.stats.hp for enemy in result.enemies}
    assert after == {"slime": 40, "goblin": 11}
    assert result.animations[0].turn == 4
    assert result.animations[0].detail == "assist"


def test_assist_turn_leaves_its_inputs_untouched(bruno, enemies):
    result = process_companion_turn(
        CompanionTurnContext(companion=bruno, enemies=enemies, rng=random.Random(6))
    )
    assert [enemy.stats.hp for enemy in enemies] == [40, 25]
    assert bruno.stats.hp == 100
    assert result.enemies[0] is not enemies[0]


def test_badly_hurt_companion_drinks_a_potion(bruno, enemies):
    bruno.take_damage(80)
    result = process_companion_turn(
        CompanionTurnContext(companion=bruno, enemies=enemies, rng=random.Random(6))
    )
    assert result.action == ActionKind.ITEM
    assert result.companion_hp == 50
    assert result.hits == ()
    assert result.animations[0].type == LogType.ITEM
    assert bruno.items == 1


def test_potion_threshold_comes_from_settings(bruno, enemies):
    bruno.take_damage(50)
    settings = EngineSettings(companion=CompanionConfig(potion_hp_ratio=0.6))
    result = process_companion_turn(
        CompanionTurnContext(
            companion=bruno, enemies=enemies, rng=random.Random(6), settings=settings
        )
    )
    assert result.action == ActionKind.ITEM
    assert result.companion_hp == 80


def test_hurt_companion_without_potion_attacks(bruno, enemies):
    bruno.items = 0
    bruno.take_damage(80)
    result = process_companion_turn(
        CompanionTurnContext(companion=bruno, enemies=enemies, rng=random.Random(6))
    )
    assert result.action == ActionKind.ATTACK


def test_fallen_companion_does_nothing(bruno, enemies):
    bruno.take_damage(100)
    result = process_companion_turn(
        CompanionTurnContext(companion=bruno, enemies=enemies, rng=random.Random(6))
    )
    assert result.action is None
    assert result.hits == ()


def test_companion_damage_uses_mood_defense(bruno):
    # Tired defense 8 mitigates 4.
    final, hp = process_companion_damage(bruno, 30)
    assert final == 26
    assert hp == 74


def test_companion_hp_never_drops_below_zero(bruno):
    final, hp = process_companion_damage(bruno, 500)
    assert final == 496
    assert hp == 0
    assert not bruno.is_alive


def test_victory_rewards_scale_with_mood():
    happy = make_combatant("pip", Side.COMPANION, mood=Mood.HAPPY)
    rewards = process_companion_rewards(happy, True, 3)
    assert rewards.exp_gained == 78
    assert rewards.loyalty_change == 6


def test_loyalty_gain_is_capped(bruno):
    rewards = process_companion_rewards(bruno, True, 8)
    assert rewards.loyalty_change == 10
    assert rewards.exp_gained == 80


def test_defeat_costs_loyalty(bruno):
    rewards = process_companion_rewards(bruno, False, 2)
    assert rewards.exp_gained == 0
    assert rewards.loyalty_change == -5
