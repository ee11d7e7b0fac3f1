"""
Tests for the AI decision module and the behavior patterns.
"""

import random
from collections import Counter

import pytest

from combat_engine.ai.decision import BattleContext, _draw_kind, choose_target, decide_action
from combat_engine.ai.patterns import BEHAVIOR_PATTERNS, get_pattern
from combat_engine.core.constants import ActionKind, Side, TargetPriority
from combat_engine.core.errors import ConfigurationError
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats

# Rolls landing in each bucket of the aggressive pattern (0.7/0.2/0.05/0.05).
ATTACK_ROLL = 0.1
SKILL_ROLL = 0.8
DEFEND_ROLL = 0.92
ITEM_ROLL = 0.97


def make_combatant(cid, side, hp=100, attack=10, **fields):
    return Combatant(
        id=cid,
        name=cid.title(),
        side=side,
        stats=Stats(hp=hp, max_hp=100, mp=20, max_mp=20, attack=attack, defense=0, speed=10),
        **fields,
    )


@pytest.fixture
def goblin():
    return make_combatant("goblin", Side.ENEMY, items=1)


@pytest.fixture
def opponents():
    return [
        make_combatant("hero", Side.PLAYER, hp=90, attack=30),
        make_combatant("pip", Side.COMPANION, hp=40, attack=12),
        make_combatant("bruno", Side.COMPANION, hp=70, attack=18),
    ]


@pytest.fixture
def rng():
    return random.Random(5)


@pytest.fixture
def aggressive():
    return get_pattern("aggressive")


def test_attack_targets_lowest_hp(mocker, rng, aggressive, goblin, opponents):
    mocker.patch.object(rng, "random", return_value=ATTACK_ROLL)
    decision = decide_action(aggressive, goblin, BattleContext(opponents=opponents), rng)
    assert decision.kind == ActionKind.ATTACK
    assert decision.target_id == "pip"


def test_skill_uses_first_ready_skill(mocker, rng, aggressive, goblin, opponents):
    mocker.patch.object(rng, "random", return_value=SKILL_ROLL)
    context = BattleContext(opponents=opponents, ready_skills=["smash", "roar"])
    decision = decide_action(aggressive, goblin, context, rng)
    assert decision.kind == ActionKind.SKILL
    assert decision.ability_id == "smash"
    assert decision.target_id == "pip"


def test_skill_without_ready_skills_falls_back_to_attack(
    mocker, rng, aggressive, goblin, opponents
):
    mocker.patch.object(rng, "random", return_value=SKILL_ROLL)
    decision = decide_action(aggressive, goblin, BattleContext(opponents=opponents), rng)
    assert decision.kind == ActionKind.ATTACK
    assert decision.ability_id is None


def test_skill_below_mana_threshold_falls_back_to_attack(
    mocker, rng, aggressive, goblin, opponents
):
    mocker.patch.object(rng, "random", return_value=SKILL_ROLL)
    goblin.stats.mp = 1
    context = BattleContext(opponents=opponents, ready_skills=["smash"])
    assert decide_action(aggressive, goblin, context, rng).kind == ActionKind.ATTACK


def test_skill_without_mana_pool_is_allowed(mocker, rng, aggressive, goblin, opponents):
    mocker.patch.object(rng, "random", return_value=SKILL_ROLL)
    goblin.stats.max_mp = 0
    goblin.stats.mp = 0
    context = BattleContext(opponents=opponents, ready_skills=["smash"])
    assert decide_action(aggressive, goblin, context, rng).kind == ActionKind.SKILL


def test_defend_targets_self(mocker, rng, aggressive, goblin, opponents):
    mocker.patch.object(rng, "random", return_value=DEFEND_ROLL)
    decision = decide_action(aggressive, goblin, BattleContext(opponents=opponents), rng)
    assert decision.kind == ActionKind.DEFEND
    assert decision.target_id == "goblin"


def test_item_needs_missing_hp(mocker, rng, aggressive, goblin, opponents):
    mocker.patch.object(rng, "random", return_value=ITEM_ROLL)
    context = BattleContext(opponents=opponents)
    assert decide_action(aggressive, goblin, context, rng).kind == ActionKind.ATTACK
    goblin.take_damage(30)
    decision = decide_action(aggressive, goblin, context, rng)
    assert decision.kind == ActionKind.ITEM
    assert decision.target_id == "goblin"


def test_item_needs_a_potion(mocker, rng, aggressive, goblin, opponents):
    mocker.patch.object(rng, "random", return_value=ITEM_ROLL)
    goblin.items = 0
    goblin.take_damage(30)
    decision = decide_action(aggressive, goblin, BattleContext(opponents=opponents), rng)
    assert decision.kind == ActionKind.ATTACK


def test_no_opponent_means_defend(mocker, rng, aggressive, goblin):
    mocker.patch.object(rng, "random", return_value=ATTACK_ROLL)
    decision = decide_action(aggressive, goblin, BattleContext(opponents=[]), rng)
    assert decision.kind == ActionKind.DEFEND


def test_highest_damage_priority(rng, opponents):
    damage_dealt = {"hero": 10, "pip": 35, "bruno": 20}
    target = choose_target(TargetPriority.HIGHEST_DAMAGE, opponents, damage_dealt, rng)
    assert target.id == "pip"


def test_highest_damage_ties_break_on_attack(rng, opponents):
    target = choose_target(TargetPriority.HIGHEST_DAMAGE, opponents, {}, rng)
    assert target.id == "hero"


def test_random_priority_uses_the_session_rng(mocker, rng, opponents):
    choice = mocker.patch.object(rng, "choice", return_value=opponents[2])
    target = choose_target(TargetPriority.RANDOM, opponents, {}, rng)
    assert target.id == "bruno"
    choice.assert_called_once()


def test_dead_opponents_are_never_targeted(rng, opponents):
    opponents[1].take_damage(100)
    assert choose_target(TargetPriority.LOWEST_HP, opponents, {}, rng).id == "bruno"


def test_weighted_draw_follows_the_weights(aggressive):
    rng = random.Random(11)
    counts = Counter(_draw_kind(aggressive, rng) for _ in range(4000))
    assert counts[ActionKind.ATTACK] / 4000 == pytest.approx(0.7, abs=0.04)
    assert counts[ActionKind.SKILL] / 4000 == pytest.approx(0.2, abs=0.04)


def test_zero_weight_actions_are_never_drawn():
    rng = random.Random(2)
    berserk = get_pattern("berserk")
    kinds = {_draw_kind(berserk, rng) for _ in range(500)}
    assert kinds <= {ActionKind.ATTACK, ActionKind.SKILL}


def test_same_seed_same_decisions(aggressive, goblin, opponents):
    context = BattleContext(opponents=opponents, ready_skills=["smash"])
    first = [decide_action(aggressive, goblin, context, random.Random(9)) for _ in range(5)]
    second = [decide_action(aggressive, goblin, context, random.Random(9)) for _ in range(5)]
    assert first == second


def test_every_pattern_has_positive_weight():
    for pattern in BEHAVIOR_PATTERNS.values():
        assert pattern.total_weight > 0


def test_unknown_pattern_raises():
    with pytest.raises(ConfigurationError):
        get_pattern("cowardly")
