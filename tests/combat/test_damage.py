"""
Tests for the damage resolver.
"""

import random

import pytest

from combat_engine.combat.damage import (
    crit_chance,
    element_multiplier,
    hit_chance,
    mitigate,
    resolve_hit,
)
from combat_engine.core.config import CombatConfig
from combat_engine.core.constants import Element, LogType, Side
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats


def make_combatant(cid, side, element=Element.NORMAL, **stats):
    values = {"hp": 100, "max_hp": 100, "attack": 10, "defense": 0, "speed": 10}
    values.update(stats)
    return Combatant(id=cid, name=cid.title(), side=side, element=element, stats=Stats(**values))


@pytest.fixture
def attacker():
    return make_combatant("hero", Side.PLAYER, attack=50)


@pytest.fixture
def defender():
    return make_combatant("slime", Side.ENEMY, defense=10)


@pytest.fixture
def rng():
    return random.Random(1)


def force_rolls(mocker, rng, rolls, variance=1.0):
    """Makes the hit and crit rolls and the variance deterministic."""
    mocker.patch.object(rng, "random", side_effect=rolls)
    mocker.patch.object(rng, "uniform", return_value=variance)


def test_basic_hit(mocker, rng, attacker, defender):
    """
    Test that 50 attack against 10 defense deals 45 with neutral variance.
    """
    force_rolls(mocker, rng, [0.0, 0.99])
    result = resolve_hit(attacker, defender, rng)
    assert result.hit
    assert not result.critical
    assert result.damage == 45
    # The resolver never touches hit points.
    assert defender.stats.hp == 100


@pytest.mark.parametrize("variance, expected", [(0.9, 40), (1.1, 49)])
def test_variance_bounds(mocker, rng, attacker, defender, variance, expected):
    force_rolls(mocker, rng, [0.0, 0.99], variance)
    assert resolve_hit(attacker, defender, rng).damage == expected


def test_rolls_happen_in_order(mocker, rng, attacker, defender):
    force_rolls(mocker, rng, [0.0, 0.99])
    resolve_hit(attacker, defender, rng)
    assert rng.random.call_count == 2
    rng.uniform.assert_called_once_with(0.9, 1.1)


def test_miss_deals_no_damage(mocker, rng, attacker, defender):
    force_rolls(mocker, rng, [0.99])
    defender.stats.dodge = 0.5
    result = resolve_hit(attacker, defender, rng)
    assert not result.hit
    assert result.damage == 0
    entry = result.to_log_entry(3)
    assert entry.type == LogType.DODGE
    assert entry.turn == 3
    rng.uniform.assert_not_called()


def test_critical_hit_uses_crit_damage(mocker, rng, attacker, defender):
    force_rolls(mocker, rng, [0.0, 0.0])
    attacker.stats.crit_damage = 2.0
    result = resolve_hit(attacker, defender, rng)
    assert result.critical
    assert result.damage == 90
    assert result.to_log_entry(1).type == LogType.CRITICAL


@pytest.mark.parametrize("crit_damage, expected", [(1.0, 67), (5.0, 135)])
def test_crit_multiplier_is_clamped(mocker, rng, attacker, defender, crit_damage, expected):
    force_rolls(mocker, rng, [0.0, 0.0])
    attacker.stats.crit_damage = crit_damage
    assert resolve_hit(attacker, defender, rng).damage == expected


def test_strong_element_scales_before_defense(mocker, rng, defender):
    force_rolls(mocker, rng, [0.0, 0.99])
    attacker = make_combatant("wolf", Side.ENEMY, Element.FIRE, attack=50)
    defender.element = Element.EARTH
    result = resolve_hit(attacker, defender, rng)
    assert result.element_multiplier == 1.5
    assert result.damage == 70


def test_weak_element_scales_before_defense(mocker, rng, defender):
    force_rolls(mocker, rng, [0.0, 0.99])
    attacker = make_combatant("wolf", Side.ENEMY, Element.FIRE, attack=50)
    defender.element = Element.WATER
    result = resolve_hit(attacker, defender, rng)
    assert result.element_multiplier == 0.7
    assert result.damage == 30


def test_landed_hit_deals_at_least_one(mocker, rng, defender):
    force_rolls(mocker, rng, [0.0, 0.99], 0.9)
    weakling = make_combatant("rat", Side.PLAYER, attack=1)
    defender.stats.defense = 500
    assert resolve_hit(weakling, defender, rng).damage == 1


def test_effective_stats_override_raw_stats(mocker, rng, attacker, defender):
    force_rolls(mocker, rng, [0.0, 0.99])
    boosted = attacker.stats.model_copy(update={"attack": 100})
    assert resolve_hit(attacker, defender, rng, attacker_stats=boosted).damage == 95


def test_base_value_and_multiplier(mocker, rng, attacker, defender):
    force_rolls(mocker, rng, [0.0, 0.99])
    result = resolve_hit(attacker, defender, rng, base_value=20, multiplier=2.0)
    assert result.damage == 35


def test_seeded_hits_stay_within_bounds(attacker, defender):
    rng = random.Random(42)
    for _ in range(200):
        result = resolve_hit(attacker, defender, rng)
        if result.hit and not result.critical:
            assert 40 <= result.damage <= 49
        if not result.hit:
            assert result.damage == 0


def test_same_seed_same_outcome(attacker, defender):
    first = [resolve_hit(attacker, defender, random.Random(7)) for _ in range(3)]
    second = [resolve_hit(attacker, defender, random.Random(7)) for _ in range(3)]
    assert first == second


def test_hit_chance_is_clamped():
    config = CombatConfig()
    sharp = Stats(hp=1, max_hp=1, attack=1, defense=1, speed=1, accuracy=0.5)
    evasive = Stats(hp=1, max_hp=1, attack=1, defense=1, speed=1, dodge=0.9)
    assert hit_chance(sharp, evasive, config) == pytest.approx(0.55)
    assert hit_chance(sharp, sharp, config) == 1.0
    assert hit_chance(evasive, evasive, config) == 0.5


def test_crit_chance_is_capped():
    lucky = Stats(hp=1, max_hp=1, attack=1, defense=1, speed=1, crit_rate=0.9)
    assert crit_chance(lucky) == 0.5


@pytest.mark.parametrize(
    "attacking, defending, expected",
    [
        (Element.FIRE, Element.EARTH, 1.5),
        (Element.WATER, Element.FIRE, 1.5),
        (Element.LIGHT, Element.DARK, 1.5),
        (Element.FIRE, Element.WATER, 0.7),
        (Element.NORMAL, Element.FIRE, 1.0),
        (Element.FIRE, Element.FIRE, 1.0),
    ],
)
def test_element_chart(attacking, defending, expected):
    assert element_multiplier(attacking, defending) == expected


def test_mitigate_floors_and_keeps_minimum():
    assert mitigate(30, 10) == 25
    assert mitigate(30.9, 0) == 30
    assert mitigate(3, 100) == 1
