"""
Tests for firing abilities through the ability registry.
"""

import random

import pytest

from combat_engine.abilities.ability import Ability, EffectSpec
from combat_engine.abilities.catalog import AbilityCatalog
from combat_engine.abilities.registry import AbilityRegistry
from combat_engine.combat.damage import HitResult, resolve_hit
from combat_engine.combat.state import BattleState
from combat_engine.core.constants import (
    EffectSpecType,
    EffectTarget,
    EffectType,
    LogType,
    Side,
    StatKind,
    Trigger,
)
from combat_engine.core.errors import InvalidAction
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats


def make_ability(ability_id, trigger, *effects, **fields):
    return Ability(id=ability_id, name=ability_id.title(), trigger=trigger, effects=effects, **fields)


@pytest.fixture
def catalog():
    return AbilityCatalog(
        [
            make_ability(
                "triple_slash",
                Trigger.ON_ATTACK,
                EffectSpec(type=EffectSpecType.MULTI_HIT, value=3),
            ),
            make_ability(
                "drain",
                Trigger.ON_ATTACK,
                EffectSpec(type=EffectSpecType.LIFE_DRAIN),
            ),
            make_ability(
                "mend",
                Trigger.ALWAYS,
                EffectSpec(type=EffectSpecType.HEAL, target=EffectTarget.SELF),
                cooldown=2,
                mp_cost=5,
            ),
            make_ability(
                "lucky_bite",
                Trigger.ON_ATTACK,
                EffectSpec(
                    type=EffectSpecType.STATUS_APPLY,
                    status=EffectType.POISON,
                    value=4,
                    duration=2,
                ),
                chance=0.5,
            ),
            make_ability(
                "last_stand",
                Trigger.ON_BELOW_HALF_HP,
                EffectSpec(
                    type=EffectSpecType.BUFF,
                    target=EffectTarget.SELF,
                    stat=StatKind.DEFENSE,
                    multiplier=1.5,
                    duration=2,
                ),
            ),
            make_ability(
                "quake",
                Trigger.ALWAYS,
                EffectSpec(type=EffectSpecType.DAMAGE, target=EffectTarget.ALL_OPPONENTS, value=10),
            ),
            make_ability(
                "weaken",
                Trigger.ON_HIT,
                EffectSpec(
                    type=EffectSpecType.DEBUFF,
                    stat=StatKind.ATTACK,
                    multiplier=0.5,
                    duration=2,
                ),
            ),
        ]
    )


@pytest.fixture
def registry(catalog):
    return AbilityRegistry(catalog)


@pytest.fixture
def hero():
    return Combatant(
        id="hero",
        name="Hero",
        side=Side.PLAYER,
        stats=Stats(hp=100, max_hp=100, mp=20, max_mp=20, attack=20, defense=5, speed=10),
        skills=["mend", "quake"],
    )


@pytest.fixture
def slimes():
    return [
        Combatant(
            id=f"slime{i}",
            name=f"Slime {i}",
            side=Side.ENEMY,
            stats=Stats(hp=500, max_hp=500, attack=5, defense=0, speed=5),
        )
        for i in (1, 2)
    ]


@pytest.fixture
def state(hero, slimes):
    return BattleState([hero, *slimes], random.Random(3))


def test_trigger_mismatch_fails(registry, hero, state):
    result = registry.try_execute(hero, "drain", Trigger.ON_HIT, state)
    assert not result.success
    assert result.reason == "trigger"


def test_unknown_ability_raises(registry, hero, state):
    with pytest.raises(InvalidAction):
        registry.try_execute(hero, "meteor", Trigger.ALWAYS, state)


def test_success_pays_mana_and_sets_cooldown(registry, hero, state):
    hero.take_damage(50)
    result = registry.try_execute(hero, "mend", Trigger.ALWAYS, state)
    assert result.success
    assert hero.stats.mp == 15
    # Default heal ratio is 30% of max hp.
    assert hero.stats.hp == 80
    assert state.cooldowns.remaining("hero", "mend") == 2
    assert state.log.of_type(LogType.SKILL)


def test_cooldown_blocks_until_it_runs_out(registry, hero, state):
    registry.try_execute(hero, "mend", Trigger.ALWAYS, state)
    assert registry.try_execute(hero, "mend", Trigger.ALWAYS, state).reason == "cooldown"
    state.cooldowns.decrement_all()
    state.cooldowns.decrement_all()
    assert registry.try_execute(hero, "mend", Trigger.ALWAYS, state).success


def test_missing_mana_fails(registry, hero, state):
    hero.stats.mp = 2
    result = registry.try_execute(hero, "mend", Trigger.ALWAYS, state)
    assert result.reason == "mana"
    assert hero.stats.mp == 2


def test_failed_chance_roll(mocker, registry, hero, slimes, state):
    mocker.patch.object(state.rng, "random", return_value=0.9)
    result = registry.try_execute(hero, "lucky_bite", Trigger.ON_ATTACK, state, slimes[0])
    assert result.reason == "chance"
    assert state.cooldowns.is_ready("hero", "lucky_bite")


def test_successful_chance_roll_applies_status(mocker, registry, hero, slimes, state):
    mocker.patch.object(state.rng, "random", return_value=0.1)
    result = registry.try_execute(hero, "lucky_bite", Trigger.ON_ATTACK, state, slimes[1])
    assert result.success
    assert result.effects_applied[0].status == EffectType.POISON
    assert state.ledger.has_effect("slime2", EffectType.POISON)
    assert not state.ledger.has_effect("slime1", EffectType.POISON)


def test_below_half_hp_guard(registry, hero, state):
    hero.take_damage(40)
    assert registry.try_execute(hero, "last_stand", Trigger.ON_BELOW_HALF_HP, state).reason == "guard"
    hero.take_damage(10)
    assert registry.try_execute(hero, "last_stand", Trigger.ON_BELOW_HALF_HP, state).success
    assert state.ledger.get_modifier("hero", StatKind.DEFENSE) == 1.5


def test_multi_hit_resolves_each_hit(mocker, registry, hero, slimes, state):
    spy = mocker.patch("combat_engine.abilities.registry.resolve_hit", wraps=resolve_hit)
    result = registry.try_execute(hero, "triple_slash", Trigger.ON_ATTACK, state, slimes[0])
    assert spy.call_count == 3
    assert len(result.effects_applied) == 3
    assert all(effect.target_id == "slime1" for effect in result.effects_applied)


def test_life_drain_heals_the_caster(mocker, registry, hero, slimes, state):
    mocker.patch(
        "combat_engine.abilities.registry.resolve_hit",
        return_value=HitResult(attacker_id="hero", defender_id="slime1", hit=True, damage=20),
    )
    hero.take_damage(50)
    registry.try_execute(hero, "drain", Trigger.ON_ATTACK, state, slimes[0])
    assert slimes[0].stats.hp == 480
    assert hero.stats.hp == 70


def test_life_drain_uses_half_attack_by_default(mocker, registry, hero, slimes, state):
    spy = mocker.patch("combat_engine.abilities.registry.resolve_hit", wraps=resolve_hit)
    registry.try_execute(hero, "drain", Trigger.ON_ATTACK, state, slimes[0])
    assert spy.call_args.kwargs["multiplier"] == 0.5


def test_all_opponents_hits_every_enemy(registry, hero, state):
    result = registry.try_execute(hero, "quake", Trigger.ALWAYS, state)
    assert {effect.target_id for effect in result.effects_applied} == {"slime1", "slime2"}


def test_enemy_target_falls_back_to_first_opponent(registry, hero, slimes, state):
    slimes[0].take_damage(500)
    result = registry.try_execute(hero, "drain", Trigger.ON_ATTACK, state, slimes[0])
    assert result.effects_applied[0].target_id == "slime2"


def test_debuff_lands_on_the_opponent(registry, slimes, hero, state):
    registry.try_execute(slimes[0], "weaken", Trigger.ON_HIT, state, hero)
    assert state.ledger.get_modifier("hero", StatKind.ATTACK) == 0.5
    assert state.effective_stats(hero).attack == 10


def test_ready_skills(registry, hero, state):
    assert registry.ready_skills(hero, state) == ["mend", "quake"]
    state.cooldowns.set("hero", "mend", 1)
    assert registry.ready_skills(hero, state) == ["quake"]
