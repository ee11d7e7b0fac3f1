"""
Tests for ability definitions, the ability catalog and cooldown tracking.
"""

import json

import pytest

from combat_engine.abilities.ability import Ability, EffectSpec
from combat_engine.abilities.catalog import AbilityCatalog
from combat_engine.abilities.cooldowns import CooldownTracker
from combat_engine.core.constants import EffectSpecType, StatKind, Trigger
from combat_engine.core.errors import ConfigurationError, InvalidAction


@pytest.fixture
def raw_abilities():
    return [
        {
            "id": "bite",
            "name": "Bite",
            "trigger": "onAttack",
            "chance": 0.3,
            "effects": [
                {"type": "statusApply", "status": "poison", "value": 5, "duration": 3}
            ],
        },
        {
            "id": "rally",
            "name": "Rally",
            "trigger": "always",
            "cooldown": 3,
            "mp_cost": 5,
            "effects": [
                {
                    "type": "buff",
                    "target": "self",
                    "stat": "attack",
                    "multiplier": 1.3,
                    "duration": 2,
                }
            ],
        },
    ]


def test_catalog_from_data(raw_abilities):
    catalog = AbilityCatalog.from_data(raw_abilities)
    assert len(catalog) == 2
    assert "bite" in catalog
    rally = catalog.get("rally")
    assert rally.is_skill
    assert rally.effects[0].stat == StatKind.ATTACK
    assert rally.effects[0].magnitude == 1.3
    assert not catalog.get("bite").is_skill


def test_catalog_load_from_file(tmp_path, raw_abilities):
    path = tmp_path / "abilities.json"
    path.write_text(json.dumps(raw_abilities))
    assert len(AbilityCatalog.load(path)) == 2


def test_unknown_ability_raises_invalid_action(raw_abilities):
    catalog = AbilityCatalog.from_data(raw_abilities)
    with pytest.raises(InvalidAction):
        catalog.get("teleport")


def test_duplicate_ids_rejected(raw_abilities):
    with pytest.raises(ConfigurationError, match="Duplicate"):
        AbilityCatalog.from_data(raw_abilities + raw_abilities[:1])


@pytest.mark.parametrize(
    "field, value",
    [
        ("cooldown", -1),
        ("chance", 1.5),
        ("mp_cost", -3),
        ("effects", []),
        ("trigger", "onSneeze"),
    ],
)
def test_malformed_ability_rejected(raw_abilities, field, value):
    raw_abilities[1][field] = value
    with pytest.raises(ConfigurationError, match="rally"):
        AbilityCatalog.from_data(raw_abilities)


def test_buff_without_stat_rejected():
    with pytest.raises(ValueError):
        EffectSpec(type=EffectSpecType.BUFF, multiplier=1.2, duration=2)


@pytest.mark.parametrize(
    "effect",
    [
        {"type": "statusApply", "status": "buff", "stat": "attack", "duration": 2},
        {"type": "statusApply", "status": "debuff", "stat": "hp", "value": 0.5, "duration": 2},
        {"type": "statusApply", "status": "debuff", "duration": 2, "multiplier": 0.5},
        {"type": "debuff", "stat": "max_hp", "multiplier": 0.5, "duration": 2},
    ],
)
def test_bad_modifier_rejected_at_load(raw_abilities, effect):
    raw_abilities[1]["effects"] = [effect]
    with pytest.raises(ConfigurationError, match="rally"):
        AbilityCatalog.from_data(raw_abilities)


def test_status_apply_modifier_accepted(raw_abilities):
    raw_abilities[1]["effects"] = [
        {"type": "statusApply", "status": "debuff", "stat": "speed", "multiplier": 0.5, "duration": 2}
    ]
    spec = AbilityCatalog.from_data(raw_abilities).get("rally").effects[0]
    assert spec.status.is_modifier
    assert spec.magnitude == 0.5


def test_status_apply_without_status_rejected():
    with pytest.raises(ValueError):
        EffectSpec(type=EffectSpecType.STATUS_APPLY, value=3, duration=2)


def test_status_apply_without_duration_rejected():
    with pytest.raises(ValueError):
        EffectSpec(type=EffectSpecType.STATUS_APPLY, status="burn", value=3)


def test_ability_is_immutable():
    ability = Ability(
        id="smash",
        name="Smash",
        trigger=Trigger.ALWAYS,
        effects=(EffectSpec(type=EffectSpecType.DAMAGE, multiplier=2.0),),
    )
    with pytest.raises(ValueError):
        ability.cooldown = 5


def test_cooldowns_count_down_to_zero():
    cooldowns = CooldownTracker()
    cooldowns.set("hero", "rally", 2)
    assert not cooldowns.is_ready("hero", "rally")
    cooldowns.decrement_all()
    assert cooldowns.remaining("hero", "rally") == 1
    cooldowns.decrement_all()
    cooldowns.decrement_all()
    assert cooldowns.remaining("hero", "rally") == 0
    assert cooldowns.is_ready("hero", "rally")
    assert len(cooldowns) == 0


def test_zero_cooldown_is_not_stored():
    cooldowns = CooldownTracker()
    cooldowns.set("hero", "bite", 0)
    assert len(cooldowns) == 0


def test_cooldowns_are_per_combatant():
    cooldowns = CooldownTracker()
    cooldowns.set("hero", "rally", 3)
    cooldowns.set("slime", "rally", 1)
    assert cooldowns.is_ready("goblin", "rally")
    cooldowns.clear("hero")
    assert cooldowns.is_ready("hero", "rally")
    assert cooldowns.remaining("slime", "rally") == 1
    cooldowns.clear()
    assert len(cooldowns) == 0
