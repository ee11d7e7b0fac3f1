"""
Tests for complete battle sessions built from the bundled content.
"""

import random

import pytest

from combat_engine.combat.session import BattleSession
from combat_engine.core.constants import BattlePhase, Difficulty, LogType, Side
from combat_engine.core.content import ContentRepository
from combat_engine.core.errors import ConfigurationError, InvalidAction


@pytest.fixture(scope="module")
def content():
    return ContentRepository()


def new_session(content, seed, enemies=("goblin", "slime"), companions=("pip",), **kwargs):
    return BattleSession.create(
        content, "hero", list(enemies), list(companions), rng=random.Random(seed), **kwargs
    )


def test_seeded_battle_runs_to_an_outcome(content):
    session = new_session(content, 12)
    result = session.run()
    assert result is not None
    assert result.outcome.is_terminal
    assert result.log[0].type == LogType.PHASE
    assert result.log[-1].type == LogType.PHASE
    assert result.summary.turns_taken <= 101
    if result.outcome == BattlePhase.VICTORY:
        assert result.summary.enemies_defeated == 2
        assert result.rewards.exp > 0
    else:
        assert result.rewards.is_empty


def test_same_seed_same_battle(content):
    first = new_session(content, 99).run()
    second = new_session(content, 99).run()
    assert first.log == second.log
    assert first.rewards == second.rewards


def test_sessions_do_not_share_state(content):
    first = new_session(content, 1)
    second = new_session(content, 2)
    assert first.state.ledger is not second.state.ledger
    assert first.state.cooldowns is not second.state.cooldowns
    first.scheduler.run(max_rounds=3)
    assert second.state.turn == 1
    assert len(second.state.log) == 0
    assert second.state.get("hero").stats.hp == content.get_player("hero").base_stats.hp


def test_repeated_enemies_get_their_own_ids(content):
    session = new_session(content, 5, enemies=("slime", "slime", "goblin"))
    ids = [enemy.id for enemy in session.state.enemies]
    assert ids == ["slime#1", "slime#2", "goblin"]


def test_enemies_are_scaled_by_difficulty(content):
    session = new_session(content, 5, enemies=("goblin",), difficulty=Difficulty.HARD)
    assert session.state.get("goblin").stats.max_hp == 90


def test_companions_are_not_scaled(content):
    session = new_session(content, 5, difficulty=Difficulty.NIGHTMARE)
    assert session.state.get("pip").stats.max_hp == 50
    assert session.state.get("pip").side == Side.COMPANION


def test_unknown_enemy_raises(content):
    with pytest.raises(ConfigurationError):
        new_session(content, 5, enemies=("unicorn",))


def test_battle_needs_an_enemy(content):
    with pytest.raises(ConfigurationError):
        new_session(content, 5, enemies=())


def test_finish_before_the_end_raises(content):
    session = new_session(content, 5)
    with pytest.raises(InvalidAction):
        session.finish()


def test_run_with_round_limit_returns_none(content):
    session = new_session(content, 5)
    assert session.run(max_rounds=1) is None
    assert session.state.phase == BattlePhase.BATTLE


def test_finish_discards_session_maps(content):
    session = new_session(content, 21)
    result = session.run()
    assert session.state.ledger.effects("hero") == []
    assert len(session.state.cooldowns) == 0
    assert session.finish() is result


def test_companion_rewards_follow_the_outcome(content):
    result = new_session(content, 33).run()
    if result.outcome == BattlePhase.ESCAPED:
        assert result.companion_rewards == {}
        return
    earned = result.companion_rewards["pip"]
    if result.outcome == BattlePhase.VICTORY:
        assert earned.exp_gained > 0
        assert earned.loyalty_change > 0
    else:
        assert earned.loyalty_change == -5
