"""
Turn scheduler module for the combat engine.

Drives a battle from preparation to its outcome: orders the living
combatants by speed each round, ticks their status effects, fires their
abilities, asks the AI, the controller or the companion processor for an
action, executes it, and checks for the end of the battle after every
single action.
"""

import math

from catchery import log_warning

from combat_engine.abilities.registry import AbilityRegistry
from combat_engine.ai.decision import Decision, decide_action
from combat_engine.ai.patterns import BehaviorPattern, get_pattern
from combat_engine.companion.assist import CompanionTurnContext, process_companion_turn
from combat_engine.core.constants import (
    ActionKind,
    BattlePhase,
    LogType,
    Side,
    TickPhase,
    Trigger,
)
from combat_engine.core.errors import InvalidAction
from combat_engine.core.logging import log_debug, log_info
from combat_engine.core.utils import clamp
from combat_engine.effects.status_effect import TickResult
from combat_engine.entities.combatant import Combatant

from .controllers import AutoPlayerController, PlayerController, build_context
from .damage import HitResult, resolve_hit
from .state import BattleState


def escape_chance(state: BattleState) -> float:
    """
    Returns the probability that the player escapes.

    Faster players escape more easily, higher level enemies make it harder.

    Args:
        state (BattleState): The battle state.

    Returns:
        float: The escape chance, clamped to the configured bounds.

    """
    config = state.settings.escape
    enemies = state.living(Side.ENEMY)
    if not enemies:
        return config.max_chance
    player_speed = state.effective_stats(state.player).speed
    enemy_speed = max(state.effective_stats(e).speed for e in enemies)
    enemy_level = max(e.level for e in enemies)
    chance = (
        config.base_chance
        + (player_speed - enemy_speed) * config.speed_bonus
        - (enemy_level - state.player.level) * config.level_penalty
    )
    return clamp(chance, config.min_chance, config.max_chance)


class TurnScheduler:
    """Runs the rounds of one battle session."""

    def __init__(
        self,
        state: BattleState,
        registry: AbilityRegistry,
        controller: PlayerController | None = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            state (BattleState): The session state to drive.
            registry (AbilityRegistry): Fires abilities from the catalog.
            controller (PlayerController | None): Decides for the player;
                the automatic controller is used when absent.

        """
        self.state = state
        self.registry = registry
        self.controller: PlayerController = controller or AutoPlayerController()

    # ---- Lifecycle ----

    def start(self) -> None:
        """Leaves preparation; no action is accepted before this."""
        if self.state.phase != BattlePhase.PREPARATION:
            return
        self.state.phase = BattlePhase.BATTLE
        self.state.add_log(
            LogType.PHASE, detail=BattlePhase.BATTLE.value, message="Battle starts"
        )
        log_info("Battle started.", {"combatants": len(self.state.combatants)})

    @property
    def is_over(self) -> bool:
        return self.state.phase.is_terminal

    def run(self, max_rounds: int | None = None) -> BattlePhase:
        """
        Runs rounds until the battle ends.

        Args:
            max_rounds (int | None): Stop after this many rounds even if the
                battle is still going.

        Returns:
            BattlePhase: The phase the battle is in when the run stops.

        """
        self.start()
        rounds = 0
        while not self.is_over and (max_rounds is None or rounds < max_rounds):
            self.run_round()
            rounds += 1
        return self.state.phase

    def run_round(self) -> None:
        """Lets every living combatant act once, fastest first, then ends the round."""
        if self.state.phase == BattlePhase.PREPARATION:
            self.start()
        if self.is_over:
            return
        for actor in self.state.turn_order():
            if self.is_over:
                return
            if not actor.is_alive:
                continue
            self.take_turn(actor)
        if not self.is_over:
            self.end_round()

    def end_round(self) -> None:
        """Ticks end-phase effects, counts cooldowns down and advances the turn."""
        state = self.state
        for combatant in state.living():
            self._apply_ticks(combatant, state.ledger.tick(combatant.id, TickPhase.END))
            if self._check_terminal():
                return
        for combatant in state.living():
            self._fire(combatant, Trigger.ON_TURN_END)
            if self._check_terminal():
                return
        state.cooldowns.decrement_all()
        state.escape_cooldown = max(0, state.escape_cooldown - 1)
        state.turn += 1
        if state.turn > state.settings.combat.max_turns:
            log_warning(
                "Battle reached the turn limit.",
                {"max_turns": state.settings.combat.max_turns},
            )
            state.finish(BattlePhase.DEFEAT)

    # ---- Turns ----

    def take_turn(self, actor: Combatant) -> None:
        """
        Runs the turn of one combatant.

        Args:
            actor (Combatant): The living combatant whose turn it is.

        """
        state = self.state
        actor.defending = False
        ticks = state.ledger.tick(actor.id, TickPhase.START)
        self._apply_ticks(actor, ticks)
        if self._check_terminal() or not actor.is_alive:
            return
        blocker = next((t for t in ticks if t.blocks_turn), None)
        if blocker is not None:
            state.add_log(
                LogType.SKIP,
                actor.id,
                detail=blocker.type.value,
                message=f"{actor.name} is {blocker.type.display_name.lower()} and cannot act",
            )
            return

        self._update_boss_phase(actor)
        for trigger in (Trigger.ON_BELOW_HALF_HP, Trigger.ON_TURN_START):
            self._fire(actor, trigger)
            if self._check_terminal() or not actor.is_alive:
                return

        decision = self.decide(actor)
        if decision is not None:
            try:
                self.execute(actor, decision)
            except InvalidAction as e:
                log_warning(
                    f"Rejected action: {e.message}",
                    {"actor": actor.id, "action": decision.kind, **e.context},
                )
                state.add_log(
                    LogType.INVALID,
                    actor.id,
                    decision.target_id,
                    detail=str(decision.kind),
                    message=f"{actor.name} forfeits the turn: {e.message}",
                )
        self._check_terminal()

    def decide(self, actor: Combatant) -> Decision | None:
        """Returns the action of a combatant, None for companions which act on their own."""
        if actor.side == Side.COMPANION:
            self._companion_turn(actor)
            return None
        if actor.side == Side.PLAYER:
            return self.controller.decide(self.state, actor, self.registry)
        context = build_context(self.state, actor, self.registry)
        return decide_action(self.pattern_of(actor), actor, context, self.state.rng)

    def pattern_of(self, actor: Combatant) -> BehaviorPattern:
        """Returns the behavior pattern a non-player combatant uses right now."""
        tracker = self.state.boss_trackers.get(actor.id)
        if tracker is not None and tracker.current.index > 0:
            return get_pattern(tracker.current.pattern)
        return get_pattern(actor.ai_pattern or "balanced")

    def execute(self, actor: Combatant, decision: Decision) -> None:
        """
        Executes a decided action.

        Args:
            actor (Combatant): The acting combatant.
            decision (Decision): The action to perform.

        Raises:
            InvalidAction: If the battle is not running, or the action names
                an unknown ability, an invalid target or a missing item.

        """
        if self.state.phase != BattlePhase.BATTLE:
            raise InvalidAction(
                "No action is accepted outside of the battle phase",
                {"phase": self.state.phase},
            )
        if decision.kind == ActionKind.ATTACK:
            self._attack(actor, self._opponent(actor, decision.target_id))
        elif decision.kind == ActionKind.SKILL:
            self._skill(actor, decision)
        elif decision.kind == ActionKind.DEFEND:
            actor.defending = True
            self.state.add_log(
                LogType.DEFEND, actor.id, actor.id, message=f"{actor.name} defends"
            )
        elif decision.kind == ActionKind.ITEM:
            self._use_item(actor)
        elif decision.kind == ActionKind.ESCAPE:
            self._escape(actor)

    # ---- Actions ----

    def _opponent(self, actor: Combatant, target_id: str | None) -> Combatant:
        if target_id is None:
            raise InvalidAction("The action needs a target", {"actor": actor.id})
        target = self.state.get(target_id)
        if not target.is_alive:
            raise InvalidAction(f"Target '{target_id}' is already defeated", {"target": target_id})
        if not actor.side.is_opponent(target.side):
            raise InvalidAction(f"Target '{target_id}' is not an opponent", {"target": target_id})
        return target

    def _attack(self, actor: Combatant, target: Combatant) -> None:
        state = self.state
        hit = resolve_hit(
            actor,
            target,
            state.rng,
            attacker_stats=state.effective_stats(actor),
            defender_stats=state.effective_stats(target),
            config=state.settings.combat,
        )
        state.apply_hit(hit, "attack")
        self._after_hit(actor, target, hit)

    def _after_hit(self, attacker: Combatant, defender: Combatant, hit: HitResult) -> None:
        """Fires the attack, crit and on-hit abilities of a landed hit."""
        if not hit.hit:
            return
        self._fire(attacker, Trigger.ON_ATTACK, defender)
        if hit.critical:
            self._fire(attacker, Trigger.ON_CRIT, defender)
        if defender.is_alive:
            self._fire(defender, Trigger.ON_HIT, attacker)

    def _skill(self, actor: Combatant, decision: Decision) -> None:
        if decision.ability_id is None or decision.ability_id not in actor.skills:
            raise InvalidAction(
                f"{actor.name} has no skill '{decision.ability_id}'",
                {"ability_id": decision.ability_id},
            )
        target = None
        if decision.target_id is not None:
            target = self._opponent(actor, decision.target_id)
        result = self.registry.try_execute(
            actor, decision.ability_id, Trigger.ALWAYS, self.state, target
        )
        if not result.success:
            self.state.add_log(
                LogType.SKILL,
                actor.id,
                decision.target_id,
                detail=decision.ability_id,
                message=f"{actor.name} fails to use {decision.ability_id} ({result.reason})",
            )

    def _use_item(self, actor: Combatant) -> None:
        if actor.items <= 0:
            raise InvalidAction(f"{actor.name} has no items left", {"actor": actor.id})
        actor.items -= 1
        amount = math.floor(actor.stats.max_hp * self.state.settings.combat.item_heal_ratio)
        restored = actor.heal(amount)
        self.state.add_log(
            LogType.ITEM,
            actor.id,
            actor.id,
            restored,
            "potion",
            f"{actor.name} drinks a potion and recovers {restored} hp",
        )

    def _escape(self, actor: Combatant) -> None:
        state = self.state
        config = state.settings.escape
        if actor.side != Side.PLAYER:
            raise InvalidAction("Only the player can escape", {"actor": actor.id})
        if state.escape_attempts >= config.max_attempts:
            state.add_log(
                LogType.ESCAPE_DECLINED,
                actor.id,
                message="No escape attempts left",
            )
            return
        if state.escape_cooldown > 0:
            state.add_log(
                LogType.ESCAPE_DECLINED,
                actor.id,
                amount=state.escape_cooldown,
                message=f"Cannot try to escape for {state.escape_cooldown} more round(s)",
            )
            return
        state.escape_attempts += 1
        chance = escape_chance(state)
        if state.rng.random() < chance:
            state.add_log(LogType.ESCAPE, actor.id, detail="success", message=f"{actor.name} escapes")
            state.finish(BattlePhase.ESCAPED)
            return
        state.escape_cooldown = config.cooldown
        state.add_log(
            LogType.ESCAPE,
            actor.id,
            detail="failed",
            message=f"{actor.name} fails to escape",
        )

    def _companion_turn(self, actor: Combatant) -> None:
        state = self.state
        result = process_companion_turn(
            CompanionTurnContext(
                companion=actor,
                enemies=state.opponents_of(actor),
                rng=state.rng,
                turn=state.turn,
                settings=state.settings,
                stats_of=state.effective_stats,
            )
        )
        if result.action == ActionKind.ITEM:
            self._use_item(actor)
        for hit in result.hits:
            if self.is_over or not actor.is_alive:
                break
            state.apply_hit(hit, "assist")
            self._after_hit(actor, state.get(hit.defender_id), hit)
        log_debug("Companion acted.", {"companion": actor.id, "action": result.action})

    # ---- Helpers ----

    def _fire(self, actor: Combatant, trigger: Trigger, target: Combatant | None = None) -> None:
        """Tries every ability of the combatant bound to the trigger."""
        for ability_id in actor.abilities:
            if not actor.is_alive or self.is_over:
                return
            try:
                if self.registry.catalog.get(ability_id).trigger != trigger:
                    continue
                self.registry.try_execute(actor, ability_id, trigger, self.state, target)
            except InvalidAction as e:
                log_warning(
                    f"Skipped ability: {e.message}",
                    {"actor": actor.id, "trigger": trigger, **e.context},
                )
                self.state.add_log(
                    LogType.INVALID,
                    actor.id,
                    detail=ability_id,
                    message=f"{actor.name} cannot use {ability_id}",
                )
            self.state.refresh_defeats()

    def _apply_ticks(self, combatant: Combatant, ticks: list[TickResult]) -> None:
        state = self.state
        for tick in ticks:
            if tick.damage > 0:
                lost = state.deal_damage(tick.source_id, combatant, tick.damage)
                state.add_log(
                    LogType.STATUS_TICK,
                    tick.source_id,
                    combatant.id,
                    lost,
                    tick.type.value,
                    f"{combatant.name} suffers {lost} {tick.type.display_name.lower()} damage",
                )
            elif tick.heal > 0:
                state.heal(tick.source_id, combatant, tick.heal, tick.type.value)
            if tick.expired:
                state.add_log(
                    LogType.STATUS_EXPIRED,
                    target_id=combatant.id,
                    detail=tick.type.value,
                    message=f"{tick.type.display_name} wears off {combatant.name}",
                )
        state.refresh_defeats()

    def _update_boss_phase(self, actor: Combatant) -> None:
        tracker = self.state.boss_trackers.get(actor.id)
        if tracker is None or not tracker.update(actor.hp_ratio):
            return
        phase = tracker.current
        self.state.add_log(
            LogType.BOSS_PHASE,
            actor.id,
            amount=phase.number,
            detail=phase.pattern,
            message=f"{actor.name} enters phase {phase.number}",
        )
        log_info("Boss phase changed.", {"boss": actor.id, "phase": phase.number})

    def _check_terminal(self) -> bool:
        self.state.refresh_defeats()
        return self.state.check_terminal() is not None
