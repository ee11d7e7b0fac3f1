"""
Battle state module for the combat engine.

Holds everything one battle session owns: its combatants, the status
ledger, the cooldown map, the boss phase trackers, the combat log and the
running statistics used for rewards. Nothing here is shared between
sessions.
"""

import random
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.abilities.cooldowns import CooldownTracker
from combat_engine.ai.boss import BossPhaseTracker
from combat_engine.companion.mood import apply_mood
from combat_engine.core.config import EngineSettings
from combat_engine.core.constants import (
    BattlePhase,
    Difficulty,
    LogType,
    Side,
    StatKind,
)
from combat_engine.core.errors import InvalidAction
from combat_engine.effects.ledger import StatusLedger
from combat_engine.entities.combatant import Combatant
from combat_engine.entities.stats import Stats

from .damage import HitResult
from .log import CombatLog, LogEntry


class BattleSummary(BaseModel):
    """Statistics of a finished battle."""

    model_config = ConfigDict(frozen=True)

    outcome: BattlePhase
    turns_taken: int
    damage_dealt: int = Field(description="Damage dealt by the player side.")
    damage_taken: int = Field(description="Damage taken by the player side.")
    phases_completed: int = Field(description="Boss phases advanced through.")
    enemies_defeated: int


class BattleState:
    """The complete, session-owned state of one battle."""

    def __init__(
        self,
        combatants: Iterable[Combatant],
        rng: random.Random,
        settings: EngineSettings | None = None,
        difficulty: Difficulty = Difficulty.NORMAL,
    ) -> None:
        """
        Initialize the state of a new battle.

        Args:
            combatants (Iterable[Combatant]): Every fighter, already built for
                this session. Exactly one must be on the player side.
            rng (random.Random): The random source of the session.
            settings (EngineSettings | None): Tunables, defaults to the
                shipped balance.
            difficulty (Difficulty): The selected difficulty.

        Raises:
            InvalidAction: If ids repeat or there is not exactly one player.

        """
        self.rng = rng
        self.settings = settings or EngineSettings()
        self.difficulty = difficulty
        self.combatants: dict[str, Combatant] = {}
        for combatant in combatants:
            if combatant.id in self.combatants:
                raise InvalidAction(
                    f"Duplicate combatant id '{combatant.id}'", {"id": combatant.id}
                )
            self.combatants[combatant.id] = combatant
        players = [c for c in self.combatants.values() if c.side == Side.PLAYER]
        if len(players) != 1:
            raise InvalidAction(
                f"A battle needs exactly one player, got {len(players)}"
            )
        self.player = players[0]

        self.phase = BattlePhase.PREPARATION
        self.turn = 1
        self.ledger = StatusLedger(self.settings.combat.modifier_floor)
        self.cooldowns = CooldownTracker()
        self.log = CombatLog()
        self.boss_trackers: dict[str, BossPhaseTracker] = {}
        boss_phases = difficulty not in self.settings.scaling.boss_phases_disabled
        for combatant in self.combatants.values():
            self.ledger.register(combatant.id, combatant.immunities)
            if boss_phases and combatant.side == Side.ENEMY and combatant.tier.is_boss:
                self.boss_trackers[combatant.id] = BossPhaseTracker()

        self.damage_dealt: dict[str, int] = {cid: 0 for cid in self.combatants}
        self.damage_taken: dict[str, int] = {cid: 0 for cid in self.combatants}
        self.defeated: list[str] = []
        self.combo = 0
        self.best_combo = 0
        self.overkill = False
        self.escape_attempts = 0
        self.escape_cooldown = 0

    # ---- Lookup ----

    def get(self, combatant_id: str) -> Combatant:
        """
        Returns the combatant with the given id.

        Raises:
            InvalidAction: If no combatant has this id.

        """
        combatant = self.combatants.get(combatant_id)
        if combatant is None:
            raise InvalidAction(
                f"Unknown combatant '{combatant_id}'", {"id": combatant_id}
            )
        return combatant

    def living(self, *sides: Side) -> list[Combatant]:
        return [
            c
            for c in self.combatants.values()
            if c.is_alive and (not sides or c.side in sides)
        ]

    @property
    def enemies(self) -> list[Combatant]:
        return [c for c in self.combatants.values() if c.side == Side.ENEMY]

    @property
    def companions(self) -> list[Combatant]:
        return [c for c in self.combatants.values() if c.side == Side.COMPANION]

    def opponents_of(self, combatant: Combatant) -> list[Combatant]:
        """Returns the living combatants fighting against the given one."""
        return [c for c in self.living() if combatant.side.is_opponent(c.side)]

    def allies_of(self, combatant: Combatant) -> list[Combatant]:
        """Returns the living combatants on the same side, itself excluded."""
        return [
            c
            for c in self.living()
            if c.id != combatant.id and not combatant.side.is_opponent(c.side)
        ]

    # ---- Effective stats ----

    def effective_stats(self, combatant: Combatant) -> Stats:
        """
        Returns the stats a combatant currently fights with.

        Applies, in order, companion mood, active buffs and debuffs, the
        current boss phase, and the defend stance.

        Args:
            combatant (Combatant): The combatant to evaluate.

        Returns:
            Stats: A modified copy; the stored stats are untouched.

        """
        stats = combatant.stats
        if combatant.side == Side.COMPANION:
            stats = apply_mood(stats, combatant.mood, self.settings.companion)
        multipliers: dict[StatKind, float] = {}
        for kind in (
            StatKind.ATTACK,
            StatKind.DEFENSE,
            StatKind.SPEED,
            StatKind.CRIT_RATE,
            StatKind.CRIT_DAMAGE,
            StatKind.DODGE,
            StatKind.ACCURACY,
        ):
            modifier = self.ledger.get_modifier(combatant.id, kind)
            if modifier != 1.0:
                multipliers[kind] = modifier
        tracker = self.boss_trackers.get(combatant.id)
        if tracker is not None:
            phase = tracker.current
            multipliers[StatKind.ATTACK] = (
                multipliers.get(StatKind.ATTACK, 1.0) * phase.damage_multiplier
            )
            multipliers[StatKind.DEFENSE] = (
                multipliers.get(StatKind.DEFENSE, 1.0) * phase.defense_multiplier
            )
            multipliers[StatKind.SPEED] = (
                multipliers.get(StatKind.SPEED, 1.0) * phase.speed_multiplier
            )
        if combatant.defending:
            multipliers[StatKind.DEFENSE] = (
                multipliers.get(StatKind.DEFENSE, 1.0)
                * self.settings.combat.defend_multiplier
            )
        if not multipliers:
            return stats.model_copy()
        return stats.scaled(multipliers)

    def turn_order(self) -> list[Combatant]:
        """Living combatants by descending effective speed, stable on ties."""
        return sorted(
            self.living(), key=lambda c: self.effective_stats(c).speed, reverse=True
        )

    # ---- Mutation ----

    def record(self, entry: LogEntry) -> LogEntry:
        return self.log.append(entry)

    def add_log(
        self,
        type: LogType,
        actor_id: str | None = None,
        target_id: str | None = None,
        amount: int = 0,
        detail: str = "",
        message: str = "",
    ) -> LogEntry:
        return self.log.add(
            self.turn, type, actor_id, target_id, amount, detail, message
        )

    def deal_damage(
        self, attacker_id: str | None, target: Combatant, amount: int
    ) -> int:
        """
        Subtracts damage from a combatant and updates the battle statistics.

        Args:
            attacker_id (str | None): The combatant responsible, if any.
            target (Combatant): The combatant taking the damage.
            amount (int): The damage.

        Returns:
            int: The hp actually lost.

        """
        hp_before = target.stats.hp
        lost = target.take_damage(amount)
        self.damage_taken[target.id] = self.damage_taken.get(target.id, 0) + lost
        if attacker_id is not None:
            self.damage_dealt[attacker_id] = self.damage_dealt.get(attacker_id, 0) + lost
            attacker = self.combatants.get(attacker_id)
            if (
                attacker is not None
                and attacker.side == Side.PLAYER
                and target.side == Side.ENEMY
                and not target.is_alive
                and amount - hp_before > self.settings.rewards.overkill_margin
            ):
                self.overkill = True
        return lost

    def apply_hit(self, hit: HitResult, detail: str = "") -> int:
        """
        Applies a resolved hit and writes its log entry.

        Args:
            hit (HitResult): The hit to apply.
            detail (str): The attack or ability that produced it.

        Returns:
            int: The hp the defender actually lost.

        """
        attacker = self.get(hit.attacker_id)
        defender = self.get(hit.defender_id)
        if attacker.side == Side.PLAYER:
            if hit.hit:
                self.combo += 1
                self.best_combo = max(self.best_combo, self.combo)
            else:
                self.combo = 0
        self.record(hit.to_log_entry(self.turn, detail))
        if not hit.hit:
            return 0
        return self.deal_damage(attacker.id, defender, hit.damage)

    def heal(self, healer_id: str | None, target: Combatant, amount: int, detail: str = "") -> int:
        """Heals a combatant and logs it, returning the hp restored."""
        restored = target.heal(amount)
        self.add_log(
            LogType.HEAL,
            healer_id,
            target.id,
            restored,
            detail,
            f"{target.name} recovers {restored} hp",
        )
        return restored

    def refresh_defeats(self) -> list[Combatant]:
        """Logs every combatant that fell since the last call."""
        fallen = []
        for combatant in self.combatants.values():
            if not combatant.is_alive and combatant.id not in self.defeated:
                self.defeated.append(combatant.id)
                self.add_log(
                    LogType.DEFEATED,
                    target_id=combatant.id,
                    message=f"{combatant.name} is defeated",
                )
                fallen.append(combatant)
        return fallen

    def check_terminal(self) -> BattlePhase | None:
        """
        Ends the battle if one side has fallen.

        Returns:
            BattlePhase | None: The terminal phase reached, if any.

        """
        if self.phase.is_terminal:
            return self.phase
        if not self.player.is_alive:
            self.finish(BattlePhase.DEFEAT)
        elif not any(enemy.is_alive for enemy in self.enemies):
            self.finish(BattlePhase.VICTORY)
        return self.phase if self.phase.is_terminal else None

    def finish(self, outcome: BattlePhase) -> None:
        """Moves the battle to a terminal phase and logs it."""
        self.phase = outcome
        self.add_log(LogType.PHASE, detail=outcome.value, message=f"Battle ends: {outcome.display_name}")

    # ---- Results ----

    @property
    def enemies_defeated(self) -> list[Combatant]:
        return [
            self.combatants[cid]
            for cid in self.defeated
            if self.combatants[cid].side == Side.ENEMY
        ]

    def side_total(self, totals: dict[str, int], *sides: Side) -> int:
        return sum(
            amount for cid, amount in totals.items() if self.combatants[cid].side in sides
        )

    def summary(self) -> BattleSummary:
        """Builds the summary statistics of the battle so far."""
        return BattleSummary(
            outcome=self.phase,
            turns_taken=self.turn,
            damage_dealt=self.side_total(self.damage_dealt, Side.PLAYER, Side.COMPANION),
            damage_taken=self.side_total(self.damage_taken, Side.PLAYER, Side.COMPANION),
            phases_completed=sum(t.phases_completed for t in self.boss_trackers.values()),
            enemies_defeated=len(self.enemies_defeated),
        )

    def close(self) -> None:
        """Discards the session maps once the battle is over."""
        for combatant_id in self.combatants:
            self.ledger.clear(combatant_id)
        self.cooldowns.clear()
