"""
Battle session module for the combat engine.

Builds a self-contained battle from content definitions, runs it to its
outcome, and packages the result: the outcome with its summary, the combat
log, the rewards and what each companion earned.
"""

import random
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.abilities.registry import AbilityRegistry
from combat_engine.companion.assist import CompanionRewards, process_companion_rewards
from combat_engine.core.config import EngineSettings
from combat_engine.core.constants import BattlePhase, Difficulty, Side
from combat_engine.core.content import ContentRepository
from combat_engine.core.errors import ConfigurationError, InvalidAction
from combat_engine.core.utils import make_rng
from combat_engine.entities.combatant import Combatant, CombatantDefinition
from combat_engine.rewards.calculator import RewardBundle, compute_rewards

from .controllers import PlayerController
from .log import LogEntry
from .scheduler import TurnScheduler
from .state import BattleState, BattleSummary


class BattleResult(BaseModel):
    """Everything a finished battle produces."""

    model_config = ConfigDict(frozen=True)

    outcome: BattlePhase
    summary: BattleSummary
    rewards: RewardBundle
    companion_rewards: dict[str, CompanionRewards] = Field(default_factory=dict)
    log: tuple[LogEntry, ...] = Field(default_factory=tuple)


def _instance_ids(definitions: Sequence[CombatantDefinition]) -> list[str]:
    """Numbers repeated definitions so every combatant gets its own id."""
    totals: dict[str, int] = {}
    for definition in definitions:
        totals[definition.id] = totals.get(definition.id, 0) + 1
    seen: dict[str, int] = {}
    ids = []
    for definition in definitions:
        if totals[definition.id] == 1:
            ids.append(definition.id)
            continue
        seen[definition.id] = seen.get(definition.id, 0) + 1
        ids.append(f"{definition.id}#{seen[definition.id]}")
    return ids


class BattleSession:
    """One battle, from its combatants to its rewards."""

    def __init__(
        self,
        state: BattleState,
        registry: AbilityRegistry,
        controller: PlayerController | None = None,
        first_time: bool = False,
    ) -> None:
        self.state = state
        self.registry = registry
        self.first_time = first_time
        self.scheduler = TurnScheduler(state, registry, controller)
        self.result: BattleResult | None = None

    @classmethod
    def create(
        cls,
        content: ContentRepository,
        player_id: str,
        enemy_ids: Sequence[str],
        companion_ids: Sequence[str] = (),
        difficulty: Difficulty = Difficulty.NORMAL,
        rng: random.Random | None = None,
        settings: EngineSettings | None = None,
        controller: PlayerController | None = None,
        first_time: bool = False,
    ) -> "BattleSession":
        """
        Builds a session from content ids.

        Args:
            content (ContentRepository): The loaded content.
            player_id (str): The player definition to use.
            enemy_ids (Sequence[str]): Monster definitions, repeats allowed.
            companion_ids (Sequence[str]): Companion definitions.
            difficulty (Difficulty): The selected difficulty.
            rng (random.Random | None): The random source, system entropy
                when absent.
            settings (EngineSettings | None): Tunables.
            controller (PlayerController | None): Decides for the player.
            first_time (bool): Whether this encounter was never won before.

        Returns:
            BattleSession: A session in the preparation phase.

        Raises:
            ConfigurationError: If an id is unknown or there is no enemy.

        """
        settings = settings or EngineSettings()
        if not enemy_ids:
            raise ConfigurationError("A battle needs at least one enemy")

        def lookup(getter, name: str) -> CombatantDefinition:
            definition = getter(name)
            if definition is None:
                raise ConfigurationError(f"Unknown combatant definition '{name}'")
            return definition

        player_def = lookup(content.get_player, player_id)
        companion_defs = [lookup(content.get_companion, cid) for cid in companion_ids]
        enemy_defs = [lookup(content.get_monster, eid) for eid in enemy_ids]

        combatants = [Combatant.from_definition(player_def, Side.PLAYER)]
        for definition, instance_id in zip(companion_defs, _instance_ids(companion_defs)):
            combatants.append(
                Combatant.from_definition(definition, Side.COMPANION, instance_id)
            )
        for definition, instance_id in zip(enemy_defs, _instance_ids(enemy_defs)):
            combatants.append(
                Combatant.from_definition(
                    definition, Side.ENEMY, instance_id, difficulty, settings.scaling
                )
            )
        state = BattleState(combatants, rng or make_rng(), settings, difficulty)
        return cls(state, AbilityRegistry(content.abilities), controller, first_time)

    def run(self, max_rounds: int | None = None) -> BattleResult | None:
        """
        Runs the battle and, once it is over, builds its result.

        Args:
            max_rounds (int | None): Stop after this many rounds.

        Returns:
            BattleResult | None: The result, None if the battle is not over.

        """
        outcome = self.scheduler.run(max_rounds)
        if not outcome.is_terminal:
            return None
        return self.finish()

    def finish(self) -> BattleResult:
        """Computes the rewards of a finished battle and discards its session maps."""
        if self.result is not None:
            return self.result
        state = self.state
        outcome = state.phase
        if not outcome.is_terminal:
            raise InvalidAction("The battle is not over yet", {"phase": outcome})
        rewards = compute_rewards(
            outcome,
            state,
            state.difficulty,
            state.rng,
            first_time=self.first_time,
            config=state.settings.rewards,
        )
        companion_rewards: dict[str, CompanionRewards] = {}
        if outcome in (BattlePhase.VICTORY, BattlePhase.DEFEAT):
            for companion in state.companions:
                companion_rewards[companion.id] = process_companion_rewards(
                    companion,
                    outcome == BattlePhase.VICTORY,
                    len(state.enemies_defeated),
                    state.settings.companion,
                )
        self.result = BattleResult(
            outcome=outcome,
            summary=state.summary(),
            rewards=rewards,
            companion_rewards=companion_rewards,
            log=tuple(state.log.entries),
        )
        state.close()
        return self.result
