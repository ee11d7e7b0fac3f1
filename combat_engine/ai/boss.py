"""
Boss phase module for the combat engine.

A boss moves through phases as its hp ratio drops. Each phase swaps the
behavior pattern and the stat multipliers of the boss, and a phase once
entered is never left for an earlier one, even after healing.
"""

from pydantic import BaseModel, ConfigDict, Field


class BossPhase(BaseModel):
    """One phase of a boss fight."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(description="0 for the opening phase.")
    threshold: float = Field(description="Entered once hp ratio is at or below it.")
    damage_multiplier: float = Field(1.0)
    defense_multiplier: float = Field(1.0)
    speed_multiplier: float = Field(1.0)
    pattern: str = Field(description="Behavior pattern used during the phase.")

    @property
    def number(self) -> int:
        return self.index + 1


BOSS_PHASES: tuple[BossPhase, ...] = (
    BossPhase(index=0, threshold=1.0, pattern="boss"),
    BossPhase(
        index=1,
        threshold=0.75,
        damage_multiplier=1.2,
        defense_multiplier=0.9,
        speed_multiplier=1.1,
        pattern="aggressive",
    ),
    BossPhase(
        index=2,
        threshold=0.5,
        damage_multiplier=1.5,
        defense_multiplier=0.8,
        speed_multiplier=1.3,
        pattern="berserk",
    ),
    BossPhase(
        index=3,
        threshold=0.25,
        damage_multiplier=2.0,
        defense_multiplier=0.5,
        speed_multiplier=1.5,
        pattern="desperate",
    ),
)


def phase_for_ratio(
    hp_ratio: float, phases: tuple[BossPhase, ...] = BOSS_PHASES
) -> BossPhase:
    """Returns the deepest phase whose threshold the hp ratio has reached."""
    reached = phases[0]
    for phase in phases:
        if hp_ratio <= phase.threshold:
            reached = phase
    return reached


class BossPhaseTracker:
    """Monotonic phase state of one boss."""

    def __init__(self, phases: tuple[BossPhase, ...] = BOSS_PHASES) -> None:
        self.phases = phases
        self.current = phases[0]

    def update(self, hp_ratio: float) -> bool:
        """
        Advances the phase from the current hp ratio.

        Args:
            hp_ratio (float): Current hp divided by max hp.

        Returns:
            bool: True if a new phase was entered.

        """
        candidate = phase_for_ratio(hp_ratio, self.phases)
        if candidate.index <= self.current.index:
            return False
        self.current = candidate
        return True

    @property
    def phases_completed(self) -> int:
        return self.current.index
