"""
Status ledger module for the combat engine.

Tracks the timed status effects of every combatant of one battle session.
The ledger never touches hit points: ticking returns what each effect did
and the caller applies it.
"""

from collections.abc import Iterable

from combat_engine.core.constants import EffectCategory, EffectType, StatKind, TickPhase
from combat_engine.core.logging import log_debug

from .status_effect import StatusEffect, TickResult


class StatusLedger:
    """Timed buffs, debuffs and damage over time, per combatant."""

    def __init__(self, modifier_floor: float = 0.1) -> None:
        """
        Initialize an empty ledger.

        Args:
            modifier_floor (float): Lowest value `get_modifier` returns.

        """
        self.modifier_floor = modifier_floor
        self._effects: dict[str, list[StatusEffect]] = {}
        self._immunities: dict[str, frozenset[EffectType]] = {}
        self._counter = 0

    def register(
        self, combatant_id: str, immunities: Iterable[EffectType] = ()
    ) -> None:
        """Makes a combatant known to the ledger, with its immunities."""
        self._effects.setdefault(combatant_id, [])
        self._immunities[combatant_id] = frozenset(immunities)

    def apply(self, combatant_id: str, effect: StatusEffect) -> bool:
        """
        Applies a status effect to a combatant.

        Re-applying an effect with the same type, stat and source refreshes
        the existing instance instead of adding a second one: the duration
        becomes the longer of the two, the magnitude becomes the incoming
        one, and a stack is added while below the stack cap.

        Args:
            combatant_id (str): The combatant receiving the effect.
            effect (StatusEffect): The effect to apply. The ledger keeps its
                own copy.

        Returns:
            bool: False if the combatant is immune, True otherwise.

        """
        if effect.type in self._immunities.get(combatant_id, frozenset()):
            log_debug(
                "Status effect blocked by immunity.",
                {"combatant": combatant_id, "effect": effect.type},
            )
            return False
        effects = self._effects.setdefault(combatant_id, [])
        for existing in effects:
            if existing.key != effect.key:
                continue
            existing.duration = max(existing.duration, effect.duration)
            existing.magnitude = effect.magnitude
            if effect.max_stacks is not None:
                existing.max_stacks = effect.max_stacks
            existing.stacks = min(existing.stacks + 1, existing.stack_cap)
            log_debug(
                "Status effect refreshed.",
                {
                    "combatant": combatant_id,
                    "effect": existing.id,
                    "duration": existing.duration,
                    "stacks": existing.stacks,
                },
            )
            return True
        self._counter += 1
        instance = effect.model_copy(
            update={
                "id": f"{combatant_id}:{effect.type.value}:{self._counter}",
                "stacks": min(effect.stacks, effect.stack_cap),
            }
        )
        effects.append(instance)
        log_debug(
            "Status effect applied.",
            {"combatant": combatant_id, "effect": instance.id},
        )
        return True

    def tick(self, combatant_id: str, phase: TickPhase) -> list[TickResult]:
        """
        Advances every effect of a combatant that runs on the given phase.

        Damage over time and regeneration fire, freeze and stun report the
        lost turn, then each matching effect loses one tick of duration and
        is dropped as soon as it reaches zero.

        Args:
            combatant_id (str): The combatant whose effects tick.
            phase (TickPhase): The phase being processed.

        Returns:
            list[TickResult]: One result per effect that ticked.

        """
        results: list[TickResult] = []
        remaining: list[StatusEffect] = []
        for effect in self._effects.get(combatant_id, []):
            if effect.tick_phase != phase:
                remaining.append(effect)
                continue
            damage = 0
            heal = 0
            if effect.type.is_damage_over_time:
                damage = int(effect.magnitude * effect.stacks)
            elif effect.type == EffectType.REGENERATION:
                heal = int(effect.magnitude * effect.stacks)
            effect.duration -= 1
            results.append(
                TickResult(
                    combatant_id=combatant_id,
                    effect_id=effect.id,
                    type=effect.type,
                    source_id=effect.source_id,
                    damage=damage,
                    heal=heal,
                    blocks_turn=effect.type.is_incapacitating,
                    remaining=effect.duration,
                )
            )
            if effect.is_active:
                remaining.append(effect)
        if combatant_id in self._effects:
            self._effects[combatant_id] = remaining
        return results

    def get_modifier(self, combatant_id: str, stat: StatKind) -> float:
        """
        Returns the combined multiplier of the active modifiers on a stat.

        Args:
            combatant_id (str): The combatant to inspect.
            stat (StatKind): The stat to look up.

        Returns:
            float: The product of every buff and debuff on the stat, never
            lower than the modifier floor; 1.0 when none is active.

        """
        modifier = 1.0
        for effect in self._effects.get(combatant_id, []):
            if effect.type.is_modifier and effect.stat == stat and effect.is_active:
                modifier *= effect.modifier
        return max(self.modifier_floor, modifier)

    def effects(self, combatant_id: str) -> list[StatusEffect]:
        """Returns copies of the active effects of a combatant."""
        return [effect.model_copy() for effect in self._effects.get(combatant_id, [])]

    def has_effect(self, combatant_id: str, effect_type: EffectType) -> bool:
        return any(
            effect.type == effect_type for effect in self._effects.get(combatant_id, [])
        )

    def is_incapacitated(self, combatant_id: str) -> bool:
        """True while a freeze or stun is active on the combatant."""
        return any(
            effect.type.is_incapacitating
            for effect in self._effects.get(combatant_id, [])
        )

    def remove_debuffs(self, combatant_id: str) -> int:
        """
        Cleanses every harmful effect from a combatant.

        Returns:
            int: The number of effects removed.

        """
        effects = self._effects.get(combatant_id, [])
        kept = [e for e in effects if e.category != EffectCategory.DEBUFF]
        removed = len(effects) - len(kept)
        if combatant_id in self._effects:
            self._effects[combatant_id] = kept
        return removed

    def clear(self, combatant_id: str) -> None:
        """Forgets every effect of a combatant."""
        self._effects.pop(combatant_id, None)
        self._immunities.pop(combatant_id, None)

    def clear_all(self) -> None:
        """Forgets every effect of every combatant."""
        self._effects.clear()
        self._immunities.clear()
