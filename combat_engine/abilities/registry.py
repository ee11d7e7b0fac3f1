"""
Ability registry module for the combat engine.

Executes special abilities for a battle session: checks the trigger, the
cooldown, the chance roll and the trigger guard, then dispatches each effect
step to the damage resolver or the status ledger.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.combat.damage import resolve_hit
from combat_engine.core.constants import (
    EffectSpecType,
    EffectTarget,
    EffectType,
    LogType,
    Trigger,
)
from combat_engine.core.logging import log_debug
from combat_engine.effects.status_effect import StatusEffect
from combat_engine.entities.combatant import Combatant

from .ability import Ability, EffectSpec
from .catalog import AbilityCatalog

if TYPE_CHECKING:
    from combat_engine.combat.state import BattleState


class AppliedEffect(BaseModel):
    """What one effect step did to one target."""

    model_config = ConfigDict(frozen=True)

    type: EffectSpecType
    target_id: str
    amount: int = Field(0, description="Damage dealt or hp restored.")
    hit: bool = Field(True)
    critical: bool = Field(False)
    status: EffectType | None = Field(None, description="Status applied, if any.")


class AbilityResult(BaseModel):
    """Outcome of an attempt to fire an ability."""

    model_config = ConfigDict(frozen=True)

    ability_id: str
    success: bool
    reason: str = Field("", description="Why the ability did not fire.")
    effects_applied: tuple[AppliedEffect, ...] = Field(default_factory=tuple)


class AbilityRegistry:
    """Fires abilities from a shared catalog against a session's state."""

    def __init__(self, catalog: AbilityCatalog) -> None:
        self.catalog = catalog

    def is_ready(self, combatant: Combatant, ability_id: str, state: "BattleState") -> bool:
        """True if the ability is off cooldown and affordable for the combatant."""
        ability = self.catalog.get(ability_id)
        return (
            state.cooldowns.is_ready(combatant.id, ability_id)
            and combatant.stats.mp >= ability.mp_cost
        )

    def ready_skills(self, combatant: Combatant, state: "BattleState") -> list[str]:
        """Returns the skills of a combatant that could be used right now."""
        return [
            skill
            for skill in combatant.skills
            if self.catalog.get(skill).is_skill and self.is_ready(combatant, skill, state)
        ]

    def try_execute(
        self,
        combatant: Combatant,
        ability_id: str,
        trigger: Trigger,
        state: "BattleState",
        target: Combatant | None = None,
    ) -> AbilityResult:
        """
        Attempts to fire an ability.

        The attempt fails silently, in this order, on a trigger mismatch, an
        active cooldown, missing mana, a failed chance roll, or a failed
        trigger guard. On success the mana is paid, the cooldown is set and
        every effect step runs in order.

        Args:
            combatant (Combatant): The combatant owning the ability.
            ability_id (str): The ability to fire.
            trigger (Trigger): The event being processed.
            state (BattleState): The battle state of the session.
            target (Combatant | None): The opponent the event concerns.

        Returns:
            AbilityResult: Whether it fired and what each step did.

        Raises:
            InvalidAction: If the ability id is unknown.

        """
        ability = self.catalog.get(ability_id)

        def failed(reason: str) -> AbilityResult:
            log_debug(
                "Ability did not fire.",
                {"combatant": combatant.id, "ability": ability_id, "reason": reason},
            )
            return AbilityResult(ability_id=ability_id, success=False, reason=reason)

        if ability.trigger != trigger:
            return failed("trigger")
        if not state.cooldowns.is_ready(combatant.id, ability_id):
            return failed("cooldown")
        if combatant.stats.mp < ability.mp_cost:
            return failed("mana")
        if ability.chance < 1.0 and state.rng.random() >= ability.chance:
            return failed("chance")
        if not self._guard(ability, combatant):
            return failed("guard")

        combatant.spend_mp(ability.mp_cost)
        state.cooldowns.set(combatant.id, ability_id, ability.cooldown)
        state.add_log(
            LogType.SKILL if ability.is_skill else LogType.ABILITY,
            combatant.id,
            target.id if target is not None else None,
            detail=ability.id,
            message=f"{combatant.name} uses {ability.name}",
        )

        applied: list[AppliedEffect] = []
        for spec in ability.effects:
            for recipient in self._targets(spec, combatant, state, target):
                applied.extend(self._dispatch(spec, ability, combatant, recipient, state))
        return AbilityResult(
            ability_id=ability_id, success=True, effects_applied=tuple(applied)
        )

    @staticmethod
    def _guard(ability: Ability, combatant: Combatant) -> bool:
        if ability.trigger == Trigger.ON_BELOW_HALF_HP:
            return combatant.stats.hp <= combatant.stats.max_hp / 2
        return True

    @staticmethod
    def _targets(
        spec: EffectSpec,
        combatant: Combatant,
        state: "BattleState",
        target: Combatant | None,
    ) -> list[Combatant]:
        if spec.target == EffectTarget.SELF:
            return [combatant] if combatant.is_alive else []
        opponents = state.opponents_of(combatant)
        if spec.target == EffectTarget.ALL_OPPONENTS:
            return opponents
        # Player and enemy both name the opposing side of the caster.
        if target is not None and target.is_alive and combatant.side.is_opponent(target.side):
            return [target]
        return opponents[:1]

    def _dispatch(
        self,
        spec: EffectSpec,
        ability: Ability,
        caster: Combatant,
        recipient: Combatant,
        state: "BattleState",
    ) -> list[AppliedEffect]:
        combat = state.settings.combat
        if spec.type in (EffectSpecType.DAMAGE, EffectSpecType.MULTI_HIT, EffectSpecType.LIFE_DRAIN):
            hits = 1
            multiplier = spec.multiplier if spec.multiplier is not None else 1.0
            if spec.type == EffectSpecType.MULTI_HIT:
                hits = int(spec.value) if spec.value is not None else combat.default_hit_count
            elif spec.type == EffectSpecType.LIFE_DRAIN and spec.multiplier is None:
                multiplier = combat.default_drain_ratio
            base_value = spec.value if spec.type == EffectSpecType.DAMAGE else None
            results = []
            for _ in range(hits):
                if not recipient.is_alive:
                    break
                hit = resolve_hit(
                    caster,
                    recipient,
                    state.rng,
                    base_value=base_value,
                    multiplier=multiplier,
                    attacker_stats=state.effective_stats(caster),
                    defender_stats=state.effective_stats(recipient),
                    config=combat,
                )
                lost = state.apply_hit(hit, ability.id)
                results.append(
                    AppliedEffect(
                        type=spec.type,
                        target_id=recipient.id,
                        amount=lost,
                        hit=hit.hit,
                        critical=hit.critical,
                    )
                )
                if spec.type == EffectSpecType.LIFE_DRAIN and lost > 0:
                    state.heal(caster.id, caster, lost, ability.id)
            return results

        if spec.type == EffectSpecType.HEAL:
            if spec.value is not None:
                amount = int(spec.value)
            else:
                ratio = spec.multiplier if spec.multiplier is not None else combat.default_heal_ratio
                amount = int(recipient.stats.max_hp * ratio)
            restored = state.heal(caster.id, recipient, amount, ability.id)
            return [AppliedEffect(type=spec.type, target_id=recipient.id, amount=restored)]

        if spec.type == EffectSpecType.STATUS_APPLY:
            status = spec.status
        elif spec.type == EffectSpecType.BUFF:
            status = EffectType.BUFF
        else:
            status = EffectType.DEBUFF
        effect = StatusEffect(
            type=status,
            magnitude=spec.magnitude,
            stat=spec.stat,
            duration=spec.duration,
            source_id=caster.id,
            max_stacks=spec.max_stacks,
        )
        applied = state.ledger.apply(recipient.id, effect)
        state.add_log(
            LogType.STATUS,
            caster.id,
            recipient.id,
            detail=status.value,
            message=(
                f"{recipient.name} is afflicted by {status.display_name}"
                if applied
                else f"{recipient.name} resists {status.display_name}"
            ),
        )
        if not applied:
            return []
        return [AppliedEffect(type=spec.type, target_id=recipient.id, status=status)]
