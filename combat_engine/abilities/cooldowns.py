"""
Cooldown module for the combat engine.

Tracks, for one battle session, how many rounds each combatant must wait
before it can fire each of its abilities again.
"""


class CooldownTracker:
    """Remaining cooldown per combatant and ability."""

    def __init__(self) -> None:
        self._remaining: dict[tuple[str, str], int] = {}

    def set(self, combatant_id: str, ability_id: str, rounds: int) -> None:
        if rounds <= 0:
            self._remaining.pop((combatant_id, ability_id), None)
            return
        self._remaining[(combatant_id, ability_id)] = rounds

    def remaining(self, combatant_id: str, ability_id: str) -> int:
        return self._remaining.get((combatant_id, ability_id), 0)

    def is_ready(self, combatant_id: str, ability_id: str) -> bool:
        return self.remaining(combatant_id, ability_id) == 0

    def decrement_all(self) -> None:
        """Counts one round down on every cooldown, dropping those that reach zero."""
        self._remaining = {
            key: rounds - 1 for key, rounds in self._remaining.items() if rounds > 1
        }

    def clear(self, combatant_id: str | None = None) -> None:
        """Forgets the cooldowns of one combatant, or of everyone."""
        if combatant_id is None:
            self._remaining.clear()
            return
        self._remaining = {
            key: rounds
            for key, rounds in self._remaining.items()
            if key[0] != combatant_id
        }

    def __len__(self) -> int:
        return len(self._remaining)
