"""
Combat log module for the combat engine.

Defines the structured, ordered record of everything that happened in a
battle, meant to be rendered or animated outside the engine.
"""

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from combat_engine.core.constants import LogType


class LogEntry(BaseModel):
    """One event of a battle."""

    model_config = ConfigDict(frozen=True)

    turn: int = Field(description="Round in which the event happened.")
    type: LogType = Field(description="Kind of event.")
    actor_id: str | None = Field(None, description="Who caused the event.")
    target_id: str | None = Field(None, description="Who the event affected.")
    amount: int = Field(0, description="Damage, healing or similar quantity.")
    detail: str = Field("", description="Ability, effect or action involved.")
    message: str = Field("", description="Human readable summary.")


class CombatLog:
    """Append-only list of log entries."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        return entry

    def add(
        self,
        turn: int,
        type: LogType,
        actor_id: str | None = None,
        target_id: str | None = None,
        amount: int = 0,
        detail: str = "",
        message: str = "",
    ) -> LogEntry:
        """Builds an entry from its fields and appends it."""
        return self.append(
            LogEntry(
                turn=turn,
                type=type,
                actor_id=actor_id,
                target_id=target_id,
                amount=amount,
                detail=detail,
                message=message,
            )
        )

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def of_type(self, *types: LogType) -> list[LogEntry]:
        return [entry for entry in self._entries if entry.type in types]

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
