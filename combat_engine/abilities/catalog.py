"""
Ability catalog module for the combat engine.

Holds the read-only ability definitions shared by every battle session.
"""

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from catchery import log_warning
from pydantic import ValidationError

from combat_engine.core.errors import ConfigurationError, InvalidAction

from .ability import Ability


class AbilityCatalog:
    """Abilities keyed by id."""

    def __init__(self, abilities: Iterable[Ability] = ()) -> None:
        self._abilities: dict[str, Ability] = {}
        for ability in abilities:
            if ability.id in self._abilities:
                raise ConfigurationError(
                    f"Duplicate ability id: {ability.id}", {"ability": ability.id}
                )
            self._abilities[ability.id] = ability

    @classmethod
    def from_data(cls, data: list[dict[str, Any]], origin: str = "<data>") -> "AbilityCatalog":
        """
        Builds a catalog from raw ability dictionaries.

        Args:
            data (list[dict[str, Any]]): One dictionary per ability.
            origin (str): Where the data came from, used in error messages.

        Returns:
            AbilityCatalog: The validated catalog.

        Raises:
            ConfigurationError: If an entry is malformed or an id repeats.

        """
        abilities = []
        for index, entry in enumerate(data):
            try:
                abilities.append(Ability.model_validate(entry))
            except (ValidationError, ValueError) as e:
                name = entry.get("id", index) if isinstance(entry, dict) else index
                raise ConfigurationError(
                    f"Invalid ability '{name}' in {origin}: {e}",
                    {"origin": origin, "ability": name},
                ) from e
        return cls(abilities)

    @classmethod
    def load(cls, path: Path) -> "AbilityCatalog":
        """Loads a catalog from a JSON file holding a list of abilities."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read abilities from {path}: {e}") from e
        if not isinstance(data, list):
            raise ConfigurationError(
                f"Expected list in {path}, got {type(data).__name__}"
            )
        return cls.from_data(data, str(path))

    def get(self, ability_id: str) -> Ability:
        """
        Returns the ability with the given id.

        Raises:
            InvalidAction: If no ability has this id.

        """
        ability = self._abilities.get(ability_id)
        if ability is None:
            log_warning(
                f"Unknown ability '{ability_id}'.",
                {"ability_id": ability_id, "known": len(self._abilities)},
            )
            raise InvalidAction(
                f"Unknown ability '{ability_id}'", {"ability_id": ability_id}
            )
        return ability

    def __contains__(self, ability_id: object) -> bool:
        return ability_id in self._abilities

    def __iter__(self) -> Iterator[Ability]:
        return iter(self._abilities.values())

    def __len__(self) -> int:
        return len(self._abilities)
