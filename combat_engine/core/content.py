"""
Content module for the combat engine.

Loads the shared, read-only game content (abilities, monsters, companions
and the player) from JSON files and validates it up front, so a malformed
entry stops the program at load time instead of in the middle of a battle.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning
from pydantic import ValidationError

from combat_engine.abilities.catalog import AbilityCatalog
from combat_engine.ai.patterns import BEHAVIOR_PATTERNS
from combat_engine.entities.combatant import CombatantDefinition

from .errors import ConfigurationError
from .utils import cprint

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ContentRepository:
    """
    Registry of every content definition a battle may need.

    Each battle session receives the repository by handle; nothing is
    cached at module level.
    """

    abilities: AbilityCatalog
    monsters: dict[str, CombatantDefinition]
    companions: dict[str, CombatantDefinition]
    players: dict[str, CombatantDefinition]

    def __init__(self, data_dir: Path | None = None, verbose: bool = False) -> None:
        """
        Initialize the repository and load its content.

        Args:
            data_dir (Path | None): The directory holding the JSON files,
                defaults to the bundled content.
            verbose (bool): Print what is being loaded.

        Raises:
            ConfigurationError: If any file is missing or malformed.

        """
        self.verbose = verbose
        self.reload(data_dir or DEFAULT_DATA_DIR)

    def reload(self, root: Path) -> None:
        """
        (Re)load all JSON assets from disk.

        Args:
            root (Path): The directory containing data files to load.

        """
        self.abilities = _load_json_file(
            root / "abilities.json",
            lambda data: AbilityCatalog.from_data(data, str(root / "abilities.json")),
            "abilities",
            self.verbose,
        )
        self.monsters = _load_json_file(
            root / "monsters.json", _load_definitions, "monsters", self.verbose
        )
        self.companions = _load_json_file(
            root / "companions.json", _load_definitions, "companions", self.verbose
        )
        self.players = _load_json_file(
            root / "player.json", _load_definitions, "player", self.verbose
        )
        for definitions in (self.monsters, self.companions, self.players):
            for definition in definitions.values():
                self._validate_references(definition)

    def _validate_references(self, definition: CombatantDefinition) -> None:
        """Checks that a definition only names known abilities and patterns."""
        context = {"definition": definition.id}
        for ability_id in definition.abilities:
            if ability_id not in self.abilities:
                raise ConfigurationError(
                    f"{definition.id} references unknown ability '{ability_id}'",
                    context,
                )
            if self.abilities.get(ability_id).is_skill:
                raise ConfigurationError(
                    f"{definition.id} lists skill '{ability_id}' as a triggered ability",
                    context,
                )
        for skill_id in definition.skills:
            if skill_id not in self.abilities:
                raise ConfigurationError(
                    f"{definition.id} references unknown skill '{skill_id}'", context
                )
            if not self.abilities.get(skill_id).is_skill:
                raise ConfigurationError(
                    f"{definition.id} lists triggered ability '{skill_id}' as a skill",
                    context,
                )
        if definition.ai_pattern is not None and definition.ai_pattern not in BEHAVIOR_PATTERNS:
            raise ConfigurationError(
                f"{definition.id} uses unknown behavior pattern '{definition.ai_pattern}'",
                context,
            )

    def _get_from_collection(
        self, collection_name: str, item_name: str
    ) -> CombatantDefinition | None:
        collection: dict[str, CombatantDefinition] = getattr(self, collection_name)
        entry = collection.get(item_name)
        if entry is None:
            log_warning(
                f"Entry '{item_name}' not found in {collection_name}.",
                {"collection_name": collection_name, "item_name": item_name},
            )
        return entry

    def get_monster(self, name: str) -> CombatantDefinition | None:
        """Get a monster definition by id, or None if not found."""
        return self._get_from_collection("monsters", name)

    def get_companion(self, name: str) -> CombatantDefinition | None:
        """Get a companion definition by id, or None if not found."""
        return self._get_from_collection("companions", name)

    def get_player(self, name: str) -> CombatantDefinition | None:
        """Get a player definition by id, or None if not found."""
        return self._get_from_collection("players", name)


def _load_definitions(data: list[dict[str, Any]]) -> dict[str, CombatantDefinition]:
    """
    Load combatant definitions from JSON data.

    Args:
        data (list[dict[str, Any]]): List of definition dictionaries.

    Returns:
        dict[str, CombatantDefinition]: Definitions keyed by id.

    Raises:
        ConfigurationError: If an entry is malformed or an id repeats.

    """
    definitions: dict[str, CombatantDefinition] = {}
    for index, entry in enumerate(data):
        try:
            definition = CombatantDefinition.model_validate(entry)
        except (ValidationError, ValueError) as e:
            name = entry.get("id", index) if isinstance(entry, dict) else index
            raise ConfigurationError(f"Invalid definition '{name}': {e}") from e
        if definition.id in definitions:
            raise ConfigurationError(f"Duplicate definition id: {definition.id}")
        definitions[definition.id] = definition
    return definitions


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], Any],
    description: str,
    verbose: bool = False,
) -> Any:
    """Helper to load and validate JSON files."""
    if verbose:
        cprint(f"  Loading {description}...", style="bold green")
    if not filepath.is_file():
        raise ConfigurationError(f"File not found: {filepath}")
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"File {filepath} raised an error: {e}") from e
    if not isinstance(data, list):
        raise ConfigurationError(
            f"Expected list in {filepath}, got {type(data).__name__}"
        )
    if not data:
        raise ConfigurationError(f"Empty data list in {filepath}")
    try:
        return loader_func(data)
    except ConfigurationError as e:
        raise ConfigurationError(f"File {filepath}: {e}") from e
