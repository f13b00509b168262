"""Bounded, most-recent-first history of analyzed recipes."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from calorie_estimator.domain.errors import InvalidInputError, PersistenceFailureError
from calorie_estimator.domain.recipes import RecipeData

HISTORY_KEY = "recipeHistory"
HISTORY_LIMIT = 5

_HISTORY_ADAPTER = TypeAdapter(list[RecipeData])
_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Persistence interface for single string records under a key."""

    def read(self, key: str) -> str | None:
        """Return the stored record, or None when absent."""

    def write(self, key: str, value: str) -> None:
        """Store a record, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete a record if present."""


@dataclass
class HistoryStore:
    """Service that loads, records and clears recipe history."""

    storage: KeyValueStorage
    limit: int = HISTORY_LIMIT
    key: str = HISTORY_KEY

    def load(self) -> list[RecipeData]:
        """Read history, treating a missing or corrupt record as empty."""
        try:
            raw = self.storage.read(self.key)
        except PersistenceFailureError:
            _logger.exception("Failed to read history from storage")
            return []
        if raw is None:
            return []
        try:
            history = _HISTORY_ADAPTER.validate_json(raw)
        except ValidationError:
            _logger.exception("Failed to parse history from storage")
            self._remove()
            return []
        return history[: self.limit]

    def record(
        self, history: list[RecipeData], recipe: RecipeData
    ) -> list[RecipeData]:
        """Prepend a recipe, truncate and persist the new history."""
        updated = [recipe, *history][: self.limit]
        try:
            self.storage.write(self.key, _dump(updated))
        except PersistenceFailureError:
            _logger.exception("Failed to save history to storage")
        return updated

    def clear(self) -> list[RecipeData]:
        """Erase persisted history."""
        self._remove()
        return []

    def _remove(self) -> None:
        try:
            self.storage.remove(self.key)
        except PersistenceFailureError:
            _logger.exception("Failed to clear history from storage")


def select(history: list[RecipeData], index: int) -> RecipeData:
    """Return a past recipe for re-display."""
    if not 0 <= index < len(history):
        raise InvalidInputError(f"No history entry at position {index}.")
    return history[index]


def _dump(history: list[RecipeData]) -> str:
    return _HISTORY_ADAPTER.dump_json(history, by_alias=True).decode("utf-8")
