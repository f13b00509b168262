"""Meal analysis session: the single owner of presentation state."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import NoReturn

from calorie_estimator.domain.errors import (
    AnalysisInProgressError,
    CalorieEstimatorError,
    InferenceFailureError,
    InvalidInputError,
)
from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.domain.recipes import Ingredient, RecipeData, RecipeDraft
from calorie_estimator.services import editing
from calorie_estimator.services.history import HistoryStore, select
from calorie_estimator.services.inference import NutritionInferenceService

_logger = logging.getLogger(__name__)


@dataclass
class MealSession:
    """Holds the current image, committed recipe, draft and history.

    Mutations go only through the methods below. Inference calls are single
    flight, and a result is dropped when the session moved on while the call
    was outstanding (cancel, clear, new image, history selection).
    """

    inference: NutritionInferenceService
    history_store: HistoryStore
    recompute_dish_totals: bool = True
    image: ImagePayload | None = None
    recipe: RecipeData | None = None
    draft: RecipeDraft | None = None
    candidate: Ingredient | None = None
    history: list[RecipeData] = field(default_factory=list)
    error: str | None = None
    is_loading: bool = False
    _generation: int = field(default=0, init=False, repr=False)

    @property
    def is_editing(self) -> bool:
        """Return True while a draft is open."""
        return self.draft is not None

    @property
    def displayed_ingredients(self) -> tuple[Ingredient, ...]:
        """Return the draft ingredients in edit mode, else the committed ones."""
        if self.draft is not None:
            return self.draft.ingredients
        if self.recipe is not None:
            return self.recipe.ingredients
        return ()

    def load_history(self) -> list[RecipeData]:
        """Populate history from persistent storage."""
        self.history = self.history_store.load()
        return self.history

    def set_image(self, image: ImagePayload) -> None:
        """Accept a newly acquired image and reset the displayed result."""
        self.image = image
        self.recipe = None
        self.draft = None
        self.candidate = None
        self.error = None
        self._advance()

    async def analyze(self) -> RecipeData | None:
        """Run dish analysis on the current image and record the result."""
        if self.image is None:
            self._fail(InvalidInputError("Please upload an image first."))
        image = self.image
        generation = self._generation
        async with self._inference_call("An error occurred: {}. Please try again."):
            self.recipe = None
            self.draft = None
            data = await self.inference.analyze_dish(image)
        if generation != self._generation:
            _logger.info("Discarding stale dish analysis result")
            return None
        if self.recompute_dish_totals:
            data = editing.recompute_totals(data)
        self.recipe = data
        self.history = self.history_store.record(self.history, data)
        return data

    async def analyze_new_ingredient(
        self, quantity: str, name: str
    ) -> Ingredient | None:
        """Estimate nutrition for an ingredient the user wants to add."""
        self._require_draft()
        generation = self._generation
        async with self._inference_call("{}"):
            ingredient = await self.inference.analyze_ingredient(quantity, name)
        if generation != self._generation or self.draft is None:
            _logger.info("Discarding stale ingredient analysis result")
            return None
        self.candidate = ingredient
        return ingredient

    def begin_edit(self) -> RecipeDraft:
        """Open a draft of the committed recipe."""
        if self.recipe is None:
            self._fail(InvalidInputError("There is no recipe to edit."))
        self.draft = editing.begin_edit(self.recipe)
        self.candidate = None
        self.error = None
        return self.draft

    def remove_ingredient(self, index: int) -> RecipeDraft:
        """Remove an ingredient from the draft."""
        self.draft = editing.remove_ingredient(self._require_draft(), index)
        return self.draft

    def add_ingredient(self, ingredient: Ingredient | None = None) -> RecipeDraft:
        """Append an ingredient, defaulting to the last analyzed candidate."""
        draft = self._require_draft()
        chosen = ingredient or self.candidate
        if chosen is None:
            self._fail(
                InvalidInputError(
                    "Please analyze an ingredient with a quantity before adding."
                )
            )
        try:
            self.draft = editing.add_ingredient(draft, chosen)
        except InvalidInputError as exc:
            self._fail(exc)
        self.candidate = None
        self.error = None
        return self.draft

    async def update_ingredient_quantity(
        self, index: int, quantity: str
    ) -> RecipeDraft | None:
        """Re-estimate a draft ingredient for a new quantity."""
        draft = self._require_draft()
        generation = self._generation
        async with self._inference_call("Failed to update quantity: {}"):
            updated = await editing.update_ingredient_quantity(
                draft, index, quantity, self.inference
            )
        if self._is_stale(generation, draft):
            _logger.info("Discarding stale quantity update result")
            return None
        self.draft = updated
        return updated

    def save_edits(self) -> RecipeData:
        """Commit the draft, recompute totals and record it in history."""
        recipe = editing.commit(self._require_draft())
        self.recipe = recipe
        self.draft = None
        self.candidate = None
        self.error = None
        self._advance()
        self.history = self.history_store.record(self.history, recipe)
        return recipe

    def cancel_edit(self) -> None:
        """Discard the draft and revert to the committed recipe."""
        if self.draft is not None:
            editing.cancel(self.draft)
        self.draft = None
        self.candidate = None
        self.error = None
        self._advance()

    def clear(self) -> None:
        """Reset the image and displayed result."""
        self.image = None
        self.recipe = None
        self.draft = None
        self.candidate = None
        self.error = None
        self._advance()

    def clear_history(self) -> None:
        """Erase history in memory and in storage."""
        self.history = self.history_store.clear()

    def select_history(self, index: int) -> RecipeData:
        """Re-display a past recipe as the current view."""
        try:
            recipe = select(self.history, index)
        except InvalidInputError as exc:
            self._fail(exc)
        self.recipe = recipe
        self.image = None
        self.draft = None
        self.candidate = None
        self.error = None
        self._advance()
        return recipe

    @asynccontextmanager
    async def _inference_call(self, message_format: str) -> AsyncIterator[None]:
        if self.is_loading:
            raise AnalysisInProgressError("An analysis is already in progress.")
        generation = self._generation
        self.is_loading = True
        self.error = None
        try:
            yield
        except InferenceFailureError as exc:
            if generation == self._generation:
                self.error = message_format.format(str(exc).rstrip("."))
            raise
        except InvalidInputError as exc:
            if generation == self._generation:
                self.error = str(exc)
            raise
        finally:
            self.is_loading = False

    def _require_draft(self) -> RecipeDraft:
        if self.draft is None:
            self._fail(InvalidInputError("Start editing the recipe first."))
        return self.draft

    def _is_stale(self, generation: int, draft: RecipeDraft) -> bool:
        return generation != self._generation or self.draft is not draft

    def _advance(self) -> None:
        self._generation += 1

    def _fail(self, exc: CalorieEstimatorError) -> NoReturn:
        self.error = str(exc)
        raise exc
