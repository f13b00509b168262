"""Copy-on-write editing of a recipe's ingredient list."""

from collections.abc import Iterable

from calorie_estimator.domain.errors import InvalidInputError
from calorie_estimator.domain.recipes import (
    Ingredient,
    NutritionTotals,
    RecipeData,
    RecipeDraft,
)
from calorie_estimator.services.inference import NutritionInferenceService


def begin_edit(current: RecipeData) -> RecipeDraft:
    """Clone the ingredient list of the committed recipe into a draft."""
    return RecipeDraft(
        recipe_name=current.recipe_name,
        ingredients=tuple(current.ingredients),
    )


def remove_ingredient(draft: RecipeDraft, index: int) -> RecipeDraft:
    """Drop the ingredient at ``index``; out-of-range indexes are ignored."""
    if not 0 <= index < len(draft.ingredients):
        return draft
    return RecipeDraft(
        recipe_name=draft.recipe_name,
        ingredients=draft.ingredients[:index] + draft.ingredients[index + 1 :],
    )


def add_ingredient(draft: RecipeDraft, ingredient: Ingredient) -> RecipeDraft:
    """Append an analyzed ingredient to the draft."""
    if (
        not ingredient.name.strip()
        or not ingredient.quantity.strip()
        or ingredient.calories <= 0
    ):
        raise InvalidInputError(
            "Please analyze an ingredient with a quantity before adding."
        )
    return RecipeDraft(
        recipe_name=draft.recipe_name,
        ingredients=(*draft.ingredients, ingredient),
    )


async def update_ingredient_quantity(
    draft: RecipeDraft,
    index: int,
    new_quantity: str,
    inference: NutritionInferenceService,
) -> RecipeDraft:
    """Re-estimate one ingredient for a new quantity, keeping its position.

    Inference errors propagate; the passed draft is never modified.
    """
    if not 0 <= index < len(draft.ingredients):
        raise InvalidInputError(f"No ingredient at position {index}.")
    if not new_quantity.strip():
        raise InvalidInputError("Please enter a quantity.")
    existing = draft.ingredients[index]
    updated = await inference.analyze_ingredient(new_quantity, existing.name)
    ingredients = list(draft.ingredients)
    ingredients[index] = updated
    return RecipeDraft(recipe_name=draft.recipe_name, ingredients=tuple(ingredients))


def sum_totals(ingredients: Iterable[Ingredient]) -> NutritionTotals:
    """Sum calories and macros over ingredients."""
    calories = protein = carbs = fats = 0
    for ingredient in ingredients:
        calories += ingredient.calories
        protein += ingredient.protein
        carbs += ingredient.carbs
        fats += ingredient.fats
    return NutritionTotals(calories=calories, protein=protein, carbs=carbs, fats=fats)


def commit(draft: RecipeDraft) -> RecipeData:
    """Produce a recipe whose totals are the sums over the draft ingredients."""
    totals = sum_totals(draft.ingredients)
    return RecipeData(
        recipe_name=draft.recipe_name,
        ingredients=draft.ingredients,
        total_calories=totals.calories,
        protein=totals.protein,
        carbs=totals.carbs,
        fats=totals.fats,
    )


def recompute_totals(recipe: RecipeData) -> RecipeData:
    """Re-establish aggregate totals on a recipe returned by the model."""
    return commit(begin_edit(recipe))


def cancel(draft: RecipeDraft) -> None:  # noqa: ARG001
    """Discard a draft; the committed recipe stays as displayed."""
