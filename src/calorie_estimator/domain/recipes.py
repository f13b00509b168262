"""Nutrition value types for dishes and their ingredients."""

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _integral_float_to_int(value: object) -> object:
    # Models sometimes emit 140.0 for an integer field.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


NutrientAmount = Annotated[
    int, Field(strict=True, ge=0), BeforeValidator(_integral_float_to_int)
]
Text = Annotated[str, Field(strict=True)]


class Ingredient(BaseModel):
    """Estimated nutrition for one food component of a dish."""

    model_config = ConfigDict(frozen=True)

    name: Text
    quantity: Text
    calories: NutrientAmount
    protein: NutrientAmount
    carbs: NutrientAmount
    fats: NutrientAmount


class RecipeData(BaseModel):
    """Nutrition breakdown for a whole dish.

    Field aliases are the camelCase names used by the inference schema and the
    persisted history record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recipe_name: Annotated[str, Field(strict=True, min_length=1)] = Field(
        alias="recipeName"
    )
    ingredients: tuple[Ingredient, ...]
    total_calories: NutrientAmount = Field(alias="totalCalories")
    protein: NutrientAmount
    carbs: NutrientAmount
    fats: NutrientAmount

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class NutritionTotals:
    """Aggregate macros summed over a list of ingredients."""

    calories: int
    protein: int
    carbs: int
    fats: int


@dataclass(frozen=True)
class RecipeDraft:
    """Editable working copy of a recipe's ingredient list."""

    recipe_name: str
    ingredients: tuple[Ingredient, ...]
