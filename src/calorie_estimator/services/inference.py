"""Nutrition inference service using schema-constrained LLM calls."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calorie_estimator.domain.errors import (
    InferenceFailureError,
    InvalidInputError,
    MalformedResponseError,
)
from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.domain.recipes import Ingredient, RecipeData

_logger = logging.getLogger(__name__)

INGREDIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "The name of the ingredient.",
        },
        "quantity": {
            "type": "string",
            "description": "The quantity of the ingredient (e.g., '1 cup', '100g').",
        },
        "calories": {
            "type": "integer",
            "description": "Estimated calories for this ingredient's portion.",
        },
        "protein": {
            "type": "integer",
            "description": "Estimated protein in grams for this portion.",
        },
        "carbs": {
            "type": "integer",
            "description": "Estimated carbohydrates in grams for this portion.",
        },
        "fats": {
            "type": "integer",
            "description": "Estimated fat in grams for this portion.",
        },
    },
    "required": ["name", "quantity", "calories", "protein", "carbs", "fats"],
    "additionalProperties": False,
}

RECIPE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "recipeName": {
            "type": "string",
            "description": "The name of the dish identified in the image.",
        },
        "ingredients": {
            "type": "array",
            "description": (
                "The primary ingredients of the dish with their individual "
                "nutritional breakdown."
            ),
            "items": INGREDIENT_SCHEMA,
        },
        "totalCalories": {
            "type": "integer",
            "description": "Total calories, the sum of ingredient calories.",
        },
        "protein": {
            "type": "integer",
            "description": "Total protein in grams, the sum over ingredients.",
        },
        "carbs": {
            "type": "integer",
            "description": "Total carbohydrates in grams, the sum over ingredients.",
        },
        "fats": {
            "type": "integer",
            "description": "Total fat in grams, the sum over ingredients.",
        },
    },
    "required": [
        "recipeName",
        "ingredients",
        "totalCalories",
        "protein",
        "carbs",
        "fats",
    ],
    "additionalProperties": False,
}

DISH_PROMPT = (
    "Analyze the food in this image. Provide a likely recipe name and an "
    "estimated total nutritional breakdown (calories, protein, carbs, fats) "
    "for a single serving. Also, provide a list of key ingredients. For each "
    "ingredient, provide its name, quantity, and its own estimated nutritional "
    "breakdown (calories, protein, carbs, fats). The total nutritional values "
    "for the dish should be the sum of the individual ingredient values. "
    "Respond in JSON format according to the provided schema."
)


class InferenceClient(Protocol):
    """Interface for a generative model returning schema-constrained JSON."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image: ImagePayload | None,
        temperature: float,
        seed: int | None,
    ) -> str:
        """Return the raw JSON text produced by the model."""


@dataclass
class NutritionInferenceService:
    """Service that prepares nutrition prompts and validates results."""

    client: InferenceClient
    temperature: float = 0.2
    seed: int | None = 42

    async def analyze_dish(self, image: ImagePayload) -> RecipeData:
        """Estimate a dish's recipe and nutrition from a photo."""
        if not image.data:
            raise InvalidInputError("Please upload an image first.")
        if not image.mime_type:
            raise InvalidInputError("Image MIME type is missing.")
        raw = await self._call(
            action="dish",
            prompt=DISH_PROMPT,
            schema_name="recipe_data",
            schema=RECIPE_SCHEMA,
            image=image,
            seed=self.seed,
        )
        try:
            return RecipeData.model_validate_json(raw)
        except ValidationError as exc:
            _log_malformed("dish", raw, exc)
            raise MalformedResponseError(
                "Received malformed data from the API."
            ) from exc

    async def analyze_ingredient(self, quantity: str, name: str) -> Ingredient:
        """Estimate nutrition for a single ``"<quantity> <name>"`` query."""
        quantity = quantity.strip()
        name = name.strip()
        if not quantity or not name:
            raise InvalidInputError(
                "Please enter both a quantity and an ingredient name."
            )
        raw = await self._call(
            action="ingredient",
            prompt=ingredient_prompt(f"{quantity} {name}"),
            schema_name="ingredient",
            schema=INGREDIENT_SCHEMA,
            image=None,
            seed=None,
        )
        try:
            return Ingredient.model_validate_json(raw)
        except ValidationError as exc:
            _log_malformed("ingredient", raw, exc)
            raise MalformedResponseError(
                "Received malformed data for ingredient from the API."
            ) from exc

    async def _call(  # noqa: PLR0913
        self,
        *,
        action: str,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image: ImagePayload | None,
        seed: int | None,
    ) -> str:
        try:
            return await self.client.generate(
                prompt=prompt,
                schema_name=schema_name,
                schema=schema,
                image=image,
                temperature=self.temperature,
                seed=seed,
            )
        except Exception as exc:
            _logger.exception("Inference %s call failed", action)
            if action == "dish":
                message = (
                    "Failed to get recipe information from the image. "
                    "The AI model may be unable to process this request."
                )
            else:
                message = "Failed to get nutritional information for the ingredient."
            raise InferenceFailureError(message) from exc


def ingredient_prompt(query: str) -> str:
    """Build the instruction for a single-ingredient estimate."""
    return (
        "Provide an estimated nutritional breakdown (calories, protein, carbs, "
        f'fats) for the following food item: "{query}". Respond in JSON format '
        "according to the provided schema. The ingredient name in the response "
        "should be a cleaned-up version of the user's input, and the response "
        "should include the quantity from the query (e.g., if the query is "
        "'1 cup rice', the quantity should be '1 cup')."
    )


def _log_malformed(action: str, raw: str, exc: ValidationError) -> None:
    _logger.warning(
        "Malformed %s response (%s errors): %.200s",
        action,
        exc.error_count(),
        raw,
    )
