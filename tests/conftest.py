"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from calorie_estimator.adapters.image_fetcher import HttpxImageFetcher
from calorie_estimator.config import Settings
from calorie_estimator.containers import AppContainer
from calorie_estimator.domain.errors import PersistenceFailureError
from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.domain.recipes import Ingredient, RecipeData
from calorie_estimator.services.history import HistoryStore, KeyValueStorage
from calorie_estimator.services.inference import (
    InferenceClient,
    NutritionInferenceService,
)
from calorie_estimator.services.session import MealSession

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"rest-of-image"

RECIPE_PAYLOAD: dict[str, object] = {
    "recipeName": "Chicken fried rice",
    "ingredients": [
        {
            "name": "White rice",
            "quantity": "1 cup",
            "calories": 200,
            "protein": 4,
            "carbs": 45,
            "fats": 0,
        },
        {
            "name": "Chicken breast",
            "quantity": "100g",
            "calories": 165,
            "protein": 31,
            "carbs": 0,
            "fats": 4,
        },
    ],
    "totalCalories": 365,
    "protein": 35,
    "carbs": 45,
    "fats": 4,
}

INGREDIENT_PAYLOAD: dict[str, object] = {
    "name": "Egg",
    "quantity": "2 large",
    "calories": 140,
    "protein": 12,
    "carbs": 1,
    "fats": 10,
}


def make_ingredient(
    name: str = "Rice", calories: int = 100, **overrides: object
) -> Ingredient:
    values: dict[str, object] = {
        "name": name,
        "quantity": "1 cup",
        "calories": calories,
        "protein": 2,
        "carbs": 20,
        "fats": 1,
    }
    values.update(overrides)
    return Ingredient.model_validate(values)


def make_recipe(
    name: str = "Dish", ingredients: list[Ingredient] | None = None
) -> RecipeData:
    items = ingredients if ingredients is not None else [make_ingredient()]
    return RecipeData(
        recipe_name=name,
        ingredients=tuple(items),
        total_calories=sum(item.calories for item in items),
        protein=sum(item.protein for item in items),
        carbs=sum(item.carbs for item in items),
        fats=sum(item.fats for item in items),
    )


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client returning queued responses in order."""

    responses: list[object] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {
                "prompt": prompt,
                "schema_name": schema_name,
                "schema": schema,
                "image": image,
                "temperature": temperature,
                "seed": seed,
            }
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return str(response)


@dataclass
class InMemoryStorage(KeyValueStorage):
    """In-memory key/value storage for tests."""

    records: dict[str, str] = field(default_factory=dict)
    fail_writes: bool = False
    fail_reads: bool = False

    def read(self, key: str) -> str | None:
        if self.fail_reads:
            raise PersistenceFailureError("read failed")
        return self.records.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceFailureError("write failed")
        self.records[key] = value

    def remove(self, key: str) -> None:
        self.records.pop(key, None)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        history_dir=tmp_path / "history",
    )


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def session(
    inference_client: FakeInferenceClient, storage: InMemoryStorage
) -> MealSession:
    return MealSession(
        inference=NutritionInferenceService(client=inference_client),
        history_store=HistoryStore(storage=storage),
    )


@pytest.fixture
def container(settings: Settings, session: MealSession) -> AppContainer:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("missing.jpg"):
            return httpx.Response(404)
        return httpx.Response(
            200, content=PNG_BYTES, headers={"content-type": "image/png"}
        )

    fetcher = HttpxImageFetcher(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    async def close_resources() -> None:
        await fetcher.close()

    return AppContainer(
        settings=settings,
        image_fetcher=fetcher,
        inference_service=session.inference,
        history_store=session.history_store,
        session=session,
        close_resources=close_resources,
    )
