"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_estimator.adapters.file_storage import JsonFileStorage
from calorie_estimator.adapters.gemini_inference_client import GeminiInferenceClient
from calorie_estimator.adapters.image_fetcher import HttpxImageFetcher, ImageFetcher
from calorie_estimator.adapters.openai_inference_client import OpenAIInferenceClient
from calorie_estimator.adapters.supabase_storage import SupabaseStorage
from calorie_estimator.config import Settings, require
from calorie_estimator.services.history import HistoryStore, KeyValueStorage
from calorie_estimator.services.inference import (
    InferenceClient,
    NutritionInferenceService,
)
from calorie_estimator.services.session import MealSession


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    image_fetcher: ImageFetcher
    inference_service: NutritionInferenceService
    history_store: HistoryStore
    session: MealSession
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    inference_client = _build_inference_client(resolved_settings)
    inference_service = NutritionInferenceService(
        client=inference_client,
        temperature=resolved_settings.temperature,
        seed=resolved_settings.seed,
    )
    history_store = build_history_store(resolved_settings)
    session = MealSession(
        inference=inference_service,
        history_store=history_store,
        recompute_dish_totals=resolved_settings.recompute_dish_totals,
    )
    session.load_history()
    image_fetcher = HttpxImageFetcher.create()

    async def close_resources() -> None:
        await image_fetcher.close()
        if isinstance(
            inference_client, (OpenAIInferenceClient, GeminiInferenceClient)
        ):
            await inference_client.close()

    return AppContainer(
        settings=resolved_settings,
        image_fetcher=image_fetcher,
        inference_service=inference_service,
        history_store=history_store,
        session=session,
        close_resources=close_resources,
    )


def build_history_store(settings: Settings) -> HistoryStore:
    """Create the history store for the configured backend."""
    return HistoryStore(storage=_build_storage(settings), limit=settings.history_limit)


def _build_inference_client(settings: Settings) -> InferenceClient:
    if settings.inference_provider == "openai":
        return OpenAIInferenceClient.create(
            api_key=require(settings.openai_api_key, "openai_api_key"),
            model=settings.openai_model,
        )
    if settings.inference_provider == "gemini":
        return GeminiInferenceClient.create(
            api_key=require(settings.gemini_api_key, "gemini_api_key"),
            model=settings.gemini_model,
        )
    raise ValueError(f"Unknown inference provider: {settings.inference_provider}")


def _build_storage(settings: Settings) -> KeyValueStorage:
    if settings.history_backend == "file":
        return JsonFileStorage(settings.history_dir)
    if settings.history_backend == "supabase":
        supabase_client = create_client(
            require(settings.supabase_url, "supabase_url"),
            require(settings.supabase_service_key, "supabase_service_key"),
        )
        return SupabaseStorage(supabase_client, device_id=settings.device_id)
    raise ValueError(f"Unknown history backend: {settings.history_backend}")
