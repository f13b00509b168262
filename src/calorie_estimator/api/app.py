"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from calorie_estimator.api.models import (
    ImageUrlRequest,
    IngredientQuery,
    QuantityUpdate,
)
from calorie_estimator.app_logging import configure_logging
from calorie_estimator.containers import AppContainer
from calorie_estimator.domain.errors import (
    AnalysisInProgressError,
    InferenceFailureError,
    InvalidInputError,
)
from calorie_estimator.domain.recipes import Ingredient, RecipeDraft
from calorie_estimator.services.images import from_bytes
from calorie_estimator.services.session import MealSession
from calorie_estimator.services.suggestions import suggest


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(AnalysisInProgressError)
    async def in_progress_handler(
        request: Request, exc: AnalysisInProgressError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(
        request: Request, exc: InvalidInputError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.exception_handler(InferenceFailureError)
    async def inference_failure_handler(
        request: Request, exc: InferenceFailureError
    ) -> JSONResponse:
        session = _session(request)
        logger.warning("Inference failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": session.error or str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/images")
    async def upload_image(request: Request) -> dict[str, object]:
        """Accept raw image bytes; the MIME type comes from Content-Type."""
        session = _session(request)
        body = await request.body()
        session.set_image(from_bytes(body, request.headers.get("content-type")))
        return _session_view(session)

    @app.post("/images/url")
    async def upload_image_url(
        payload: ImageUrlRequest, request: Request
    ) -> dict[str, object]:
        """Download a remote image and make it the current image."""
        state_container: AppContainer = request.app.state.container
        image = await state_container.image_fetcher.fetch(payload.url)
        state_container.session.set_image(image)
        return _session_view(state_container.session)

    @app.post("/analyze")
    async def analyze(request: Request) -> dict[str, object]:
        """Run dish analysis on the current image."""
        session = _session(request)
        await session.analyze()
        return _session_view(session)

    @app.get("/recipe")
    async def recipe(request: Request) -> dict[str, object]:
        """Return the current session view."""
        return _session_view(_session(request))

    @app.post("/recipe/edit")
    async def begin_edit(request: Request) -> dict[str, object]:
        """Open a draft of the committed recipe."""
        session = _session(request)
        session.begin_edit()
        return _session_view(session)

    @app.delete("/recipe/edit")
    async def cancel_edit(request: Request) -> dict[str, object]:
        """Discard the draft."""
        session = _session(request)
        session.cancel_edit()
        return _session_view(session)

    @app.post("/recipe/edit/save")
    async def save_edit(request: Request) -> dict[str, object]:
        """Commit the draft and record it in history."""
        session = _session(request)
        session.save_edits()
        return _session_view(session)

    @app.post("/recipe/edit/ingredients/analyze")
    async def analyze_ingredient(
        payload: IngredientQuery, request: Request
    ) -> dict[str, object]:
        """Estimate a new ingredient before adding it."""
        session = _session(request)
        await session.analyze_new_ingredient(payload.quantity, payload.name)
        return _session_view(session)

    @app.post("/recipe/edit/ingredients")
    async def add_ingredient(
        request: Request, ingredient: Ingredient | None = None
    ) -> dict[str, object]:
        """Append an ingredient, or the analyzed candidate, to the draft."""
        session = _session(request)
        session.add_ingredient(ingredient)
        return _session_view(session)

    @app.delete("/recipe/edit/ingredients/{index}")
    async def remove_ingredient(index: int, request: Request) -> dict[str, object]:
        """Remove a draft ingredient by position."""
        session = _session(request)
        session.remove_ingredient(index)
        return _session_view(session)

    @app.patch("/recipe/edit/ingredients/{index}")
    async def update_quantity(
        index: int, payload: QuantityUpdate, request: Request
    ) -> dict[str, object]:
        """Re-estimate a draft ingredient for a new quantity."""
        session = _session(request)
        await session.update_ingredient_quantity(index, payload.quantity)
        return _session_view(session)

    @app.get("/history")
    async def history(request: Request) -> dict[str, object]:
        """Return recent analyses, most recent first."""
        session = _session(request)
        return {"history": [item.to_payload() for item in session.history]}

    @app.delete("/history")
    async def clear_history(request: Request) -> dict[str, object]:
        """Erase history."""
        session = _session(request)
        session.clear_history()
        return {"history": []}

    @app.post("/history/{index}/select")
    async def select_history(index: int, request: Request) -> dict[str, object]:
        """Show a past analysis as the current recipe."""
        session = _session(request)
        session.select_history(index)
        return _session_view(session)

    @app.get("/suggestions")
    async def suggestions(q: str = "") -> dict[str, list[str]]:
        """Return ingredient name suggestions."""
        return {"suggestions": suggest(q)}

    @app.post("/clear")
    async def clear(request: Request) -> dict[str, object]:
        """Reset the current image and recipe."""
        session = _session(request)
        session.clear()
        return _session_view(session)

    return app


def _session(request: Request) -> MealSession:
    state_container: AppContainer = request.app.state.container
    return state_container.session


def _session_view(session: MealSession) -> dict[str, object]:
    return {
        "hasImage": session.image is not None,
        "isLoading": session.is_loading,
        "error": session.error,
        "recipe": session.recipe.to_payload() if session.recipe else None,
        "draft": _draft_view(session.draft),
        "candidate": (
            session.candidate.model_dump(mode="json") if session.candidate else None
        ),
        "history": [item.to_payload() for item in session.history],
    }


def _draft_view(draft: RecipeDraft | None) -> dict[str, object] | None:
    if draft is None:
        return None
    return {
        "recipeName": draft.recipe_name,
        "ingredients": [item.model_dump(mode="json") for item in draft.ingredients],
    }
