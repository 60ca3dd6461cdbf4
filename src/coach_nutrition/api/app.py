"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from coach_nutrition.api.diet_plans import router as diet_plans_router
from coach_nutrition.api.foods import router as foods_router
from coach_nutrition.api.nutrition import router as nutrition_router
from coach_nutrition.api.recipes import router as recipes_router
from coach_nutrition.app_logging import configure_logging
from coach_nutrition.containers import AppContainer
from coach_nutrition.domain.errors import (
    ForbiddenError,
    NotFoundError,
    NutritionError,
    PersistenceError,
    ValidationError,
)

_STATUS_BY_ERROR: tuple[tuple[type[NutritionError], int], ...] = (
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(nutrition_router)
    app.include_router(foods_router)
    app.include_router(recipes_router)
    app.include_router(diet_plans_router)

    @app.exception_handler(NutritionError)
    async def nutrition_error_handler(
        request: Request, exc: NutritionError
    ) -> JSONResponse:
        if isinstance(exc, PersistenceError):
            logger.error(
                "Storage failure on %s %s",
                request.method,
                request.url.path,
                exc_info=exc,
            )
            return JSONResponse(
                status_code=500, content={"error": "Internal server error"}
            )
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                return JSONResponse(
                    status_code=status_code, content={"error": str(exc)}
                )
        logger.error("Unhandled domain error: %s", exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400, content={"error": f"{location}: {message}"}
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=exc.headers,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
