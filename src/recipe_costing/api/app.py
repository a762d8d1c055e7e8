"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from recipe_costing.api.admin import router as admin_router
from recipe_costing.api.ingredients import router as ingredients_router
from recipe_costing.api.menus import router as menus_router
from recipe_costing.api.recipes import router as recipes_router
from recipe_costing.app_logging import configure_logging
from recipe_costing.containers import AppContainer
from recipe_costing.errors import NotFoundError, PersistenceError, ValidationError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Recipe Costing")
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(ingredients_router)
    app.include_router(recipes_router)
    app.include_router(menus_router)

    @app.exception_handler(ValidationError)
    async def validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(PersistenceError)
    async def persistence_error(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.error(
            "Row store failure on %s %s: %s", request.method, request.url.path, exc
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )
