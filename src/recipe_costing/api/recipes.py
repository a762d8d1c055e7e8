"""Recipe endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, Response, status

from recipe_costing.api.admin import require_admin
from recipe_costing.api.models import RecipeCreate, RecipeIngredients, RecipeUpdate
from recipe_costing.api.responses import download, recipe_detail_payload

if TYPE_CHECKING:
    from recipe_costing.containers import AppContainer

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("")
async def list_recipes(
    request: Request, search: str | None = None
) -> dict[str, object]:
    """List recipes, optionally filtered by name or code."""
    container: AppContainer = request.app.state.container
    recipes = container.recipe_service.list_recipes(search)
    return {"recipes": [asdict(recipe) for recipe in recipes]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(body: RecipeCreate, request: Request) -> dict[str, object]:
    """Create a recipe with its ingredient lines."""
    container: AppContainer = request.app.state.container
    detail = container.recipe_service.create_recipe(
        body.model_dump(exclude={"ingredients"}),
        [line.to_input() for line in body.ingredients],
    )
    return recipe_detail_payload(detail)


@router.get("/analytics")
async def analytics(request: Request) -> dict[str, object]:
    """Return cost per serving analytics across recipes."""
    container: AppContainer = request.app.state.container
    return container.recipe_service.analytics()


@router.post("/recalculate-costs", dependencies=[Depends(require_admin)])
async def recalculate_costs(request: Request) -> dict[str, object]:
    """Recalculate every recipe's cached cost."""
    container: AppContainer = request.app.state.container
    return {"success": True, **container.recipe_service.recalculate_all()}


@router.get("/{recipe_id}")
async def get_recipe(recipe_id: int, request: Request) -> dict[str, object]:
    """Return a recipe with costed ingredients and allergens."""
    container: AppContainer = request.app.state.container
    return recipe_detail_payload(container.recipe_service.get_detail(recipe_id))


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: int, body: RecipeUpdate, request: Request
) -> dict[str, object]:
    """Update recipe fields."""
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.update_recipe(
        recipe_id, body.model_dump(exclude_unset=True)
    )
    return {"recipe": asdict(recipe)}


@router.delete("/{recipe_id}")
async def delete_recipe(recipe_id: int, request: Request) -> dict[str, object]:
    """Delete a recipe and its ingredient lines."""
    container: AppContainer = request.app.state.container
    container.recipe_service.delete_recipe(recipe_id)
    return {"success": True}


@router.put("/{recipe_id}/ingredients")
async def replace_ingredients(
    recipe_id: int, body: RecipeIngredients, request: Request
) -> dict[str, object]:
    """Replace the ingredient lines of a recipe."""
    container: AppContainer = request.app.state.container
    detail = container.recipe_service.replace_ingredients(
        recipe_id, [line.to_input() for line in body.ingredients]
    )
    return recipe_detail_payload(detail)


@router.post("/{recipe_id}/recalculate")
async def recalculate(recipe_id: int, request: Request) -> dict[str, object]:
    """Recalculate one recipe's cached cost."""
    container: AppContainer = request.app.state.container
    cost = container.recipe_service.recalculate(recipe_id)
    return {"success": True, **asdict(cost)}


@router.post("/{recipe_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate(recipe_id: int, request: Request) -> dict[str, object]:
    """Copy a recipe with fresh ingredient snapshots."""
    container: AppContainer = request.app.state.container
    return recipe_detail_payload(container.recipe_service.duplicate(recipe_id))


@router.get("/{recipe_id}/export-pdf")
async def export_pdf(recipe_id: int, request: Request) -> Response:
    """Download a recipe card as PDF."""
    container: AppContainer = request.app.state.container
    return download(container.report_service.recipe_pdf(recipe_id))
