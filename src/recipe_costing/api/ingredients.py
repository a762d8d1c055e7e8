"""Ingredient lookup and bulk import endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, File, Request, UploadFile

from recipe_costing.api.admin import require_admin
from recipe_costing.api.responses import ingredient_payload
from recipe_costing.services.imports import read_table

if TYPE_CHECKING:
    import pandas as pd

    from recipe_costing.containers import AppContainer

router = APIRouter(tags=["ingredients"])


@router.get("/ingredients")
async def search_ingredients(
    request: Request, search: str | None = None, limit: int = 10
) -> dict[str, object]:
    """Search ingredients by name or product code."""
    container: AppContainer = request.app.state.container
    results = container.ingredient_service.search(search, limit=limit)
    return {"ingredients": [ingredient_payload(item) for item in results]}


@router.get("/ingredients/{product_code}")
async def get_ingredient(product_code: str, request: Request) -> dict[str, object]:
    """Return one ingredient with its allergens."""
    container: AppContainer = request.app.state.container
    return ingredient_payload(container.ingredient_service.get(product_code))


@router.post("/imports", dependencies=[Depends(require_admin)])
async def import_tables(
    request: Request,
    pricing: UploadFile | None = File(default=None),
    allergens: UploadFile | None = File(default=None),
) -> dict[str, object]:
    """Import a supplier price list and/or allergen table."""
    container: AppContainer = request.app.state.container
    result = container.import_service.import_tables(
        pricing=await _read_upload(pricing),
        allergens=await _read_upload(allergens),
    )
    return {"success": True, **asdict(result)}


async def _read_upload(upload: UploadFile | None) -> pd.DataFrame | None:
    if upload is None:
        return None
    return read_table(await upload.read(), upload.filename)
