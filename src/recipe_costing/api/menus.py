"""Weekly menu endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response

from recipe_costing.api.models import MenuPayload
from recipe_costing.api.responses import download

if TYPE_CHECKING:
    from recipe_costing.containers import AppContainer

router = APIRouter(prefix="/menus", tags=["menus"])


@router.get("")
async def list_menus(request: Request) -> dict[str, object]:
    """List stored menus, newest week first."""
    container: AppContainer = request.app.state.container
    return {"menus": [asdict(menu) for menu in container.menu_service.list_menus()]}


@router.put("")
async def save_menu(body: MenuPayload, request: Request) -> dict[str, object]:
    """Create or replace the menu for a week."""
    container: AppContainer = request.app.state.container
    menu = container.menu_service.save_menu(body.to_menu())
    return {"success": True, "menu": asdict(menu)}


@router.get("/{week_start_date}")
async def get_menu(week_start_date: date, request: Request) -> dict[str, object]:
    """Return the menu stored for a week."""
    container: AppContainer = request.app.state.container
    return {"menu": asdict(container.menu_service.get_menu(week_start_date))}


@router.get("/{week_start_date}/costing")
async def costing(
    week_start_date: date,
    request: Request,
    include_daily_options: bool | None = None,
) -> dict[str, object]:
    """Return daily and weekly cost totals for a menu."""
    container: AppContainer = request.app.state.container
    result = container.menu_service.costing(
        week_start_date, _include_options(container, include_daily_options)
    )
    return result.as_dict()


@router.get("/{week_start_date}/export-allergies")
async def export_allergies(
    week_start_date: date, request: Request, include_code: bool = True
) -> Response:
    """Download the weekly allergy form as XLSX."""
    container: AppContainer = request.app.state.container
    return download(
        container.report_service.allergy_matrix(
            week_start_date, include_code=include_code
        )
    )


@router.get("/{week_start_date}/export-pdf")
async def export_pdf(
    week_start_date: date,
    request: Request,
    include_daily_options: bool | None = None,
) -> Response:
    """Download the weekly menu with costing as PDF."""
    container: AppContainer = request.app.state.container
    return download(
        container.report_service.menu_pdf(
            week_start_date, _include_options(container, include_daily_options)
        )
    )


def _include_options(container: AppContainer, requested: bool | None) -> bool:
    if requested is None:
        return container.settings.include_daily_options_in_costing
    return requested
