"""Supabase repository for weekly menus."""

import json
from dataclasses import asdict, dataclass
from datetime import date
from typing import TypeVar

from supabase import Client

from recipe_costing.adapters.supabase_support import execute, optional_int
from recipe_costing.domain.menus import (
    DAILY_OPTION_SLOTS,
    DAY_SLOTS,
    WEEKDAYS,
    DailyOptions,
    DayMenu,
    Menu,
    MenuSummary,
)
from recipe_costing.errors import PersistenceError
from recipe_costing.services.menus import MenuRepository

_SlotsT = TypeVar("_SlotsT", DayMenu, DailyOptions)


@dataclass
class SupabaseMenuRepository(MenuRepository):
    """Supabase implementation for menus.

    One row per week; each weekday and the daily options are stored as JSON
    objects of slot name to recipe id.
    """

    client: Client

    def upsert_menu(self, menu: Menu) -> Menu:
        """Insert or replace the menu for its week."""
        payload: dict[str, object] = {
            "name": menu.name,
            "week_start_date": menu.week_start_date.isoformat(),
            "daily_options": (
                asdict(menu.daily_options) if menu.daily_options else None
            ),
        }
        for day in WEEKDAYS:
            day_menu = menu.day(day)
            payload[day] = asdict(day_menu) if day_menu else None
        response = execute(
            self.client.table("menus").upsert(payload, on_conflict="week_start_date"),
            "save menu",
        )
        if not response.data:
            raise PersistenceError("Failed to save menu")
        return _parse_menu(response.data[0])

    def get_menu(self, week_start_date: date) -> Menu | None:
        """Return the menu for a week, if present."""
        response = execute(
            self.client.table("menus")
            .select("*")
            .eq("week_start_date", week_start_date.isoformat())
            .limit(1),
            "load menu",
        )
        if not response.data:
            return None
        return _parse_menu(response.data[0])

    def list_menus(self) -> list[MenuSummary]:
        """Return stored menus, newest week first."""
        response = execute(
            self.client.table("menus")
            .select("id, name, week_start_date")
            .order("week_start_date", desc=True),
            "list menus",
        )
        return [
            MenuSummary(
                id=optional_int(row.get("id")),
                name=str(row.get("name") or ""),
                week_start_date=date.fromisoformat(str(row["week_start_date"])),
            )
            for row in response.data or []
        ]

    def count_menus(self) -> int:
        """Return the number of stored weeks."""
        response = execute(
            self.client.table("menus").select("id", count="exact").limit(1),
            "count menus",
        )
        return int(response.count or 0)


def _parse_menu(row: dict[str, object]) -> Menu:
    days = {
        day: _parse_slots(row.get(day), DAY_SLOTS, DayMenu) for day in WEEKDAYS
    }
    return Menu(
        id=optional_int(row.get("id")),
        name=str(row.get("name") or ""),
        week_start_date=date.fromisoformat(str(row["week_start_date"])),
        daily_options=_parse_slots(
            row.get("daily_options"), DAILY_OPTION_SLOTS, DailyOptions
        ),
        **days,
    )


def _parse_slots(
    blob: object, slots: tuple[str, ...], factory: type[_SlotsT]
) -> _SlotsT | None:
    if isinstance(blob, str) and blob:
        blob = json.loads(blob)
    if not isinstance(blob, dict):
        return None
    return factory(**{slot: optional_int(blob.get(slot)) for slot in slots})
