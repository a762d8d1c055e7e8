"""Weekly menu storage and cost rollup."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol

from recipe_costing.domain.menus import (
    WEEKDAYS,
    DailyCost,
    Menu,
    MenuCosting,
    MenuSummary,
    ResolvedDay,
    ResolvedMenu,
)
from recipe_costing.domain.recipes import Recipe
from recipe_costing.errors import NotFoundError, ValidationError
from recipe_costing.services.recipes import RecipeRepository

DAILY_OPTIONS = "daily_options"


class MenuRepository(Protocol):
    """Persistence interface for weekly menus."""

    def upsert_menu(self, menu: Menu) -> Menu:
        """Insert or replace the menu for its week start date."""

    def get_menu(self, week_start_date: date) -> Menu | None:
        """Return the menu for a week, if present."""

    def list_menus(self) -> list[MenuSummary]:
        """Return stored menus, newest week first."""

    def count_menus(self) -> int:
        """Return the number of stored weeks."""


@dataclass
class MenuService:
    """Application service for weekly menus."""

    repository: MenuRepository
    recipe_repository: RecipeRepository

    def save_menu(self, menu: Menu) -> Menu:
        """Validate and store a menu, replacing any menu for the same week."""
        if not menu.name or not menu.name.strip():
            raise ValidationError("Menu name is required")
        return self.repository.upsert_menu(menu)

    def get_menu(self, week_start_date: date) -> Menu:
        """Return a stored menu or raise NotFoundError."""
        menu = self.repository.get_menu(week_start_date)
        if menu is None:
            raise NotFoundError(f"Menu for week {week_start_date} not found")
        return menu

    def list_menus(self) -> list[MenuSummary]:
        """List stored menus."""
        return self.repository.list_menus()

    def resolve(self, week_start_date: date) -> ResolvedMenu:
        """Return a menu with its recipe references loaded."""
        menu = self.get_menu(week_start_date)
        recipes = self.recipe_repository.get_recipes(menu.recipe_ids())
        return resolve_menu(menu, recipes)

    def costing(
        self, week_start_date: date, include_daily_options: bool = False
    ) -> MenuCosting:
        """Return the cost rollup for a stored menu."""
        return rollup_menu(
            self.resolve(week_start_date), include_daily_options=include_daily_options
        )


def resolve_menu(menu: Menu, recipes: dict[int, Recipe]) -> ResolvedMenu:
    """Replace recipe ids with recipes; unknown ids resolve to None."""
    days = []
    for name in WEEKDAYS:
        day_menu = menu.day(name)
        if day_menu is None:
            continue
        days.append(
            ResolvedDay(
                day=name,
                slots={
                    slot: recipes.get(rid) if rid else None
                    for slot, rid in day_menu.slots().items()
                },
            )
        )
    options = None
    if menu.daily_options is not None:
        options = ResolvedDay(
            day=DAILY_OPTIONS,
            slots={
                slot: recipes.get(rid) if rid else None
                for slot, rid in menu.daily_options.slots().items()
            },
        )
    return ResolvedMenu(menu=menu, days=days, daily_options=options)


def rollup_day(day: ResolvedDay) -> DailyCost:
    """Sum cost per serving over populated slots; servings is the largest slot."""
    items = day.recipes()
    return DailyCost(
        day=day.day,
        cost=sum(recipe.cost_per_serving or 0.0 for recipe in items),
        items=items,
        servings=max((recipe.servings for recipe in items), default=0),
    )


def rollup_menu(
    menu: ResolvedMenu, include_daily_options: bool = False
) -> MenuCosting:
    """Roll recipe costs up into daily and weekly totals.

    Daily options are always rolled up on their own and only count towards
    the weekly figures when ``include_daily_options`` is set.
    """
    daily_costs = [rollup_day(day) for day in menu.days]
    options = rollup_day(menu.daily_options) if menu.daily_options else None
    counted = list(daily_costs)
    if include_daily_options and options is not None:
        counted.append(options)
    total_cost = sum(entry.cost for entry in counted)
    total_servings = max((entry.servings for entry in counted), default=0)
    cost_per_person = (
        round(total_cost / total_servings, 2) if total_servings > 0 else 0.0
    )
    return MenuCosting(
        daily_costs=daily_costs,
        total_weekly_cost=total_cost,
        total_weekly_servings=total_servings,
        cost_per_person=cost_per_person,
        daily_options=options,
    )
