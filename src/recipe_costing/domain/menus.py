"""Domain models for weekly menus and their costing."""

from dataclasses import dataclass, field
from datetime import date

from recipe_costing.domain.recipes import Recipe

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")
DAY_SLOTS = (
    "lunch_option_1",
    "lunch_option_2",
    "lunch_option_3",
    "served_with",
    "dessert",
)
DAILY_OPTION_SLOTS = ("option_1", "option_2", "option_3", "option_4")


@dataclass(frozen=True)
class DayMenu:
    """Recipe ids planned for one weekday."""

    lunch_option_1: int | None = None
    lunch_option_2: int | None = None
    lunch_option_3: int | None = None
    served_with: int | None = None
    dessert: int | None = None

    def slots(self) -> dict[str, int | None]:
        """Return slot name to recipe id in display order."""
        return {slot: getattr(self, slot) for slot in DAY_SLOTS}


@dataclass(frozen=True)
class DailyOptions:
    """Recipe ids available on every day of the week."""

    option_1: int | None = None
    option_2: int | None = None
    option_3: int | None = None
    option_4: int | None = None

    def slots(self) -> dict[str, int | None]:
        """Return slot name to recipe id in display order."""
        return {slot: getattr(self, slot) for slot in DAILY_OPTION_SLOTS}


@dataclass(frozen=True)
class Menu:
    """Weekly menu keyed by its week start date."""

    name: str
    week_start_date: date
    monday: DayMenu | None = None
    tuesday: DayMenu | None = None
    wednesday: DayMenu | None = None
    thursday: DayMenu | None = None
    friday: DayMenu | None = None
    daily_options: DailyOptions | None = None
    id: int | None = None

    def day(self, name: str) -> DayMenu | None:
        """Return the menu for a weekday name."""
        if name not in WEEKDAYS:
            raise KeyError(name)
        return getattr(self, name)

    def recipe_ids(self) -> set[int]:
        """Return every recipe id referenced by the menu."""
        ids: set[int] = set()
        for day in WEEKDAYS:
            day_menu = self.day(day)
            if day_menu is not None:
                ids.update(rid for rid in day_menu.slots().values() if rid)
        if self.daily_options is not None:
            ids.update(rid for rid in self.daily_options.slots().values() if rid)
        return ids


@dataclass(frozen=True)
class MenuSummary:
    """Listing row for a stored menu."""

    name: str
    week_start_date: date
    id: int | None = None


@dataclass(frozen=True)
class ResolvedDay:
    """Menu slots with recipe ids replaced by recipes (None when missing)."""

    day: str
    slots: dict[str, Recipe | None]

    def recipes(self) -> list[Recipe]:
        """Return populated slots in order."""
        return [recipe for recipe in self.slots.values() if recipe is not None]


@dataclass(frozen=True)
class ResolvedMenu:
    """Menu whose recipe references have been resolved."""

    menu: Menu
    days: list[ResolvedDay]
    daily_options: ResolvedDay | None = None


@dataclass(frozen=True)
class DailyCost:
    """Cost rollup for one day or for the daily options."""

    day: str
    cost: float
    items: list[Recipe] = field(default_factory=list)
    servings: int = 0


@dataclass(frozen=True)
class MenuCosting:
    """Weekly cost rollup."""

    daily_costs: list[DailyCost]
    total_weekly_cost: float
    total_weekly_servings: int
    cost_per_person: float
    daily_options: DailyCost | None = None

    def as_dict(self) -> dict[str, object]:
        """Serialize with currency figures rounded to 2 decimal places."""
        return {
            "daily_costs": [_serialize_daily(entry) for entry in self.daily_costs],
            "daily_options": _serialize_daily(self.daily_options)
            if self.daily_options
            else None,
            "total_weekly_cost": round(self.total_weekly_cost, 2),
            "total_weekly_servings": self.total_weekly_servings,
            "cost_per_person": round(self.cost_per_person, 2),
        }


def _serialize_daily(entry: DailyCost) -> dict[str, object]:
    return {
        "day": entry.day,
        "cost": round(entry.cost, 2),
        "servings": entry.servings,
        "items": [
            {
                "id": recipe.id,
                "name": recipe.name,
                "code": recipe.code,
                "servings": recipe.servings,
                "cost_per_serving": round(recipe.cost_per_serving or 0.0, 2),
            }
            for recipe in entry.items
        ],
    }
