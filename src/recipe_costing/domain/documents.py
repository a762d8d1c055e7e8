"""Structured documents handed to renderers."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class DocumentLine:
    """Ingredient line as printed on a recipe document."""

    name: str
    quantity: float
    unit: str | None
    cost: float
    supplier: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RecipeDocument:
    """Printable recipe card."""

    name: str
    code: str | None
    servings: int
    lines: list[DocumentLine]
    allergens: dict[str, str]
    total_cost: float
    cost_per_serving: float
    instructions: str | None = None
    notes: str | None = None
    photo: str | None = None


@dataclass(frozen=True)
class MenuDocumentRow:
    """Recipe placed in a menu section."""

    slot: str
    name: str
    code: str | None
    cost_per_serving: float
    allergens: dict[str, str]


@dataclass(frozen=True)
class MenuDocumentSection:
    """One weekday (or the daily options) of a printed menu."""

    title: str
    rows: list[MenuDocumentRow]
    cost: float
    servings: int


@dataclass(frozen=True)
class MenuDocument:
    """Printable weekly menu with costing."""

    name: str
    week_start_date: date
    sections: list[MenuDocumentSection]
    allergens: dict[str, str]
    total_weekly_cost: float
    cost_per_person: float


@dataclass(frozen=True)
class AllergyMatrix:
    """Grid of menu recipes against allergen columns."""

    title: str
    menu_name: str
    columns: list[str]
    sections: list[tuple[str, list[tuple[str, dict[str, str]]]]]
    filename: str = "allergies.xlsx"


@dataclass(frozen=True)
class RenderedDocument:
    """Renderer output."""

    content: bytes
    filename: str
    media_type: str = field(default="application/octet-stream")
