"""Report builders for recipe cards, menus and allergy forms."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from recipe_costing.domain.documents import (
    AllergyMatrix,
    DocumentLine,
    MenuDocument,
    MenuDocumentRow,
    MenuDocumentSection,
    RecipeDocument,
    RenderedDocument,
)
from recipe_costing.domain.ingredients import AllergenStatus
from recipe_costing.domain.menus import ResolvedDay
from recipe_costing.domain.recipes import Recipe, RecipeDetail
from recipe_costing.services.allergens import merge_status, merge_summaries
from recipe_costing.services.menus import DAILY_OPTIONS, MenuService, rollup_menu
from recipe_costing.services.recipes import RecipeService

UK_ALLERGENS = (
    "Celery",
    "Cereals (Gluten)",
    "Crustaceans",
    "Eggs",
    "Fish",
    "Lupin",
    "Milk",
    "Molluscs",
    "Mustard",
    "Nuts",
    "Sesame",
    "Soya",
    "Sulphur Dioxide",
)
_ALLERGEN_ALIASES = {
    "Gluten": "Cereals (Gluten)",
    "Sulphites": "Sulphur Dioxide",
}
_MARKS = {AllergenStatus.HAS: "✓", AllergenStatus.MAY: "may"}
_UNSAFE_FILENAME = re.compile(r'[/\\?%*:|"<>]')


class PdfRenderer(Protocol):
    """Renders recipe and menu documents to PDF."""

    def render_recipe(self, document: RecipeDocument) -> RenderedDocument:
        """Render a recipe card."""

    def render_menu(self, document: MenuDocument) -> RenderedDocument:
        """Render a weekly menu."""


class SpreadsheetRenderer(Protocol):
    """Renders tabular documents to a spreadsheet."""

    def render_allergy_matrix(self, document: AllergyMatrix) -> RenderedDocument:
        """Render an allergy form."""


@dataclass
class ReportService:
    """Builds structured documents and hands them to renderers."""

    recipe_service: RecipeService
    menu_service: MenuService
    pdf_renderer: PdfRenderer
    spreadsheet_renderer: SpreadsheetRenderer

    def recipe_pdf(self, recipe_id: int) -> RenderedDocument:
        """Render a recipe card as PDF."""
        detail = self.recipe_service.get_detail(recipe_id)
        return self.pdf_renderer.render_recipe(build_recipe_document(detail))

    def menu_pdf(
        self, week_start_date: date, include_daily_options: bool = False
    ) -> RenderedDocument:
        """Render a weekly menu with costing as PDF."""
        resolved = self.menu_service.resolve(week_start_date)
        costing = rollup_menu(resolved, include_daily_options=include_daily_options)
        summaries = self._recipe_allergens(resolved.days, resolved.daily_options)
        day_costs = {entry.day: entry for entry in costing.daily_costs}
        sections = [
            _menu_section(
                day, summaries, day_costs[day.day].cost, day_costs[day.day].servings
            )
            for day in resolved.days
        ]
        if resolved.daily_options is not None and costing.daily_options is not None:
            sections.append(
                _menu_section(
                    resolved.daily_options,
                    summaries,
                    costing.daily_options.cost,
                    costing.daily_options.servings,
                )
            )
        document = MenuDocument(
            name=resolved.menu.name,
            week_start_date=resolved.menu.week_start_date,
            sections=sections,
            allergens=_marks(merge_summaries(summaries.values())),
            total_weekly_cost=costing.total_weekly_cost,
            cost_per_person=costing.cost_per_person,
        )
        return self.pdf_renderer.render_menu(document)

    def allergy_matrix(
        self, week_start_date: date, include_code: bool = True
    ) -> RenderedDocument:
        """Render the weekly allergy form as a spreadsheet."""
        resolved = self.menu_service.resolve(week_start_date)
        summaries = self._recipe_allergens(resolved.days, resolved.daily_options)
        days = list(resolved.days)
        if resolved.daily_options is not None:
            days.append(resolved.daily_options)

        columns = list(UK_ALLERGENS)
        sections: list[tuple[str, list[tuple[str, dict[str, str]]]]] = []
        for day in days:
            rows = []
            for recipe in day.recipes():
                marks = _marks(_by_column(summaries.get(recipe.id, {})))
                for name in marks:
                    if name not in columns:
                        columns.append(name)
                rows.append((_display_name(recipe, include_code), marks))
            sections.append((_section_title(day.day), rows))

        menu = resolved.menu
        suffix = "(coded)" if include_code else "(No Codes)"
        document = AllergyMatrix(
            title=f"WEEK - {menu.week_start_date.strftime('%d/%m/%Y')}",
            menu_name=menu.name,
            columns=columns,
            sections=sections,
            filename=f"Allergies-{sanitize_filename(menu.name)} {suffix}.xlsx",
        )
        return self.spreadsheet_renderer.render_allergy_matrix(document)

    def _recipe_allergens(
        self, days: list[ResolvedDay], options: ResolvedDay | None
    ) -> dict[int, dict[str, AllergenStatus]]:
        summaries: dict[int, dict[str, AllergenStatus]] = {}
        for day in [*days, *([options] if options else [])]:
            for recipe in day.recipes():
                if recipe.id not in summaries:
                    summaries[recipe.id] = self.recipe_service.get_detail(
                        recipe.id
                    ).allergens
        return summaries


def build_recipe_document(detail: RecipeDetail) -> RecipeDocument:
    """Convert a costed recipe into a printable document."""
    recipe = detail.recipe
    return RecipeDocument(
        name=recipe.name,
        code=recipe.code,
        servings=recipe.servings,
        lines=[
            DocumentLine(
                name=line.ingredient.snapshot.name,
                quantity=line.ingredient.quantity,
                unit=line.ingredient.unit or line.ingredient.snapshot.unit,
                cost=line.cost,
                supplier=line.ingredient.snapshot.supplier,
                notes=line.ingredient.notes,
            )
            for line in detail.lines
        ],
        allergens=_marks(detail.allergens),
        total_cost=recipe.total_cost or 0.0,
        cost_per_serving=recipe.cost_per_serving or 0.0,
        instructions=recipe.instructions,
        notes=recipe.notes,
        photo=recipe.photo,
    )


def canonical_allergen(name: str) -> str:
    """Map an allergen name onto the allergy form's column naming."""
    cleaned = name.strip()
    titled = cleaned[:1].upper() + cleaned[1:]
    return _ALLERGEN_ALIASES.get(titled, titled)


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in download filenames."""
    return _UNSAFE_FILENAME.sub("-", name)


def _by_column(summary: dict[str, AllergenStatus]) -> dict[str, AllergenStatus]:
    # Several declared names can land in one form column; the strongest wins.
    columns: dict[str, AllergenStatus] = {}
    for name, status in summary.items():
        column = canonical_allergen(name)
        columns[column] = merge_status(columns.get(column), status)
    return columns


def _marks(summary: dict[str, AllergenStatus]) -> dict[str, str]:
    return {
        name: _MARKS[status] for name, status in summary.items() if status in _MARKS
    }


def _menu_section(
    day: ResolvedDay,
    summaries: dict[int, dict[str, AllergenStatus]],
    cost: float,
    servings: int,
) -> MenuDocumentSection:
    rows = [
        MenuDocumentRow(
            slot=slot.replace("_", " ").title(),
            name=recipe.name,
            code=recipe.code,
            cost_per_serving=recipe.cost_per_serving or 0.0,
            allergens=_marks(summaries.get(recipe.id, {})),
        )
        for slot, recipe in day.slots.items()
        if recipe is not None
    ]
    return MenuDocumentSection(
        title=_section_title(day.day), rows=rows, cost=cost, servings=servings
    )


def _section_title(day: str) -> str:
    if day == DAILY_OPTIONS:
        return "Daily Options"
    return day.title()


def _display_name(recipe: Recipe, include_code: bool) -> str:
    if include_code and recipe.code:
        return f"{recipe.name} ({recipe.code})"
    return recipe.name
