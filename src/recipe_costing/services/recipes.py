"""Recipe service: snapshot builder, cost recalculation and recipe CRUD."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from recipe_costing.domain.recipes import (
    IngredientSnapshot,
    Recipe,
    RecipeCost,
    RecipeDetail,
    RecipeIngredient,
    RecipeIngredientDraft,
    RecipeLineInput,
)
from recipe_costing.errors import NotFoundError, PersistenceError, ValidationError
from recipe_costing.services.allergens import summarize
from recipe_costing.services.costing import compute_recipe_cost, cost_lines
from recipe_costing.services.ingredients import IngredientRepository
from recipe_costing.services.snapshots import build_snapshot

_logger = logging.getLogger(__name__)

RECIPE_FIELDS = (
    "name",
    "code",
    "description",
    "servings",
    "prep_time",
    "cook_time",
    "instructions",
    "notes",
    "photo",
)
_TOP_COUNT = 10


class RecipeRepository(Protocol):
    """Persistence interface for recipes and recipe lines."""

    def create_recipe(self, payload: dict[str, object]) -> Recipe:
        """Create a recipe and return it."""

    def update_recipe(self, recipe_id: int, payload: dict[str, object]) -> Recipe:
        """Update recipe fields and return the recipe."""

    def get_recipe(self, recipe_id: int) -> Recipe | None:
        """Return a recipe by id, if present."""

    def get_recipes(self, recipe_ids: Iterable[int]) -> dict[int, Recipe]:
        """Return recipes keyed by id; unknown ids are omitted."""

    def list_recipes(self, query: str | None = None) -> list[Recipe]:
        """Return recipes ordered by name, optionally filtered by name or code."""

    def delete_recipe(self, recipe_id: int) -> bool:
        """Delete a recipe and its lines. Return whether it existed."""

    def add_ingredient(self, draft: RecipeIngredientDraft) -> RecipeIngredient:
        """Insert a recipe line."""

    def list_ingredients(self, recipe_id: int) -> list[RecipeIngredient]:
        """Return the lines of a recipe."""

    def replace_ingredients(
        self, recipe_id: int, drafts: list[RecipeIngredientDraft]
    ) -> list[RecipeIngredient]:
        """Atomically replace every line of a recipe."""

    def find_ingredients_by_codes(
        self, product_codes: Iterable[str]
    ) -> list[RecipeIngredient]:
        """Return lines whose original product code is in the given set."""

    def update_snapshot(
        self, recipe_ingredient_id: int, snapshot: IngredientSnapshot
    ) -> None:
        """Overwrite the snapshot fields of a recipe line."""

    def update_costs(self, recipe_id: int, cost: RecipeCost) -> None:
        """Store cached cost figures on a recipe."""

    def count_recipes(self) -> int:
        """Return the number of recipes."""


@dataclass
class RecipeService:
    """Application service for recipes and their costs."""

    repository: RecipeRepository
    ingredient_repository: IngredientRepository

    def create_recipe(
        self, payload: dict[str, object], lines: list[RecipeLineInput] | None = None
    ) -> RecipeDetail:
        """Create a recipe with its lines and compute its cost."""
        fields = _validate_recipe_payload(payload, partial=False)
        requested = [_validate_line(line) for line in lines or []]
        snapshots = self._snapshots_for(line.product_code for line in requested)
        recipe = self.repository.create_recipe(
            {**fields, "total_cost": 0.0, "cost_per_serving": 0.0}
        )
        drafts = [
            _draft(recipe.id, line, snapshots[line.product_code]) for line in requested
        ]
        if drafts:
            self.repository.replace_ingredients(recipe.id, drafts)
        self.recalculate(recipe.id)
        return self.get_detail(recipe.id)

    def update_recipe(self, recipe_id: int, payload: dict[str, object]) -> Recipe:
        """Update recipe fields; servings changes refresh the cached cost."""
        self._require_recipe(recipe_id)
        fields = _validate_recipe_payload(payload, partial=True)
        if not fields:
            raise ValidationError("No recipe fields to update")
        recipe = self.repository.update_recipe(recipe_id, fields)
        if "servings" in fields:
            self.recalculate(recipe_id)
            recipe = self._require_recipe(recipe_id)
        return recipe

    def attach_ingredient(
        self,
        recipe_id: int,
        product_code: str | None,
        quantity: object,
        unit: str | None = None,
        notes: str | None = None,
    ) -> RecipeIngredient:
        """Snapshot an ingredient onto a new recipe line.

        The recipe cost is not recalculated; callers recalculate once after
        attaching a batch of lines.
        """
        line = _validate_line(
            RecipeLineInput(
                product_code=product_code, quantity=quantity, unit=unit, notes=notes
            )
        )
        self._require_recipe(recipe_id)
        source = self.ingredient_repository.get_ingredient(line.product_code)
        if source is None:
            raise NotFoundError(f"Ingredient {line.product_code} not found")
        return self.repository.add_ingredient(
            _draft(recipe_id, line, build_snapshot(source))
        )

    def replace_ingredients(
        self, recipe_id: int, lines: list[RecipeLineInput]
    ) -> RecipeDetail:
        """Replace every line of a recipe and recalculate its cost."""
        self._require_recipe(recipe_id)
        requested = [_validate_line(line) for line in lines]
        snapshots = self._snapshots_for(line.product_code for line in requested)
        drafts = [
            _draft(recipe_id, line, snapshots[line.product_code]) for line in requested
        ]
        self.repository.replace_ingredients(recipe_id, drafts)
        self.recalculate(recipe_id)
        return self.get_detail(recipe_id)

    def recalculate(self, recipe_id: int) -> RecipeCost:
        """Recompute and store the cached cost of a recipe."""
        recipe = self._require_recipe(recipe_id)
        ingredients = self.repository.list_ingredients(recipe_id)
        cost = compute_recipe_cost(ingredients, recipe.servings)
        self.repository.update_costs(recipe_id, cost)
        return cost

    def recalculate_all(self) -> dict[str, int]:
        """Recalculate every recipe that has ingredients."""
        recipes = self.repository.list_recipes()
        recalculated = 0
        errors = 0
        _logger.info("Starting cost recalculation for %s recipes", len(recipes))
        for recipe in recipes:
            try:
                if not self.repository.list_ingredients(recipe.id):
                    continue
                self.recalculate(recipe.id)
                recalculated += 1
            except (PersistenceError, NotFoundError):
                errors += 1
                _logger.exception(
                    "Failed to recalculate recipe %s (%s)", recipe.id, recipe.name
                )
        _logger.info(
            "Cost recalculation complete: recalculated=%s errors=%s",
            recalculated,
            errors,
        )
        return {"recalculated": recalculated, "errors": errors, "total": len(recipes)}

    def get_detail(self, recipe_id: int) -> RecipeDetail:
        """Return a recipe with costed lines and allergen summary."""
        recipe = self._require_recipe(recipe_id)
        ingredients = self.repository.list_ingredients(recipe_id)
        if recipe.total_cost is None or recipe.cost_per_serving is None:
            self.recalculate(recipe_id)
            recipe = self._require_recipe(recipe_id)
        return RecipeDetail(
            recipe=recipe,
            lines=cost_lines(ingredients),
            allergens=summarize(ingredients),
        )

    def list_recipes(self, query: str | None = None) -> list[Recipe]:
        """List recipes, optionally filtered by name or code."""
        cleaned = query.strip() if query else None
        return self.repository.list_recipes(cleaned or None)

    def delete_recipe(self, recipe_id: int) -> None:
        """Delete a recipe or raise NotFoundError."""
        if not self.repository.delete_recipe(recipe_id):
            raise NotFoundError(f"Recipe {recipe_id} not found")

    def duplicate(self, recipe_id: int) -> RecipeDetail:
        """Copy a recipe, re-snapshotting its lines from current ingredient data."""
        original = self._require_recipe(recipe_id)
        lines = [
            RecipeLineInput(
                product_code=ingredient.original_product_code,
                quantity=ingredient.quantity,
                unit=ingredient.unit,
                notes=ingredient.notes,
            )
            for ingredient in self.repository.list_ingredients(recipe_id)
        ]
        payload: dict[str, object] = {
            "name": f"{original.name} (Copy)",
            "code": f"{original.code}_COPY" if original.code else None,
            "description": original.description,
            "servings": original.servings,
            "prep_time": original.prep_time,
            "cook_time": original.cook_time,
            "instructions": original.instructions,
            "notes": original.notes,
            "photo": original.photo,
        }
        return self.create_recipe(payload, lines)

    def analytics(self) -> dict[str, object]:
        """Summarize the spread of cost per serving across recipes."""
        recipes = self.repository.list_recipes()
        costed = [recipe for recipe in recipes if (recipe.cost_per_serving or 0) > 0]
        distribution = dict.fromkeys(
            ("under_1", "between_1_and_2", "between_2_and_3", "over_3"), 0
        )
        if not costed:
            return {
                "total_recipes": len(recipes),
                "recipes_with_costs": 0,
                "most_expensive": None,
                "least_expensive": None,
                "average_cost": 0.0,
                "top_expensive": [],
                "top_cheapest": [],
                "cost_distribution": distribution,
            }
        ranked = sorted(costed, key=lambda r: r.cost_per_serving or 0.0, reverse=True)
        for recipe in costed:
            distribution[_cost_bucket(recipe.cost_per_serving or 0.0)] += 1
        average = sum(r.cost_per_serving or 0.0 for r in costed) / len(costed)
        return {
            "total_recipes": len(recipes),
            "recipes_with_costs": len(costed),
            "most_expensive": _summary(ranked[0]),
            "least_expensive": _summary(ranked[-1]),
            "average_cost": round(average, 2),
            "top_expensive": [_summary(r) for r in ranked[:_TOP_COUNT]],
            "top_cheapest": [_summary(r) for r in reversed(ranked[-_TOP_COUNT:])],
            "cost_distribution": distribution,
        }

    def _require_recipe(self, recipe_id: int) -> Recipe:
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        return recipe

    def _snapshots_for(
        self, product_codes: Iterable[str]
    ) -> dict[str, IngredientSnapshot]:
        codes = set(product_codes)
        if not codes:
            return {}
        found = self.ingredient_repository.get_ingredients(codes)
        missing = sorted(codes - set(found))
        if missing:
            raise NotFoundError(f"Ingredients not found: {', '.join(missing)}")
        return {code: build_snapshot(source) for code, source in found.items()}


@dataclass(frozen=True)
class _ValidLine:
    product_code: str
    quantity: float
    unit: str | None
    notes: str | None


def _validate_line(line: RecipeLineInput) -> _ValidLine:
    code = (line.product_code or "").strip()
    if not code:
        raise ValidationError("Ingredient is missing a product code")
    quantity = _parse_number(line.quantity)
    if quantity is None:
        raise ValidationError(f"Quantity for {code} must be a number")
    if quantity <= 0:
        raise ValidationError(f"Quantity for {code} must be greater than zero")
    return _ValidLine(
        product_code=code,
        quantity=quantity,
        unit=line.unit or None,
        notes=line.notes or None,
    )


def _draft(
    recipe_id: int, line: _ValidLine, snapshot: IngredientSnapshot
) -> RecipeIngredientDraft:
    return RecipeIngredientDraft(
        recipe_id=recipe_id,
        original_product_code=line.product_code,
        quantity=line.quantity,
        snapshot=snapshot,
        unit=line.unit,
        notes=line.notes,
    )


def _validate_recipe_payload(
    payload: dict[str, object], *, partial: bool
) -> dict[str, object]:
    fields = {key: value for key, value in payload.items() if key in RECIPE_FIELDS}
    if not partial or "name" in fields:
        name = fields.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Recipe name is required")
        fields["name"] = name.strip()
    if not partial or "servings" in fields:
        servings = fields.get("servings", 1)
        if isinstance(servings, bool) or not isinstance(servings, int):
            raise ValidationError("Servings must be a whole number")
        if servings < 0:
            raise ValidationError("Servings cannot be negative")
        fields["servings"] = servings
    for key in ("prep_time", "cook_time"):
        value = fields.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{key} must be a whole number of minutes")
    return fields


def _parse_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _cost_bucket(cost: float) -> str:
    if cost < 1:
        return "under_1"
    if cost < 2:  # noqa: PLR2004
        return "between_1_and_2"
    if cost < 3:  # noqa: PLR2004
        return "between_2_and_3"
    return "over_3"


def _summary(recipe: Recipe) -> dict[str, object]:
    return {
        "id": recipe.id,
        "name": recipe.name,
        "code": recipe.code,
        "servings": recipe.servings,
        "cost_per_serving": recipe.cost_per_serving,
    }
