"""Supabase repository for recipes and recipe ingredient snapshots."""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from supabase import Client

from recipe_costing.adapters.supabase_support import (
    CHUNK_SIZE,
    PAGE_SIZE,
    chunked,
    execute,
    fetch_all,
    optional_float,
    optional_int,
)
from recipe_costing.domain.recipes import (
    IngredientSnapshot,
    Recipe,
    RecipeCost,
    RecipeIngredient,
    RecipeIngredientDraft,
)
from recipe_costing.errors import PersistenceError
from recipe_costing.services.allergens import parse_allergen_entries, to_tokens
from recipe_costing.services.recipes import RecipeRepository

_logger = logging.getLogger(__name__)

_RECIPE_COLUMNS = (
    "id, name, code, description, servings, prep_time, cook_time, instructions, "
    "notes, photo, total_cost, cost_per_serving"
)
_LINE_COLUMNS = (
    "id, recipe_id, original_product_code, quantity, unit, notes, ingredient_name, "
    "ingredient_supplier, ingredient_price, ingredient_weight, ingredient_unit, "
    "ingredient_allergies"
)


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipes."""

    client: Client
    page_size: int = PAGE_SIZE
    chunk_size: int = CHUNK_SIZE

    def create_recipe(self, payload: dict[str, object]) -> Recipe:
        """Create a recipe row and return it."""
        response = execute(
            self.client.table("recipes").insert(payload), "create recipe"
        )
        if not response.data:
            raise PersistenceError("Failed to create recipe")
        return _parse_recipe(response.data[0])

    def update_recipe(self, recipe_id: int, payload: dict[str, object]) -> Recipe:
        """Update recipe fields and return the recipe."""
        response = execute(
            self.client.table("recipes").update(payload).eq("id", recipe_id),
            "update recipe",
        )
        if not response.data:
            raise PersistenceError(f"Failed to update recipe {recipe_id}")
        return _parse_recipe(response.data[0])

    def get_recipe(self, recipe_id: int) -> Recipe | None:
        """Return a recipe by id, if present."""
        response = execute(
            self.client.table("recipes")
            .select(_RECIPE_COLUMNS)
            .eq("id", recipe_id)
            .limit(1),
            "load recipe",
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def get_recipes(self, recipe_ids: Iterable[int]) -> dict[int, Recipe]:
        """Return recipes keyed by id."""
        ids = sorted(set(recipe_ids))
        if not ids:
            return {}
        response = execute(
            self.client.table("recipes").select(_RECIPE_COLUMNS).in_("id", ids),
            "load recipes",
        )
        recipes = [_parse_recipe(row) for row in response.data or []]
        return {recipe.id: recipe for recipe in recipes}

    def list_recipes(self, query: str | None = None) -> list[Recipe]:
        """Return recipes ordered by name."""
        rows = fetch_all(
            lambda: self._recipes_query(query), "list recipes", self.page_size
        )
        return [_parse_recipe(row) for row in rows]

    def delete_recipe(self, recipe_id: int) -> bool:
        """Delete a recipe; lines cascade in the database."""
        response = execute(
            self.client.table("recipes").delete().eq("id", recipe_id),
            "delete recipe",
        )
        return bool(response.data)

    def add_ingredient(self, draft: RecipeIngredientDraft) -> RecipeIngredient:
        """Insert a recipe line."""
        response = execute(
            self.client.table("recipe_ingredients").insert(_draft_row(draft)),
            "add recipe ingredient",
        )
        if not response.data:
            raise PersistenceError("Failed to add recipe ingredient")
        return _parse_line(response.data[0])

    def list_ingredients(self, recipe_id: int) -> list[RecipeIngredient]:
        """Return the lines of a recipe."""
        response = execute(
            self.client.table("recipe_ingredients")
            .select(_LINE_COLUMNS)
            .eq("recipe_id", recipe_id)
            .order("id", desc=False),
            "list recipe ingredients",
        )
        return [_parse_line(row) for row in response.data or []]

    def replace_ingredients(
        self, recipe_id: int, drafts: list[RecipeIngredientDraft]
    ) -> list[RecipeIngredient]:
        """Replace the lines of a recipe, restoring the old lines on failure."""
        previous = execute(
            self.client.table("recipe_ingredients")
            .select("*")
            .eq("recipe_id", recipe_id),
            "load recipe ingredients",
        ).data or []
        execute(
            self.client.table("recipe_ingredients").delete().eq("recipe_id", recipe_id),
            "clear recipe ingredients",
        )
        if not drafts:
            return []
        try:
            response = execute(
                self.client.table("recipe_ingredients").insert(
                    [_draft_row(draft) for draft in drafts]
                ),
                "insert recipe ingredients",
            )
        except PersistenceError:
            _logger.warning(
                "Restoring %s lines for recipe %s after failed replace",
                len(previous),
                recipe_id,
            )
            if previous:
                execute(
                    self.client.table("recipe_ingredients").insert(previous),
                    "restore recipe ingredients",
                )
            raise
        return [_parse_line(row) for row in response.data or []]

    def find_ingredients_by_codes(
        self, product_codes: Iterable[str]
    ) -> list[RecipeIngredient]:
        """Return lines whose original product code is in the given set."""
        codes = sorted(set(product_codes))
        if not codes:
            return []
        rows: list[dict[str, object]] = []
        for chunk in chunked(codes, self.chunk_size):
            codes_in_chunk = list(chunk)
            rows.extend(
                fetch_all(
                    lambda: self.client.table("recipe_ingredients")
                    .select(_LINE_COLUMNS)
                    .in_("original_product_code", codes_in_chunk)
                    .order("id", desc=False),
                    "find recipe ingredients",
                    self.page_size,
                )
            )
        lines = [_parse_line(row) for row in rows]
        return sorted(lines, key=lambda line: line.id)

    def update_snapshot(
        self, recipe_ingredient_id: int, snapshot: IngredientSnapshot
    ) -> None:
        """Overwrite the snapshot columns of a recipe line."""
        execute(
            self.client.table("recipe_ingredients")
            .update(_snapshot_columns(snapshot))
            .eq("id", recipe_ingredient_id),
            "update recipe ingredient snapshot",
        )

    def update_costs(self, recipe_id: int, cost: RecipeCost) -> None:
        """Store cached cost figures on a recipe."""
        execute(
            self.client.table("recipes")
            .update(
                {
                    "total_cost": cost.total_cost,
                    "cost_per_serving": cost.cost_per_serving,
                }
            )
            .eq("id", recipe_id),
            "update recipe costs",
        )

    def count_recipes(self) -> int:
        """Return the number of recipes."""
        response = execute(
            self.client.table("recipes").select("id", count="exact").limit(1),
            "count recipes",
        )
        return int(response.count or 0)

    def _recipes_query(self, query: str | None):  # type: ignore[no-untyped-def]
        request = self.client.table("recipes").select(_RECIPE_COLUMNS)
        if query:
            pattern = f"%{query}%"
            request = request.or_(f"name.ilike.{pattern},code.ilike.{pattern}")
        return request.order("name", desc=False).order("id", desc=False)


def _snapshot_columns(snapshot: IngredientSnapshot) -> dict[str, object]:
    return {
        "ingredient_name": snapshot.name,
        "ingredient_supplier": snapshot.supplier,
        "ingredient_price": snapshot.price,
        "ingredient_weight": snapshot.weight,
        "ingredient_unit": snapshot.unit,
        "ingredient_allergies": json.dumps(to_tokens(snapshot.allergens)),
    }


def _draft_row(draft: RecipeIngredientDraft) -> dict[str, object]:
    return {
        "recipe_id": draft.recipe_id,
        "original_product_code": draft.original_product_code,
        "quantity": draft.quantity,
        "unit": draft.unit,
        "notes": draft.notes,
        **_snapshot_columns(draft.snapshot),
    }


def _parse_recipe(row: dict[str, object]) -> Recipe:
    return Recipe(
        id=int(row["id"]),
        name=str(row.get("name", "")),
        servings=optional_int(row.get("servings")) or 0,
        code=row.get("code") or None,
        description=row.get("description"),
        prep_time=optional_int(row.get("prep_time")),
        cook_time=optional_int(row.get("cook_time")),
        instructions=row.get("instructions"),
        notes=row.get("notes"),
        photo=row.get("photo"),
        total_cost=optional_float(row.get("total_cost")),
        cost_per_serving=optional_float(row.get("cost_per_serving")),
    )


def _parse_line(row: dict[str, object]) -> RecipeIngredient:
    return RecipeIngredient(
        id=int(row["id"]),
        recipe_id=int(row["recipe_id"]),
        original_product_code=str(row.get("original_product_code") or ""),
        quantity=optional_float(row.get("quantity")) or 0.0,
        unit=row.get("unit"),
        notes=row.get("notes"),
        snapshot=IngredientSnapshot(
            name=str(row.get("ingredient_name") or ""),
            price=row.get("ingredient_price"),
            supplier=row.get("ingredient_supplier"),
            weight=row.get("ingredient_weight"),
            unit=row.get("ingredient_unit"),
            allergens=parse_allergen_entries(row.get("ingredient_allergies")),
        ),
    )
