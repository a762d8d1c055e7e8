"""Supabase implementation for ingredients and allergen declarations."""

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
)
from recipe_costing.domain.ingredients import (
    AllergenDeclaration,
    AllergenEntry,
    Ingredient,
    IngredientWithAllergens,
)
from recipe_costing.services.allergens import parse_status
from recipe_costing.services.ingredients import IngredientRepository


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase-backed repository for the ingredient store."""

    client: Client
    page_size: int = PAGE_SIZE
    chunk_size: int = CHUNK_SIZE

    def upsert_ingredients(self, ingredients: list[Ingredient]) -> None:
        """Insert or update ingredients by product code."""
        if not ingredients:
            return
        payload = [
            {
                "product_code": item.product_code,
                "name": item.name,
                "supplier": item.supplier,
                "weight": item.pack_weight,
                "unit": item.unit,
                "price": item.price,
            }
            for item in ingredients
        ]
        execute(
            self.client.table("ingredients").upsert(
                payload, on_conflict="product_code"
            ),
            "upsert ingredients",
        )

    def upsert_allergens(self, declarations: list[AllergenDeclaration]) -> None:
        """Insert or update allergen declarations."""
        if not declarations:
            return
        payload = [
            {
                "product_code": item.product_code,
                "allergy": item.allergen,
                "status": item.status.value,
            }
            for item in declarations
        ]
        execute(
            self.client.table("allergies").upsert(
                payload, on_conflict="product_code,allergy"
            ),
            "upsert allergies",
        )

    def get_ingredient(self, product_code: str) -> IngredientWithAllergens | None:
        """Return an ingredient with its allergens, if present."""
        return self.get_ingredients([product_code]).get(product_code)

    def get_ingredients(
        self, product_codes: Iterable[str]
    ) -> dict[str, IngredientWithAllergens]:
        """Return ingredients with allergens keyed by product code."""
        codes = sorted(set(product_codes))
        if not codes:
            return {}
        ingredients: list[Ingredient] = []
        for chunk in chunked(codes, self.chunk_size):
            response = execute(
                self.client.table("ingredients")
                .select("*")
                .in_("product_code", list(chunk)),
                "load ingredients",
            )
            ingredients.extend(_parse_ingredient(row) for row in response.data or [])
        allergens = self._allergens_for([item.product_code for item in ingredients])
        return {
            item.product_code: IngredientWithAllergens(
                ingredient=item, allergens=tuple(allergens.get(item.product_code, []))
            )
            for item in ingredients
        }

    def existing_codes(self, product_codes: Iterable[str]) -> set[str]:
        """Return which of the given product codes exist."""
        codes = sorted(set(product_codes))
        if not codes:
            return set()
        found: set[str] = set()
        for chunk in chunked(codes, self.chunk_size):
            response = execute(
                self.client.table("ingredients")
                .select("product_code")
                .in_("product_code", list(chunk)),
                "check product codes",
            )
            found.update(str(row["product_code"]) for row in response.data or [])
        return found

    def search(self, query: str, limit: int) -> list[IngredientWithAllergens]:
        """Search ingredients by name or product code."""
        pattern = f"%{query}%"
        response = execute(
            self.client.table("ingredients")
            .select("*")
            .or_(f"name.ilike.{pattern},product_code.ilike.{pattern}")
            .order("name", desc=False)
            .limit(limit),
            "search ingredients",
        )
        ingredients = [_parse_ingredient(row) for row in response.data or []]
        allergens = self._allergens_for([item.product_code for item in ingredients])
        return [
            IngredientWithAllergens(
                ingredient=item, allergens=tuple(allergens.get(item.product_code, []))
            )
            for item in ingredients
        ]

    def count_ingredients(self) -> int:
        """Return the number of ingredients."""
        response = execute(
            self.client.table("ingredients").select("id", count="exact").limit(1),
            "count ingredients",
        )
        return int(response.count or 0)

    def count_allergen_types(self) -> int:
        """Return the number of distinct allergen names."""
        rows = fetch_all(
            lambda: self.client.table("allergies")
            .select("allergy")
            .order("allergy", desc=False)
            .order("product_code", desc=False),
            "count allergen types",
            self.page_size,
        )
        return len({row.get("allergy") for row in rows})

    def _allergens_for(
        self, product_codes: list[str]
    ) -> dict[str, list[AllergenEntry]]:
        if not product_codes:
            return {}
        rows: list[dict[str, object]] = []
        for chunk in chunked(product_codes, self.chunk_size):
            rows.extend(self._allergen_rows(list(chunk)))
        grouped: dict[str, list[AllergenEntry]] = {}
        for row in rows:
            status = parse_status(row.get("status"))
            name = row.get("allergy")
            if status is None or not name:
                continue
            grouped.setdefault(str(row["product_code"]), []).append(
                AllergenEntry(name=str(name), status=status)
            )
        return grouped

    def _allergen_rows(self, product_codes: list[str]) -> list[dict[str, object]]:
        return fetch_all(
            lambda: self.client.table("allergies")
            .select("product_code, allergy, status")
            .in_("product_code", product_codes)
            .order("allergy", desc=False)
            .order("product_code", desc=False),
            "load allergies",
            self.page_size,
        )


def _parse_ingredient(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row into a domain model."""
    return Ingredient(
        product_code=str(row["product_code"]),
        name=str(row.get("name", "")),
        price=optional_float(row.get("price")) or 0.0,
        supplier=row.get("supplier") or None,
        pack_weight=optional_float(row.get("weight")),
        unit=row.get("unit") or None,
    )
