"""Services for the ingredient store."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from recipe_costing.domain.ingredients import (
    AllergenDeclaration,
    Ingredient,
    IngredientWithAllergens,
)
from recipe_costing.errors import NotFoundError


class IngredientRepository(Protocol):
    """Persistence interface for ingredients and allergen declarations."""

    def upsert_ingredients(self, ingredients: list[Ingredient]) -> None:
        """Insert or update ingredients by product code."""

    def upsert_allergens(self, declarations: list[AllergenDeclaration]) -> None:
        """Insert or update declarations by (product code, allergen)."""

    def get_ingredient(self, product_code: str) -> IngredientWithAllergens | None:
        """Return an ingredient with its allergens, if present."""

    def get_ingredients(
        self, product_codes: Iterable[str]
    ) -> dict[str, IngredientWithAllergens]:
        """Return ingredients with allergens keyed by product code."""

    def existing_codes(self, product_codes: Iterable[str]) -> set[str]:
        """Return which of the given product codes exist."""

    def search(self, query: str, limit: int) -> list[IngredientWithAllergens]:
        """Search ingredients by name or product code."""

    def count_ingredients(self) -> int:
        """Return the number of ingredients."""

    def count_allergen_types(self) -> int:
        """Return the number of distinct allergen names."""


@dataclass
class IngredientService:
    """Application service for ingredient lookups."""

    repository: IngredientRepository

    def search(
        self, query: str | None, limit: int = 10
    ) -> list[IngredientWithAllergens]:
        """Search by name or code; an empty query returns nothing."""
        if not query or not query.strip():
            return []
        return self.repository.search(query.strip(), limit)

    def get(self, product_code: str) -> IngredientWithAllergens:
        """Return an ingredient or raise NotFoundError."""
        ingredient = self.repository.get_ingredient(product_code)
        if ingredient is None:
            raise NotFoundError(f"Ingredient {product_code} not found")
        return ingredient
