"""Snapshot builder for recipe lines."""

from recipe_costing.domain.ingredients import IngredientWithAllergens
from recipe_costing.domain.recipes import IngredientSnapshot


def build_snapshot(source: IngredientWithAllergens) -> IngredientSnapshot:
    """Copy the current ingredient and allergen data into a snapshot."""
    ingredient = source.ingredient
    return IngredientSnapshot(
        name=ingredient.name,
        price=ingredient.price,
        supplier=ingredient.supplier,
        weight=ingredient.pack_weight,
        unit=ingredient.unit,
        allergens=tuple(source.allergens),
    )
