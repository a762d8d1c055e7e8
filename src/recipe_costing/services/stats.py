"""Dashboard statistics."""

from dataclasses import dataclass

from recipe_costing.services.ingredients import IngredientRepository
from recipe_costing.services.menus import MenuRepository
from recipe_costing.services.recipes import RecipeRepository


@dataclass
class StatsService:
    """Service for dashboard counts."""

    ingredient_repository: IngredientRepository
    recipe_repository: RecipeRepository
    menu_repository: MenuRepository

    def counts(self) -> dict[str, int]:
        """Return record counts shown on the dashboard."""
        return {
            "ingredients": self.ingredient_repository.count_ingredients(),
            "recipes": self.recipe_repository.count_recipes(),
            "menus": self.menu_repository.count_menus(),
            "allergen_types": self.ingredient_repository.count_allergen_types(),
        }
