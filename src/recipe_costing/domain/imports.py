"""Models for bulk price and allergen imports."""

from dataclasses import dataclass, field

from recipe_costing.domain.ingredients import AllergenDeclaration, Ingredient


@dataclass(frozen=True)
class ParsedPricing:
    """Ingredients read from a pricing table."""

    ingredients: list[Ingredient]
    skipped: int


@dataclass(frozen=True)
class ParsedAllergens:
    """Allergen declarations read from an allergen table."""

    declarations: list[AllergenDeclaration]
    skipped: int


@dataclass(frozen=True)
class ResyncResult:
    """Outcome of refreshing recipe snapshots for changed product codes."""

    snapshots_updated: int = 0
    recipes_recalculated: list[int] = field(default_factory=list)
    failed_recipe_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    """Summary returned after an import."""

    ingredients_processed: int
    allergens_processed: int
    rows_skipped: int
    resync: ResyncResult
