"""Domain models for ingredients and allergen declarations."""

from dataclasses import dataclass, field
from enum import StrEnum


class AllergenStatus(StrEnum):
    """Declared presence of an allergen in a product."""

    HAS = "has"
    NO = "no"
    MAY = "may"


@dataclass(frozen=True)
class AllergenEntry:
    """Allergen name paired with its declared status."""

    name: str
    status: AllergenStatus


@dataclass(frozen=True)
class Ingredient:
    """Canonical supplier product keyed by product code."""

    product_code: str
    name: str
    price: float
    supplier: str | None = None
    pack_weight: float | None = None
    unit: str | None = None


@dataclass(frozen=True)
class AllergenDeclaration:
    """Allergen status declared for one product."""

    product_code: str
    allergen: str
    status: AllergenStatus


@dataclass(frozen=True)
class IngredientWithAllergens:
    """Ingredient joined with its allergen declarations."""

    ingredient: Ingredient
    allergens: tuple[AllergenEntry, ...] = field(default_factory=tuple)
