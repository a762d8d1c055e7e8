"""Domain models for recipes and their ingredient snapshots."""

from dataclasses import dataclass, field

from recipe_costing.domain.ingredients import AllergenEntry, AllergenStatus


@dataclass(frozen=True)
class Recipe:
    """Recipe with cached cost figures."""

    id: int
    name: str
    servings: int
    code: str | None = None
    description: str | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    instructions: str | None = None
    notes: str | None = None
    photo: str | None = None
    total_cost: float | None = None
    cost_per_serving: float | None = None


@dataclass(frozen=True)
class IngredientSnapshot:
    """Ingredient data frozen onto a recipe line at attach or resync time."""

    name: str
    price: float | None
    supplier: str | None = None
    weight: float | None = None
    unit: str | None = None
    allergens: tuple[AllergenEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RecipeIngredientDraft:
    """Recipe line ready to be inserted."""

    recipe_id: int
    original_product_code: str
    quantity: float
    snapshot: IngredientSnapshot
    unit: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RecipeIngredient:
    """Persisted recipe line with its ingredient snapshot."""

    id: int
    recipe_id: int
    original_product_code: str
    quantity: float
    snapshot: IngredientSnapshot
    unit: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RecipeCost:
    """Result of a cost calculation."""

    total_cost: float
    cost_per_serving: float


@dataclass(frozen=True)
class CostedLine:
    """Recipe line with its derived unit price and cost."""

    ingredient: RecipeIngredient
    unit_price: float
    cost: float


@dataclass(frozen=True)
class RecipeDetail:
    """Recipe with costed lines and its allergen summary."""

    recipe: Recipe
    lines: list[CostedLine]
    allergens: dict[str, AllergenStatus]


@dataclass(frozen=True)
class RecipeLineInput:
    """Requested recipe line before its snapshot is taken."""

    product_code: str | None
    quantity: object
    unit: str | None = None
    notes: str | None = None
