"""Cost engine: unit prices, line costs and recipe totals.

All functions are pure and tolerate malformed snapshot values. A line whose
price cannot be read contributes nothing to the total instead of aborting the
calculation for the whole recipe.
"""

import logging
import math
from collections.abc import Iterable

from recipe_costing.domain.recipes import CostedLine, RecipeCost, RecipeIngredient

_logger = logging.getLogger(__name__)


def unit_price(price: object, weight: object) -> float:
    """Return the price of one base unit of a pack.

    Products without a positive pack weight are priced per item.
    """
    resolved_price = to_float(price)
    resolved_weight = to_float(weight)
    if resolved_weight > 0:
        return resolved_price / resolved_weight
    return resolved_price


def line_cost(quantity: object, price: object, weight: object) -> float:
    """Return the cost of using ``quantity`` base units of a product."""
    return to_float(quantity) * unit_price(price, weight)


def cost_per_serving(total_cost: float, servings: object) -> float:
    """Split a total across servings, returning 0 for non-positive servings."""
    resolved_servings = to_float(servings)
    if resolved_servings <= 0:
        return 0.0
    return total_cost / resolved_servings


def cost_lines(ingredients: Iterable[RecipeIngredient]) -> list[CostedLine]:
    """Attach unit price and cost to each recipe line."""
    lines: list[CostedLine] = []
    for ingredient in ingredients:
        snapshot = ingredient.snapshot
        if _is_malformed(snapshot.price):
            _logger.warning(
                "Recipe %s line %s (%s) has no usable price; costing it at 0",
                ingredient.recipe_id,
                ingredient.id,
                ingredient.original_product_code,
            )
        if _is_malformed(ingredient.quantity):
            _logger.warning(
                "Recipe %s line %s (%s) has no usable quantity; costing it at 0",
                ingredient.recipe_id,
                ingredient.id,
                ingredient.original_product_code,
            )
        price = unit_price(snapshot.price, snapshot.weight)
        lines.append(
            CostedLine(
                ingredient=ingredient,
                unit_price=price,
                cost=to_float(ingredient.quantity) * price,
            )
        )
    return lines


def compute_recipe_cost(
    ingredients: Iterable[RecipeIngredient], servings: object
) -> RecipeCost:
    """Compute total cost and cost per serving from recipe snapshots."""
    total = sum(line.cost for line in cost_lines(ingredients))
    return RecipeCost(
        total_cost=total, cost_per_serving=cost_per_serving(total, servings)
    )


def to_float(value: object) -> float:
    """Coerce a stored numeric value, treating anything unusable as 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def _is_malformed(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        try:
            float(value.strip())
        except ValueError:
            return True
        return False
    if isinstance(value, bool) or not isinstance(value, int | float):
        return True
    return math.isnan(value) or math.isinf(value)
