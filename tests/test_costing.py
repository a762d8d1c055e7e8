"""Tests for the cost engine."""

import logging
import math

import pytest

from recipe_costing.domain.recipes import IngredientSnapshot, RecipeIngredient
from recipe_costing.services.costing import (
    compute_recipe_cost,
    cost_lines,
    cost_per_serving,
    line_cost,
    to_float,
    unit_price,
)


def _line(
    line_id: int, quantity: object, price: object, weight: object = None
) -> RecipeIngredient:
    return RecipeIngredient(
        id=line_id,
        recipe_id=1,
        original_product_code=f"ING{line_id}",
        quantity=quantity,  # type: ignore[arg-type]
        snapshot=IngredientSnapshot(
            name=f"Ingredient {line_id}",
            price=price,  # type: ignore[arg-type]
            weight=weight,  # type: ignore[arg-type]
        ),
    )


def test_unit_price_divides_by_positive_weight() -> None:
    assert unit_price(10, 5) == 2
    assert unit_price(10, None) == 10
    assert unit_price(10, 0) == 10
    assert unit_price(10, -4) == 10


def test_line_cost_uses_unit_price() -> None:
    assert line_cost(3, 10, 5) == 6
    assert line_cost("3", "10", "5") == 6


@pytest.mark.parametrize("servings", [0, -1, None, "abc"])
def test_cost_per_serving_is_zero_without_servings(servings: object) -> None:
    assert cost_per_serving(12.0, servings) == 0.0


def test_recipe_cost_scenario() -> None:
    cost = compute_recipe_cost([_line(1, 3, 10, 5)], servings=2)

    assert cost.total_cost == 6
    assert cost.cost_per_serving == 3


def test_total_is_sum_of_line_costs() -> None:
    lines = [_line(1, 3, 10, 5), _line(2, 0.25, 4.8, 2.4), _line(3, 2, 1.5)]

    cost = compute_recipe_cost(lines, servings=4)

    expected = 3 * 2 + 0.25 * 2 + 2 * 1.5
    assert math.isclose(cost.total_cost, expected)
    assert math.isclose(cost.cost_per_serving, expected / 4)


def test_malformed_price_contributes_zero(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("recipe_costing"), "propagate", True)
    lines = [_line(1, 3, 10, 5), _line(2, 2, "n/a"), _line(3, 1, None)]

    with caplog.at_level(logging.WARNING, logger="recipe_costing"):
        costed = cost_lines(lines)

    assert [line.cost for line in costed] == [6, 0, 0]
    assert "ING2" in caplog.text
    assert "ING3" in caplog.text


def test_malformed_quantity_contributes_zero(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("recipe_costing"), "propagate", True)
    lines = [_line(1, "two", 10, 5), _line(2, None, 4), _line(3, 1, 4)]

    with caplog.at_level(logging.WARNING, logger="recipe_costing"):
        costed = cost_lines(lines)

    assert [line.cost for line in costed] == [0, 0, 4]
    warnings = [r.getMessage() for r in caplog.records if "quantity" in r.getMessage()]
    assert len(warnings) == 2
    assert "ING1" in warnings[0]
    assert "ING2" in warnings[1]


def test_to_float_rejects_unusable_values() -> None:
    assert to_float(True) == 0.0
    assert to_float(float("nan")) == 0.0
    assert to_float(float("inf")) == 0.0
    assert to_float(" 2.5 ") == 2.5
    assert to_float(object()) == 0.0
