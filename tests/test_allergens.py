"""Tests for allergen parsing and aggregation."""

import json

import pytest

from recipe_costing.domain.ingredients import AllergenEntry, AllergenStatus
from recipe_costing.domain.recipes import IngredientSnapshot, RecipeIngredient
from recipe_costing.services.allergens import (
    merge_summaries,
    parse_allergen_entries,
    status_from_cell,
    summarize,
    to_tokens,
)

HAS = AllergenStatus.HAS
MAY = AllergenStatus.MAY
NO = AllergenStatus.NO


def _ingredient(code: str, *entries: tuple[str, AllergenStatus]) -> RecipeIngredient:
    return RecipeIngredient(
        id=len(code),
        recipe_id=1,
        original_product_code=code,
        quantity=1,
        snapshot=IngredientSnapshot(
            name=code,
            price=1.0,
            allergens=tuple(AllergenEntry(name, status) for name, status in entries),
        ),
    )


def test_has_beats_may_for_same_allergen() -> None:
    nuts = _ingredient("A", ("Nuts", HAS))
    traces = _ingredient("B", ("Nuts", MAY))

    assert summarize([nuts, traces]) == {"Nuts": HAS}


def test_summary_is_commutative() -> None:
    first = _ingredient("A", ("Milk", MAY), ("Eggs", NO), ("Celery", HAS))
    second = _ingredient("B", ("Milk", HAS), ("Eggs", MAY), ("Fish", NO))

    assert summarize([first, second]) == summarize([second, first])
    assert summarize([first, second]) == {"Celery": HAS, "Eggs": MAY, "Milk": HAS}


def test_no_and_undeclared_are_omitted() -> None:
    assert summarize([_ingredient("A", ("Mustard", NO))]) == {}
    assert summarize([]) == {}


def test_merge_summaries_for_menu_scope() -> None:
    monday = {"Milk": MAY}
    tuesday = {"Milk": HAS, "Soya": MAY}

    merged = merge_summaries([monday, tuesday])

    assert merged == {"Milk": HAS, "Soya": MAY}
    assert merge_summaries([tuesday, monday]) == merged


@pytest.mark.parametrize(
    ("cell", "expected"),
    [
        ("Y", HAS),
        ("yes", HAS),
        (" n ", NO),
        ("No", NO),
        ("may", MAY),
        ("May Contain", MAY),
        ("P", MAY),
        ("", None),
        ("unknown", None),
        (None, None),
    ],
)
def test_status_from_cell(cell: object, expected: AllergenStatus | None) -> None:
    assert status_from_cell(cell) == expected


def test_parse_tokens_and_structured_entries() -> None:
    raw = json.dumps(["Nuts:has", "Milk:may", "Eggs:no", "broken", "Fish:maybe"])

    entries = parse_allergen_entries(raw)

    assert entries == (
        AllergenEntry("Nuts", HAS),
        AllergenEntry("Milk", MAY),
        AllergenEntry("Eggs", NO),
    )
    assert parse_allergen_entries(
        [{"allergy": "Sesame", "status": "has"}, ("Soya", "may"), {"status": "has"}]
    ) == (AllergenEntry("Sesame", HAS), AllergenEntry("Soya", MAY))


def test_token_names_may_contain_colons() -> None:
    entries = parse_allergen_entries(["Cereals: wheat:has"])

    assert entries == (AllergenEntry("Cereals: wheat", HAS),)


def test_unparseable_input_yields_nothing() -> None:
    assert parse_allergen_entries(None) == ()
    assert parse_allergen_entries("") == ()
    assert parse_allergen_entries({"Nuts": "has"}) == ()
    assert parse_allergen_entries(42) == ()


def test_tokens_are_read_back_unchanged() -> None:
    entries = (AllergenEntry("Nuts", HAS), AllergenEntry("Milk", MAY))

    assert to_tokens(entries) == ["Nuts:has", "Milk:may"]
    assert parse_allergen_entries(json.dumps(to_tokens(entries))) == entries
