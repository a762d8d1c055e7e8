"""Tests for Supabase adapter implementations."""

import json
from dataclasses import dataclass, field
from datetime import date

import pytest
from postgrest.exceptions import APIError

from recipe_costing.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from recipe_costing.adapters.supabase_menu_repository import SupabaseMenuRepository
from recipe_costing.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from recipe_costing.domain.ingredients import (
    AllergenDeclaration,
    AllergenEntry,
    AllergenStatus,
    Ingredient,
)
from recipe_costing.domain.menus import DailyOptions, DayMenu, Menu
from recipe_costing.domain.recipes import IngredientSnapshot, RecipeIngredientDraft
from recipe_costing.errors import PersistenceError


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None
    count: int | None = None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "insert": [],
            "update": [],
            "upsert": [],
            "delete": [],
        }
    )
    failures: dict[str, list[Exception]] = field(default_factory=dict)
    payloads: list[tuple[str, object]] = field(default_factory=list)
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_on_conflict: str | None = None
    count: int | None = None
    ranges: list[tuple[int, int]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def fail(self, action: str, exc: Exception) -> None:
        self.failures.setdefault(action, []).append(exc)

    def select(self, *_args: str, count: str | None = None) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.payloads.append(("insert", payload))
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.payloads.append(("update", payload))
        return self

    def upsert(self, payload: object, on_conflict: str = "") -> "FakeTable":
        self._action = "upsert"
        self.last_on_conflict = on_conflict
        self.payloads.append(("upsert", payload))
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def or_(self, filters: str) -> "FakeTable":
        self.last_filters.append(("or", filters))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def range(self, start: int, end: int) -> "FakeTable":
        self.ranges.append((start, end))
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        pending = self.failures.get(action)
        if pending:
            raise pending.pop(0)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data, count=self.count)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _line_row(line_id: int, recipe_id: int = 1) -> dict[str, object]:
    return {
        "id": line_id,
        "recipe_id": recipe_id,
        "original_product_code": "ING1",
        "quantity": "3",
        "unit": "kg",
        "notes": None,
        "ingredient_name": "Chicken Breast",
        "ingredient_supplier": "Brakes",
        "ingredient_price": 10,
        "ingredient_weight": 5,
        "ingredient_unit": "kg",
        "ingredient_allergies": json.dumps(["Milk:may", "Gluten:has"]),
    }


def test_ingredient_upserts_use_conflict_keys() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseIngredientRepository(client)

    repository.upsert_ingredients(
        [Ingredient("ING1", "Chicken Breast", 10.0, "Brakes", 5.0, "kg")]
    )
    repository.upsert_allergens(
        [AllergenDeclaration("ING1", "Milk", AllergenStatus.MAY)]
    )

    ingredients = client.table("ingredients")
    assert ingredients.last_on_conflict == "product_code"
    assert ingredients.payloads[0][1] == [
        {
            "product_code": "ING1",
            "name": "Chicken Breast",
            "supplier": "Brakes",
            "weight": 5.0,
            "unit": "kg",
            "price": 10.0,
        }
    ]
    allergies = client.table("allergies")
    assert allergies.last_on_conflict == "product_code,allergy"
    assert allergies.payloads[0][1] == [
        {"product_code": "ING1", "allergy": "Milk", "status": "may"}
    ]


def test_get_ingredients_joins_allergens() -> None:
    client = FakeSupabaseClient()
    client.table("ingredients").queue(
        "select",
        [
            {
                "product_code": "ING1",
                "name": "Chicken Breast",
                "supplier": "Brakes",
                "weight": "5",
                "unit": "kg",
                "price": "10.5",
            }
        ],
    )
    client.table("allergies").queue(
        "select",
        [
            {"product_code": "ING1", "allergy": "Gluten", "status": "has"},
            {"product_code": "ING1", "allergy": "Milk", "status": "bogus"},
        ],
    )

    found = SupabaseIngredientRepository(client).get_ingredients(["ING1", "ING1"])

    item = found["ING1"]
    assert item.ingredient.price == 10.5
    assert item.ingredient.pack_weight == 5
    assert item.allergens == (AllergenEntry("Gluten", AllergenStatus.HAS),)


def test_ingredient_search_matches_name_or_code() -> None:
    client = FakeSupabaseClient()

    results = SupabaseIngredientRepository(client).search("rice", 5)

    assert results == []
    assert (
        "or",
        "name.ilike.%rice%,product_code.ilike.%rice%",
    ) in client.table("ingredients").last_filters


def test_counts_use_exact_count() -> None:
    client = FakeSupabaseClient()
    client.table("ingredients").count = 42
    client.table("allergies").queue(
        "select", [{"allergy": "Milk"}, {"allergy": "Milk"}, {"allergy": "Soya"}]
    )
    repository = SupabaseIngredientRepository(client)

    assert repository.count_ingredients() == 42
    assert repository.count_allergen_types() == 2


def test_allergen_types_are_counted_across_pages() -> None:
    client = FakeSupabaseClient()
    allergies = client.table("allergies")
    allergies.queue("select", [{"allergy": "Celery"}, {"allergy": "Milk"}])
    allergies.queue("select", [{"allergy": "Milk"}, {"allergy": "Soya"}])
    repository = SupabaseIngredientRepository(client, page_size=2)

    assert repository.count_allergen_types() == 3
    assert allergies.ranges == [(0, 1), (2, 3), (4, 5)]


def test_existing_codes_are_checked_in_chunks() -> None:
    client = FakeSupabaseClient()
    ingredients = client.table("ingredients")
    ingredients.queue("select", [{"product_code": "A1"}])
    ingredients.queue("select", [{"product_code": "C3"}, {"product_code": "D4"}])
    ingredients.queue("select", [{"product_code": "E5"}])
    repository = SupabaseIngredientRepository(client, chunk_size=2)

    found = repository.existing_codes(["E5", "D4", "C3", "B2", "A1"])

    assert found == {"A1", "C3", "D4", "E5"}
    assert [values for _, values in ingredients.last_filters] == [
        ["A1", "B2"],
        ["C3", "D4"],
        ["E5"],
    ]


def test_list_recipes_reads_every_page() -> None:
    client = FakeSupabaseClient()
    recipes = client.table("recipes")
    recipes.queue(
        "select",
        [{"id": 1, "name": "Apple Pie", "servings": 1}, {"id": 2, "name": "Bake"}],
    )
    recipes.queue("select", [{"id": 3, "name": "Curry", "servings": 2}])
    repository = SupabaseRecipeRepository(client, page_size=2)

    listed = repository.list_recipes()

    assert [recipe.id for recipe in listed] == [1, 2, 3]
    assert recipes.ranges == [(0, 1), (2, 3), (3, 4)]


def test_lines_by_code_are_chunked_and_ordered() -> None:
    client = FakeSupabaseClient()
    table = client.table("recipe_ingredients")
    table.queue("select", [_line_row(5), _line_row(9)])
    table.queue("select", [])
    table.queue("select", [_line_row(2, recipe_id=4)])
    repository = SupabaseRecipeRepository(client, chunk_size=2)

    lines = repository.find_ingredients_by_codes(["ING1", "ING2", "ING3"])

    assert [line.id for line in lines] == [2, 5, 9]
    assert {tuple(values) for _, values in table.last_filters} == {
        ("ING1", "ING2"),
        ("ING3",),
    }


def test_recipe_line_allergens_are_stored_as_tokens() -> None:
    client = FakeSupabaseClient()
    client.table("recipe_ingredients").queue("insert", [_line_row(7)])
    snapshot = IngredientSnapshot(
        name="Chicken Breast",
        price=10.0,
        supplier="Brakes",
        weight=5.0,
        unit="kg",
        allergens=(
            AllergenEntry("Milk", AllergenStatus.MAY),
            AllergenEntry("Gluten", AllergenStatus.HAS),
        ),
    )

    line = SupabaseRecipeRepository(client).add_ingredient(
        RecipeIngredientDraft(
            recipe_id=1,
            original_product_code="ING1",
            quantity=3.0,
            snapshot=snapshot,
            unit="kg",
        )
    )

    _, payload = client.table("recipe_ingredients").payloads[0]
    assert payload["ingredient_allergies"] == '["Milk:may", "Gluten:has"]'
    assert line.id == 7
    assert line.quantity == 3
    assert line.snapshot.allergens == snapshot.allergens


def test_replace_ingredients_restores_previous_rows_on_failure() -> None:
    client = FakeSupabaseClient()
    table = client.table("recipe_ingredients")
    previous = [_line_row(1), _line_row(2)]
    table.queue("select", previous)
    table.fail("insert", APIError({"message": "insert failed", "code": "500"}))
    draft = RecipeIngredientDraft(
        recipe_id=1,
        original_product_code="ING2",
        quantity=1.0,
        snapshot=IngredientSnapshot(name="Rice", price=3.0),
    )

    with pytest.raises(PersistenceError):
        SupabaseRecipeRepository(client).replace_ingredients(1, [draft])

    inserts = [payload for action, payload in table.payloads if action == "insert"]
    assert inserts[-1] == previous


def test_recipe_rows_are_parsed() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").queue(
        "select",
        [
            {
                "id": 3,
                "name": "Curry",
                "code": "",
                "servings": "4",
                "total_cost": "12.5",
                "cost_per_serving": None,
            }
        ],
    )

    recipe = SupabaseRecipeRepository(client).get_recipe(3)

    assert recipe is not None
    assert recipe.code is None
    assert recipe.servings == 4
    assert recipe.total_cost == 12.5
    assert recipe.cost_per_serving is None


def test_client_errors_become_persistence_errors() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").fail(
        "select", APIError({"message": "connection reset", "code": "503"})
    )

    with pytest.raises(PersistenceError, match="load recipe"):
        SupabaseRecipeRepository(client).get_recipe(1)


def test_menu_upsert_and_parse() -> None:
    client = FakeSupabaseClient()
    table = client.table("menus")
    table.queue(
        "upsert",
        [
            {
                "id": 5,
                "name": "Spring",
                "week_start_date": "2024-03-04",
                "monday": {"lunch_option_1": 1, "dessert": 2},
                "tuesday": json.dumps({"served_with": "3"}),
                "wednesday": None,
                "daily_options": {"option_1": 4},
            }
        ],
    )
    menu = Menu(
        name="Spring",
        week_start_date=date(2024, 3, 4),
        monday=DayMenu(lunch_option_1=1, dessert=2),
        tuesday=DayMenu(served_with=3),
        daily_options=DailyOptions(option_1=4),
    )

    stored = SupabaseMenuRepository(client).upsert_menu(menu)

    _, payload = table.payloads[0]
    assert table.last_on_conflict == "week_start_date"
    assert payload["week_start_date"] == "2024-03-04"
    assert payload["monday"]["lunch_option_1"] == 1
    assert payload["wednesday"] is None
    assert stored.id == 5
    assert stored.monday == DayMenu(lunch_option_1=1, dessert=2)
    assert stored.tuesday == DayMenu(served_with=3)
    assert stored.wednesday is None
    assert stored.daily_options == DailyOptions(option_1=4)


def test_missing_menu_returns_none() -> None:
    client = FakeSupabaseClient()

    assert SupabaseMenuRepository(client).get_menu(date(2024, 3, 4)) is None
