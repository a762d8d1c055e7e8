"""Serialization helpers shared by the API routers."""

from dataclasses import asdict
from urllib.parse import quote

from fastapi import Response

from recipe_costing.domain.documents import RenderedDocument
from recipe_costing.domain.ingredients import AllergenEntry, IngredientWithAllergens
from recipe_costing.domain.recipes import CostedLine, RecipeDetail


def ingredient_payload(item: IngredientWithAllergens) -> dict[str, object]:
    """Serialize an ingredient with its allergen declarations."""
    ingredient = item.ingredient
    return {
        "product_code": ingredient.product_code,
        "name": ingredient.name,
        "supplier": ingredient.supplier,
        "weight": ingredient.pack_weight,
        "unit": ingredient.unit,
        "price": ingredient.price,
        "allergens": _allergen_list(item.allergens),
    }


def recipe_detail_payload(detail: RecipeDetail) -> dict[str, object]:
    """Serialize a recipe with costed lines and its allergen summary."""
    return {
        "recipe": asdict(detail.recipe),
        "ingredients": [_line_payload(line) for line in detail.lines],
        "allergens": {name: status.value for name, status in detail.allergens.items()},
    }


def download(document: RenderedDocument) -> Response:
    """Return a rendered document as an attachment."""
    fallback = document.filename.encode("ascii", "replace").decode("ascii")
    disposition = (
        f'attachment; filename="{fallback}"; '
        f"filename*=UTF-8''{quote(document.filename)}"
    )
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": disposition},
    )


def _line_payload(line: CostedLine) -> dict[str, object]:
    ingredient = line.ingredient
    snapshot = ingredient.snapshot
    return {
        "id": ingredient.id,
        "original_product_code": ingredient.original_product_code,
        "quantity": ingredient.quantity,
        "unit": ingredient.unit,
        "notes": ingredient.notes,
        "ingredient_name": snapshot.name,
        "ingredient_supplier": snapshot.supplier,
        "ingredient_price": snapshot.price,
        "ingredient_weight": snapshot.weight,
        "ingredient_unit": snapshot.unit,
        "ingredient_allergies": _allergen_list(snapshot.allergens),
        "unit_price": line.unit_price,
        "cost": line.cost,
    }


def _allergen_list(entries: tuple[AllergenEntry, ...]) -> list[dict[str, str]]:
    return [{"allergy": entry.name, "status": entry.status.value} for entry in entries]
