"""Bulk import of supplier price lists and allergen tables."""

import io
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from recipe_costing.domain.imports import (
    ImportResult,
    ParsedAllergens,
    ParsedPricing,
    ResyncResult,
)
from recipe_costing.domain.ingredients import AllergenDeclaration, Ingredient
from recipe_costing.errors import ImportFormatError
from recipe_costing.services.allergens import status_from_cell
from recipe_costing.services.ingredients import IngredientRepository
from recipe_costing.services.resync import SnapshotResyncService

_logger = logging.getLogger(__name__)

# Allergen columns start after the code and description columns.
_FIRST_ALLERGEN_COLUMN = 2


def read_table(content: bytes, filename: str | None = None) -> pd.DataFrame:
    """Read a CSV or Excel upload into a header-less frame of raw cells."""
    if not content:
        raise ImportFormatError(f"{filename or 'Upload'} is empty")
    buffer = io.BytesIO(content)
    try:
        if filename and filename.lower().endswith(".csv"):
            frame = pd.read_csv(
                buffer, header=None, dtype=object, skip_blank_lines=False
            )
        else:
            frame = pd.read_excel(buffer, header=None, dtype=object)
    except Exception as exc:
        raise ImportFormatError(
            f"Failed to read {filename or 'upload'}: {exc}"
        ) from exc
    return frame


def parse_pricing(frame: pd.DataFrame) -> ParsedPricing:
    """Parse a price list with Code, Product Name, Supplier, Weight, Unit, Price."""
    if frame.empty:
        raise ImportFormatError("Price list appears to be empty")
    headers = [_header(value) for value in frame.iloc[0].tolist()]
    code_index = _find_column(headers, "code")
    name_index = _find_column(headers, "product name")
    price_index = _find_column(headers, "price")
    supplier_index = _find_column(headers, "supplier")
    weight_index = _find_column(headers, "weight")
    unit_index = _find_column(headers, "unit")
    if code_index is None or name_index is None or price_index is None:
        raise ImportFormatError(
            "Missing required columns. Expected: Code, Product Name, Price. "
            f"Found: {', '.join(h for h in headers if h)}"
        )

    ingredients: list[Ingredient] = []
    skipped = 0
    for row in frame.iloc[1:].itertuples(index=False, name=None):
        if _is_blank_row(row):
            continue
        code = _text(_cell(row, code_index))
        name = _text(_cell(row, name_index))
        price = _number(_cell(row, price_index))
        if not code or not name or price is None or price < 0:
            skipped += 1
            continue
        ingredients.append(
            Ingredient(
                product_code=code,
                name=name,
                price=price,
                supplier=_text(_cell(row, supplier_index)),
                pack_weight=_number(_cell(row, weight_index)),
                unit=_text(_cell(row, unit_index)),
            )
        )
    if skipped:
        _logger.warning("Skipped %s price rows with missing data", skipped)
    return ParsedPricing(ingredients=ingredients, skipped=skipped)


def parse_allergens(frame: pd.DataFrame) -> ParsedAllergens:
    """Parse an allergen table: Code, Description, then one column per allergen."""
    if frame.empty:
        raise ImportFormatError("Allergen table appears to be empty")
    headers = [_header(value) for value in frame.iloc[0].tolist()]
    code_index = _find_column(headers, "code")
    if code_index is None:
        raise ImportFormatError(
            f"Missing required Code column. Found: {', '.join(h for h in headers if h)}"
        )
    raw_headers = frame.iloc[0].tolist()
    allergen_columns = [
        (index, _text(raw_headers[index]))
        for index in range(_FIRST_ALLERGEN_COLUMN, len(raw_headers))
        if index != code_index and _text(raw_headers[index])
    ]

    declarations: list[AllergenDeclaration] = []
    skipped = 0
    for row in frame.iloc[1:].itertuples(index=False, name=None):
        if _is_blank_row(row):
            continue
        code = _text(_cell(row, code_index))
        if not code:
            skipped += 1
            continue
        for index, allergen in allergen_columns:
            status = status_from_cell(_text(_cell(row, index)))
            if status is None or allergen is None:
                continue
            declarations.append(
                AllergenDeclaration(product_code=code, allergen=allergen, status=status)
            )
    if skipped:
        _logger.warning("Skipped %s allergen rows with missing data", skipped)
    return ParsedAllergens(declarations=declarations, skipped=skipped)


@dataclass
class ImportService:
    """Upserts imported ingredient data and resyncs affected recipes."""

    ingredient_repository: IngredientRepository
    resync_service: SnapshotResyncService
    batch_size: int = 50

    def import_tables(
        self,
        pricing: pd.DataFrame | None = None,
        allergens: pd.DataFrame | None = None,
    ) -> ImportResult:
        """Import a price list and/or allergen table.

        Both tables are parsed before anything is written so a structural
        problem in either aborts the whole import.
        """
        if pricing is None and allergens is None:
            raise ImportFormatError("A price list or an allergen table is required")
        parsed_pricing = (
            parse_pricing(pricing) if pricing is not None else ParsedPricing([], 0)
        )
        parsed_allergens = (
            parse_allergens(allergens)
            if allergens is not None
            else ParsedAllergens([], 0)
        )

        ingredients = list(
            {item.product_code: item for item in parsed_pricing.ingredients}.values()
        )
        if ingredients:
            self.ingredient_repository.upsert_ingredients(ingredients)

        declarations = list(
            {
                (item.product_code, item.allergen): item
                for item in parsed_allergens.declarations
            }.values()
        )
        unknown = 0
        if declarations:
            known = self.ingredient_repository.existing_codes(
                {item.product_code for item in declarations}
            )
            stored = [item for item in declarations if item.product_code in known]
            unknown = len(declarations) - len(stored)
            declarations = stored
            if declarations:
                self.ingredient_repository.upsert_allergens(declarations)
        if unknown:
            _logger.warning(
                "Ignored %s allergen declarations for unknown product codes", unknown
            )

        changed = {item.product_code for item in ingredients}
        changed.update(item.product_code for item in declarations)
        resync = self.resync(changed)
        _logger.info(
            "Import complete: ingredients=%s allergens=%s skipped=%s",
            len(ingredients),
            len(declarations),
            parsed_pricing.skipped + parsed_allergens.skipped,
        )
        return ImportResult(
            ingredients_processed=len(ingredients),
            allergens_processed=len(declarations),
            rows_skipped=parsed_pricing.skipped + parsed_allergens.skipped,
            resync=resync,
        )

    def resync(self, product_codes: Iterable[str]) -> ResyncResult:
        """Resync snapshots in fixed-size batches of product codes."""
        codes = sorted(set(product_codes))
        size = max(self.batch_size, 1)
        updated = 0
        recalculated: list[int] = []
        failed: list[int] = []
        for start in range(0, len(codes), size):
            result = self.resync_service.resync(codes[start : start + size])
            updated += result.snapshots_updated
            recalculated.extend(
                rid for rid in result.recipes_recalculated if rid not in recalculated
            )
            failed.extend(rid for rid in result.failed_recipe_ids if rid not in failed)
        return ResyncResult(
            snapshots_updated=updated,
            recipes_recalculated=recalculated,
            failed_recipe_ids=sorted(failed),
        )


def _header(value: object) -> str:
    text = _text(value)
    return text.lower() if text else ""


def _find_column(headers: list[str], needle: str) -> int | None:
    for index, header in enumerate(headers):
        if needle in header:
            return index
    return None


def _cell(row: tuple[object, ...], index: int | None) -> object:
    if index is None or index >= len(row):
        return None
    return row[index]


def _is_blank_row(row: tuple[object, ...]) -> bool:
    return all(_text(value) is None for value in row)


def _text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    return text or None


def _number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(str(value).strip().lstrip("£$€"))
    except ValueError:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result
