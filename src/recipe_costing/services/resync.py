"""Refresh recipe snapshots after ingredient data changes."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from recipe_costing.domain.imports import ResyncResult
from recipe_costing.errors import NotFoundError, PersistenceError
from recipe_costing.services.ingredients import IngredientRepository
from recipe_costing.services.recipes import RecipeRepository, RecipeService
from recipe_costing.services.snapshots import build_snapshot

_logger = logging.getLogger(__name__)


@dataclass
class SnapshotResyncService:
    """Re-derives snapshots for changed product codes and recosts recipes.

    Failures are isolated per recipe: a recipe whose line or cost update
    fails is reported in ``failed_recipe_ids`` and the rest of the batch
    carries on. Running the same resync twice is harmless.
    """

    ingredient_repository: IngredientRepository
    recipe_repository: RecipeRepository
    recipe_service: RecipeService

    def resync(self, product_codes: Iterable[str]) -> ResyncResult:
        """Refresh every recipe line that references one of the product codes."""
        codes = {code for code in product_codes if code}
        if not codes:
            return ResyncResult()
        latest = self.ingredient_repository.get_ingredients(codes)
        lines = self.recipe_repository.find_ingredients_by_codes(codes)

        updated = 0
        touched: dict[int, None] = {}
        failed: set[int] = set()
        for line in lines:
            source = latest.get(line.original_product_code)
            if source is None:
                continue
            touched.setdefault(line.recipe_id)
            if line.recipe_id in failed:
                continue
            try:
                self.recipe_repository.update_snapshot(line.id, build_snapshot(source))
                updated += 1
            except PersistenceError:
                failed.add(line.recipe_id)
                _logger.exception(
                    "Failed to refresh snapshot for recipe %s line %s",
                    line.recipe_id,
                    line.id,
                )

        recalculated: list[int] = []
        for recipe_id in touched:
            if recipe_id in failed:
                continue
            try:
                self.recipe_service.recalculate(recipe_id)
                recalculated.append(recipe_id)
            except (PersistenceError, NotFoundError):
                failed.add(recipe_id)
                _logger.exception("Failed to recalculate recipe %s", recipe_id)

        _logger.info(
            "Resynced %s codes: snapshots=%s recipes=%s failed=%s",
            len(codes),
            updated,
            len(recalculated),
            len(failed),
        )
        return ResyncResult(
            snapshots_updated=updated,
            recipes_recalculated=recalculated,
            failed_recipe_ids=sorted(failed),
        )
