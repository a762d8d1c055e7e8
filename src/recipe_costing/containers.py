"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from recipe_costing.adapters.reportlab_pdf_renderer import ReportLabPdfRenderer
from recipe_costing.adapters.spreadsheet_renderer import PandasSpreadsheetRenderer
from recipe_costing.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from recipe_costing.adapters.supabase_menu_repository import SupabaseMenuRepository
from recipe_costing.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from recipe_costing.config import Settings
from recipe_costing.services.imports import ImportService
from recipe_costing.services.ingredients import (
    IngredientRepository,
    IngredientService,
)
from recipe_costing.services.menus import MenuRepository, MenuService
from recipe_costing.services.recipes import RecipeRepository, RecipeService
from recipe_costing.services.reports import ReportService
from recipe_costing.services.resync import SnapshotResyncService
from recipe_costing.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ingredient_service: IngredientService
    recipe_service: RecipeService
    resync_service: SnapshotResyncService
    import_service: ImportService
    menu_service: MenuService
    report_service: ReportService
    stats_service: StatsService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ingredient_repository = SupabaseIngredientRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    menu_repository = SupabaseMenuRepository(supabase_client)
    return wire_services(
        resolved_settings, ingredient_repository, recipe_repository, menu_repository
    )


def wire_services(
    settings: Settings,
    ingredient_repository: IngredientRepository,
    recipe_repository: RecipeRepository,
    menu_repository: MenuRepository,
) -> AppContainer:
    """Build services on top of the given repositories."""
    recipe_service = RecipeService(recipe_repository, ingredient_repository)
    resync_service = SnapshotResyncService(
        ingredient_repository=ingredient_repository,
        recipe_repository=recipe_repository,
        recipe_service=recipe_service,
    )
    menu_service = MenuService(menu_repository, recipe_repository)
    return AppContainer(
        settings=settings,
        ingredient_service=IngredientService(ingredient_repository),
        recipe_service=recipe_service,
        resync_service=resync_service,
        import_service=ImportService(
            ingredient_repository=ingredient_repository,
            resync_service=resync_service,
            batch_size=settings.resync_batch_size,
        ),
        menu_service=menu_service,
        report_service=ReportService(
            recipe_service=recipe_service,
            menu_service=menu_service,
            pdf_renderer=ReportLabPdfRenderer(currency_symbol=settings.currency_symbol),
            spreadsheet_renderer=PandasSpreadsheetRenderer(),
        ),
        stats_service=StatsService(
            ingredient_repository=ingredient_repository,
            recipe_repository=recipe_repository,
            menu_repository=menu_repository,
        ),
    )
