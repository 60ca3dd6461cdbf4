"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from coach_nutrition.adapters.supabase_audit_repository import SupabaseAuditRepository
from coach_nutrition.adapters.supabase_diet_plan_repository import (
    SupabaseDietPlanRepository,
)
from coach_nutrition.adapters.supabase_food_repository import SupabaseFoodRepository
from coach_nutrition.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from coach_nutrition.config import Settings
from coach_nutrition.services.audit import AuditService
from coach_nutrition.services.diet_plans import DietPlanService
from coach_nutrition.services.foods import FoodService
from coach_nutrition.services.recipes import RecipeService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    audit_service: AuditService
    food_service: FoodService
    recipe_service: RecipeService
    diet_plan_service: DietPlanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    diet_plan_repository = SupabaseDietPlanRepository(supabase_client)
    audit_service = AuditService(SupabaseAuditRepository(supabase_client))
    food_service = FoodService(food_repository, audit_service)
    recipe_service = RecipeService(
        repository=recipe_repository,
        food_repository=food_repository,
        audit_service=audit_service,
    )
    diet_plan_service = DietPlanService(
        repository=diet_plan_repository,
        food_repository=food_repository,
        recipe_repository=recipe_repository,
        audit_service=audit_service,
    )

    async def close_resources() -> None:
        _logger.info("Closing Supabase client session")
        supabase_client.postgrest.session.close()

    return AppContainer(
        settings=resolved_settings,
        audit_service=audit_service,
        food_service=food_service,
        recipe_service=recipe_service,
        diet_plan_service=diet_plan_service,
        close_resources=close_resources,
    )
