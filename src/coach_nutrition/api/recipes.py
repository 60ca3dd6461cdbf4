"""Recipe endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from coach_nutrition.api.deps import optional_actor, require_actor
from coach_nutrition.api.schemas import RecipeIn, RecipePreviewRequest
from coach_nutrition.domain.models import Actor  # noqa: TC001

if TYPE_CHECKING:
    from coach_nutrition.containers import AppContainer

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("")
async def list_recipes(
    request: Request,
    category: str | None = None,
    search: str | None = None,
    limit: int = 100,
    actor: Actor | None = Depends(optional_actor),
) -> dict[str, object]:
    """Return system recipes plus the caller's own recipes."""
    container: AppContainer = request.app.state.container
    recipes = container.recipe_service.list_recipes(
        actor, category=category, search=search, limit=limit
    )
    return {"recipes": recipes}


@router.post("/preview")
async def preview_recipe(
    body: RecipePreviewRequest, request: Request
) -> dict[str, object]:
    """Total a list of ingredients without saving a recipe."""
    container: AppContainer = request.app.state.container
    total, per_serving = container.recipe_service.preview_totals(
        [ingredient.model_dump() for ingredient in body.ingredients], body.servings
    )
    return {"total": total, "per_serving": per_serving}


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: UUID, request: Request, actor: Actor | None = Depends(optional_actor)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"recipe": container.recipe_service.get_recipe(recipe_id, actor)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    body: RecipeIn, request: Request, actor: Actor = Depends(require_actor)
) -> dict[str, object]:
    """Create a recipe and compute its per-serving nutrition."""
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.create_recipe(
        actor, body.columns(), body.ingredient_rows()
    )
    return {"recipe": recipe}


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: UUID,
    body: RecipeIn,
    request: Request,
    actor: Actor = Depends(require_actor),
) -> dict[str, object]:
    """Partially update a recipe; sending ingredients replaces them all."""
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.update_recipe(
        actor, recipe_id, body.columns(), body.ingredient_rows()
    )
    return {"recipe": recipe}


@router.delete("/{recipe_id}")
async def delete_recipe(
    recipe_id: UUID, request: Request, actor: Actor = Depends(require_actor)
) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.recipe_service.delete_recipe(actor, recipe_id)
    return {"status": "deleted"}
