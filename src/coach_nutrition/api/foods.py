"""Food catalogue endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from coach_nutrition.api.deps import optional_actor, require_actor
from coach_nutrition.api.schemas import FoodCreate, FoodUpdate
from coach_nutrition.domain.models import Actor  # noqa: TC001

if TYPE_CHECKING:
    from coach_nutrition.containers import AppContainer

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("")
async def list_foods(  # noqa: PLR0913
    request: Request,
    category: str | None = None,
    subcategory: str | None = None,
    search: str | None = None,
    limit: int = 100,
    actor: Actor | None = Depends(optional_actor),
) -> dict[str, object]:
    """Return system foods plus the caller's own foods."""
    container: AppContainer = request.app.state.container
    foods = container.food_service.list_foods(
        actor, category=category, subcategory=subcategory, search=search, limit=limit
    )
    return {"foods": foods}


@router.get("/categories")
async def list_categories(request: Request) -> dict[str, object]:
    """Return system food categories with counts."""
    container: AppContainer = request.app.state.container
    return {"categories": container.food_service.list_categories()}


@router.get("/{food_id}")
async def get_food(
    food_id: UUID, request: Request, actor: Actor | None = Depends(optional_actor)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"food": container.food_service.get_food(food_id, actor)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_food(
    body: FoodCreate, request: Request, actor: Actor = Depends(require_actor)
) -> dict[str, object]:
    """Create a food owned by the caller."""
    container: AppContainer = request.app.state.container
    food = container.food_service.create_food(actor, body.model_dump(exclude_none=True))
    return {"food": food}


@router.put("/{food_id}")
async def update_food(
    food_id: UUID,
    body: FoodUpdate,
    request: Request,
    actor: Actor = Depends(require_actor),
) -> dict[str, object]:
    """Apply a partial update to a food."""
    container: AppContainer = request.app.state.container
    food = container.food_service.update_food(
        actor, food_id, body.model_dump(exclude_unset=True)
    )
    return {"food": food}


@router.delete("/{food_id}")
async def delete_food(
    food_id: UUID, request: Request, actor: Actor = Depends(require_actor)
) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.food_service.delete_food(actor, food_id)
    return {"status": "deleted"}
