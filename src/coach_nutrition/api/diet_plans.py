"""Diet plan builder endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from coach_nutrition.api.deps import optional_actor, require_actor
from coach_nutrition.api.schemas import DietPlanIn, MealIn
from coach_nutrition.domain.models import Actor  # noqa: TC001

if TYPE_CHECKING:
    from coach_nutrition.containers import AppContainer

router = APIRouter(prefix="/diet/plans", tags=["diet"])


@router.get("")
async def list_plans(
    request: Request,
    goal: str | None = None,
    dietary_type: str | None = None,
    search: str | None = None,
    actor: Actor | None = Depends(optional_actor),
) -> dict[str, object]:
    """Return system plans plus the caller's own plans."""
    container: AppContainer = request.app.state.container
    plans = container.diet_plan_service.list_plans(
        actor, goal=goal, dietary_type=dietary_type, search=search
    )
    return {"plans": plans}


@router.post("/preview")
async def preview_plan(body: DietPlanIn, request: Request) -> dict[str, object]:
    """Compute meal totals and daily targets without saving."""
    container: AppContainer = request.app.state.container
    return {"plan": container.diet_plan_service.preview(body.to_draft())}


@router.get("/{plan_id}")
async def get_plan(
    plan_id: UUID, request: Request, actor: Actor | None = Depends(optional_actor)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"plan": container.diet_plan_service.get_plan(plan_id, actor)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_plan(
    body: DietPlanIn, request: Request, actor: Actor = Depends(require_actor)
) -> dict[str, object]:
    """Save a plan with all of its meals and items."""
    container: AppContainer = request.app.state.container
    plan = container.diet_plan_service.create_plan(actor, body.to_draft())
    return {"plan": plan}


@router.put("/{plan_id}")
async def update_plan(
    plan_id: UUID,
    body: DietPlanIn,
    request: Request,
    actor: Actor = Depends(require_actor),
) -> dict[str, object]:
    """Update a plan; sending meals replaces all of them."""
    container: AppContainer = request.app.state.container
    plan = container.diet_plan_service.update_plan(actor, plan_id, body.to_draft())
    return {"plan": plan}


@router.post("/{plan_id}/meals", status_code=status.HTTP_201_CREATED)
async def add_meal(
    plan_id: UUID,
    body: MealIn,
    request: Request,
    actor: Actor = Depends(require_actor),
) -> dict[str, object]:
    """Append a meal to a plan."""
    container: AppContainer = request.app.state.container
    meal = container.diet_plan_service.add_meal(actor, plan_id, body.to_draft())
    return {"meal": meal}


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: UUID, request: Request, actor: Actor = Depends(require_actor)
) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.diet_plan_service.delete_plan(actor, plan_id)
    return {"status": "deleted"}
