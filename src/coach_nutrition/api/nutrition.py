"""Stateless nutrition calculation endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request

from coach_nutrition.api.deps import optional_actor
from coach_nutrition.api.schemas import CaloriesRequest, PortionRequest
from coach_nutrition.domain.models import Actor  # noqa: TC001
from coach_nutrition.services.nutrition import derive_calories

if TYPE_CHECKING:
    from coach_nutrition.containers import AppContainer

router = APIRouter(prefix="/nutrition", tags=["nutrition"])


@router.post("/calories")
async def calculate_calories(body: CaloriesRequest) -> dict[str, object]:
    """Derive calories from a macro triple."""
    return {"calories": derive_calories(body.protein_g, body.carbs_g, body.fat_g)}


@router.post("/portion")
async def calculate_portion(
    body: PortionRequest,
    request: Request,
    actor: Actor | None = Depends(optional_actor),
) -> dict[str, object]:
    """Return the nutrition of a quantity of a food."""
    container: AppContainer = request.app.state.container
    macros = container.food_service.calculate_portion(
        body.food_id, body.quantity, body.unit, actor
    )
    return {"nutrition": macros}
