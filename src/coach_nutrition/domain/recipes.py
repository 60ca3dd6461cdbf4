"""Domain models for recipes."""

from dataclasses import dataclass, field
from uuid import UUID

from coach_nutrition.domain.nutrition import ZERO_MACROS, MacroProfile


@dataclass(frozen=True)
class RecipeIngredient:
    """A food quantity inside a recipe."""

    food_id: UUID
    quantity: float
    unit: str = "g"
    notes: str | None = None
    order_index: int = 0


@dataclass(frozen=True)
class Recipe:
    """Recipe with ingredients and denormalized per-serving macros."""

    id: UUID | None
    name: str
    servings: int
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    per_serving: MacroProfile = ZERO_MACROS
    total_weight_g: float | None = None
    description: str | None = None
    category: str | None = None
    instructions: str | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    is_system: bool = False
    is_published: bool = True
    created_by: UUID | None = None
