"""Unvalidated author input for meals and diet plans."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class LineItemDraft:
    """Food or recipe reference as entered in the meal builder."""

    food_id: UUID | None = None
    recipe_id: UUID | None = None
    quantity: object = None
    unit: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MealDraft:
    """Meal as entered in the plan builder.

    Manual macro fields are only used when the meal has no items.
    """

    meal_name: str
    meal_number: int | None = None
    items: list[LineItemDraft] = field(default_factory=list)
    time_suggestion: str | None = None
    notes: str | None = None
    calories: float | None = None
    protein_grams: float | None = None
    carbs_grams: float | None = None
    fat_grams: float | None = None


@dataclass(frozen=True)
class DietPlanDraft:
    """Diet plan as submitted on save.

    Fields left as None keep the stored values on update. A new plan
    defaults to three published meals a day with targets derived from them.
    """

    name: str
    meals: list[MealDraft] | None = None
    use_meal_totals: bool | None = None
    meals_per_day: int | None = None
    calories_target: float | None = None
    protein_grams: float | None = None
    carbs_grams: float | None = None
    fat_grams: float | None = None
    description: str | None = None
    goal: str | None = None
    dietary_type: str | None = None
    notes: str | None = None
    is_system: bool = False
    is_published: bool | None = None
