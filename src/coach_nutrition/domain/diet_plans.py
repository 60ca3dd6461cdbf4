"""Domain models for diet plans, meals and meal items."""

from dataclasses import dataclass, field
from uuid import UUID

from coach_nutrition.domain.nutrition import ZERO_MACROS, MacroProfile


@dataclass(frozen=True)
class MealFoodItem:
    """Line item of a meal.

    ``macros`` is a snapshot taken when the item was added to the meal.
    Later edits to the referenced food or recipe never change it.
    """

    food_id: UUID | None
    recipe_id: UUID | None
    quantity: float
    unit: str
    macros: MacroProfile
    name: str = ""
    notes: str | None = None
    order_index: int = 0
    id: UUID | None = None


@dataclass(frozen=True)
class Meal:
    """Meal with ordered items and denormalized totals."""

    meal_number: int
    meal_name: str
    totals: MacroProfile = ZERO_MACROS
    items: list[MealFoodItem] = field(default_factory=list)
    time_suggestion: str | None = None
    notes: str | None = None
    id: UUID | None = None


@dataclass(frozen=True)
class PlanTargets:
    """Daily macro targets of a diet plan."""

    calories_target: int | None = None
    protein_grams: int | None = None
    carbs_grams: int | None = None
    fat_grams: int | None = None


@dataclass(frozen=True)
class DietPlan:
    """Diet plan with its meals for one day."""

    id: UUID | None
    name: str
    meals_per_day: int = 3
    meals: list[Meal] = field(default_factory=list)
    targets: PlanTargets = field(default_factory=PlanTargets)
    use_meal_totals: bool = False
    description: str | None = None
    goal: str | None = None
    dietary_type: str | None = None
    notes: str | None = None
    is_system: bool = False
    is_published: bool = True
    is_active: bool = True
    created_by: UUID | None = None
