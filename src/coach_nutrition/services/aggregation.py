"""Summing line items into meal, recipe and daily totals."""

import math
from collections.abc import Iterable

from coach_nutrition.domain.diet_plans import Meal, PlanTargets
from coach_nutrition.domain.errors import ValidationError
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.services.nutrition import (
    derive_calories,
    round_calories,
    round_grams,
    round_half_up,
)


def sum_macros(profiles: Iterable[MacroProfile]) -> MacroProfile:
    """Sum profiles componentwise.

    ``math.fsum`` and a single rounding at the end keep the result
    independent of the order of the items. An empty iterable yields all zeros.
    """
    items = list(profiles)
    return MacroProfile(
        calories=round_calories(math.fsum(item.calories for item in items)),
        protein_g=round_grams(math.fsum(item.protein_g for item in items)),
        fat_g=round_grams(math.fsum(item.fat_g for item in items)),
        carbs_g=round_grams(math.fsum(item.carbs_g for item in items)),
        fiber_g=round_grams(math.fsum(item.fiber_g for item in items)),
    )


def per_serving(total: MacroProfile, servings: int) -> MacroProfile:
    """Divide recipe totals by the number of servings."""
    if isinstance(servings, bool) or not isinstance(servings, int) or servings < 1:
        raise ValidationError("Servings must be a whole number of at least 1")
    return MacroProfile(
        calories=round_calories(total.calories / servings),
        protein_g=round_grams(total.protein_g / servings),
        fat_g=round_grams(total.fat_g / servings),
        carbs_g=round_grams(total.carbs_g / servings),
        fiber_g=round_grams(total.fiber_g / servings),
    )


def rollup_day(meals: Iterable[Meal]) -> MacroProfile:
    """Sum meal totals into daily totals."""
    return sum_macros(meal.totals for meal in meals)


def resolve_targets(
    meals: list[Meal], requested: PlanTargets, use_meal_totals: bool
) -> PlanTargets:
    """Return the plan targets to store on save.

    With ``use_meal_totals`` the targets are overwritten by the daily rollup.
    Otherwise the author's targets are kept as typed; only a missing calorie
    target is derived from the macro targets.
    """
    if use_meal_totals:
        day = rollup_day(meals)
        return PlanTargets(
            calories_target=int(day.calories),
            protein_grams=int(round_half_up(day.protein_g)),
            carbs_grams=int(round_half_up(day.carbs_g)),
            fat_grams=int(round_half_up(day.fat_g)),
        )
    macros = (requested.protein_grams, requested.carbs_grams, requested.fat_grams)
    if requested.calories_target is None and any(macros):
        derived = derive_calories(*(value or 0 for value in macros))
        return PlanTargets(
            calories_target=derived or None,
            protein_grams=requested.protein_grams,
            carbs_grams=requested.carbs_grams,
            fat_grams=requested.fat_grams,
        )
    return requested
