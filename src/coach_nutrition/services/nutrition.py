"""Calorie derivation and food unit conversion."""

import logging
import math
from decimal import ROUND_HALF_UP, Context, Decimal

from coach_nutrition.domain.errors import InvalidUnitError, ValidationError
from coach_nutrition.domain.foods import Food
from coach_nutrition.domain.nutrition import (
    PORTION_UNITS,
    VOLUME_UNITS,
    WEIGHT_UNITS,
    ZERO_MACROS,
    MacroProfile,
    Unit,
)
from coach_nutrition.domain.recipes import Recipe

PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9

DEFAULT_QUANTITY = 100.0
MAX_QUANTITY = 1_000_000.0
DEFAULT_UNIT = Unit.GRAM

# Volume units assume a density of 1 g/ml.
GRAMS_PER_UNIT: dict[Unit, float] = {
    Unit.GRAM: 1.0,
    Unit.OUNCE: 28.35,
    Unit.POUND: 453.6,
    Unit.CUP: 240.0,
    Unit.TABLESPOON: 15.0,
    Unit.TEASPOON: 5.0,
}

# Wide enough to quantize any finite float.
_ROUNDING_CONTEXT = Context(prec=400)

_logger = logging.getLogger(__name__)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like ``Math.round``: halves always go away from zero."""
    if not math.isfinite(value):
        raise ValidationError("Nutrition values are too large to calculate")
    quantum = Decimal(1).scaleb(-digits)
    return float(
        Decimal(str(value)).quantize(
            quantum, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT
        )
    )


def round_grams(value: float) -> float:
    """Round a macro amount to one decimal place."""
    return round_half_up(value, 1)


def round_calories(value: float) -> int:
    """Round a calorie amount to a whole kcal."""
    return int(round_half_up(value))


def derive_calories(protein_g: float, carbs_g: float, fat_g: float) -> int:
    """Return Atwater calories for a macro triple."""
    for label, amount in (("protein", protein_g), ("carbs", carbs_g), ("fat", fat_g)):
        _require_non_negative(amount, label)
    return round_calories(
        protein_g * PROTEIN_KCAL_PER_G
        + carbs_g * CARBS_KCAL_PER_G
        + fat_g * FAT_KCAL_PER_G
    )


def calories_match(
    stored_calories: float,
    protein_g: float,
    carbs_g: float,
    fat_g: float,
    tolerance: float = 1.0,
) -> bool:
    """Check a stored calorie value against the value derived from macros."""
    derived = derive_calories(protein_g, carbs_g, fat_g)
    return abs(stored_calories - derived) <= tolerance


def coerce_quantity(value: object, default: float = DEFAULT_QUANTITY) -> float:
    """Parse a loosely typed quantity, using ``default`` when it is missing."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError("Quantity must be a number")
    if isinstance(value, int | float):
        quantity = float(value)
    elif isinstance(value, str):
        try:
            quantity = float(value.strip())
        except ValueError as exc:
            raise ValidationError(f"Quantity must be a number, got {value!r}") from exc
    else:
        raise ValidationError("Quantity must be a number")
    _require_non_negative(quantity, "quantity")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"Quantity must not exceed {MAX_QUANTITY:g}")
    return quantity


def parse_unit(value: str | None) -> Unit:
    """Normalize a unit name, defaulting to grams."""
    if value is None or not value.strip():
        return DEFAULT_UNIT
    try:
        return Unit(value.strip().lower())
    except ValueError as exc:
        raise InvalidUnitError(value) from exc


def convert_portion(food: Food, quantity: object, unit: str | None) -> MacroProfile:
    """Scale a food's per-100g profile to the requested quantity.

    Macros are rounded to one decimal and calories are derived from the
    rounded macros.
    """
    amount = coerce_quantity(quantity)
    parsed_unit = parse_unit(unit)
    if amount == 0:
        return ZERO_MACROS
    multiplier = _require_finite(_multiplier_per_100g(food, amount, parsed_unit))
    protein = round_grams(food.protein_per_100g * multiplier)
    carbs = round_grams(food.carbs_per_100g * multiplier)
    fat = round_grams(food.fat_per_100g * multiplier)
    fiber = round_grams((food.fiber_per_100g or 0.0) * multiplier)
    return MacroProfile(
        calories=derive_calories(protein, carbs, fat),
        protein_g=protein,
        fat_g=fat,
        carbs_g=carbs,
        fiber_g=fiber,
    )


def convert_recipe_portion(
    recipe: Recipe, quantity: object, unit: str | None
) -> MacroProfile:
    """Scale a recipe's per-serving profile to the requested quantity."""
    amount = coerce_quantity(quantity, default=1.0)
    parsed_unit = parse_unit(unit or Unit.SERVING)
    if parsed_unit in (Unit.SERVING, Unit.PIECE):
        servings = amount
    elif parsed_unit in WEIGHT_UNITS:
        if not recipe.total_weight_g or recipe.total_weight_g <= 0:
            raise InvalidUnitError(str(parsed_unit), "recipe has no total weight")
        grams_per_serving = recipe.total_weight_g / max(recipe.servings, 1)
        servings = amount * GRAMS_PER_UNIT[parsed_unit] / grams_per_serving
    else:
        raise InvalidUnitError(str(parsed_unit), "not supported for recipes")
    _require_finite(servings)
    per_serving = recipe.per_serving
    return MacroProfile(
        calories=round_calories(per_serving.calories * servings),
        protein_g=round_grams(per_serving.protein_g * servings),
        fat_g=round_grams(per_serving.fat_g * servings),
        carbs_g=round_grams(per_serving.carbs_g * servings),
        fiber_g=round_grams(per_serving.fiber_g * servings),
    )


def _multiplier_per_100g(food: Food, amount: float, unit: Unit) -> float:
    if unit in WEIGHT_UNITS or unit in VOLUME_UNITS:
        return amount * GRAMS_PER_UNIT[unit] / 100.0
    if unit not in PORTION_UNITS:
        raise InvalidUnitError(str(unit))

    serving_size = food.default_serving_size
    serving_unit = _serving_unit(food)
    if serving_size and serving_size > 0 and serving_unit is not None:
        if serving_unit in WEIGHT_UNITS or serving_unit in VOLUME_UNITS:
            serving_grams = serving_size * GRAMS_PER_UNIT[serving_unit]
            return amount * serving_grams / 100.0
        if serving_unit == unit:
            return amount / serving_size

    _logger.debug(
        "No gram weight for %s of food %s; using the 100 g baseline", unit, food.id
    )
    return amount


def _serving_unit(food: Food) -> Unit | None:
    if not food.default_serving_unit:
        return None
    try:
        return Unit(food.default_serving_unit.strip().lower())
    except ValueError:
        return None


def _require_finite(multiplier: float) -> float:
    if not math.isfinite(multiplier):
        raise ValidationError("Quantity is too large")
    return multiplier


def _require_non_negative(value: float, label: str) -> float:
    if not math.isfinite(value):
        raise ValidationError(f"{label.capitalize()} must be a finite number")
    if value < 0:
        raise ValidationError(f"{label.capitalize()} must not be negative")
    return value
