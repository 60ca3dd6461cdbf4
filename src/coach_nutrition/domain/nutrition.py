"""Nutrition domain models."""

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient profile for a portion, meal, recipe or day."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    fiber_g: float = 0.0


ZERO_MACROS = MacroProfile(calories=0, protein_g=0.0, fat_g=0.0, carbs_g=0.0)


class Unit(StrEnum):
    """Quantity units accepted by the unit converter."""

    GRAM = "g"
    OUNCE = "oz"
    POUND = "lb"
    CUP = "cup"
    TABLESPOON = "tbsp"
    TEASPOON = "tsp"
    SERVING = "serving"
    PIECE = "piece"
    SCOOP = "scoop"


WEIGHT_UNITS = frozenset({Unit.GRAM, Unit.OUNCE, Unit.POUND})
VOLUME_UNITS = frozenset({Unit.CUP, Unit.TABLESPOON, Unit.TEASPOON})
PORTION_UNITS = frozenset({Unit.SERVING, Unit.PIECE, Unit.SCOOP})
