"""Domain models for the food catalogue."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Food:
    """A food with its nutrition profile per 100 g."""

    id: UUID
    name: str
    category: str
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float
    calories_per_100g: float
    fiber_per_100g: float | None = None
    default_serving_size: float | None = None
    default_serving_unit: str | None = None
    subcategory: str | None = None
    brand: str | None = None
    is_system: bool = False
    is_published: bool = True
    created_by: UUID | None = None


@dataclass(frozen=True)
class FoodCategory:
    """Category name with the number of system foods in it."""

    category: str
    count: int
