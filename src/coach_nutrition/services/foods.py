"""Services for the food catalogue."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from coach_nutrition.domain.errors import NotFoundError, ValidationError
from coach_nutrition.domain.foods import Food, FoodCategory
from coach_nutrition.domain.models import Actor
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.services.access import can_view, ensure_can_mutate
from coach_nutrition.services.audit import AuditService, audit_snapshot
from coach_nutrition.services.nutrition import (
    calories_match,
    convert_portion,
    derive_calories,
    parse_unit,
)

_MACRO_FIELDS = ("protein_per_100g", "carbs_per_100g", "fat_per_100g")
_OPTIONAL_NUMBER_FIELDS = (
    "calories_per_100g",
    "fiber_per_100g",
    "default_serving_size",
)
_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "brand",
        "category",
        "subcategory",
        "default_serving_unit",
        "is_published",
        *_MACRO_FIELDS,
        *_OPTIONAL_NUMBER_FIELDS,
    }
)

_logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for foods."""

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""

    def list_foods(  # noqa: PLR0913
        self,
        viewer_id: UUID | None,
        category: str | None,
        subcategory: str | None,
        search: str | None,
        limit: int,
    ) -> list[Food]:
        """Return system foods plus the viewer's own foods, ordered by name."""

    def list_categories(self) -> list[FoodCategory]:
        """Return system food categories with counts."""

    def create_food(self, payload: dict[str, object]) -> Food:
        """Create a food and return it."""

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food:
        """Update the given columns of a food and return it."""

    def delete_food(self, food_id: UUID) -> None:
        """Delete a food."""


@dataclass
class FoodService:
    """Application service for food operations."""

    repository: FoodRepository
    audit_service: AuditService

    def get_food(self, food_id: UUID, actor: Actor | None = None) -> Food:
        """Return a food visible to the actor."""
        food = self.repository.get_food(food_id)
        if food is None or not can_view(food, actor):
            raise NotFoundError("Food", food_id)
        return food

    def list_foods(  # noqa: PLR0913
        self,
        actor: Actor | None,
        category: str | None = None,
        subcategory: str | None = None,
        search: str | None = None,
        limit: int = 100,
    ) -> list[Food]:
        """List foods visible to the actor."""
        foods = self.repository.list_foods(
            viewer_id=actor.id if actor else None,
            category=category,
            subcategory=subcategory,
            search=search,
            limit=limit,
        )
        return [food for food in foods if can_view(food, actor)]

    def list_categories(self) -> list[FoodCategory]:
        """List system food categories."""
        return self.repository.list_categories()

    def create_food(self, actor: Actor, payload: dict[str, object]) -> Food:
        """Create a food owned by the actor.

        Missing calories are derived from the macros.
        """
        if not payload.get("name") or not payload.get("category"):
            raise ValidationError("Name and category are required")
        values = _clean_payload(payload)
        for field_name in _MACRO_FIELDS:
            values.setdefault(field_name, 0.0)
        if values.get("calories_per_100g") is None:
            values["calories_per_100g"] = derive_calories(
                values["protein_per_100g"],
                values["carbs_per_100g"],
                values["fat_per_100g"],
            )
        values.setdefault("default_serving_size", 100.0)
        values.setdefault("default_serving_unit", "g")
        values["is_system"] = bool(payload.get("is_system")) and actor.is_super_admin
        values["created_by"] = str(actor.id)
        food = self.repository.create_food(values)
        _warn_on_calorie_mismatch(food)
        self.audit_service.record_event(
            actor.id, "food", food.id, "created", None, audit_snapshot(food)
        )
        return food

    def update_food(
        self, actor: Actor, food_id: UUID, payload: dict[str, object]
    ) -> Food:
        """Apply a partial update to a food."""
        existing = self.repository.get_food(food_id)
        if existing is None:
            raise NotFoundError("Food", food_id)
        ensure_can_mutate(existing, actor, "food")
        values = _clean_payload(payload)
        macros_changed = any(field_name in values for field_name in _MACRO_FIELDS)
        if macros_changed and "calories_per_100g" not in values:
            values["calories_per_100g"] = derive_calories(
                float(values.get("protein_per_100g", existing.protein_per_100g)),
                float(values.get("carbs_per_100g", existing.carbs_per_100g)),
                float(values.get("fat_per_100g", existing.fat_per_100g)),
            )
        if not values:
            return existing
        food = self.repository.update_food(food_id, values)
        _warn_on_calorie_mismatch(food)
        self.audit_service.record_event(
            actor.id,
            "food",
            food_id,
            "updated",
            audit_snapshot(existing),
            audit_snapshot(food),
        )
        return food

    def delete_food(self, actor: Actor, food_id: UUID) -> None:
        """Delete a food the actor may change."""
        existing = self.repository.get_food(food_id)
        if existing is None:
            raise NotFoundError("Food", food_id)
        ensure_can_mutate(existing, actor, "food")
        self.repository.delete_food(food_id)
        self.audit_service.record_event(
            actor.id, "food", food_id, "deleted", audit_snapshot(existing), None
        )

    def calculate_portion(
        self,
        food_id: UUID,
        quantity: object,
        unit: str | None,
        actor: Actor | None = None,
    ) -> MacroProfile:
        """Return the nutrition of a quantity of a food."""
        return convert_portion(self.get_food(food_id, actor), quantity, unit)


def _clean_payload(payload: dict[str, object]) -> dict[str, object]:
    """Drop unknown and empty fields and validate numbers."""
    values: dict[str, object] = {}
    for key, value in payload.items():
        if key not in _EDITABLE_FIELDS or value is None:
            continue
        if key in _MACRO_FIELDS or key in _OPTIONAL_NUMBER_FIELDS:
            value = _non_negative_number(value, key)
        values[key] = value
    if "default_serving_unit" in values:
        values["default_serving_unit"] = str(
            parse_unit(str(values["default_serving_unit"]))
        )
    return values


def _non_negative_number(value: object, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return float(value)


def _warn_on_calorie_mismatch(food: Food) -> None:
    if not calories_match(
        food.calories_per_100g,
        food.protein_per_100g,
        food.carbs_per_100g,
        food.fat_per_100g,
    ):
        _logger.warning(
            "Stored calories for food %s (%s kcal) differ from its macros",
            food.id,
            food.calories_per_100g,
        )
