"""Recipe composition service."""

import logging
import math
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from coach_nutrition.domain.errors import NotFoundError, ValidationError
from coach_nutrition.domain.models import Actor
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.domain.recipes import Recipe, RecipeIngredient
from coach_nutrition.services.access import can_view, ensure_can_mutate
from coach_nutrition.services.aggregation import per_serving, sum_macros
from coach_nutrition.services.audit import AuditService, audit_snapshot
from coach_nutrition.services.foods import FoodRepository
from coach_nutrition.services.nutrition import (
    coerce_quantity,
    convert_portion,
    parse_unit,
    round_calories,
    round_grams,
)

_TEXT_FIELDS = ("name", "description", "category", "instructions")
_MINUTE_FIELDS = ("prep_time_minutes", "cook_time_minutes")
_PER_SERVING_FIELDS = {
    "calories_per_serving": "calories",
    "protein_per_serving": "protein_g",
    "carbs_per_serving": "carbs_g",
    "fat_per_serving": "fat_g",
    "fiber_per_serving": "fiber_g",
}

_logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Persistence interface for recipes and their ingredients."""

    def get_recipe_with_ingredients(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe with its ordered ingredients."""

    def list_recipes(
        self,
        viewer_id: UUID | None,
        category: str | None,
        search: str | None,
        limit: int,
    ) -> list[Recipe]:
        """Return system recipes plus the viewer's own, without ingredients."""

    def save_recipe(self, recipe: Recipe) -> UUID:
        """Insert a recipe and its ingredients in one transaction."""

    def update_recipe(
        self,
        recipe_id: UUID,
        payload: dict[str, object],
        ingredients: list[RecipeIngredient] | None,
    ) -> None:
        """Update recipe columns and optionally replace its ingredients atomically."""

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe and its ingredients in one transaction."""


@dataclass
class RecipeService:
    """Computes recipe nutrition and persists recipes."""

    repository: RecipeRepository
    food_repository: FoodRepository
    audit_service: AuditService

    def get_recipe(self, recipe_id: UUID, actor: Actor | None = None) -> Recipe:
        """Return a recipe visible to the actor."""
        recipe = self.repository.get_recipe_with_ingredients(recipe_id)
        if recipe is None or not can_view(recipe, actor):
            raise NotFoundError("Recipe", recipe_id)
        return recipe

    def list_recipes(
        self,
        actor: Actor | None,
        category: str | None = None,
        search: str | None = None,
        limit: int = 100,
    ) -> list[Recipe]:
        """List recipes visible to the actor."""
        recipes = self.repository.list_recipes(
            viewer_id=actor.id if actor else None,
            category=category,
            search=search,
            limit=limit,
        )
        return [recipe for recipe in recipes if can_view(recipe, actor)]

    def calculate_totals(
        self, ingredients: list[RecipeIngredient], servings: int
    ) -> tuple[MacroProfile, MacroProfile]:
        """Return whole-recipe totals and per-serving values."""
        portions = []
        for ingredient in ingredients:
            food = self.food_repository.get_food(ingredient.food_id)
            if food is None:
                raise NotFoundError("Food", ingredient.food_id)
            portions.append(convert_portion(food, ingredient.quantity, ingredient.unit))
        total = sum_macros(portions)
        return total, per_serving(total, servings)

    def preview_totals(
        self, ingredients: list[dict[str, object]], servings: object
    ) -> tuple[MacroProfile, MacroProfile]:
        """Validate raw ingredients and total them without saving anything."""
        parsed = build_ingredients(ingredients)
        return self.calculate_totals(parsed, _servings(servings))

    def create_recipe(
        self,
        actor: Actor,
        payload: dict[str, object],
        ingredients: list[dict[str, object]] | None = None,
    ) -> Recipe:
        """Create a recipe, computing its per-serving macros from ingredients."""
        if not payload.get("name"):
            raise ValidationError("Name is required")
        parsed = build_ingredients(ingredients or [])
        servings = _servings(payload.get("servings", 1))
        if parsed:
            _, serving_macros = self.calculate_totals(parsed, servings)
        else:
            serving_macros = _manual_per_serving(payload)
        recipe = Recipe(
            id=None,
            name=str(payload["name"]),
            servings=servings,
            ingredients=parsed,
            per_serving=serving_macros,
            total_weight_g=_optional_float(payload.get("total_weight_g")),
            description=_optional_str(payload.get("description")),
            category=_optional_str(payload.get("category")),
            instructions=_optional_str(payload.get("instructions")),
            prep_time_minutes=_optional_int(payload.get("prep_time_minutes")),
            cook_time_minutes=_optional_int(payload.get("cook_time_minutes")),
            is_system=bool(payload.get("is_system")) and actor.is_super_admin,
            is_published=payload.get("is_published") is not False,
            created_by=actor.id,
        )
        recipe_id = self.repository.save_recipe(recipe)
        saved = replace(recipe, id=recipe_id)
        _logger.info(
            "Recipe %s saved with %s ingredients, %s kcal per serving",
            recipe_id,
            len(parsed),
            serving_macros.calories,
        )
        self.audit_service.record_event(
            actor.id, "recipe", recipe_id, "created", None, audit_snapshot(saved)
        )
        return saved

    def update_recipe(
        self,
        actor: Actor,
        recipe_id: UUID,
        payload: dict[str, object],
        ingredients: list[dict[str, object]] | None = None,
    ) -> Recipe:
        """Partially update a recipe.

        Per-serving macros are recomputed when the ingredients or the
        number of servings change.
        """
        existing = self.repository.get_recipe_with_ingredients(recipe_id)
        if existing is None:
            raise NotFoundError("Recipe", recipe_id)
        ensure_can_mutate(existing, actor, "recipe")

        columns = _recipe_columns(payload)
        parsed = build_ingredients(ingredients) if ingredients is not None else None
        servings = columns.get("servings", existing.servings)
        if parsed is not None or "servings" in columns:
            current = parsed if parsed is not None else existing.ingredients
            # Clearing the ingredients zeroes the per-serving values.
            if current or parsed is not None:
                _, serving_macros = self.calculate_totals(current, int(servings))
                columns.update(_per_serving_columns(serving_macros))
        self.repository.update_recipe(recipe_id, columns, parsed)

        updated = self.repository.get_recipe_with_ingredients(recipe_id)
        if updated is None:
            raise NotFoundError("Recipe", recipe_id)
        self.audit_service.record_event(
            actor.id,
            "recipe",
            recipe_id,
            "updated",
            audit_snapshot(existing),
            audit_snapshot(updated),
        )
        return updated

    def delete_recipe(self, actor: Actor, recipe_id: UUID) -> None:
        """Delete a recipe and its ingredients."""
        existing = self.repository.get_recipe_with_ingredients(recipe_id)
        if existing is None:
            raise NotFoundError("Recipe", recipe_id)
        ensure_can_mutate(existing, actor, "recipe")
        self.repository.delete_recipe(recipe_id)
        self.audit_service.record_event(
            actor.id, "recipe", recipe_id, "deleted", audit_snapshot(existing), None
        )


def build_ingredients(raw_items: list[dict[str, object]]) -> list[RecipeIngredient]:
    """Validate raw ingredient rows, keeping their order."""
    ingredients: list[RecipeIngredient] = []
    for index, item in enumerate(raw_items):
        food_id = _parse_uuid(item.get("food_id"))
        if food_id is None:
            raise ValidationError(f"Ingredient {index + 1} needs a food_id")
        unit = parse_unit(_optional_str(item.get("unit")))
        ingredients.append(
            RecipeIngredient(
                food_id=food_id,
                quantity=coerce_quantity(item.get("quantity")),
                unit=str(unit),
                notes=_optional_str(item.get("notes")),
                order_index=index,
            )
        )
    return ingredients


def _recipe_columns(payload: dict[str, object]) -> dict[str, object]:
    columns: dict[str, object] = {}
    for key in _TEXT_FIELDS:
        if payload.get(key) is not None:
            columns[key] = str(payload[key])
    for key in _MINUTE_FIELDS:
        if payload.get(key) is not None:
            columns[key] = _optional_int(payload[key])
    if payload.get("servings") is not None:
        columns["servings"] = _servings(payload["servings"])
    if payload.get("total_weight_g") is not None:
        columns["total_weight_g"] = _optional_float(payload["total_weight_g"])
    for key in _PER_SERVING_FIELDS:
        if payload.get(key) is not None:
            columns[key] = coerce_quantity(payload[key])
    if payload.get("is_published") is not None:
        columns["is_published"] = bool(payload["is_published"])
    return columns


def _per_serving_columns(macros: MacroProfile) -> dict[str, object]:
    return {
        column: getattr(macros, attribute)
        for column, attribute in _PER_SERVING_FIELDS.items()
    }


def _manual_per_serving(payload: dict[str, object]) -> MacroProfile:
    return MacroProfile(
        calories=round_calories(
            coerce_quantity(payload.get("calories_per_serving"), 0)
        ),
        protein_g=round_grams(coerce_quantity(payload.get("protein_per_serving"), 0)),
        fat_g=round_grams(coerce_quantity(payload.get("fat_per_serving"), 0)),
        carbs_g=round_grams(coerce_quantity(payload.get("carbs_per_serving"), 0)),
        fiber_g=round_grams(coerce_quantity(payload.get("fiber_per_serving"), 0)),
    )


def _servings(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError("Servings must be a whole number of at least 1")
    if not math.isfinite(value) or value != int(value) or value < 1:
        raise ValidationError("Servings must be a whole number of at least 1")
    return int(value)


def _parse_uuid(value: object) -> UUID | None:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            return None
    return None


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _optional_float(value: object) -> float | None:
    return coerce_quantity(value) if value is not None else None


def _optional_int(value: object) -> int | None:
    return int(coerce_quantity(value)) if value is not None else None
