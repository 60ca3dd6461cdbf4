"""Diet plan builder: meal snapshots, daily rollup and persistence."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from coach_nutrition.domain.diet_plans import DietPlan, Meal, MealFoodItem, PlanTargets
from coach_nutrition.domain.drafts import DietPlanDraft, LineItemDraft, MealDraft
from coach_nutrition.domain.errors import NotFoundError, ValidationError
from coach_nutrition.domain.models import Actor
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.services.access import can_view, ensure_can_mutate
from coach_nutrition.services.aggregation import resolve_targets, sum_macros
from coach_nutrition.services.audit import AuditService, audit_snapshot
from coach_nutrition.services.foods import FoodRepository
from coach_nutrition.services.nutrition import (
    coerce_quantity,
    convert_portion,
    convert_recipe_portion,
    parse_unit,
    round_calories,
    round_grams,
    round_half_up,
)
from coach_nutrition.services.recipes import RecipeRepository

_logger = logging.getLogger(__name__)


class DietPlanRepository(Protocol):
    """Persistence interface for diet plans, meals and meal items."""

    def get_diet_plan(self, plan_id: UUID) -> DietPlan | None:
        """Return a plan with its ordered meals and items."""

    def list_diet_plans(
        self,
        viewer_id: UUID | None,
        goal: str | None,
        dietary_type: str | None,
        search: str | None,
    ) -> list[DietPlan]:
        """Return system plans plus the viewer's own, without meals."""

    def save_diet_plan(self, plan: DietPlan) -> UUID:
        """Insert a plan with all meals and items in one transaction."""

    def update_diet_plan(
        self, plan_id: UUID, payload: dict[str, object], meals: list[Meal] | None
    ) -> None:
        """Update plan columns and optionally replace all meals atomically."""

    def save_meal(
        self, plan_id: UUID, meal: Meal, targets: PlanTargets | None
    ) -> UUID:
        """Insert one meal with its items and update plan targets atomically."""

    def delete_diet_plan(self, plan_id: UUID) -> None:
        """Delete a plan, its meals and their items in one transaction."""


@dataclass
class DietPlanService:
    """Builds meals from foods and recipes and rolls them up into plans."""

    repository: DietPlanRepository
    food_repository: FoodRepository
    recipe_repository: RecipeRepository
    audit_service: AuditService

    def get_plan(self, plan_id: UUID, actor: Actor | None = None) -> DietPlan:
        """Return a plan visible to the actor."""
        plan = self.repository.get_diet_plan(plan_id)
        if plan is None or not can_view(plan, actor):
            raise NotFoundError("Diet plan", plan_id)
        return plan

    def list_plans(
        self,
        actor: Actor | None,
        goal: str | None = None,
        dietary_type: str | None = None,
        search: str | None = None,
    ) -> list[DietPlan]:
        """List plans visible to the actor."""
        plans = self.repository.list_diet_plans(
            viewer_id=actor.id if actor else None,
            goal=goal,
            dietary_type=dietary_type,
            search=search,
        )
        return [plan for plan in plans if can_view(plan, actor)]

    def build_line_item(self, draft: LineItemDraft, order_index: int) -> MealFoodItem:
        """Resolve a food or recipe reference into a macro snapshot."""
        if (draft.food_id is None) == (draft.recipe_id is None):
            raise ValidationError(
                "A meal item must reference exactly one of food_id or recipe_id"
            )
        if draft.food_id is not None:
            food = self.food_repository.get_food(draft.food_id)
            if food is None:
                raise NotFoundError("Food", draft.food_id)
            quantity = coerce_quantity(draft.quantity)
            unit = parse_unit(draft.unit)
            macros = convert_portion(food, quantity, unit)
            name = food.name
        else:
            recipe = self.recipe_repository.get_recipe_with_ingredients(draft.recipe_id)
            if recipe is None:
                raise NotFoundError("Recipe", draft.recipe_id)
            quantity = coerce_quantity(draft.quantity, default=1.0)
            unit = parse_unit(draft.unit or "serving")
            macros = convert_recipe_portion(recipe, quantity, unit)
            name = recipe.name
        return MealFoodItem(
            food_id=draft.food_id,
            recipe_id=draft.recipe_id,
            quantity=quantity,
            unit=str(unit),
            macros=macros,
            name=name,
            notes=draft.notes,
            order_index=order_index,
        )

    def build_meal(self, draft: MealDraft, position: int) -> Meal:
        """Build a meal; totals come from its items, or the typed values when empty."""
        items = [
            self.build_line_item(item, index) for index, item in enumerate(draft.items)
        ]
        if items:
            totals = sum_macros(item.macros for item in items)
        else:
            totals = _typed_totals(draft)
        return Meal(
            meal_number=draft.meal_number or position + 1,
            meal_name=draft.meal_name or f"Meal {position + 1}",
            totals=totals,
            items=items,
            time_suggestion=draft.time_suggestion,
            notes=draft.notes,
        )

    def preview(
        self, draft: DietPlanDraft, current_meals: list[Meal] | None = None
    ) -> DietPlan:
        """Compute meals and targets without persisting anything.

        When the draft carries no meals, ``current_meals`` are rolled up instead.
        """
        meals_per_day = (
            draft.meals_per_day if draft.meals_per_day is not None else 3
        )
        if meals_per_day < 1:
            raise ValidationError("meals_per_day must be at least 1")
        if draft.meals is None:
            meals = list(current_meals or [])
        else:
            meals = [
                self.build_meal(meal, index) for index, meal in enumerate(draft.meals)
            ]
        requested = PlanTargets(
            calories_target=_optional_whole(draft.calories_target, "calories_target"),
            protein_grams=_optional_whole(draft.protein_grams, "protein_grams"),
            carbs_grams=_optional_whole(draft.carbs_grams, "carbs_grams"),
            fat_grams=_optional_whole(draft.fat_grams, "fat_grams"),
        )
        use_meal_totals = draft.use_meal_totals is not False
        targets = resolve_targets(meals, requested, use_meal_totals)
        return DietPlan(
            id=None,
            name=draft.name,
            meals_per_day=meals_per_day,
            meals=meals,
            targets=targets,
            use_meal_totals=use_meal_totals,
            description=draft.description,
            goal=draft.goal,
            dietary_type=draft.dietary_type,
            notes=draft.notes,
            is_published=draft.is_published is not False,
        )

    def create_plan(self, actor: Actor, draft: DietPlanDraft) -> DietPlan:
        """Compute and persist a new plan owned by the actor."""
        if not draft.name:
            raise ValidationError("Name is required")
        plan = replace(
            self.preview(draft),
            is_system=draft.is_system and actor.is_super_admin,
            created_by=actor.id,
        )
        plan_id = self.repository.save_diet_plan(plan)
        saved = replace(plan, id=plan_id)
        _logger.info(
            "Diet plan %s saved with %s meals, %s kcal target",
            plan_id,
            len(plan.meals),
            plan.targets.calories_target,
        )
        self.audit_service.record_event(
            actor.id, "diet_plan", plan_id, "created", None, audit_snapshot(saved)
        )
        return saved

    def update_plan(
        self, actor: Actor, plan_id: UUID, draft: DietPlanDraft
    ) -> DietPlan:
        """Update a plan from a draft.

        Meals are replaced only when the draft carries them; targets are
        recomputed either way.
        """
        existing = self.repository.get_diet_plan(plan_id)
        if existing is None:
            raise NotFoundError("Diet plan", plan_id)
        ensure_can_mutate(existing, actor, "diet plan")
        if not draft.name:
            raise ValidationError("Name is required")
        draft = _fill_from_existing(draft, existing)
        plan = self.preview(draft, current_meals=existing.meals)
        self.repository.update_diet_plan(
            plan_id,
            _plan_columns(plan),
            plan.meals if draft.meals is not None else None,
        )
        updated = self.repository.get_diet_plan(plan_id)
        if updated is None:
            raise NotFoundError("Diet plan", plan_id)
        self.audit_service.record_event(
            actor.id,
            "diet_plan",
            plan_id,
            "updated",
            audit_snapshot(existing),
            audit_snapshot(updated),
        )
        return updated

    def add_meal(self, actor: Actor, plan_id: UUID, draft: MealDraft) -> Meal:
        """Append a meal to a plan, re-rolling targets for derived plans."""
        existing = self.repository.get_diet_plan(plan_id)
        if existing is None:
            raise NotFoundError("Diet plan", plan_id)
        ensure_can_mutate(existing, actor, "diet plan")
        meal = self.build_meal(draft, len(existing.meals))
        targets = None
        if existing.use_meal_totals:
            targets = resolve_targets(
                [*existing.meals, meal], existing.targets, use_meal_totals=True
            )
        meal_id = self.repository.save_meal(plan_id, meal, targets)
        saved = replace(meal, id=meal_id)
        self.audit_service.record_event(
            actor.id, "diet_plan", plan_id, "meal_added", None, audit_snapshot(saved)
        )
        return saved

    def delete_plan(self, actor: Actor, plan_id: UUID) -> None:
        """Delete a plan together with its meals and items."""
        existing = self.repository.get_diet_plan(plan_id)
        if existing is None:
            raise NotFoundError("Diet plan", plan_id)
        ensure_can_mutate(existing, actor, "diet plan")
        self.repository.delete_diet_plan(plan_id)
        self.audit_service.record_event(
            actor.id, "diet_plan", plan_id, "deleted", audit_snapshot(existing), None
        )


def _fill_from_existing(draft: DietPlanDraft, existing: DietPlan) -> DietPlanDraft:
    """Keep the stored mode, meal count and publication state when omitted."""
    return replace(
        draft,
        use_meal_totals=(
            draft.use_meal_totals
            if draft.use_meal_totals is not None
            else existing.use_meal_totals
        ),
        meals_per_day=(
            draft.meals_per_day
            if draft.meals_per_day is not None
            else existing.meals_per_day
        ),
        is_published=(
            draft.is_published
            if draft.is_published is not None
            else existing.is_published
        ),
    )


def _typed_totals(draft: MealDraft) -> MacroProfile:
    return MacroProfile(
        calories=round_calories(coerce_quantity(draft.calories, 0)),
        protein_g=round_grams(coerce_quantity(draft.protein_grams, 0)),
        fat_g=round_grams(coerce_quantity(draft.fat_grams, 0)),
        carbs_g=round_grams(coerce_quantity(draft.carbs_grams, 0)),
    )


def _optional_whole(value: float | None, label: str) -> int | None:
    if value is None:
        return None
    try:
        amount = coerce_quantity(value)
    except ValidationError as exc:
        raise ValidationError(f"{label} must be a non-negative number") from exc
    return int(round_half_up(amount))


def _plan_columns(plan: DietPlan) -> dict[str, object]:
    columns = {
        "name": plan.name,
        "description": plan.description,
        "goal": plan.goal,
        "dietary_type": plan.dietary_type,
        "notes": plan.notes,
        "meals_per_day": plan.meals_per_day,
        "use_meal_totals": plan.use_meal_totals,
        "is_published": plan.is_published,
        "calories_target": plan.targets.calories_target,
        "protein_grams": plan.targets.protein_grams,
        "carbs_grams": plan.targets.carbs_grams,
        "fat_grams": plan.targets.fat_grams,
    }
    return {key: value for key, value in columns.items() if value is not None}
