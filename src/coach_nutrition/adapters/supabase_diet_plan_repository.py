"""Supabase implementation for diet plans, meals and meal items."""

from collections import defaultdict
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from coach_nutrition.adapters.supabase_support import (
    execute,
    optional_uuid,
    returned_id,
)
from coach_nutrition.domain.diet_plans import DietPlan, Meal, MealFoodItem, PlanTargets
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.services.diet_plans import DietPlanRepository


@dataclass
class SupabaseDietPlanRepository(DietPlanRepository):
    """Supabase-backed repository for diet plans.

    Plan, meal and item rows are written by Postgres functions so each save,
    update or delete is a single transaction.
    """

    client: Client

    def get_diet_plan(self, plan_id: UUID) -> DietPlan | None:
        """Return a plan with its ordered meals and items."""
        response = execute(
            self.client.table("diet_plans")
            .select("*")
            .eq("id", str(plan_id))
            .limit(1),
            "load diet plan",
        )
        if not response.data:
            return None
        meals_response = execute(
            self.client.table("diet_plan_meals")
            .select("*")
            .eq("plan_id", str(plan_id))
            .order("meal_number"),
            "load diet plan meals",
        )
        meal_rows = meals_response.data or []
        items_by_meal: dict[str, list[MealFoodItem]] = defaultdict(list)
        meal_ids = [str(row["id"]) for row in meal_rows]
        if meal_ids:
            items_response = execute(
                self.client.table("meal_food_items")
                .select("*")
                .in_("meal_id", meal_ids)
                .order("order_index"),
                "load meal items",
            )
            for row in items_response.data or []:
                items_by_meal[str(row["meal_id"])].append(_parse_item(row))
        meals = [
            _parse_meal(row, items_by_meal.get(str(row["id"]), []))
            for row in meal_rows
        ]
        return _parse_plan(response.data[0], meals)

    def list_diet_plans(
        self,
        viewer_id: UUID | None,
        goal: str | None,
        dietary_type: str | None,
        search: str | None,
    ) -> list[DietPlan]:
        """Return system plans plus the viewer's own, without meals."""
        query = self.client.table("diet_plans").select("*").eq("is_active", True)
        if viewer_id is not None:
            query = query.or_(f"is_system.eq.true,created_by.eq.{viewer_id}")
        else:
            query = query.eq("is_system", True)
        if goal:
            query = query.eq("goal", goal)
        if dietary_type:
            query = query.eq("dietary_type", dietary_type)
        if search:
            query = query.ilike("name", f"%{search}%")
        response = execute(query.order("name"), "list diet plans")
        return [_parse_plan(row, []) for row in response.data or []]

    def save_diet_plan(self, plan: DietPlan) -> UUID:
        """Insert a plan with all meals and items in one transaction."""
        response = execute(
            self.client.rpc(
                "save_diet_plan",
                {
                    "plan": _plan_payload(plan),
                    "meals": [_meal_payload(meal) for meal in plan.meals],
                },
            ),
            "save diet plan",
        )
        return returned_id(response.data, "save diet plan")

    def update_diet_plan(
        self, plan_id: UUID, payload: dict[str, object], meals: list[Meal] | None
    ) -> None:
        """Update plan columns and optionally replace all meals atomically."""
        execute(
            self.client.rpc(
                "update_diet_plan",
                {
                    "plan_id": str(plan_id),
                    "payload": payload,
                    "meals": (
                        [_meal_payload(meal) for meal in meals]
                        if meals is not None
                        else None
                    ),
                },
            ),
            "update diet plan",
        )

    def save_meal(
        self, plan_id: UUID, meal: Meal, targets: PlanTargets | None
    ) -> UUID:
        """Insert one meal with its items and update plan targets atomically."""
        response = execute(
            self.client.rpc(
                "save_meal",
                {
                    "plan_id": str(plan_id),
                    "meal": _meal_payload(meal),
                    "targets": _targets_payload(targets) if targets else None,
                },
            ),
            "save meal",
        )
        return returned_id(response.data, "save meal")

    def delete_diet_plan(self, plan_id: UUID) -> None:
        """Delete a plan, its meals and their items in one transaction."""
        execute(
            self.client.rpc("delete_diet_plan", {"plan_id": str(plan_id)}),
            "delete diet plan",
        )


def _targets_payload(targets: PlanTargets) -> dict[str, object]:
    return {
        "calories_target": targets.calories_target,
        "protein_grams": targets.protein_grams,
        "carbs_grams": targets.carbs_grams,
        "fat_grams": targets.fat_grams,
    }


def _plan_payload(plan: DietPlan) -> dict[str, object]:
    return {
        "name": plan.name,
        "description": plan.description,
        "goal": plan.goal,
        "dietary_type": plan.dietary_type,
        "notes": plan.notes,
        "meals_per_day": plan.meals_per_day,
        "use_meal_totals": plan.use_meal_totals,
        "is_system": plan.is_system,
        "is_published": plan.is_published,
        "is_active": plan.is_active,
        "created_by": str(plan.created_by) if plan.created_by else None,
        **_targets_payload(plan.targets),
    }


def _meal_payload(meal: Meal) -> dict[str, object]:
    return {
        "meal_number": meal.meal_number,
        "meal_name": meal.meal_name,
        "time_suggestion": meal.time_suggestion,
        "notes": meal.notes,
        "calories": meal.totals.calories,
        "protein_grams": meal.totals.protein_g,
        "carbs_grams": meal.totals.carbs_g,
        "fat_grams": meal.totals.fat_g,
        "fiber_grams": meal.totals.fiber_g,
        "items": [_item_payload(item) for item in meal.items],
    }


def _item_payload(item: MealFoodItem) -> dict[str, object]:
    return {
        "food_id": str(item.food_id) if item.food_id else None,
        "recipe_id": str(item.recipe_id) if item.recipe_id else None,
        "item_name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "notes": item.notes,
        "order_index": item.order_index,
        "calculated_calories": item.macros.calories,
        "calculated_protein": item.macros.protein_g,
        "calculated_carbs": item.macros.carbs_g,
        "calculated_fat": item.macros.fat_g,
        "calculated_fiber": item.macros.fiber_g,
    }


def _parse_item(row: dict[str, object]) -> MealFoodItem:
    """Parse a meal item row, keeping its stored macro snapshot."""
    return MealFoodItem(
        id=optional_uuid(row.get("id")),
        food_id=optional_uuid(row.get("food_id")),
        recipe_id=optional_uuid(row.get("recipe_id")),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or "g"),
        macros=MacroProfile(
            calories=float(row.get("calculated_calories") or 0.0),
            protein_g=float(row.get("calculated_protein") or 0.0),
            fat_g=float(row.get("calculated_fat") or 0.0),
            carbs_g=float(row.get("calculated_carbs") or 0.0),
            fiber_g=float(row.get("calculated_fiber") or 0.0),
        ),
        name=str(row.get("item_name") or ""),
        notes=row.get("notes"),
        order_index=int(row.get("order_index") or 0),
    )


def _parse_meal(row: dict[str, object], items: list[MealFoodItem]) -> Meal:
    """Parse a meal row with its items."""
    return Meal(
        id=optional_uuid(row.get("id")),
        meal_number=int(row.get("meal_number") or 0),
        meal_name=str(row.get("meal_name") or ""),
        totals=MacroProfile(
            calories=float(row.get("calories") or 0.0),
            protein_g=float(row.get("protein_grams") or 0.0),
            fat_g=float(row.get("fat_grams") or 0.0),
            carbs_g=float(row.get("carbs_grams") or 0.0),
            fiber_g=float(row.get("fiber_grams") or 0.0),
        ),
        items=items,
        time_suggestion=row.get("time_suggestion"),
        notes=row.get("notes"),
    )


def _parse_plan(row: dict[str, object], meals: list[Meal]) -> DietPlan:
    """Parse a diet plan row into a domain model."""
    return DietPlan(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        meals_per_day=int(row.get("meals_per_day") or 3),
        meals=meals,
        targets=PlanTargets(
            calories_target=_optional_int(row.get("calories_target")),
            protein_grams=_optional_int(row.get("protein_grams")),
            carbs_grams=_optional_int(row.get("carbs_grams")),
            fat_grams=_optional_int(row.get("fat_grams")),
        ),
        use_meal_totals=bool(row.get("use_meal_totals", False)),
        description=row.get("description"),
        goal=row.get("goal"),
        dietary_type=row.get("dietary_type"),
        notes=row.get("notes"),
        is_system=bool(row.get("is_system", False)),
        is_published=bool(row.get("is_published", True)),
        is_active=bool(row.get("is_active", True)),
        created_by=optional_uuid(row.get("created_by")),
    )


def _optional_int(value: object) -> int | None:
    return int(value) if value is not None else None
