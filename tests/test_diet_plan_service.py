"""Tests for the diet plan builder."""

from dataclasses import replace

import pytest

from coach_nutrition.domain.drafts import DietPlanDraft, LineItemDraft, MealDraft
from coach_nutrition.domain.errors import ForbiddenError, NotFoundError, ValidationError
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.domain.recipes import Recipe
from tests.conftest import make_actor, make_admin, make_food


@pytest.fixture
def chicken(repositories):
    return repositories.foods.add(make_food())


@pytest.fixture
def stew(repositories):
    return repositories.recipes.add(
        Recipe(
            id=None,
            name="Beef Stew",
            servings=4,
            per_serving=MacroProfile(
                calories=350, protein_g=28.0, fat_g=12.0, carbs_g=30.0
            ),
            is_system=True,
        )
    )


def _typed_meal(name: str, calories: float) -> MealDraft:
    return MealDraft(meal_name=name, calories=calories)


def _derived_plan(*meals: MealDraft) -> DietPlanDraft:
    return DietPlanDraft(name="Cut", meals=list(meals), use_meal_totals=True)


def test_line_item_needs_exactly_one_reference(
    diet_plan_service, chicken, stew
) -> None:
    with pytest.raises(ValidationError, match="exactly one"):
        diet_plan_service.build_line_item(LineItemDraft(), 0)
    with pytest.raises(ValidationError, match="exactly one"):
        diet_plan_service.build_line_item(
            LineItemDraft(food_id=chicken.id, recipe_id=stew.id), 0
        )


def test_food_line_item_defaults_to_100_grams(diet_plan_service, chicken) -> None:
    item = diet_plan_service.build_line_item(LineItemDraft(food_id=chicken.id), 3)

    assert item.quantity == 100.0
    assert item.unit == "g"
    assert item.macros.calories == 125
    assert item.name == "Chicken Breast"
    assert item.order_index == 3


def test_recipe_line_item_defaults_to_one_serving(diet_plan_service, stew) -> None:
    item = diet_plan_service.build_line_item(LineItemDraft(recipe_id=stew.id), 0)

    assert item.quantity == 1.0
    assert item.unit == "serving"
    assert item.macros.calories == 350


def test_line_item_for_missing_food(diet_plan_service) -> None:
    with pytest.raises(NotFoundError, match="Food"):
        diet_plan_service.build_line_item(LineItemDraft(food_id=make_food().id), 0)


def test_meal_totals_come_from_items(diet_plan_service, chicken, stew) -> None:
    draft = MealDraft(
        meal_name="Lunch",
        calories=9999,
        items=[
            LineItemDraft(food_id=chicken.id, quantity=150, unit="g"),
            LineItemDraft(recipe_id=stew.id, quantity=0.5),
        ],
    )

    meal = diet_plan_service.build_meal(draft, 0)

    assert meal.totals.calories == 188 + 175
    assert meal.totals.protein_g == 44.0


def test_empty_meal_uses_typed_totals_or_zero(diet_plan_service) -> None:
    typed = diet_plan_service.build_meal(_typed_meal("Snack", 212.4), 1)
    empty = diet_plan_service.build_meal(MealDraft(meal_name=""), 2)

    assert typed.totals.calories == 212
    assert typed.meal_number == 2
    assert empty.totals.calories == 0
    assert empty.meal_name == "Meal 3"


def test_derived_plan_targets_sum_meals(diet_plan_service) -> None:
    plan = diet_plan_service.create_plan(
        make_actor(),
        _derived_plan(_typed_meal("Breakfast", 300), _typed_meal("Dinner", 500)),
    )

    assert plan.targets.calories_target == 800
    assert plan.use_meal_totals is True


def test_manual_plan_keeps_author_targets(diet_plan_service) -> None:
    draft = DietPlanDraft(
        name="Bulk",
        meals=[_typed_meal("Breakfast", 300)],
        use_meal_totals=False,
        calories_target=3000,
        protein_grams=180,
    )

    plan = diet_plan_service.create_plan(make_actor(), draft)

    assert plan.targets.calories_target == 3000
    assert plan.targets.protein_grams == 180


def test_plan_requires_name_and_meals_per_day(diet_plan_service) -> None:
    with pytest.raises(ValidationError, match="Name"):
        diet_plan_service.create_plan(make_actor(), DietPlanDraft(name=""))
    with pytest.raises(ValidationError, match="meals_per_day"):
        diet_plan_service.preview(DietPlanDraft(name="Zero", meals_per_day=0))


def test_preview_does_not_persist(diet_plan_service, repositories) -> None:
    plan = diet_plan_service.preview(_derived_plan(_typed_meal("Only", 450)))

    assert plan.id is None
    assert plan.targets.calories_target == 450
    assert repositories.plans.plans == {}


def test_snapshot_survives_food_edit(
    diet_plan_service, repositories, chicken
) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        _derived_plan(
            MealDraft(
                meal_name="Lunch",
                items=[LineItemDraft(food_id=chicken.id, quantity=150)],
            )
        ),
    )
    repositories.foods.add(replace(chicken, protein_per_100g=40.0))

    stored = diet_plan_service.get_plan(plan.id, actor)

    assert stored.meals[0].items[0].macros.calories == 188
    assert stored.meals[0].items[0].macros.protein_g == 30.0


def test_add_meal_rerolls_derived_targets(diet_plan_service) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        _derived_plan(_typed_meal("Breakfast", 300), _typed_meal("Dinner", 500)),
    )

    meal = diet_plan_service.add_meal(actor, plan.id, _typed_meal("Snack", 200))
    stored = diet_plan_service.get_plan(plan.id, actor)

    assert meal.id is not None
    assert meal.meal_number == 3
    assert stored.targets.calories_target == 1000
    assert len(stored.meals) == 3


def test_add_meal_keeps_manual_targets(diet_plan_service) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        DietPlanDraft(name="Manual", use_meal_totals=False, calories_target=2000),
    )

    diet_plan_service.add_meal(actor, plan.id, _typed_meal("Snack", 200))

    assert diet_plan_service.get_plan(plan.id, actor).targets.calories_target == 2000


def test_update_plan_without_meals_keeps_them(diet_plan_service) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        _derived_plan(_typed_meal("Breakfast", 300), _typed_meal("Dinner", 500)),
    )

    updated = diet_plan_service.update_plan(
        actor, plan.id, DietPlanDraft(name="Renamed", goal="fat_loss")
    )

    assert updated.name == "Renamed"
    assert updated.goal == "fat_loss"
    assert len(updated.meals) == 2
    assert updated.targets.calories_target == 800
    assert updated.use_meal_totals is True


def test_update_plan_keeps_unsent_publication_and_meal_count(
    diet_plan_service, repositories
) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        DietPlanDraft(name="Bulk", meals_per_day=5, is_published=False),
    )

    updated = diet_plan_service.update_plan(
        actor, plan.id, DietPlanDraft(name="Renamed")
    )

    assert updated.name == "Renamed"
    assert updated.is_published is False
    assert updated.meals_per_day == 5
    assert repositories.plans.plans[plan.id].is_published is False


def test_new_plan_defaults_to_three_published_meals(diet_plan_service) -> None:
    plan = diet_plan_service.create_plan(make_actor(), DietPlanDraft(name="Cut"))

    assert plan.meals_per_day == 3
    assert plan.is_published is True


def test_update_plan_replaces_meals(diet_plan_service, repositories) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        _derived_plan(_typed_meal("Breakfast", 300), _typed_meal("Dinner", 500)),
    )

    updated = diet_plan_service.update_plan(
        actor, plan.id, _derived_plan(_typed_meal("Only meal", 1200))
    )

    assert [meal.meal_name for meal in updated.meals] == ["Only meal"]
    assert updated.targets.calories_target == 1200
    assert len(repositories.plans.meals) == 1


def test_update_plan_of_other_user_is_forbidden(diet_plan_service) -> None:
    plan = diet_plan_service.create_plan(make_actor(), _derived_plan())

    with pytest.raises(ForbiddenError):
        diet_plan_service.update_plan(make_actor(), plan.id, DietPlanDraft(name="X"))


def test_delete_plan_cascades(diet_plan_service, repositories, chicken) -> None:
    actor = make_actor()
    plan = diet_plan_service.create_plan(
        actor,
        _derived_plan(
            MealDraft(
                meal_name="Lunch",
                items=[
                    LineItemDraft(food_id=chicken.id),
                    LineItemDraft(food_id=chicken.id, quantity=50),
                ],
            ),
            _typed_meal("Dinner", 500),
        ),
    )
    assert len(repositories.plans.items) == 2

    diet_plan_service.delete_plan(actor, plan.id)

    assert repositories.plans.meals == {}
    assert repositories.plans.items == {}
    with pytest.raises(NotFoundError):
        diet_plan_service.get_plan(plan.id, actor)


def test_only_super_admin_creates_system_plans(diet_plan_service) -> None:
    draft = replace(_derived_plan(), is_system=True)

    assert diet_plan_service.create_plan(make_admin(), draft).is_system is True
    assert diet_plan_service.create_plan(make_actor(), draft).is_system is False


def test_list_plans_hides_other_users_plans(diet_plan_service) -> None:
    owner = make_actor()
    diet_plan_service.create_plan(owner, replace(_derived_plan(), name="Mine"))
    diet_plan_service.create_plan(make_actor(), replace(_derived_plan(), name="Theirs"))

    names = [plan.name for plan in diet_plan_service.list_plans(owner)]

    assert names == ["Mine"]
