"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from uuid import UUID, uuid4

import pytest
from jose import jwt

from coach_nutrition.config import Settings
from coach_nutrition.containers import AppContainer
from coach_nutrition.domain.diet_plans import DietPlan, Meal, MealFoodItem, PlanTargets
from coach_nutrition.domain.foods import Food, FoodCategory
from coach_nutrition.domain.models import SUPER_ADMIN_ROLE, Actor
from coach_nutrition.domain.recipes import Recipe, RecipeIngredient
from coach_nutrition.services.audit import AuditRepository, AuditService
from coach_nutrition.services.diet_plans import DietPlanRepository, DietPlanService
from coach_nutrition.services.foods import FoodRepository, FoodService
from coach_nutrition.services.recipes import RecipeRepository, RecipeService

JWT_SECRET = "test-secret"


def make_food(**overrides: object) -> Food:
    values: dict[str, object] = {
        "id": uuid4(),
        "name": "Chicken Breast",
        "category": "protein",
        "protein_per_100g": 20.0,
        "carbs_per_100g": 0.0,
        "fat_per_100g": 5.0,
        "calories_per_100g": 125.0,
        "default_serving_size": 100.0,
        "default_serving_unit": "g",
        "is_system": True,
    }
    values.update(overrides)
    return Food(**values)  # type: ignore[arg-type]


def make_actor(*roles: str) -> Actor:
    return Actor(id=uuid4(), roles=frozenset(roles))


def make_admin() -> Actor:
    return make_actor(SUPER_ADMIN_ROLE)


def token_for(actor: Actor) -> str:
    return jwt.encode(
        {"sub": str(actor.id), "roles": sorted(actor.roles)},
        JWT_SECRET,
        algorithm="HS256",
    )


def auth_headers(actor: Actor) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(actor)}"}


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    foods: dict[UUID, Food] = field(default_factory=dict)

    def add(self, food: Food) -> Food:
        self.foods[food.id] = food
        return food

    def get_food(self, food_id: UUID) -> Food | None:
        return self.foods.get(food_id)

    def list_foods(  # noqa: PLR0913
        self,
        viewer_id: UUID | None,
        category: str | None,
        subcategory: str | None,
        search: str | None,
        limit: int,
    ) -> list[Food]:
        foods = [
            food
            for food in self.foods.values()
            if food.is_system or (viewer_id and food.created_by == viewer_id)
        ]
        if category:
            foods = [food for food in foods if food.category == category]
        if subcategory:
            foods = [food for food in foods if food.subcategory == subcategory]
        if search:
            foods = [food for food in foods if search.lower() in food.name.lower()]
        return sorted(foods, key=lambda food: food.name)[:limit]

    def list_categories(self) -> list[FoodCategory]:
        counts: dict[str, int] = {}
        for food in self.foods.values():
            if food.is_system:
                counts[food.category] = counts.get(food.category, 0) + 1
        return [FoodCategory(category=key, count=counts[key]) for key in sorted(counts)]

    def create_food(self, payload: dict[str, object]) -> Food:
        values = dict(payload)
        created_by = values.pop("created_by", None)
        food = Food(
            id=uuid4(),
            created_by=UUID(str(created_by)) if created_by else None,
            **values,  # type: ignore[arg-type]
        )
        return self.add(food)

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food:
        food = replace(self.foods[food_id], **payload)  # type: ignore[arg-type]
        return self.add(food)

    def delete_food(self, food_id: UUID) -> None:
        self.foods.pop(food_id, None)


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: dict[UUID, Recipe] = field(default_factory=dict)

    def add(self, recipe: Recipe) -> Recipe:
        if recipe.id is None:
            recipe = replace(recipe, id=uuid4())
        self.recipes[recipe.id] = recipe
        return recipe

    def get_recipe_with_ingredients(self, recipe_id: UUID) -> Recipe | None:
        return self.recipes.get(recipe_id)

    def list_recipes(
        self,
        viewer_id: UUID | None,
        category: str | None,
        search: str | None,
        limit: int,
    ) -> list[Recipe]:
        recipes = [
            replace(recipe, ingredients=[])
            for recipe in self.recipes.values()
            if recipe.is_system or (viewer_id and recipe.created_by == viewer_id)
        ]
        if category:
            recipes = [recipe for recipe in recipes if recipe.category == category]
        if search:
            recipes = [r for r in recipes if search.lower() in r.name.lower()]
        return sorted(recipes, key=lambda recipe: recipe.name)[:limit]

    def save_recipe(self, recipe: Recipe) -> UUID:
        saved = self.add(replace(recipe, id=None))
        return saved.id  # type: ignore[return-value]

    def update_recipe(
        self,
        recipe_id: UUID,
        payload: dict[str, object],
        ingredients: list[RecipeIngredient] | None,
    ) -> None:
        recipe = self.recipes[recipe_id]
        payload = dict(payload)
        macros = {
            "calories": payload.pop("calories_per_serving", None),
            "protein_g": payload.pop("protein_per_serving", None),
            "carbs_g": payload.pop("carbs_per_serving", None),
            "fat_g": payload.pop("fat_per_serving", None),
            "fiber_g": payload.pop("fiber_per_serving", None),
        }
        per_serving = replace(
            recipe.per_serving,
            **{key: value for key, value in macros.items() if value is not None},
        )
        recipe = replace(
            recipe, per_serving=per_serving, **payload  # type: ignore[arg-type]
        )
        if ingredients is not None:
            recipe = replace(recipe, ingredients=list(ingredients))
        self.recipes[recipe_id] = recipe

    def delete_recipe(self, recipe_id: UUID) -> None:
        self.recipes.pop(recipe_id, None)


@dataclass
class InMemoryDietPlanRepository(DietPlanRepository):
    """In-memory diet plan repository with separate meal and item tables."""

    plans: dict[UUID, DietPlan] = field(default_factory=dict)
    meals: dict[UUID, tuple[UUID, Meal]] = field(default_factory=dict)
    items: dict[UUID, tuple[UUID, MealFoodItem]] = field(default_factory=dict)

    def get_diet_plan(self, plan_id: UUID) -> DietPlan | None:
        plan = self.plans.get(plan_id)
        if plan is None:
            return None
        meals = []
        for meal_id, (owner_id, meal) in self.meals.items():
            if owner_id != plan_id:
                continue
            items = [
                item for parent_id, item in self.items.values() if parent_id == meal_id
            ]
            items.sort(key=lambda item: item.order_index)
            meals.append(replace(meal, items=items))
        meals.sort(key=lambda meal: meal.meal_number)
        return replace(plan, meals=meals)

    def list_diet_plans(
        self,
        viewer_id: UUID | None,
        goal: str | None,
        dietary_type: str | None,
        search: str | None,
    ) -> list[DietPlan]:
        plans = [
            plan
            for plan in self.plans.values()
            if plan.is_system or (viewer_id and plan.created_by == viewer_id)
        ]
        if goal:
            plans = [plan for plan in plans if plan.goal == goal]
        if dietary_type:
            plans = [plan for plan in plans if plan.dietary_type == dietary_type]
        if search:
            plans = [plan for plan in plans if search.lower() in plan.name.lower()]
        return sorted(plans, key=lambda plan: plan.name)

    def save_diet_plan(self, plan: DietPlan) -> UUID:
        plan_id = uuid4()
        self.plans[plan_id] = replace(plan, id=plan_id, meals=[])
        for meal in plan.meals:
            self._insert_meal(plan_id, meal)
        return plan_id

    def update_diet_plan(
        self, plan_id: UUID, payload: dict[str, object], meals: list[Meal] | None
    ) -> None:
        plan = self.plans[plan_id]
        target_keys = {"calories_target", "protein_grams", "carbs_grams", "fat_grams"}
        targets = replace(
            plan.targets, **{k: v for k, v in payload.items() if k in target_keys}
        )
        columns = {k: v for k, v in payload.items() if k not in target_keys}
        self.plans[plan_id] = replace(
            plan, targets=targets, **columns  # type: ignore[arg-type]
        )
        if meals is not None:
            self._delete_meals(plan_id)
            for meal in meals:
                self._insert_meal(plan_id, meal)

    def save_meal(
        self, plan_id: UUID, meal: Meal, targets: PlanTargets | None
    ) -> UUID:
        meal_id = self._insert_meal(plan_id, meal)
        if targets is not None:
            self.plans[plan_id] = replace(self.plans[plan_id], targets=targets)
        return meal_id

    def delete_diet_plan(self, plan_id: UUID) -> None:
        self._delete_meals(plan_id)
        self.plans.pop(plan_id, None)

    def _insert_meal(self, plan_id: UUID, meal: Meal) -> UUID:
        meal_id = uuid4()
        self.meals[meal_id] = (plan_id, replace(meal, id=meal_id, items=[]))
        for item in meal.items:
            item_id = uuid4()
            self.items[item_id] = (meal_id, replace(item, id=item_id))
        return meal_id

    def _delete_meals(self, plan_id: UUID) -> None:
        meal_ids = {
            meal_id for meal_id, (owner, _) in self.meals.items() if owner == plan_id
        }
        for item_id, (meal_id, _) in list(self.items.items()):
            if meal_id in meal_ids:
                del self.items[item_id]
        for meal_id in meal_ids:
            del self.meals[meal_id]


@dataclass
class InMemoryAuditRepository(AuditRepository):
    """In-memory audit repository for tests."""

    events: list[dict[str, object]] = field(default_factory=list)

    def create_event(  # noqa: PLR0913
        self,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        self.events.append(
            {
                "user_id": user_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "event_type": event_type,
                "before": before,
                "after": after,
            }
        )


@dataclass
class Repositories:
    foods: InMemoryFoodRepository = field(default_factory=InMemoryFoodRepository)
    recipes: InMemoryRecipeRepository = field(default_factory=InMemoryRecipeRepository)
    plans: InMemoryDietPlanRepository = field(
        default_factory=InMemoryDietPlanRepository
    )
    audit: InMemoryAuditRepository = field(default_factory=InMemoryAuditRepository)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        jwt_secret=JWT_SECRET,
    )


@pytest.fixture
def repositories() -> Repositories:
    return Repositories()


@pytest.fixture
def audit_service(repositories: Repositories) -> AuditService:
    return AuditService(repositories.audit)


@pytest.fixture
def food_service(
    repositories: Repositories, audit_service: AuditService
) -> FoodService:
    return FoodService(repositories.foods, audit_service)


@pytest.fixture
def recipe_service(
    repositories: Repositories, audit_service: AuditService
) -> RecipeService:
    return RecipeService(
        repository=repositories.recipes,
        food_repository=repositories.foods,
        audit_service=audit_service,
    )


@pytest.fixture
def diet_plan_service(
    repositories: Repositories, audit_service: AuditService
) -> DietPlanService:
    return DietPlanService(
        repository=repositories.plans,
        food_repository=repositories.foods,
        recipe_repository=repositories.recipes,
        audit_service=audit_service,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    audit_service: AuditService,
    food_service: FoodService,
    recipe_service: RecipeService,
    diet_plan_service: DietPlanService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        audit_service=audit_service,
        food_service=food_service,
        recipe_service=recipe_service,
        diet_plan_service=diet_plan_service,
        close_resources=close_resources,
    )

