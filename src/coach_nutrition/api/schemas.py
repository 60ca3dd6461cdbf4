"""Pydantic request models for the nutrition API."""

from uuid import UUID

from pydantic import BaseModel, Field

from coach_nutrition.domain.drafts import DietPlanDraft, LineItemDraft, MealDraft

Quantity = float | str | None


class CaloriesRequest(BaseModel):
    """Macro triple to derive calories from."""

    protein_g: float = 0
    carbs_g: float = 0
    fat_g: float = 0


class PortionRequest(BaseModel):
    """Quantity of a food to convert into nutrition."""

    food_id: UUID
    quantity: Quantity = None
    unit: str | None = None


class FoodCreate(BaseModel):
    """Food payload."""

    name: str
    category: str
    brand: str | None = None
    subcategory: str | None = None
    protein_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fat_per_100g: float | None = None
    calories_per_100g: float | None = None
    fiber_per_100g: float | None = None
    default_serving_size: float | None = None
    default_serving_unit: str | None = None
    is_system: bool = False
    is_published: bool = True


class FoodUpdate(BaseModel):
    """Partial food update."""

    name: str | None = None
    category: str | None = None
    brand: str | None = None
    subcategory: str | None = None
    protein_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fat_per_100g: float | None = None
    calories_per_100g: float | None = None
    fiber_per_100g: float | None = None
    default_serving_size: float | None = None
    default_serving_unit: str | None = None
    is_published: bool | None = None


class RecipeIngredientIn(BaseModel):
    """Recipe ingredient payload."""

    food_id: UUID
    quantity: Quantity = None
    unit: str | None = None
    notes: str | None = None


class RecipeIn(BaseModel):
    """Recipe payload, used for both create and partial update."""

    name: str | None = None
    description: str | None = None
    category: str | None = None
    instructions: str | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    servings: float | None = None
    total_weight_g: float | None = None
    calories_per_serving: float | None = None
    protein_per_serving: float | None = None
    carbs_per_serving: float | None = None
    fat_per_serving: float | None = None
    fiber_per_serving: float | None = None
    is_system: bool = False
    is_published: bool | None = None
    ingredients: list[RecipeIngredientIn] | None = None

    def columns(self) -> dict[str, object]:
        """Return the recipe fields that were sent, without ingredients."""
        return self.model_dump(exclude_unset=True, exclude={"ingredients"})

    def ingredient_rows(self) -> list[dict[str, object]] | None:
        if self.ingredients is None:
            return None
        return [ingredient.model_dump() for ingredient in self.ingredients]


class RecipePreviewRequest(BaseModel):
    """Ingredients to total without saving a recipe."""

    servings: float = 1
    ingredients: list[RecipeIngredientIn] = Field(default_factory=list)


class LineItemIn(BaseModel):
    """Meal item referencing exactly one food or recipe."""

    food_id: UUID | None = None
    recipe_id: UUID | None = None
    quantity: Quantity = None
    unit: str | None = None
    notes: str | None = None

    def to_draft(self) -> LineItemDraft:
        return LineItemDraft(
            food_id=self.food_id,
            recipe_id=self.recipe_id,
            quantity=self.quantity,
            unit=self.unit,
            notes=self.notes,
        )


class MealIn(BaseModel):
    """Meal payload; manual macros apply only to meals without items."""

    meal_name: str = ""
    meal_number: int | None = None
    items: list[LineItemIn] = Field(default_factory=list)
    time_suggestion: str | None = None
    notes: str | None = None
    calories: float | None = None
    protein_grams: float | None = None
    carbs_grams: float | None = None
    fat_grams: float | None = None

    def to_draft(self) -> MealDraft:
        return MealDraft(
            meal_name=self.meal_name,
            meal_number=self.meal_number,
            items=[item.to_draft() for item in self.items],
            time_suggestion=self.time_suggestion,
            notes=self.notes,
            calories=self.calories,
            protein_grams=self.protein_grams,
            carbs_grams=self.carbs_grams,
            fat_grams=self.fat_grams,
        )


class DietPlanIn(BaseModel):
    """Diet plan payload."""

    name: str = ""
    meals: list[MealIn] | None = None
    use_meal_totals: bool | None = None
    meals_per_day: int | None = None
    calories_target: float | None = None
    protein_grams: float | None = None
    carbs_grams: float | None = None
    fat_grams: float | None = None
    description: str | None = None
    goal: str | None = None
    dietary_type: str | None = None
    notes: str | None = None
    is_system: bool = False
    is_published: bool | None = None

    def to_draft(self) -> DietPlanDraft:
        return DietPlanDraft(
            name=self.name,
            meals=(
                [meal.to_draft() for meal in self.meals]
                if self.meals is not None
                else None
            ),
            use_meal_totals=self.use_meal_totals,
            meals_per_day=self.meals_per_day,
            calories_target=self.calories_target,
            protein_grams=self.protein_grams,
            carbs_grams=self.carbs_grams,
            fat_grams=self.fat_grams,
            description=self.description,
            goal=self.goal,
            dietary_type=self.dietary_type,
            notes=self.notes,
            is_system=self.is_system,
            is_published=self.is_published,
        )
