"""Supabase implementation for recipes and their ingredients."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from coach_nutrition.adapters.supabase_support import (
    execute,
    optional_float,
    optional_uuid,
    returned_id,
)
from coach_nutrition.domain.nutrition import MacroProfile
from coach_nutrition.domain.recipes import Recipe, RecipeIngredient
from coach_nutrition.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for recipes.

    Writes that touch ingredients go through Postgres functions so the recipe
    row and its ingredient rows change in one transaction.
    """

    client: Client

    def get_recipe_with_ingredients(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe with its ordered ingredients."""
        response = execute(
            self.client.table("recipes")
            .select("*")
            .eq("id", str(recipe_id))
            .limit(1),
            "load recipe",
        )
        if not response.data:
            return None
        ingredients_response = execute(
            self.client.table("recipe_ingredients")
            .select("*")
            .eq("recipe_id", str(recipe_id))
            .order("order_index"),
            "load recipe ingredients",
        )
        ingredients = [
            _parse_ingredient(row) for row in ingredients_response.data or []
        ]
        return _parse_recipe(response.data[0], ingredients)

    def list_recipes(
        self,
        viewer_id: UUID | None,
        category: str | None,
        search: str | None,
        limit: int,
    ) -> list[Recipe]:
        """Return system recipes plus the viewer's own, without ingredients."""
        query = self.client.table("recipes").select("*")
        if viewer_id is not None:
            query = query.or_(f"is_system.eq.true,created_by.eq.{viewer_id}")
        else:
            query = query.eq("is_system", True)
        if category:
            query = query.eq("category", category)
        if search:
            query = query.ilike("name", f"%{search}%")
        response = execute(query.order("name").limit(limit), "list recipes")
        return [_parse_recipe(row, []) for row in response.data or []]

    def save_recipe(self, recipe: Recipe) -> UUID:
        """Insert a recipe and its ingredients in one transaction."""
        response = execute(
            self.client.rpc(
                "save_recipe",
                {
                    "recipe": _recipe_payload(recipe),
                    "ingredients": [
                        _ingredient_payload(item) for item in recipe.ingredients
                    ],
                },
            ),
            "save recipe",
        )
        return returned_id(response.data, "save recipe")

    def update_recipe(
        self,
        recipe_id: UUID,
        payload: dict[str, object],
        ingredients: list[RecipeIngredient] | None,
    ) -> None:
        """Update recipe columns and optionally replace its ingredients atomically."""
        execute(
            self.client.rpc(
                "update_recipe",
                {
                    "recipe_id": str(recipe_id),
                    "payload": payload,
                    "ingredients": (
                        [_ingredient_payload(item) for item in ingredients]
                        if ingredients is not None
                        else None
                    ),
                },
            ),
            "update recipe",
        )

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe and its ingredients in one transaction."""
        execute(
            self.client.rpc("delete_recipe", {"recipe_id": str(recipe_id)}),
            "delete recipe",
        )


def _recipe_payload(recipe: Recipe) -> dict[str, object]:
    return {
        "name": recipe.name,
        "description": recipe.description,
        "category": recipe.category,
        "instructions": recipe.instructions,
        "prep_time_minutes": recipe.prep_time_minutes,
        "cook_time_minutes": recipe.cook_time_minutes,
        "servings": recipe.servings,
        "total_weight_g": recipe.total_weight_g,
        "calories_per_serving": recipe.per_serving.calories,
        "protein_per_serving": recipe.per_serving.protein_g,
        "carbs_per_serving": recipe.per_serving.carbs_g,
        "fat_per_serving": recipe.per_serving.fat_g,
        "fiber_per_serving": recipe.per_serving.fiber_g,
        "is_system": recipe.is_system,
        "is_published": recipe.is_published,
        "created_by": str(recipe.created_by) if recipe.created_by else None,
    }


def _ingredient_payload(ingredient: RecipeIngredient) -> dict[str, object]:
    return {
        "food_id": str(ingredient.food_id),
        "quantity": ingredient.quantity,
        "unit": ingredient.unit,
        "notes": ingredient.notes,
        "order_index": ingredient.order_index,
    }


def _parse_ingredient(row: dict[str, object]) -> RecipeIngredient:
    """Parse a recipe ingredient row."""
    return RecipeIngredient(
        food_id=UUID(str(row["food_id"])),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or "g"),
        notes=row.get("notes"),
        order_index=int(row.get("order_index") or 0),
    )


def _parse_recipe(
    row: dict[str, object], ingredients: list[RecipeIngredient]
) -> Recipe:
    """Parse a recipe row into a domain model."""
    return Recipe(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        servings=int(row.get("servings") or 1),
        ingredients=ingredients,
        per_serving=MacroProfile(
            calories=float(row.get("calories_per_serving") or 0.0),
            protein_g=float(row.get("protein_per_serving") or 0.0),
            fat_g=float(row.get("fat_per_serving") or 0.0),
            carbs_g=float(row.get("carbs_per_serving") or 0.0),
            fiber_g=float(row.get("fiber_per_serving") or 0.0),
        ),
        total_weight_g=optional_float(row.get("total_weight_g")),
        description=row.get("description"),
        category=row.get("category"),
        instructions=row.get("instructions"),
        prep_time_minutes=row.get("prep_time_minutes"),
        cook_time_minutes=row.get("cook_time_minutes"),
        is_system=bool(row.get("is_system", False)),
        is_published=bool(row.get("is_published", True)),
        created_by=optional_uuid(row.get("created_by")),
    )
