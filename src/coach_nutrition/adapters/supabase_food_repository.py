"""Supabase implementation of the food catalogue."""

from collections import Counter
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from coach_nutrition.adapters.supabase_support import (
    execute,
    optional_float,
    optional_uuid,
)
from coach_nutrition.domain.errors import PersistenceError
from coach_nutrition.domain.foods import Food, FoodCategory
from coach_nutrition.services.foods import FoodRepository


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed repository for foods."""

    client: Client

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""
        response = execute(
            self.client.table("foods")
            .select("*")
            .eq("id", str(food_id))
            .limit(1),
            "load food",
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def list_foods(  # noqa: PLR0913
        self,
        viewer_id: UUID | None,
        category: str | None,
        subcategory: str | None,
        search: str | None,
        limit: int,
    ) -> list[Food]:
        """Return system foods plus the viewer's own foods, ordered by name."""
        query = self.client.table("foods").select("*")
        if viewer_id is not None:
            query = query.or_(f"is_system.eq.true,created_by.eq.{viewer_id}")
        else:
            query = query.eq("is_system", True)
        if category:
            query = query.eq("category", category)
        if subcategory:
            query = query.eq("subcategory", subcategory)
        if search:
            query = query.ilike("name", f"%{search}%")
        response = execute(query.order("name").limit(limit), "list foods")
        return [_parse_food(row) for row in response.data or []]

    def list_categories(self) -> list[FoodCategory]:
        """Return system food categories with counts."""
        response = execute(
            self.client.table("foods").select("category").eq("is_system", True),
            "list food categories",
        )
        counts = Counter(
            str(row["category"]) for row in response.data or [] if row.get("category")
        )
        return [
            FoodCategory(category=category, count=count)
            for category, count in sorted(counts.items())
        ]

    def create_food(self, payload: dict[str, object]) -> Food:
        """Create a food and return it."""
        response = execute(self.client.table("foods").insert(payload), "create food")
        if not response.data:
            raise PersistenceError("Failed to create food")
        return _parse_food(response.data[0])

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food:
        """Update the given columns of a food and return it."""
        response = execute(
            self.client.table("foods").update(payload).eq("id", str(food_id)),
            "update food",
        )
        if not response.data:
            raise PersistenceError("Failed to update food")
        return _parse_food(response.data[0])

    def delete_food(self, food_id: UUID) -> None:
        """Delete a food."""
        execute(
            self.client.table("foods").delete().eq("id", str(food_id)),
            "delete food",
        )


def _parse_food(row: dict[str, object]) -> Food:
    """Parse a food row into a domain model."""
    return Food(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        category=str(row.get("category", "")),
        protein_per_100g=float(row.get("protein_per_100g") or 0.0),
        carbs_per_100g=float(row.get("carbs_per_100g") or 0.0),
        fat_per_100g=float(row.get("fat_per_100g") or 0.0),
        calories_per_100g=float(row.get("calories_per_100g") or 0.0),
        fiber_per_100g=optional_float(row.get("fiber_per_100g")),
        default_serving_size=optional_float(row.get("default_serving_size")),
        default_serving_unit=row.get("default_serving_unit"),
        subcategory=row.get("subcategory"),
        brand=row.get("brand"),
        is_system=bool(row.get("is_system", False)),
        is_published=bool(row.get("is_published", True)),
        created_by=optional_uuid(row.get("created_by")),
    )
