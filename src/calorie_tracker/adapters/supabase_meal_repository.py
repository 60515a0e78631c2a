"""Supabase repository for meals with embedded food items."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorie_tracker.domain.meals import (
    FoodItem,
    Meal,
    MealRecord,
    MealSource,
    MealType,
)
from calorie_tracker.domain.products import ProductSource
from calorie_tracker.services.meals import MealRepository
from calorie_tracker.services.nutrition import round_one_decimal

_TABLE = "meals"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals; items live in a JSON column."""

    client: Client

    def create_meal(self, record: MealRecord) -> Meal:
        """Create a meal row and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "day_entry_id": str(record.day_entry_id),
                    "type": record.type.value,
                    "time": record.time,
                    "items": [_item_to_json(item) for item in record.items],
                    "total_kcal": record.total_kcal,
                    "total_fiber": record.total_fiber,
                    "source": record.source.value,
                    "ai_confidence": record.ai_confidence,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def meal_type_exists(self, day_entry_id: UUID, meal_type: MealType) -> bool:
        """Return whether the day entry has a meal of this type."""
        response = (
            self.client.table(_TABLE)
            .select("id")
            .eq("day_entry_id", str(day_entry_id))
            .eq("type", meal_type.value)
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def update_meal_items(
        self,
        meal_id: UUID,
        items: list[FoodItem],
        total_kcal: int,
        total_fiber: float,
    ) -> Meal | None:
        """Replace items and totals in a single row update."""
        return self._update(
            meal_id,
            {
                "items": [_item_to_json(item) for item in items],
                "total_kcal": total_kcal,
                "total_fiber": total_fiber,
            },
        )

    def update_meal_details(
        self, meal_id: UUID, changes: dict[str, object]
    ) -> Meal | None:
        """Update meal metadata."""
        payload = {
            key: value.value if isinstance(value, MealType) else value
            for key, value in changes.items()
        }
        return self._update(meal_id, payload)

    def delete_meal(self, meal_id: UUID) -> bool:
        """Delete a meal row."""
        response = self.client.table(_TABLE).delete().eq("id", str(meal_id)).execute()
        return bool(response.data)

    def list_by_day_entry(self, day_entry_id: UUID) -> list[Meal]:
        """Return meals of a day entry, oldest first."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("day_entry_id", str(day_entry_id))
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def calculate_total_kcal_for_day_entry(self, day_entry_id: UUID) -> int:
        """Sum meal calories for a day entry."""
        rows = self._totals(day_entry_id)
        return sum(int(row.get("total_kcal") or 0) for row in rows)

    def calculate_total_fiber_for_day_entry(self, day_entry_id: UUID) -> float:
        """Sum meal fiber for a day entry."""
        rows = self._totals(day_entry_id)
        return round_one_decimal(
            sum(float(row.get("total_fiber") or 0.0) for row in rows)
        )

    def _totals(self, day_entry_id: UUID) -> list[dict[str, object]]:
        response = (
            self.client.table(_TABLE)
            .select("total_kcal, total_fiber")
            .eq("day_entry_id", str(day_entry_id))
            .execute()
        )
        return response.data or []

    def _update(self, meal_id: UUID, payload: dict[str, object]) -> Meal | None:
        response = (
            self.client.table(_TABLE)
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(meal_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])


def _item_to_json(item: FoodItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "product_id": str(item.product_id) if item.product_id else None,
        "recipe_id": str(item.recipe_id) if item.recipe_id else None,
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "kcal": item.kcal,
        "protein": item.protein,
        "fat": item.fat,
        "carbs": item.carbs,
        "fiber": item.fiber,
        "source": item.source.value if item.source else None,
    }


def _optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None


def _parse_item(data: dict[str, object]) -> FoodItem:
    source = data.get("source")
    return FoodItem(
        id=UUID(str(data["id"])),
        product_id=_optional_uuid(data.get("product_id")),
        recipe_id=_optional_uuid(data.get("recipe_id")),
        name=str(data.get("name", "")),
        quantity=float(data.get("quantity") or 0.0),
        unit=str(data.get("unit") or "g"),
        kcal=int(data.get("kcal") or 0),
        protein=_optional_float(data.get("protein")),
        fat=_optional_float(data.get("fat")),
        carbs=_optional_float(data.get("carbs")),
        fiber=_optional_float(data.get("fiber")),
        source=ProductSource(source) if source else None,
    )


def _parse_meal(row: dict[str, object]) -> Meal:
    """Parse a meal row into a domain model."""
    return Meal(
        id=UUID(str(row["id"])),
        day_entry_id=UUID(str(row["day_entry_id"])),
        type=MealType(row["type"]),
        time=row.get("time"),
        items=[_parse_item(item) for item in row.get("items") or []],
        total_kcal=int(row.get("total_kcal") or 0),
        total_fiber=_optional_float(row.get("total_fiber")),
        source=MealSource(row.get("source") or MealSource.MANUAL),
        ai_confidence=_optional_float(row.get("ai_confidence")),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
