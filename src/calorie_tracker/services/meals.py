"""Meal composition service: items, totals and day refreshes."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID, uuid4

from calorie_tracker.domain.meals import (
    FoodItem,
    Meal,
    MealItemInput,
    MealRecord,
    MealType,
    NewMeal,
    ProductRef,
    RecipeRef,
)
from calorie_tracker.errors import BadRequestError, ForbiddenError, NotFoundError
from calorie_tracker.services.days import DayMealsReader, DayService
from calorie_tracker.services.nutrition import (
    recover_per100g,
    scale_from_per100g,
    sum_fiber,
    sum_kcal,
)
from calorie_tracker.services.products import ProductService

_logger = logging.getLogger(__name__)


class MealRepository(DayMealsReader, Protocol):
    """Persistence interface for meals with embedded items."""

    def create_meal(self, record: MealRecord) -> Meal:
        """Persist a new meal and return it."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id, if present."""

    def meal_type_exists(self, day_entry_id: UUID, meal_type: MealType) -> bool:
        """Return whether the day entry already has a meal of this type."""

    def update_meal_items(
        self,
        meal_id: UUID,
        items: list[FoodItem],
        total_kcal: int,
        total_fiber: float,
    ) -> Meal | None:
        """Replace a meal's items and totals in one write."""

    def update_meal_details(
        self, meal_id: UUID, changes: dict[str, object]
    ) -> Meal | None:
        """Update meal metadata such as type and time."""

    def delete_meal(self, meal_id: UUID) -> bool:
        """Delete a meal and report whether it existed."""


@dataclass
class MealService:
    """Owns meal item lists and keeps meal and day totals consistent.

    Every write ends with a full refresh of the owning day's totals. Item
    updates are read-modify-write on the whole item list without a version
    check, so two concurrent merges into the same meal can lose one update.
    """

    repository: MealRepository
    product_service: ProductService
    day_service: DayService

    def create(self, user_id: UUID, date: str, data: NewMeal) -> Meal:
        """Create a meal on the user's day, computing item nutrition."""
        day_entry = self.day_service.get_or_create(user_id, date)
        if self.repository.meal_type_exists(day_entry.id, data.type):
            raise BadRequestError(
                f"meal with type '{data.type}' already exists for this day"
            )

        items = [self._build_item(item) for item in data.items]
        meal = self.repository.create_meal(
            MealRecord(
                day_entry_id=day_entry.id,
                type=data.type,
                time=data.time,
                items=items,
                total_kcal=sum_kcal(items),
                total_fiber=sum_fiber(items),
                source=data.source,
                ai_confidence=data.ai_confidence,
            )
        )
        self.day_service.refresh_totals(day_entry.id)
        return meal

    def get_by_id(self, meal_id: UUID, user_id: UUID) -> Meal:
        """Return a meal owned by the user."""
        return self._get_owned(meal_id, user_id, "access")

    def list_for_day(self, user_id: UUID, date: str) -> list[Meal]:
        """Return the user's meals for a date; empty when the day is unknown."""
        day = self.day_service.get_day_with_meals(user_id, date)
        if day is None:
            return []
        return day.meals

    def update_details(
        self,
        meal_id: UUID,
        user_id: UUID,
        meal_type: MealType | None = None,
        time: str | None = None,
    ) -> Meal:
        """Change a meal's type or time."""
        meal = self._get_owned(meal_id, user_id, "update")
        changes: dict[str, object] = {}
        if meal_type is not None and meal_type != meal.type:
            if self.repository.meal_type_exists(meal.day_entry_id, meal_type):
                raise BadRequestError(
                    f"meal with type '{meal_type}' already exists for this day"
                )
            changes["type"] = meal_type
        if time is not None:
            changes["time"] = time
        if not changes:
            return meal

        updated = self.repository.update_meal_details(meal_id, changes)
        if updated is None:
            raise NotFoundError("meal not found")
        self.day_service.refresh_totals(meal.day_entry_id)
        return updated

    def update_product_quantity(
        self, meal_id: UUID, user_id: UUID, product_id: UUID, quantity: float
    ) -> Meal:
        """Re-quantify one product in a meal from its cached nutrition."""
        _validate_quantity(quantity)
        meal = self._get_owned(meal_id, user_id, "update")
        items = list(meal.items)
        index = _find_product(items, product_id)
        if index is None:
            raise NotFoundError("product not found in meal")
        items[index] = self._rescale(items[index], quantity)
        return self._save_items(meal, items)

    def merge_or_add_items(
        self, meal_id: UUID, user_id: UUID, items: Sequence[MealItemInput]
    ) -> Meal:
        """Merge incoming items into a meal.

        Products already in the meal are re-quantified, new products are
        appended and items not mentioned are left untouched. A product that
        appears more than once is matched on its first item, as in
        ``update_product_quantity``.
        """
        meal = self._get_owned(meal_id, user_id, "update")
        merged = list(meal.items)
        positions: dict[UUID, int] = {}
        for index, item in enumerate(merged):
            if item.product_id is not None:
                positions.setdefault(item.product_id, index)
        for incoming in items:
            _validate_quantity(incoming.quantity)
            index = (
                positions.get(incoming.product_id)
                if isinstance(incoming, ProductRef)
                else None
            )
            if index is not None:
                merged[index] = self._rescale(merged[index], incoming.quantity)
                continue
            new_item = self._build_item(incoming)
            positions[new_item.product_id] = len(merged)
            merged.append(new_item)
        return self._save_items(meal, merged)

    def remove_product(
        self, meal_id: UUID, user_id: UUID, product_id: UUID
    ) -> Meal | None:
        """Remove a product from a meal.

        Removing the last item deletes the meal and returns ``None``.
        """
        meal = self._get_owned(meal_id, user_id, "update")
        if _find_product(meal.items, product_id) is None:
            raise NotFoundError("product not found in meal")
        remaining = [item for item in meal.items if item.product_id != product_id]
        if remaining:
            return self._save_items(meal, remaining)

        _logger.info("Meal %s has no items left, deleting it", meal_id)
        if not self.repository.delete_meal(meal_id):
            raise NotFoundError("meal not found")
        self.day_service.refresh_totals(meal.day_entry_id)
        return None

    def delete(self, meal_id: UUID, user_id: UUID) -> None:
        """Delete a meal owned by the user."""
        meal = self._get_owned(meal_id, user_id, "delete")
        if not self.repository.delete_meal(meal_id):
            raise NotFoundError("meal not found")
        self.day_service.refresh_totals(meal.day_entry_id)

    def _get_owned(self, meal_id: UUID, user_id: UUID, action: str) -> Meal:
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            raise NotFoundError("meal not found")
        if not self.day_service.check_ownership(meal.day_entry_id, user_id):
            raise ForbiddenError(f"You can only {action} your own meals")
        return meal

    def _save_items(self, meal: Meal, items: list[FoodItem]) -> Meal:
        updated = self.repository.update_meal_items(
            meal.id,
            items=items,
            total_kcal=sum_kcal(items),
            total_fiber=sum_fiber(items),
        )
        if updated is None:
            raise NotFoundError("meal not found")
        self.day_service.refresh_totals(meal.day_entry_id)
        return updated

    def _build_item(self, item: MealItemInput) -> FoodItem:
        if isinstance(item, RecipeRef):
            raise BadRequestError("Recipe support is not implemented yet")
        if not isinstance(item, ProductRef):
            raise BadRequestError("Either productId or recipeId must be provided")
        _validate_quantity(item.quantity)
        product = self.product_service.get(item.product_id)
        portion = scale_from_per100g(product.rates(), item.quantity)
        return FoodItem(
            id=uuid4(),
            product_id=product.id,
            name=product.name,
            quantity=item.quantity,
            kcal=portion.kcal,
            protein=portion.protein,
            fat=portion.fat,
            carbs=portion.carbs,
            fiber=portion.fiber,
            source=product.source,
        )

    def _rescale(self, item: FoodItem, quantity: float) -> FoodItem:
        if item.quantity > 0:
            rates = recover_per100g(item)
        elif item.product_id is not None:
            # A zero-gram item carries no recoverable rates.
            rates = self.product_service.get(item.product_id).rates()
        else:
            raise BadRequestError("cannot rescale an item without quantity")
        portion = scale_from_per100g(rates, quantity)
        return replace(
            item,
            quantity=quantity,
            kcal=portion.kcal,
            protein=portion.protein,
            fat=portion.fat,
            carbs=portion.carbs,
            fiber=portion.fiber,
        )


def meal_item_from_payload(payload: dict[str, object]) -> MealItemInput:
    """Convert a raw ``{productId|recipeId, quantity}`` mapping to an item input."""
    product_id = _parse_uuid(payload.get("productId", payload.get("product_id")))
    recipe_id = _parse_uuid(payload.get("recipeId", payload.get("recipe_id")))
    quantity = _to_quantity(payload.get("quantity"))
    if product_id is not None and recipe_id is not None:
        raise BadRequestError("Only one of productId or recipeId may be provided")
    if product_id is not None:
        return ProductRef(product_id=product_id, quantity=quantity)
    if recipe_id is not None:
        return RecipeRef(recipe_id=recipe_id, quantity=quantity)
    raise BadRequestError("Either productId or recipeId must be provided")


def _find_product(items: list[FoodItem], product_id: UUID) -> int | None:
    for index, item in enumerate(items):
        if item.product_id == product_id:
            return index
    return None


def _validate_quantity(quantity: float) -> None:
    if quantity < 0:
        raise BadRequestError("quantity must be non-negative")


def _parse_uuid(value: object) -> UUID | None:
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError as exc:
            raise BadRequestError(f"invalid id: {value}") from exc
    raise BadRequestError(f"invalid id: {value!r}")


def _to_quantity(value: object) -> float:
    if isinstance(value, bool):
        raise BadRequestError("quantity must be a number")
    if isinstance(value, int | float):
        quantity = float(value)
    elif isinstance(value, str):
        try:
            quantity = float(value)
        except ValueError as exc:
            raise BadRequestError("quantity must be a number") from exc
    else:
        raise BadRequestError("quantity must be a number")
    _validate_quantity(quantity)
    return quantity
