"""Domain models for meals and their embedded food items."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from calorie_tracker.domain.products import ProductSource


class MealType(StrEnum):
    """Slot of the day a meal belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    OTHER = "other"


class MealSource(StrEnum):
    """How a meal was entered."""

    MANUAL = "manual"
    AI = "ai"


@dataclass(frozen=True)
class FoodItem:
    """Line entry of a meal; nutrition values are cached for ``quantity`` grams."""

    id: UUID
    name: str
    quantity: float
    kcal: int
    product_id: UUID | None = None
    recipe_id: UUID | None = None
    unit: str = "g"
    protein: float | None = None
    fat: float | None = None
    carbs: float | None = None
    fiber: float | None = None
    source: ProductSource | None = None


@dataclass(frozen=True)
class Meal:
    """A timed group of food items under one day entry."""

    id: UUID
    day_entry_id: UUID
    type: MealType
    items: list[FoodItem]
    total_kcal: int
    source: MealSource
    created_at: datetime
    updated_at: datetime
    time: str | None = None
    total_fiber: float | None = None
    ai_confidence: float | None = None


@dataclass(frozen=True)
class ProductRef:
    """Meal item input that references a product."""

    product_id: UUID
    quantity: float


@dataclass(frozen=True)
class RecipeRef:
    """Meal item input that references a recipe."""

    recipe_id: UUID
    quantity: float


MealItemInput = ProductRef | RecipeRef


@dataclass(frozen=True)
class NewMeal:
    """Input for creating a meal on a given day."""

    type: MealType
    items: list[MealItemInput]
    source: MealSource = MealSource.MANUAL
    time: str | None = None
    ai_confidence: float | None = None


@dataclass(frozen=True)
class MealRecord:
    """Fully computed meal ready to be persisted."""

    day_entry_id: UUID
    type: MealType
    items: list[FoodItem]
    total_kcal: int
    source: MealSource
    time: str | None = None
    total_fiber: float | None = None
    ai_confidence: float | None = None


@dataclass(frozen=True)
class PortionNutrition:
    """Absolute nutrition for a portion; macros are ``None`` when unknown."""

    kcal: int
    protein: float | None = None
    fat: float | None = None
    carbs: float | None = None
    fiber: float | None = None
