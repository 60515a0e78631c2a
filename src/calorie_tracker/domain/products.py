"""Domain models for the product catalogue."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ProductSource(StrEnum):
    """Provenance of a product's nutrition profile."""

    MANUAL = "manual"
    AI = "ai"
    OPENFOODFACTS = "openfoodfacts"
    USER = "user"


@dataclass(frozen=True)
class NutritionRates:
    """Nutrition values per 100 grams; ``None`` means unknown."""

    kcal_per_100g: float
    protein_per_100g: float | None = None
    fat_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fiber_per_100g: float | None = None


@dataclass(frozen=True)
class Product:
    """Reusable nutrition profile stored per 100 grams."""

    id: UUID
    name: str
    normalized_name: str
    kcal_per_100g: float
    source: ProductSource
    is_verified: bool
    usage_count: int
    created_at: datetime
    updated_at: datetime
    protein_per_100g: float | None = None
    fat_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fiber_per_100g: float | None = None
    sugar_per_100g: float | None = None
    created_by: UUID | None = None
    barcode: str | None = None
    brand: str | None = None
    category: str | None = None

    def rates(self) -> NutritionRates:
        """Return the per-100g profile used for portion math."""
        return NutritionRates(
            kcal_per_100g=self.kcal_per_100g,
            protein_per_100g=self.protein_per_100g,
            fat_per_100g=self.fat_per_100g,
            carbs_per_100g=self.carbs_per_100g,
            fiber_per_100g=self.fiber_per_100g,
        )


@dataclass(frozen=True)
class ProductData:
    """Input for creating or updating a product."""

    name: str
    kcal_per_100g: float
    protein_per_100g: float | None = None
    fat_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fiber_per_100g: float | None = None
    sugar_per_100g: float | None = None
    barcode: str | None = None
    brand: str | None = None
    category: str | None = None
    source: ProductSource = ProductSource.USER
