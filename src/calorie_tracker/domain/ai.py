"""Models for language-model meal parsing and nutrition estimates."""

from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calorie_tracker.domain.products import ProductSource


class ParsedMealItem(BaseModel):
    """Single food item extracted from a meal description."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    search_terms: list[str] = Field(default_factory=list, alias="searchTerms")


class MealParse(BaseModel):
    """Structured output of the meal parsing prompt."""

    confidence: float | None = None
    items: list[ParsedMealItem] = Field(default_factory=list)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float | None) -> float | None:
        if value is None:
            return None
        return min(max(value, 0.0), 1.0)


class ProductNutritionEstimate(BaseModel):
    """Per-100g nutrition estimate for a product name."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    kcal_per_100g: float | None = Field(default=None, alias="kcalPer100g")
    protein_per_100g: float | None = Field(default=None, ge=0, alias="proteinPer100g")
    fat_per_100g: float | None = Field(default=None, ge=0, alias="fatPer100g")
    carbs_per_100g: float | None = Field(default=None, ge=0, alias="carbsPer100g")
    fiber_per_100g: float | None = Field(default=None, ge=0, alias="fiberPer100g")
    sugar_per_100g: float | None = Field(default=None, ge=0, alias="sugarPer100g")
    category: str | None = None
    confidence: float | None = None


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by a completion call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclass(frozen=True)
class CompletionResult:
    """Raw JSON text returned by a completion call with its usage."""

    text: str | None
    usage: TokenUsage


@dataclass(frozen=True)
class ParsedMeal:
    """Validated meal parse together with the usage that produced it."""

    parse: MealParse
    usage: TokenUsage


@dataclass(frozen=True)
class NutritionEstimate:
    """Validated nutrition estimate together with its usage."""

    estimate: ProductNutritionEstimate
    usage: TokenUsage


@dataclass(frozen=True)
class ResolvedProduct:
    """Outcome of resolving one parsed item to a product."""

    product_id: UUID
    name: str
    quantity: float
    was_created: bool
    source: ProductSource
    usage: TokenUsage = TokenUsage()


@dataclass(frozen=True)
class ParseMealResult:
    """Result of an AI meal parse request."""

    meal_id: UUID
    products: list[ResolvedProduct]
    confidence: float | None
    products_created_count: int
    products_found_count: int
    usage: TokenUsage
