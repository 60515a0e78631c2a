"""AI meal logging: parse free text, resolve products, build meals."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from calorie_tracker.domain.ai import (
    ParsedMealItem,
    ParseMealResult,
    ResolvedProduct,
    TokenUsage,
)
from calorie_tracker.domain.meals import Meal, MealSource, MealType, NewMeal, ProductRef
from calorie_tracker.errors import BadRequestError
from calorie_tracker.services.meal_parsing import MealTextParser
from calorie_tracker.services.meals import MealService
from calorie_tracker.services.product_resolver import ProductResolver
from calorie_tracker.services.products import ProductService

_logger = logging.getLogger(__name__)


@dataclass
class AiMealService:
    """Entry points for creating or extending meals from a text description.

    Item resolution is best effort: an item that cannot be resolved is logged
    and skipped, and only a request where no item resolves fails.
    """

    parser: MealTextParser
    resolver: ProductResolver
    meal_service: MealService
    product_service: ProductService

    async def parse_and_create(
        self,
        user_id: UUID,
        text: str,
        meal_type: MealType,
        date: str | None = None,
    ) -> ParseMealResult:
        """Parse a meal description and create a new meal from it."""
        _logger.info("Parsing meal for user %s: %r", user_id, text)
        parsed = await self.parser.parse_meal_description(text)
        resolved = await self._resolve_items(parsed.parse.items, user_id)

        meal = self.meal_service.create(
            user_id,
            date or datetime.now(tz=UTC).date().isoformat(),
            NewMeal(
                type=meal_type,
                items=_to_refs(resolved),
                source=MealSource.AI,
                ai_confidence=parsed.parse.confidence,
            ),
        )
        self.product_service.record_usage([item.product_id for item in resolved])
        return self._result(meal, resolved, parsed.parse.confidence, parsed.usage)

    async def parse_and_merge(
        self, user_id: UUID, meal_id: UUID, text: str
    ) -> ParseMealResult:
        """Parse a meal description and merge its items into an existing meal."""
        _logger.info("Parsing meal %s update for user %s: %r", meal_id, user_id, text)
        parsed = await self.parser.parse_meal_description(text)
        resolved = await self._resolve_items(parsed.parse.items, user_id)

        meal = self.meal_service.merge_or_add_items(
            meal_id, user_id, _to_refs(resolved)
        )
        self.product_service.record_usage([item.product_id for item in resolved])
        return self._result(meal, resolved, parsed.parse.confidence, parsed.usage)

    async def _resolve_items(
        self, items: list[ParsedMealItem], user_id: UUID
    ) -> list[ResolvedProduct]:
        resolved: list[ResolvedProduct] = []
        for item in items:
            try:
                resolved.append(await self.resolver.find_or_create(item, user_id))
            except Exception:
                _logger.exception("Failed to process item %r", item.name)
        if not resolved:
            raise BadRequestError(
                "Failed to process any products from meal description"
            )
        return resolved

    @staticmethod
    def _result(
        meal: Meal,
        resolved: list[ResolvedProduct],
        confidence: float | None,
        parse_usage: TokenUsage,
    ) -> ParseMealResult:
        created = sum(1 for item in resolved if item.was_created)
        usage = parse_usage
        for item in resolved:
            usage = usage + item.usage
        _logger.info(
            "Meal %s now has %s parsed products (%s created, %s found)",
            meal.id,
            len(resolved),
            created,
            len(resolved) - created,
        )
        return ParseMealResult(
            meal_id=meal.id,
            products=resolved,
            confidence=confidence,
            products_created_count=created,
            products_found_count=len(resolved) - created,
            usage=usage,
        )


def _to_refs(resolved: list[ResolvedProduct]) -> list[ProductRef]:
    return [
        ProductRef(product_id=item.product_id, quantity=item.quantity)
        for item in resolved
    ]
