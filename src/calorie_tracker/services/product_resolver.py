"""Resolution of parsed meal items to catalogue products."""

import logging
from dataclasses import dataclass
from uuid import UUID

from calorie_tracker.domain.ai import ParsedMealItem, ResolvedProduct
from calorie_tracker.domain.products import ProductData, ProductSource
from calorie_tracker.services.meal_parsing import MealTextParser
from calorie_tracker.services.products import ProductService

_logger = logging.getLogger(__name__)


@dataclass
class ProductResolver:
    """Find an existing product for a parsed item or create one from AI data.

    Usage counters are left to the caller, which increments them once the
    owning meal has been persisted.
    """

    product_service: ProductService
    parser: MealTextParser
    search_limit: int = 5

    async def find_or_create(
        self, item: ParsedMealItem, user_id: UUID
    ) -> ResolvedProduct:
        """Return the best matching product, creating one when nothing matches."""
        for term in item.search_terms or [item.name]:
            found = self.product_service.search(term, limit=self.search_limit)
            if not found:
                continue
            best = found[0]
            _logger.info(
                "Found existing product %r (%s) for search term %r",
                best.name,
                best.id,
                term,
            )
            return ResolvedProduct(
                product_id=best.id,
                name=best.name,
                quantity=item.quantity,
                was_created=False,
                source=best.source,
            )

        _logger.info("No match found for %r, generating with AI", item.name)
        estimated = await self.parser.estimate_product_nutrition(item.name)
        estimate = estimated.estimate
        name = estimate.name or item.name
        product = self.product_service.create_ai_product(
            ProductData(
                name=name,
                kcal_per_100g=estimate.kcal_per_100g or 0.0,
                protein_per_100g=estimate.protein_per_100g,
                fat_per_100g=estimate.fat_per_100g,
                carbs_per_100g=estimate.carbs_per_100g,
                fiber_per_100g=estimate.fiber_per_100g,
                sugar_per_100g=estimate.sugar_per_100g,
                category=estimate.category,
            ),
            user_id,
        )
        _logger.info("Created AI product %r (%s)", product.name, product.id)
        return ResolvedProduct(
            product_id=product.id,
            name=product.name,
            quantity=item.quantity,
            was_created=True,
            source=ProductSource.AI,
            usage=estimated.usage,
        )
