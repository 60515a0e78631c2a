"""Services for the shared product catalogue."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from calorie_tracker.domain.products import Product, ProductData, ProductSource
from calorie_tracker.errors import BadRequestError, ForbiddenError, NotFoundError
from calorie_tracker.services.normalization import normalize_product_name

_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "kcal_per_100g",
        "protein_per_100g",
        "fat_per_100g",
        "carbs_per_100g",
        "fiber_per_100g",
        "sugar_per_100g",
        "barcode",
        "brand",
        "category",
    }
)


class ProductRepository(Protocol):
    """Persistence interface for products."""

    def get_product(self, product_id: UUID) -> Product | None:
        """Return a product by id, if present."""

    def search_products(self, normalized_term: str, limit: int) -> list[Product]:
        """Return products whose normalized name starts with the term.

        Results are ordered by usage count, then by creation time, descending.
        """

    def create_product(self, payload: dict[str, object]) -> Product:
        """Create a product and return it."""

    def update_product(
        self, product_id: UUID, payload: dict[str, object]
    ) -> Product | None:
        """Update a product and return it, or ``None`` if it does not exist."""

    def delete_product(self, product_id: UUID) -> bool:
        """Delete a product and report whether it existed."""

    def increment_usage(self, product_id: UUID) -> None:
        """Increment the usage counter of a product."""


@dataclass
class ProductService:
    """Application service for product catalogue operations."""

    repository: ProductRepository

    def get(self, product_id: UUID) -> Product:
        """Return a product or fail with NotFound."""
        product = self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError("product not found")
        return product

    def search(self, query: str, limit: int = 10) -> list[Product]:
        """Autocomplete products by normalized name prefix."""
        term = normalize_product_name(query)
        if not term:
            return []
        return self.repository.search_products(term, limit)

    def create(self, data: ProductData, user_id: UUID) -> Product:
        """Create a user-submitted product.

        Only ``manual`` is kept as an explicit source; everything else entered
        through this path is recorded as ``user``.
        """
        source = (
            ProductSource.MANUAL
            if data.source == ProductSource.MANUAL
            else ProductSource.USER
        )
        return self.repository.create_product(
            _new_product_payload(data, source, user_id)
        )

    def create_ai_product(self, data: ProductData, user_id: UUID) -> Product:
        """Create an unverified product from AI-estimated nutrition."""
        return self.repository.create_product(
            _new_product_payload(data, ProductSource.AI, user_id)
        )

    def update(
        self, product_id: UUID, changes: dict[str, object], user_id: UUID
    ) -> Product:
        """Update a product owned by the user.

        Only name, nutrition, barcode, brand and category may change; the
        normalized name is recomputed whenever the name changes.
        """
        self._ensure_owner(product_id, user_id, "update")
        unknown = sorted(set(changes) - _UPDATABLE_FIELDS)
        if unknown:
            raise BadRequestError(
                f"Product fields cannot be updated: {', '.join(unknown)}"
            )
        payload = dict(changes)
        if "name" in payload:
            name = payload["name"]
            key = normalize_product_name(name) if isinstance(name, str) else ""
            if not key:
                raise BadRequestError("name must contain letters or digits")
            payload["normalized_name"] = key
        if "kcal_per_100g" in payload:
            _validate_kcal(payload["kcal_per_100g"])
        updated = self.repository.update_product(product_id, payload)
        if updated is None:
            raise NotFoundError("product not found")
        return updated

    def delete(self, product_id: UUID, user_id: UUID) -> None:
        """Delete a product owned by the user."""
        self._ensure_owner(product_id, user_id, "delete")
        if not self.repository.delete_product(product_id):
            raise NotFoundError("product not found")

    def record_usage(self, product_ids: list[UUID]) -> None:
        """Increment usage once per referenced product id."""
        for product_id in product_ids:
            self.repository.increment_usage(product_id)

    def _ensure_owner(self, product_id: UUID, user_id: UUID, action: str) -> None:
        product = self.repository.get_product(product_id)
        if product is None or product.created_by != user_id:
            raise ForbiddenError(f"You can only {action} products you created")


def _new_product_payload(
    data: ProductData, source: ProductSource, user_id: UUID
) -> dict[str, object]:
    _validate_kcal(data.kcal_per_100g)
    return {
        "name": data.name,
        "normalized_name": normalize_product_name(data.name),
        "kcal_per_100g": data.kcal_per_100g,
        "protein_per_100g": data.protein_per_100g,
        "fat_per_100g": data.fat_per_100g,
        "carbs_per_100g": data.carbs_per_100g,
        "fiber_per_100g": data.fiber_per_100g,
        "sugar_per_100g": data.sugar_per_100g,
        "barcode": data.barcode,
        "brand": data.brand,
        "category": data.category,
        "source": source,
        "created_by": user_id,
        "is_verified": False,
        "usage_count": 0,
    }


def _validate_kcal(value: object) -> None:
    if not isinstance(value, int | float) or value < 0:
        raise BadRequestError("kcal_per_100g must be a non-negative number")
