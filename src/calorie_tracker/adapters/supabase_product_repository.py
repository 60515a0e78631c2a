"""Supabase repository for products."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorie_tracker.domain.products import Product, ProductSource
from calorie_tracker.services.products import ProductRepository

_TABLE = "products"


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase implementation for the product catalogue."""

    client: Client

    def get_product(self, product_id: UUID) -> Product | None:
        """Return a product by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(product_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_product(response.data[0])

    def search_products(self, normalized_term: str, limit: int) -> list[Product]:
        """Return products by normalized name prefix, most used first."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .ilike("normalized_name", f"{normalized_term}%")
            .order("usage_count", desc=True)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_product(row) for row in response.data or []]

    def create_product(self, payload: dict[str, object]) -> Product:
        """Create a product row and return it."""
        response = self.client.table(_TABLE).insert(_to_row(payload)).execute()
        if not response.data:
            raise RuntimeError("Failed to create product")
        return _parse_product(response.data[0])

    def update_product(
        self, product_id: UUID, payload: dict[str, object]
    ) -> Product | None:
        """Update a product row and return it."""
        row = _to_row(payload)
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE).update(row).eq("id", str(product_id)).execute()
        )
        if not response.data:
            return None
        return _parse_product(response.data[0])

    def delete_product(self, product_id: UUID) -> bool:
        """Delete a product row."""
        response = (
            self.client.table(_TABLE).delete().eq("id", str(product_id)).execute()
        )
        return bool(response.data)

    def increment_usage(self, product_id: UUID) -> None:
        """Increment the usage counter of a product."""
        response = (
            self.client.table(_TABLE)
            .select("usage_count")
            .eq("id", str(product_id))
            .limit(1)
            .execute()
        )
        current = 0
        if response.data:
            current = int(response.data[0].get("usage_count") or 0)
        self.client.table(_TABLE).update({"usage_count": current + 1}).eq(
            "id", str(product_id)
        ).execute()


def _to_row(payload: dict[str, object]) -> dict[str, object]:
    row: dict[str, object] = {}
    for key, value in payload.items():
        if isinstance(value, UUID):
            row[key] = str(value)
        elif isinstance(value, ProductSource):
            row[key] = value.value
        else:
            row[key] = value
    return row


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)


def _parse_product(row: dict[str, object]) -> Product:
    """Parse a product row into a domain model."""
    created_by = row.get("created_by")
    return Product(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        normalized_name=str(row.get("normalized_name", "")),
        kcal_per_100g=float(row.get("kcal_per_100g") or 0.0),
        protein_per_100g=_optional_float(row.get("protein_per_100g")),
        fat_per_100g=_optional_float(row.get("fat_per_100g")),
        carbs_per_100g=_optional_float(row.get("carbs_per_100g")),
        fiber_per_100g=_optional_float(row.get("fiber_per_100g")),
        sugar_per_100g=_optional_float(row.get("sugar_per_100g")),
        source=ProductSource(row.get("source") or ProductSource.MANUAL),
        is_verified=bool(row.get("is_verified", False)),
        usage_count=int(row.get("usage_count") or 0),
        created_by=UUID(str(created_by)) if created_by else None,
        barcode=row.get("barcode"),
        brand=row.get("brand"),
        category=row.get("category"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
