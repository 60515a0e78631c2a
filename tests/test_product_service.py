"""Tests for product catalogue service."""

from uuid import uuid4

import pytest

from calorie_tracker.domain.products import ProductData, ProductSource
from calorie_tracker.errors import BadRequestError, ForbiddenError, NotFoundError
from tests.conftest import Services


def test_create_normalizes_name_and_defaults(services: Services) -> None:
    user_id = uuid4()

    product = services.product_service.create(
        ProductData(name="Овсянка", kcal_per_100g=343, source=ProductSource.AI),
        user_id,
    )

    assert product.normalized_name == "ovsyanka"
    assert product.source == ProductSource.USER
    assert product.is_verified is False
    assert product.usage_count == 0
    assert product.created_by == user_id


def test_create_keeps_manual_source(services: Services) -> None:
    product = services.product_service.create(
        ProductData(name="Rice", kcal_per_100g=130, source=ProductSource.MANUAL),
        uuid4(),
    )

    assert product.source == ProductSource.MANUAL


def test_create_ai_product_is_unverified_ai(services: Services) -> None:
    product = services.product_service.create_ai_product(
        ProductData(name="Baked salmon", kcal_per_100g=206), uuid4()
    )

    assert product.source == ProductSource.AI
    assert product.is_verified is False


def test_create_rejects_negative_kcal(services: Services) -> None:
    with pytest.raises(BadRequestError):
        services.product_service.create(
            ProductData(name="Broken", kcal_per_100g=-1), uuid4()
        )


def test_update_recomputes_normalized_name(services: Services) -> None:
    user_id = uuid4()
    product = services.product_service.create(
        ProductData(name="Гречка", kcal_per_100g=313), user_id
    )

    updated = services.product_service.update(
        product.id, {"name": "Гречка отварная"}, user_id
    )

    assert updated.name == "Гречка отварная"
    assert updated.normalized_name == "grechkaotvarnaya"


def test_update_rejects_derived_and_system_fields(services: Services) -> None:
    user_id = uuid4()
    product = services.product_service.create(
        ProductData(name="Овсянка", kcal_per_100g=343), user_id
    )
    services.product_service.record_usage([product.id, product.id])

    with pytest.raises(BadRequestError, match="cannot be updated"):
        services.product_service.update(
            product.id,
            {"usage_count": 0, "normalized_name": "hijacked", "is_verified": True},
            user_id,
        )

    stored = services.product_service.get(product.id)
    assert stored.usage_count == 2
    assert stored.normalized_name == "ovsyanka"
    assert stored.is_verified is False


@pytest.mark.parametrize("name", ["", "%%", None])
def test_update_rejects_name_without_search_key(
    services: Services, name: object
) -> None:
    user_id = uuid4()
    product = services.product_service.create(
        ProductData(name="Овсянка", kcal_per_100g=343), user_id
    )

    with pytest.raises(BadRequestError):
        services.product_service.update(product.id, {"name": name}, user_id)

    assert services.product_service.get(product.id).name == "Овсянка"


def test_update_and_delete_require_creator(services: Services) -> None:
    product = services.product_service.create(
        ProductData(name="Apple", kcal_per_100g=52), uuid4()
    )

    with pytest.raises(ForbiddenError):
        services.product_service.update(product.id, {"kcal_per_100g": 50}, uuid4())
    with pytest.raises(ForbiddenError):
        services.product_service.delete(product.id, uuid4())


def test_delete_removes_product(services: Services) -> None:
    user_id = uuid4()
    product = services.product_service.create(
        ProductData(name="Pear", kcal_per_100g=57), user_id
    )

    services.product_service.delete(product.id, user_id)

    with pytest.raises(NotFoundError):
        services.product_service.get(product.id)


def test_search_prefers_usage_then_recency(services: Services) -> None:
    older = services.add_product("Milk 2.5%", 52)
    popular = services.add_product("Milk 3.2%", 58)
    newest = services.add_product("Milk skimmed", 35)
    services.product_service.record_usage([popular.id, popular.id])

    results = services.product_service.search("milk", limit=5)

    assert [product.id for product in results] == [popular.id, newest.id, older.id]


def test_search_with_empty_key_returns_nothing(services: Services) -> None:
    services.add_product("Milk", 52)

    assert services.product_service.search("%%%") == []
