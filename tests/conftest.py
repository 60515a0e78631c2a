"""Shared test fixtures."""

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from calorie_tracker.config import Settings
from calorie_tracker.domain.ai import CompletionResult, TokenUsage
from calorie_tracker.domain.days import DayEntry
from calorie_tracker.domain.meals import FoodItem, Meal, MealRecord, MealType
from calorie_tracker.domain.products import Product, ProductData, ProductSource
from calorie_tracker.services.ai_meals import AiMealService
from calorie_tracker.services.days import DayEntryRepository, DayService
from calorie_tracker.services.meal_parsing import CompletionClient, MealTextParser
from calorie_tracker.services.meals import MealRepository, MealService
from calorie_tracker.services.nutrition import round_one_decimal
from calorie_tracker.services.product_resolver import ProductResolver
from calorie_tracker.services.products import ProductRepository, ProductService

_EPOCH = datetime(2024, 1, 1, tzinfo=UTC)


@dataclass
class _Clock:
    """Monotonic timestamps so ordering by creation time is deterministic."""

    ticks: int = 0

    def now(self) -> datetime:
        self.ticks += 1
        return _EPOCH + timedelta(seconds=self.ticks)


@dataclass
class InMemoryProductRepository(ProductRepository):
    """In-memory product repository for tests."""

    products: dict[UUID, Product] = field(default_factory=dict)
    clock: _Clock = field(default_factory=_Clock)
    usage_increments: list[UUID] = field(default_factory=list)

    def get_product(self, product_id: UUID) -> Product | None:
        return self.products.get(product_id)

    def search_products(self, normalized_term: str, limit: int) -> list[Product]:
        matches = [
            product
            for product in self.products.values()
            if product.normalized_name.startswith(normalized_term)
        ]
        matches.sort(
            key=lambda product: (product.usage_count, product.created_at), reverse=True
        )
        return matches[:limit]

    def create_product(self, payload: dict[str, object]) -> Product:
        now = self.clock.now()
        product = Product(id=uuid4(), created_at=now, updated_at=now, **payload)
        self.products[product.id] = product
        return product

    def update_product(
        self, product_id: UUID, payload: dict[str, object]
    ) -> Product | None:
        current = self.products.get(product_id)
        if current is None:
            return None
        updated = replace(current, updated_at=self.clock.now(), **payload)
        self.products[product_id] = updated
        return updated

    def delete_product(self, product_id: UUID) -> bool:
        return self.products.pop(product_id, None) is not None

    def increment_usage(self, product_id: UUID) -> None:
        self.usage_increments.append(product_id)
        current = self.products[product_id]
        self.products[product_id] = replace(
            current, usage_count=current.usage_count + 1
        )


@dataclass
class InMemoryDayEntryRepository(DayEntryRepository):
    """In-memory day entry repository for tests."""

    entries: dict[UUID, DayEntry] = field(default_factory=dict)
    clock: _Clock = field(default_factory=_Clock)

    def get_day_entry(self, day_entry_id: UUID) -> DayEntry | None:
        return self.entries.get(day_entry_id)

    def get_by_user_and_date(self, user_id: UUID, date: str) -> DayEntry | None:
        for entry in self.entries.values():
            if entry.user_id == user_id and entry.date == date:
                return entry
        return None

    def create_day_entry(self, user_id: UUID, date: str) -> DayEntry:
        now = self.clock.now()
        entry = DayEntry(
            id=uuid4(),
            user_id=user_id,
            date=date,
            consumed_kcal=0,
            consumed_fiber=0.0,
            created_at=now,
            updated_at=now,
        )
        self.entries[entry.id] = entry
        return entry

    def update_consumed_kcal(self, day_entry_id: UUID, total_kcal: int) -> None:
        entry = self.entries[day_entry_id]
        self.entries[day_entry_id] = replace(entry, consumed_kcal=total_kcal)

    def update_consumed_fiber(self, day_entry_id: UUID, total_fiber: float) -> None:
        entry = self.entries[day_entry_id]
        self.entries[day_entry_id] = replace(entry, consumed_fiber=total_fiber)

    def check_ownership(self, day_entry_id: UUID, user_id: UUID) -> bool:
        entry = self.entries.get(day_entry_id)
        return entry is not None and entry.user_id == user_id


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, Meal] = field(default_factory=dict)
    clock: _Clock = field(default_factory=_Clock)

    def create_meal(self, record: MealRecord) -> Meal:
        now = self.clock.now()
        meal = Meal(
            id=uuid4(),
            day_entry_id=record.day_entry_id,
            type=record.type,
            time=record.time,
            items=list(record.items),
            total_kcal=record.total_kcal,
            total_fiber=record.total_fiber,
            source=record.source,
            ai_confidence=record.ai_confidence,
            created_at=now,
            updated_at=now,
        )
        self.meals[meal.id] = meal
        return meal

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.meals.get(meal_id)

    def meal_type_exists(self, day_entry_id: UUID, meal_type: MealType) -> bool:
        return any(
            meal.day_entry_id == day_entry_id and meal.type == meal_type
            for meal in self.meals.values()
        )

    def update_meal_items(
        self,
        meal_id: UUID,
        items: list[FoodItem],
        total_kcal: int,
        total_fiber: float,
    ) -> Meal | None:
        return self._update(
            meal_id, items=list(items), total_kcal=total_kcal, total_fiber=total_fiber
        )

    def update_meal_details(
        self, meal_id: UUID, changes: dict[str, object]
    ) -> Meal | None:
        return self._update(meal_id, **changes)

    def delete_meal(self, meal_id: UUID) -> bool:
        return self.meals.pop(meal_id, None) is not None

    def list_by_day_entry(self, day_entry_id: UUID) -> list[Meal]:
        meals = [
            meal for meal in self.meals.values() if meal.day_entry_id == day_entry_id
        ]
        return sorted(meals, key=lambda meal: meal.created_at)

    def calculate_total_kcal_for_day_entry(self, day_entry_id: UUID) -> int:
        return sum(meal.total_kcal for meal in self.list_by_day_entry(day_entry_id))

    def calculate_total_fiber_for_day_entry(self, day_entry_id: UUID) -> float:
        return round_one_decimal(
            sum(
                meal.total_fiber or 0.0
                for meal in self.list_by_day_entry(day_entry_id)
            )
        )

    def _update(self, meal_id: UUID, **changes: object) -> Meal | None:
        current = self.meals.get(meal_id)
        if current is None:
            return None
        updated = replace(current, updated_at=self.clock.now(), **changes)
        self.meals[meal_id] = updated
        return updated


@dataclass
class FakeCompletionClient(CompletionClient):
    """Completion client replaying queued results or errors."""

    responses: list[CompletionResult | Exception] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

    def queue_json(self, payload: object, total_tokens: int = 30) -> None:
        self.responses.append(completion(payload, total_tokens))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> CompletionResult:
        self.calls.append(
            {
                "model": model,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if not self.responses:
            raise RuntimeError("no completion queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def completion(payload: object, total_tokens: int = 30) -> CompletionResult:
    """Build a completion result carrying ``payload`` as JSON text."""
    return CompletionResult(
        text=json.dumps(payload, ensure_ascii=False),
        usage=TokenUsage(
            prompt_tokens=total_tokens - 10,
            completion_tokens=10,
            total_tokens=total_tokens,
        ),
    )


@dataclass
class Services:
    """Service graph wired over in-memory repositories."""

    products: InMemoryProductRepository
    days: InMemoryDayEntryRepository
    meals: InMemoryMealRepository
    completions: FakeCompletionClient
    product_service: ProductService
    day_service: DayService
    meal_service: MealService
    parser: MealTextParser
    resolver: ProductResolver
    ai_meal_service: AiMealService

    def add_product(  # noqa: PLR0913
        self,
        name: str,
        kcal_per_100g: float,
        protein_per_100g: float | None = None,
        fat_per_100g: float | None = None,
        carbs_per_100g: float | None = None,
        fiber_per_100g: float | None = None,
        source: ProductSource = ProductSource.MANUAL,
    ) -> Product:
        return self.product_service.create(
            ProductData(
                name=name,
                kcal_per_100g=kcal_per_100g,
                protein_per_100g=protein_per_100g,
                fat_per_100g=fat_per_100g,
                carbs_per_100g=carbs_per_100g,
                fiber_per_100g=fiber_per_100g,
                source=source,
            ),
            user_id=uuid4(),
        )


def build_services() -> Services:
    products = InMemoryProductRepository()
    days = InMemoryDayEntryRepository()
    meals = InMemoryMealRepository()
    completions = FakeCompletionClient()
    product_service = ProductService(products)
    day_service = DayService(repository=days, meals=meals)
    meal_service = MealService(
        repository=meals, product_service=product_service, day_service=day_service
    )
    parser = MealTextParser(client=completions, model="test-model")
    resolver = ProductResolver(product_service=product_service, parser=parser)
    ai_meal_service = AiMealService(
        parser=parser,
        resolver=resolver,
        meal_service=meal_service,
        product_service=product_service,
    )
    return Services(
        products=products,
        days=days,
        meals=meals,
        completions=completions,
        product_service=product_service,
        day_service=day_service,
        meal_service=meal_service,
        parser=parser,
        resolver=resolver,
        ai_meal_service=ai_meal_service,
    )


@pytest.fixture
def services() -> Services:
    return build_services()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
    )
