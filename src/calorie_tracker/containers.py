"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_tracker.adapters.openai_completion_client import OpenAICompletionClient
from calorie_tracker.adapters.supabase_day_entry_repository import (
    SupabaseDayEntryRepository,
)
from calorie_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from calorie_tracker.adapters.supabase_product_repository import (
    SupabaseProductRepository,
)
from calorie_tracker.config import Settings
from calorie_tracker.services.ai_meals import AiMealService
from calorie_tracker.services.days import DayService
from calorie_tracker.services.meal_parsing import MealTextParser
from calorie_tracker.services.meals import MealService
from calorie_tracker.services.product_resolver import ProductResolver
from calorie_tracker.services.products import ProductService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    product_service: ProductService
    day_service: DayService
    meal_service: MealService
    meal_text_parser: MealTextParser
    product_resolver: ProductResolver
    ai_meal_service: AiMealService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    product_repository = SupabaseProductRepository(supabase_client)
    day_entry_repository = SupabaseDayEntryRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)

    product_service = ProductService(product_repository)
    day_service = DayService(repository=day_entry_repository, meals=meal_repository)
    meal_service = MealService(
        repository=meal_repository,
        product_service=product_service,
        day_service=day_service,
    )
    completion_client = OpenAICompletionClient.create(
        api_key=resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    meal_text_parser = MealTextParser(
        client=completion_client,
        model=resolved_settings.openai_model,
        max_tokens=resolved_settings.openai_max_tokens,
        temperature=resolved_settings.openai_temperature,
        nutrition_temperature=resolved_settings.openai_nutrition_temperature,
    )
    product_resolver = ProductResolver(
        product_service=product_service,
        parser=meal_text_parser,
        search_limit=resolved_settings.product_search_limit,
    )
    ai_meal_service = AiMealService(
        parser=meal_text_parser,
        resolver=product_resolver,
        meal_service=meal_service,
        product_service=product_service,
    )

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        product_service=product_service,
        day_service=day_service,
        meal_service=meal_service,
        meal_text_parser=meal_text_parser,
        product_resolver=product_resolver,
        ai_meal_service=ai_meal_service,
        close_resources=close_resources,
    )
