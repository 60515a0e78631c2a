"""Language-model prompts for meal parsing and nutrition estimates."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from calorie_tracker.domain.ai import (
    CompletionResult,
    MealParse,
    NutritionEstimate,
    ParsedMeal,
    ProductNutritionEstimate,
)
from calorie_tracker.errors import (
    BadRequestError,
    DomainException,
    Extension,
    InternalServerError,
)

_logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

MEAL_PARSE_PROMPT = """\
You are a nutrition assistant that turns meal descriptions into food items.

Rules:
1. Extract each food item with its quantity in grams. If no quantity is given,
   estimate a typical portion.
2. Keep the cooking method in the item name ("baked chicken breast", not
   "chicken breast"), because it changes the nutrition.
3. Split dishes whose parts are logged separately ("oatmeal with banana" is
   oatmeal and banana). Keep a single item for foods that are eaten as one
   product ("cheesecake", "borscht").
4. For every item give search terms: the name in the original language, its
   Latin transliteration and an English translation, most specific first.
5. Liquids: 1 cup = 240 ml, 1 glass = 200 ml, 1 tablespoon = 15 ml; treat
   1 ml as 1 g.
6. confidence is a number from 0 to 1 describing how clear the input was.

Respond with JSON only, exactly in this shape:
{"confidence": 0.85, "items": [{"name": "Овсянка", "quantity": 50,
"searchTerms": ["овсянка", "ovsyanka", "oatmeal"]}]}"""

NUTRITION_PROMPT = """\
You are a nutrition database that returns nutrition values per 100 grams.

Rules:
1. All values are per 100 g of the product as named.
2. When a cooking method is named, give values for the prepared form (baked
   chicken differs from raw chicken, boiled rice from dry rice).
3. Use standard composition tables (USDA, national food tables) as reference.
4. Omit a field only when it is truly unknown; use 0 for a known zero.
5. confidence is 0.9-1.0 for common foods, 0.5-0.8 for less common ones and
   below 0.5 when uncertain.
6. category is in the language of the product name.

Respond with JSON only, exactly in this shape:
{"name": "Овсянка", "kcalPer100g": 343, "proteinPer100g": 12.6,
"fatPer100g": 6.9, "carbsPer100g": 59.5, "fiberPer100g": 10.1,
"sugarPer100g": 1.0, "category": "Зерновые", "confidence": 0.95}"""


class CompletionClient(Protocol):
    """Interface for JSON-mode language-model completions."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> CompletionResult:
        """Return the completion text and its token usage."""


@dataclass
class MealTextParser:
    """Service that prompts the model and validates its JSON answers."""

    client: CompletionClient
    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    nutrition_temperature: float = 0.3

    async def parse_meal_description(self, text: str) -> ParsedMeal:
        """Extract food items with quantities and search terms from text."""
        result = await self._complete(
            system_prompt=MEAL_PARSE_PROMPT,
            user_prompt=f'Parse this meal: "{text}"',
            temperature=self.temperature,
            failure_message="Failed to parse meal description with AI",
        )
        parse = _validate(MealParse, result, "Could not parse meal description")
        if not parse.items:
            raise BadRequestError("Could not parse meal description - no items found")
        _logger.info("Parsed meal: %r -> %s items", text, len(parse.items))
        return ParsedMeal(parse=parse, usage=result.usage)

    async def estimate_product_nutrition(self, product_name: str) -> NutritionEstimate:
        """Estimate per-100g nutrition for a product name."""
        result = await self._complete(
            system_prompt=NUTRITION_PROMPT,
            user_prompt=f'Provide nutrition data for: "{product_name}"',
            temperature=self.nutrition_temperature,
            failure_message="Failed to generate product nutrition with AI",
        )
        estimate = _validate(
            ProductNutritionEstimate, result, "Invalid nutrition data from AI"
        )
        if estimate.kcal_per_100g is None or estimate.kcal_per_100g < 0:
            raise BadRequestError(
                "Invalid nutrition data from AI - missing or invalid calories"
            )
        _logger.info("Generated nutrition for: %r", product_name)
        return NutritionEstimate(estimate=estimate, usage=result.usage)

    async def _complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        failure_message: str,
    ) -> CompletionResult:
        try:
            result = await self.client.complete(
                model=self.model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                temperature=temperature,
                max_tokens=self.max_tokens,
            )
        except DomainException:
            raise
        except Exception as exc:
            _logger.exception("Completion request failed")
            raise InternalServerError(
                failure_message, [Extension(str(exc), "originalError")]
            ) from exc
        if not result.text:
            raise InternalServerError("AI returned empty response")
        return result


def _validate(
    model: type[_ModelT], result: CompletionResult, message: str
) -> _ModelT:
    try:
        payload = json.loads(result.text or "")
    except json.JSONDecodeError as exc:
        raise InternalServerError(
            "AI returned malformed JSON", [Extension(str(exc), "originalError")]
        ) from exc
    if not isinstance(payload, dict):
        raise BadRequestError(message, [Extension("expected a JSON object", "payload")])
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise BadRequestError(message, [Extension(str(exc), "validation")]) from exc
