"""Portion nutrition math for food items."""

import math

from calorie_tracker.domain.meals import FoodItem, PortionNutrition
from calorie_tracker.domain.products import NutritionRates


def scale_from_per100g(rates: NutritionRates, quantity: float) -> PortionNutrition:
    """Compute absolute nutrition for ``quantity`` grams from per-100g rates.

    ``kcal`` is rounded to an integer and always present. Macros are rounded to
    one decimal; a missing or zero rate yields ``None`` so that "unknown" stays
    distinguishable from a measured value.
    """
    return PortionNutrition(
        kcal=_round_kcal(rates.kcal_per_100g * quantity / 100),
        protein=_scale_macro(rates.protein_per_100g, quantity),
        fat=_scale_macro(rates.fat_per_100g, quantity),
        carbs=_scale_macro(rates.carbs_per_100g, quantity),
        fiber=_scale_macro(rates.fiber_per_100g, quantity),
    )


def recover_per100g(item: FoodItem) -> NutritionRates:
    """Derive per-100g rates from the cached values of an existing item.

    Rates come from already rounded values, so repeated re-quantification
    drifts by up to the rounding step each time. Only fields the item carries
    are recovered. The item must have a positive quantity.
    """
    if item.quantity <= 0:
        raise ValueError("cannot recover rates from an item without quantity")
    return NutritionRates(
        kcal_per_100g=item.kcal / item.quantity * 100,
        protein_per_100g=_recover_macro(item.protein, item.quantity),
        fat_per_100g=_recover_macro(item.fat, item.quantity),
        carbs_per_100g=_recover_macro(item.carbs, item.quantity),
        fiber_per_100g=_recover_macro(item.fiber, item.quantity),
    )


def sum_kcal(items: list[FoodItem]) -> int:
    """Return the exact integer calorie total of a meal's items."""
    return sum(item.kcal for item in items)


def sum_fiber(items: list[FoodItem]) -> float:
    """Return the fiber total of a meal's items rounded to one decimal."""
    return round_one_decimal(sum(item.fiber or 0.0 for item in items))


def round_one_decimal(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _round_kcal(value: float) -> int:
    return math.floor(value + 0.5)


def _scale_macro(rate: float | None, quantity: float) -> float | None:
    if not rate:
        return None
    return round_one_decimal(rate * quantity / 100)


def _recover_macro(value: float | None, quantity: float) -> float | None:
    if value is None:
        return None
    return value / quantity * 100
