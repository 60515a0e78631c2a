"""Domain models for daily aggregation."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from calorie_tracker.domain.meals import Meal


@dataclass(frozen=True)
class DayEntry:
    """One user's calendar date with cached consumption totals."""

    id: UUID
    user_id: UUID
    date: str
    consumed_kcal: int
    created_at: datetime
    updated_at: datetime
    consumed_fiber: float | None = None
    target_kcal: int | None = None
    notes: str | None = None


@dataclass(frozen=True)
class DayWithMeals:
    """Day entry together with its meals."""

    entry: DayEntry
    meals: list[Meal]
