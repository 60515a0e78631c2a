"""Day entry service keeping consumed totals in sync with meals."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from calorie_tracker.domain.days import DayEntry, DayWithMeals
from calorie_tracker.domain.meals import Meal
from calorie_tracker.errors import NotFoundError

_logger = logging.getLogger(__name__)


class DayEntryRepository(Protocol):
    """Persistence interface for day entries."""

    def get_day_entry(self, day_entry_id: UUID) -> DayEntry | None:
        """Return a day entry by id, if present."""

    def get_by_user_and_date(self, user_id: UUID, date: str) -> DayEntry | None:
        """Return the day entry for a user and YYYY-MM-DD date, if present."""

    def create_day_entry(self, user_id: UUID, date: str) -> DayEntry:
        """Create a day entry with zero totals and return it."""

    def update_consumed_kcal(self, day_entry_id: UUID, total_kcal: int) -> None:
        """Store the consumed calories of a day entry."""

    def update_consumed_fiber(self, day_entry_id: UUID, total_fiber: float) -> None:
        """Store the consumed fiber of a day entry."""

    def check_ownership(self, day_entry_id: UUID, user_id: UUID) -> bool:
        """Return whether the day entry exists and belongs to the user."""


class DayMealsReader(Protocol):
    """Read access to the meals of a day entry."""

    def list_by_day_entry(self, day_entry_id: UUID) -> list[Meal]:
        """Return meals of a day entry ordered by creation time."""

    def calculate_total_kcal_for_day_entry(self, day_entry_id: UUID) -> int:
        """Sum ``total_kcal`` over all meals of a day entry."""

    def calculate_total_fiber_for_day_entry(self, day_entry_id: UUID) -> float:
        """Sum ``total_fiber`` over all meals of a day entry, missing as zero."""


@dataclass
class DayService:
    """Application service for day entries and their derived totals.

    Totals are always recomputed from the stored meals rather than adjusted by
    deltas, so a retried or concurrent write converges on the current meals.
    """

    repository: DayEntryRepository
    meals: DayMealsReader

    def get_by_user_and_date(self, user_id: UUID, date: str) -> DayEntry | None:
        """Return the user's day entry for a date, if present."""
        return self.repository.get_by_user_and_date(user_id, date)

    def get_by_id(self, day_entry_id: UUID) -> DayEntry:
        """Return a day entry or fail with NotFound."""
        entry = self.repository.get_day_entry(day_entry_id)
        if entry is None:
            raise NotFoundError("day entry not found")
        return entry

    def get_or_create(self, user_id: UUID, date: str) -> DayEntry:
        """Return the day entry for a user and date, creating it if absent."""
        existing = self.repository.get_by_user_and_date(user_id, date)
        if existing:
            return existing
        _logger.info("Creating day entry: user=%s date=%s", user_id, date)
        return self.repository.create_day_entry(user_id, date)

    def get_day_with_meals(self, user_id: UUID, date: str) -> DayWithMeals | None:
        """Return the day entry with its meals, or ``None`` when absent."""
        entry = self.repository.get_by_user_and_date(user_id, date)
        if entry is None:
            return None
        return DayWithMeals(entry=entry, meals=self.meals.list_by_day_entry(entry.id))

    def refresh_consumed_kcal(self, day_entry_id: UUID) -> int:
        """Recompute consumed calories from all meals of the day."""
        total = self.meals.calculate_total_kcal_for_day_entry(day_entry_id)
        self.repository.update_consumed_kcal(day_entry_id, total)
        return total

    def refresh_consumed_fiber(self, day_entry_id: UUID) -> float:
        """Recompute consumed fiber from all meals of the day."""
        total = self.meals.calculate_total_fiber_for_day_entry(day_entry_id)
        self.repository.update_consumed_fiber(day_entry_id, total)
        return total

    def refresh_totals(self, day_entry_id: UUID) -> None:
        """Recompute every cached total of a day entry."""
        self.refresh_consumed_kcal(day_entry_id)
        self.refresh_consumed_fiber(day_entry_id)

    def check_ownership(self, day_entry_id: UUID, user_id: UUID) -> bool:
        """Return whether the user owns the day entry; ``False`` when missing."""
        return self.repository.check_ownership(day_entry_id, user_id)
