"""Supabase repository for day entries."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorie_tracker.domain.days import DayEntry
from calorie_tracker.services.days import DayEntryRepository

_TABLE = "day_entries"


@dataclass
class SupabaseDayEntryRepository(DayEntryRepository):
    """Supabase implementation for day entries."""

    client: Client

    def get_day_entry(self, day_entry_id: UUID) -> DayEntry | None:
        """Return a day entry by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(day_entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_day_entry(response.data[0])

    def get_by_user_and_date(self, user_id: UUID, date: str) -> DayEntry | None:
        """Return the day entry for a user and date, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("date", date)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_day_entry(response.data[0])

    def create_day_entry(self, user_id: UUID, date: str) -> DayEntry:
        """Create a day entry with zero totals."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": str(user_id),
                    "date": date,
                    "consumed_kcal": 0,
                    "consumed_fiber": 0,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create day entry")
        return _parse_day_entry(response.data[0])

    def update_consumed_kcal(self, day_entry_id: UUID, total_kcal: int) -> None:
        """Store consumed calories."""
        self._update(day_entry_id, {"consumed_kcal": total_kcal})

    def update_consumed_fiber(self, day_entry_id: UUID, total_fiber: float) -> None:
        """Store consumed fiber."""
        self._update(day_entry_id, {"consumed_fiber": total_fiber})

    def check_ownership(self, day_entry_id: UUID, user_id: UUID) -> bool:
        """Return whether the day entry belongs to the user."""
        response = (
            self.client.table(_TABLE)
            .select("user_id")
            .eq("id", str(day_entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return False
        return response.data[0].get("user_id") == str(user_id)

    def _update(self, day_entry_id: UUID, payload: dict[str, object]) -> None:
        self.client.table(_TABLE).update(
            {**payload, "updated_at": datetime.now(tz=UTC).isoformat()}
        ).eq("id", str(day_entry_id)).execute()


def _parse_day_entry(row: dict[str, object]) -> DayEntry:
    """Parse a day entry row into a domain model."""
    consumed_fiber = row.get("consumed_fiber")
    target_kcal = row.get("target_kcal")
    return DayEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        date=str(row["date"]),
        consumed_kcal=int(row.get("consumed_kcal") or 0),
        consumed_fiber=float(consumed_fiber) if consumed_fiber is not None else None,
        target_kcal=int(target_kcal) if target_kcal is not None else None,
        notes=row.get("notes"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
