"""Meter reading records and raw display-value conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any

# Meter displays carry one decimal litre digit: 1287309 -> 128730.9 L
RAW_DIGITS_PER_LITRE = 10
LITRES_PER_KILOLITRE = 1000


def raw_to_kilolitres(raw: int | float) -> float:
    """Convert a raw meter display value to kL (1287309 -> 128.7309)."""
    return raw / RAW_DIGITS_PER_LITRE / LITRES_PER_KILOLITRE


@dataclass
class MeterReading:
    """A cumulative meter reading submitted by an owner."""

    owner_id: str
    value: float  # kL, cumulative
    reading_date: date
    reading_time: time
    id: int | None = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def sort_key(self) -> tuple[date, time]:
        return (self.reading_date, self.reading_time)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> MeterReading:
        """Build a reading from a ``readings`` table row."""
        recorded = row.get("recorded_at")
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            value=float(row["reading_value"]),
            reading_date=date.fromisoformat(row["reading_date"]),
            reading_time=time.fromisoformat(row["reading_time"]),
            recorded_at=datetime.fromisoformat(recorded) if recorded else datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "reading_value": self.value,
            "reading_date": self.reading_date.isoformat(),
            "reading_time": self.reading_time.strftime("%H:%M:%S"),
            "recorded_at": self.recorded_at.isoformat(),
        }
