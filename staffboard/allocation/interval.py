from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from staffboard.allocation.errors import InvalidRange


@dataclass(frozen=True, slots=True)
class CalendarInterval:
    """Closed date range; both ends are working days that belong to the interval."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidRange(self.start, self.end)

    @classmethod
    def single(cls, day: date) -> "CalendarInterval":
        return cls(day, day)

    def overlaps(self, other: "CalendarInterval") -> bool:
        return self.start <= other.end and other.start <= self.end

    def contains(self, other: "CalendarInterval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def intersection(self, other: "CalendarInterval") -> "CalendarInterval | None":
        if not self.overlaps(other):
            return None
        return CalendarInterval(max(self.start, other.start), min(self.end, other.end))

    def duration_days(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
