"""
Tool: Schedule Models
Purpose: Value types for calendar availability

Usage:
    from busylight.schedule.models import BusyPeriod

    period = BusyPeriod(start, end)
    if period.contains(now):
        ...
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any


@dataclass(frozen=True)
class BusyPeriod:
    """
    Half-open interval [start, end) during which a calendar is busy.

    Both ends are timezone-aware datetimes.
    """

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"BusyPeriod start {self.start} is after end {self.end}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, when: datetime) -> bool:
        return self.start <= when < self.end

    def covers(self, window_start: datetime, window_end: datetime, tolerance: timedelta) -> bool:
        """True if this period spans the whole window, give or take `tolerance` at each edge."""
        return self.start < window_start + tolerance and self.end > window_end - tolerance

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"
