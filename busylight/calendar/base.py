"""
Tool: Calendar Source Base
Purpose: Abstract interface for anything that can answer free/busy queries

Defines the query contract used by the availability scheduler, plus the
"ignore all-day events" heuristic applied per calendar before periods reach
the merger.

Usage:
    from busylight.calendar.base import CalendarSource, CalendarQueryResult

    class StaticSource(CalendarSource):
        async def query(self, calendar_ids, window_start, window_end):
            return CalendarQueryResult(busy={"primary": [...]})
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from busylight.schedule.models import BusyPeriod

logger = logging.getLogger(__name__)

# Slack allowed at each window edge when deciding a period covers the whole window
FULL_WINDOW_TOLERANCE = timedelta(seconds=5)


@dataclass
class CalendarQueryResult:
    """Busy periods and errors reported per calendar ID."""

    busy: dict[str, list[BusyPeriod]] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)

    def all_periods(self) -> list[BusyPeriod]:
        return [period for periods in self.busy.values() for period in periods]


class CalendarSource(ABC):
    """
    Abstract base class for free/busy providers.

    Implementations must raise CalendarQueryError when the query as a whole
    fails. Problems confined to one calendar go in `CalendarQueryResult.errors`.
    """

    @abstractmethod
    async def query(
        self,
        calendar_ids: Iterable[str],
        window_start: datetime,
        window_end: datetime,
    ) -> CalendarQueryResult:
        """
        Fetch busy periods for each calendar within [window_start, window_end).

        Args:
            calendar_ids: Calendars to query
            window_start: Inclusive start of the query window
            window_end: Exclusive end of the query window

        Returns:
            CalendarQueryResult keyed by calendar ID
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the source."""
        return None


def drop_full_window_periods(
    periods: Iterable[BusyPeriod],
    window_start: datetime,
    window_end: datetime,
    title: str = "",
) -> list[BusyPeriod]:
    """
    Drop periods that cover the entire query window.

    Only aggregate busy ranges are visible, so a period booked for the whole
    window is the closest available proxy for an all-day event.
    """
    kept = []
    for period in periods:
        if period.covers(window_start, window_end, FULL_WINDOW_TOLERANCE):
            logger.info(f"Ignoring long-running event from {title or 'calendar'}: {period}")
            continue
        kept.append(period)
    return kept
