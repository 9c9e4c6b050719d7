"""
Tool: Availability Scheduler
Purpose: Track the merged busy schedule and answer "busy now?" / "when next?"

Holds the canonical schedule produced by the merger and the time it was last
refreshed. Periods are trimmed from the front as they elapse.

Reads can refresh: when expiry empties the schedule and the last poll is older
than the staleness threshold, `expire_elapsed` queries the calendar inline.
Callers of `is_busy_now` and `next_transition_time` must therefore tolerate
the duration of a full calendar query.

Usage:
    from busylight.schedule.availability import AvailabilityScheduler

    scheduler = AvailabilityScheduler(source, ["primary"])
    await scheduler.refresh(now)
    busy = await scheduler.is_busy_now(now)
    wake_at = await scheduler.next_transition_time(now)
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from busylight.calendar.base import CalendarSource
from busylight.errors import CalendarQueryError
from busylight.schedule import GUARD_MARGIN, LOOKAHEAD, STALE_AFTER
from busylight.schedule.merger import merge_busy_periods
from busylight.schedule.models import BusyPeriod

logger = logging.getLogger(__name__)


class AvailabilityScheduler:
    """Owns the merged busy schedule for the lookahead window."""

    def __init__(
        self,
        source: CalendarSource,
        calendar_ids: Iterable[str] = (),
        lookahead: timedelta = LOOKAHEAD,
        guard_margin: timedelta = GUARD_MARGIN,
        stale_after: timedelta = STALE_AFTER,
    ):
        self.source = source
        self.calendar_ids = list(calendar_ids)
        self.lookahead = lookahead
        self.guard_margin = guard_margin
        self.stale_after = stale_after

        self._schedule: list[BusyPeriod] = []
        self._last_poll_time: datetime | None = None

    @property
    def schedule(self) -> list[BusyPeriod]:
        return list(self._schedule)

    @property
    def last_poll_time(self) -> datetime | None:
        return self._last_poll_time

    def load(self, periods: Iterable[BusyPeriod], now: datetime) -> None:
        """
        Replace the schedule with the merge of `periods`.

        `periods` must come from a query over [now, now + lookahead).
        """
        self._schedule = merge_busy_periods(periods)
        self._last_poll_time = now
        logger.debug(f"Schedule loaded: {[str(p) for p in self._schedule]}")

    async def refresh(self, now: datetime) -> None:
        """
        Query the calendar source and load the result.

        Raises:
            CalendarQueryError: the query failed; the previous schedule is kept
        """
        window_end = now + self.lookahead
        logger.info(f"Polling calendars {self.calendar_ids} until {window_end.isoformat()}")

        result = await self.source.query(self.calendar_ids, now, window_end)
        for calendar_id, errors in result.errors.items():
            for error in errors:
                logger.error(f"Calendar {calendar_id}: {error}")

        self.load(result.all_periods(), now)
        logger.info(f"Schedule refreshed with {len(self._schedule)} busy period(s)")

    async def expire_elapsed(self, now: datetime) -> None:
        """Drop elapsed periods, refreshing inline if the schedule ran dry and is stale."""
        horizon = now + self.guard_margin
        while self._schedule and not self._schedule[0].end > horizon:
            self._schedule.pop(0)

        if self._schedule:
            return

        if self._last_poll_time is None or now - self._last_poll_time > self.stale_after:
            try:
                await self.refresh(now)
            except CalendarQueryError as e:
                logger.warning(f"Unable to refresh calendar data while removing expired periods: {e}")

    async def is_busy_now(self, now: datetime) -> bool:
        await self.expire_elapsed(now)
        if not self._schedule:
            return False
        return not self._schedule[0].start > now + self.guard_margin

    async def next_transition_time(self, now: datetime) -> datetime:
        """
        Return when the busy/free status is next expected to change.

        With nothing scheduled this is the end of the lookahead window, since
        nothing is known past it without a fresh query.
        """
        await self.expire_elapsed(now)
        if not self._schedule:
            return now + self.lookahead

        front = self._schedule[0]
        if not front.start > now + self.guard_margin:
            return front.end
        return front.start


__all__ = ["AvailabilityScheduler"]
