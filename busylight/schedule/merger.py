"""
Tool: Busy Period Merger
Purpose: Reduce busy periods from all monitored calendars to one canonical schedule

The result is sorted by start and no two entries overlap or touch. Merging an
already merged schedule returns it unchanged.

Usage:
    from busylight.schedule.merger import merge_busy_periods

    schedule = merge_busy_periods(raw_periods)
"""

from collections.abc import Iterable

from busylight.schedule.models import BusyPeriod


def merge_busy_periods(periods: Iterable[BusyPeriod]) -> list[BusyPeriod]:
    """
    Merge overlapping and touching busy periods.

    Args:
        periods: Busy periods in any order, possibly overlapping

    Returns:
        List of disjoint, non-adjacent periods in ascending start order
    """
    ordered = sorted(periods, key=lambda p: p.start)

    merged: list[BusyPeriod] = []
    current_start = None
    current_end = None

    for period in ordered:
        if current_start is None:
            current_start, current_end = period.start, period.end
        elif period.start > current_end:
            # disjoint: commit what we have and start over
            merged.append(BusyPeriod(current_start, current_end))
            current_start, current_end = period.start, period.end
        elif period.end > current_end:
            current_end = period.end

    if current_start is not None:
        merged.append(BusyPeriod(current_start, current_end))

    return merged


__all__ = ["merge_busy_periods"]
