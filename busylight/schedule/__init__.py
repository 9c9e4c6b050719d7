"""
Schedule - busy period merging and availability tracking

Components:
    models.py: BusyPeriod value type
    merger.py: Collapse raw busy periods into a canonical schedule
    availability.py: AvailabilityScheduler (busy now? next transition?)
"""

from datetime import timedelta

# Defaults
LOOKAHEAD = timedelta(hours=8)
GUARD_MARGIN = timedelta(seconds=5)
STALE_AFTER = timedelta(minutes=30)

__all__ = [
    "LOOKAHEAD",
    "GUARD_MARGIN",
    "STALE_AFTER",
]
