"""
Calendar - free/busy sources for the availability scheduler

Components:
    base.py: CalendarSource interface, query results, all-day filtering
    google_freebusy.py: Google Calendar free/busy API client

Usage:
    from busylight.calendar.google_freebusy import GoogleFreeBusySource

    source = GoogleFreeBusySource(config)
    result = await source.query(calendar_ids, start, end)
"""

# Google API endpoints
CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"
FREEBUSY_URL = f"{CALENDAR_API_BASE}/freeBusy"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"

__all__ = [
    "CALENDAR_API_BASE",
    "FREEBUSY_URL",
    "GOOGLE_TOKEN_URL",
    "CALENDAR_READONLY_SCOPE",
]
