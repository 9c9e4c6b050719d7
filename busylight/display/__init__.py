"""
Display - notification events and indicator resolution

Components:
    events.py: Notification enum (what outside callers can tell the daemon)
    resolver.py: DisplayState, IndicatorCommand and the priority resolver
"""
