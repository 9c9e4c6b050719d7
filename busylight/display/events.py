"""
Tool: Notification Events
Purpose: The fixed set of notifications the daemon reacts to

Every external trigger (signal, CLI request, test harness) maps onto exactly
one member of `Notification`. Names that do not match raise
UnknownNotificationError instead of being silently ignored.

Usage:
    from busylight.display.events import Notification

    event = Notification.parse("zoom-muted")
"""

from enum import Enum

from busylight.errors import UnknownNotificationError


class Notification(str, Enum):
    """Externally delivered events."""

    ZOOM_MUTED = "zoom_muted"
    ZOOM_OPEN_MIC = "zoom_open_mic"
    ZOOM_ENDED = "zoom_ended"
    TOGGLE_URGENT = "toggle_urgent"
    TOGGLE_LOW_PRIORITY = "toggle_low_priority"
    TOGGLE_ACTIVE = "toggle_active"
    FORCE_REFRESH = "force_refresh"
    TERMINATE = "terminate"

    @property
    def description(self) -> str:
        descriptions = {
            "zoom_muted": "In a meeting, microphone muted",
            "zoom_open_mic": "In a meeting, microphone live",
            "zoom_ended": "Meeting ended",
            "toggle_urgent": "Toggle the urgent indicator",
            "toggle_low_priority": "Toggle the low-priority marker",
            "toggle_active": "Toggle between working and idle",
            "force_refresh": "Re-read the calendars now",
            "terminate": "Shut the daemon down",
        }
        return descriptions.get(self.value, "")

    @classmethod
    def parse(cls, name: str) -> "Notification":
        """
        Look up a notification by name.

        Accepts any case and either "-" or "_" as the separator. Short
        aliases ("muted", "unmuted", "ended", "urgent", "lowpri", "active",
        "refresh", "quit") are accepted too.

        Raises:
            UnknownNotificationError: no notification matches `name`
        """
        key = name.strip().lower().replace("-", "_")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnknownNotificationError(name) from None


_ALIASES = {
    "muted": "zoom_muted",
    "unmuted": "zoom_open_mic",
    "open_mic": "zoom_open_mic",
    "ended": "zoom_ended",
    "urgent": "toggle_urgent",
    "lowpri": "toggle_low_priority",
    "low_priority": "toggle_low_priority",
    "active": "toggle_active",
    "refresh": "force_refresh",
    "quit": "terminate",
}


__all__ = ["Notification"]
