"""Exception hierarchy shared by all busylight components."""


class BusylightError(Exception):
    """Base class for errors raised by busylight."""


class ConfigError(BusylightError):
    """Configuration could not be read or validated."""


class CalendarQueryError(BusylightError):
    """The calendar source failed to answer a free/busy query."""


class TransportError(BusylightError):
    """The light hardware could not be opened or written to."""


class PidFileError(BusylightError):
    """The PID file could not be created, read or removed."""


class UnknownNotificationError(BusylightError, ValueError):
    """A notification name did not match any known notification."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown notification: {name!r}")


__all__ = [
    "BusylightError",
    "ConfigError",
    "CalendarQueryError",
    "TransportError",
    "PidFileError",
    "UnknownNotificationError",
]
