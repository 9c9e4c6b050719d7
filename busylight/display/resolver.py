"""
Tool: Display Resolver
Purpose: Decide the single light state from the current flags

Priority, first match wins (only while the daemon is active):
    1. urgent              -> URGENT_FLASH
    2. in meeting, muted   -> RED_SOLID
    3. in meeting, live    -> RED_FLASHING
    4. calendar busy       -> YELLOW
    5. otherwise           -> GREEN

The low-priority flag is an overlay on top of whichever state was chosen.
An inactive daemon always shows OFF with no overlay.

Usage:
    from busylight.display.resolver import DisplayState, apply_notification, resolve

    state = apply_notification(state, Notification.ZOOM_MUTED)
    indicator = resolve(state)
"""

from dataclasses import dataclass, replace
from enum import Enum

from busylight.display.events import Notification


class IndicatorCommand(str, Enum):
    """Primary light states."""

    GREEN = "green"
    YELLOW = "yellow"
    RED_SOLID = "red_solid"
    RED_FLASHING = "red_flashing"
    URGENT_FLASH = "urgent_flash"
    OFF = "off"


@dataclass(frozen=True)
class ResolvedIndicator:
    """What the light should show right now."""

    command: IndicatorCommand
    low_priority_overlay: bool = False

    def __str__(self) -> str:
        if self.low_priority_overlay:
            return f"{self.command.value}+lowpri"
        return self.command.value


@dataclass
class DisplayState:
    """Flags that feed the resolver. Baseline is everything off."""

    active: bool = False
    calendar_busy: bool = False
    zoom_active: bool = False
    zoom_muted: bool = False
    urgent: bool = False
    low_priority: bool = False


def resolve(state: DisplayState) -> ResolvedIndicator:
    if not state.active:
        return ResolvedIndicator(IndicatorCommand.OFF)

    if state.urgent:
        command = IndicatorCommand.URGENT_FLASH
    elif state.zoom_active and state.zoom_muted:
        command = IndicatorCommand.RED_SOLID
    elif state.zoom_active:
        command = IndicatorCommand.RED_FLASHING
    elif state.calendar_busy:
        command = IndicatorCommand.YELLOW
    else:
        command = IndicatorCommand.GREEN

    return ResolvedIndicator(command, low_priority_overlay=state.low_priority)


def apply_notification(state: DisplayState, notification: Notification) -> DisplayState:
    """
    Return the flags after `notification`.

    TOGGLE_ACTIVE only flips the flag; opening hardware, reloading config and
    refreshing the calendar are the event loop's job. FORCE_REFRESH and
    TERMINATE leave the flags alone.
    """
    if notification is Notification.ZOOM_MUTED:
        return replace(state, zoom_active=True, zoom_muted=True)
    if notification is Notification.ZOOM_OPEN_MIC:
        return replace(state, zoom_active=True, zoom_muted=False)
    if notification is Notification.ZOOM_ENDED:
        return replace(state, zoom_active=False)
    if notification is Notification.TOGGLE_URGENT:
        return replace(state, urgent=not state.urgent)
    if notification is Notification.TOGGLE_LOW_PRIORITY:
        return replace(state, low_priority=not state.low_priority)
    if notification is Notification.TOGGLE_ACTIVE:
        return replace(state, active=not state.active)
    return replace(state)


__all__ = [
    "DisplayState",
    "IndicatorCommand",
    "ResolvedIndicator",
    "apply_notification",
    "resolve",
]
