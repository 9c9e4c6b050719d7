"""
Tool: Signal Notifications
Purpose: Deliver notifications to the daemon as POSIX signals

Each signal maps to exactly one Notification:

    USR1    in meeting, muted
    USR2    in meeting, open mic
    HUP     meeting ended
    INFO    force calendar refresh (ALRM on platforms without INFO)
    VTALRM  toggle urgent
    WINCH   toggle active/idle
    CHLD    toggle low priority
    INT     terminate
    TERM    terminate

Usage:
    from busylight.daemon.notifications import install_signal_handlers, send_notification

    install_signal_handlers(loop, daemon.notify)
    send_notification(pid, Notification.ZOOM_MUTED)
"""

import asyncio
import logging
import os
import signal
from collections.abc import Callable

from busylight.display.events import Notification

logger = logging.getLogger(__name__)

_REFRESH_SIGNAL = getattr(signal, "SIGINFO", signal.SIGALRM)

SIGNAL_NOTIFICATIONS: dict[signal.Signals, Notification] = {
    signal.SIGUSR1: Notification.ZOOM_MUTED,
    signal.SIGUSR2: Notification.ZOOM_OPEN_MIC,
    signal.SIGHUP: Notification.ZOOM_ENDED,
    _REFRESH_SIGNAL: Notification.FORCE_REFRESH,
    signal.SIGVTALRM: Notification.TOGGLE_URGENT,
    signal.SIGWINCH: Notification.TOGGLE_ACTIVE,
    signal.SIGCHLD: Notification.TOGGLE_LOW_PRIORITY,
    signal.SIGINT: Notification.TERMINATE,
    signal.SIGTERM: Notification.TERMINATE,
}

# Preferred signal for each notification (TERMINATE goes out as SIGINT)
NOTIFICATION_SIGNALS: dict[Notification, signal.Signals] = {}
for _sig, _notification in SIGNAL_NOTIFICATIONS.items():
    NOTIFICATION_SIGNALS.setdefault(_notification, _sig)


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    notify: Callable[[Notification], None],
) -> None:
    """Route every mapped signal into `notify` from the event loop thread."""
    for sig, notification in SIGNAL_NOTIFICATIONS.items():
        loop.add_signal_handler(sig, notify, notification)
    logger.debug(f"Installed handlers for {len(SIGNAL_NOTIFICATIONS)} signals")


def remove_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    for sig in SIGNAL_NOTIFICATIONS:
        loop.remove_signal_handler(sig)


def send_notification(pid: int, notification: Notification) -> signal.Signals:
    """
    Signal the daemon running as `pid`.

    Raises:
        OSError: the process does not exist or cannot be signalled
    """
    sig = NOTIFICATION_SIGNALS[notification]
    os.kill(pid, sig)
    return sig


__all__ = [
    "NOTIFICATION_SIGNALS",
    "SIGNAL_NOTIFICATIONS",
    "install_signal_handlers",
    "remove_signal_handlers",
    "send_notification",
]
