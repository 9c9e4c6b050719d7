"""
Tool: Busylight Daemon
Purpose: Single reactive loop that owns all state and drives the light

Three sources feed one asyncio queue:
- the periodic refresh timer (hourly by default, armed only while active)
- the transition timer (re-armed to the next busy/free change)
- external notifications (signal handlers, or anything calling notify())

One item is taken off the queue at a time and handled to completion,
including any calendar query or hardware write, before the next one is read.
That serialization is the only concurrency control: nothing else touches the
display flags, the schedule or the transport. Each handled item ends with one
resolve and one write of the full current light state.

Usage:
    python -m busylight.daemon.runner
    busylight run

Dependencies:
    - asyncio (stdlib)
    - aiohttp, pyserial, pyyaml (via collaborators)
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from busylight.calendar.base import CalendarSource
from busylight.calendar.google_freebusy import GoogleFreeBusySource
from busylight.daemon.config import BusylightConfig, load_config, reload_config
from busylight.daemon.notifications import install_signal_handlers, remove_signal_handlers
from busylight.daemon.pidfile import PidFile
from busylight.daemon.timers import QueueTimer, TimerFired, TimerKind
from busylight.display.events import Notification
from busylight.display.resolver import DisplayState, ResolvedIndicator, apply_notification, resolve
from busylight.errors import BusylightError, CalendarQueryError, ConfigError, TransportError
from busylight.hardware.commands import SHUTDOWN_PATTERN, STARTUP_PATTERN, encode
from busylight.hardware.transport import LightTransport, SerialLightTransport, play_pattern
from busylight.logging_config import set_level, setup_logging
from busylight.schedule.availability import AvailabilityScheduler

logger = logging.getLogger(__name__)


def serial_transport_from_config(config: BusylightConfig) -> LightTransport:
    return SerialLightTransport(
        device=config.device,
        device_dir=config.device_dir,
        device_regexp=config.device_regexp,
        baud_rate=config.baud_rate,
        write_timeout=config.write_timeout_seconds,
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BusylightDaemon:
    """Owns the config, scheduler, transport and display flags for one daemon run."""

    def __init__(
        self,
        config: BusylightConfig,
        source: CalendarSource | None = None,
        transport_factory: Callable[[BusylightConfig], LightTransport] = serial_transport_from_config,
        config_loader: Callable[[BusylightConfig], BusylightConfig] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.source = source or GoogleFreeBusySource(config)
        self.transport_factory = transport_factory
        self.transport = transport_factory(config)
        self.config_loader = config_loader or reload_config
        self.clock = clock

        self.scheduler = AvailabilityScheduler(
            self.source,
            config.calendars,
            lookahead=config.lookahead,
            guard_margin=config.guard_margin,
            stale_after=config.stale_after,
        )
        self.state = DisplayState()

        self.queue: asyncio.Queue = asyncio.Queue()
        self.refresh_timer = QueueTimer(TimerKind.PERIODIC_REFRESH, self.queue)
        self.transition_timer = QueueTimer(TimerKind.TRANSITION, self.queue)

        self.running = False
        self.last_indicator: ResolvedIndicator | None = None

    # =========================================================================
    # Inputs
    # =========================================================================

    def notify(self, notification: Notification) -> None:
        """Queue an external notification. Safe to call from signal handlers on the loop."""
        self.queue.put_nowait(notification)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """
        Bring the daemon up: open the light, poll the calendars, show the state.

        Raises:
            TransportError: the light could not be opened
        """
        try:
            self.transport.open()
            await play_pattern(self.transport, STARTUP_PATTERN)
        except TransportError:
            self.transport.close()
            raise

        self.state = DisplayState(active=True)
        now = self.clock()
        await self._refresh_schedule(now)
        await self._update_calendar_busy(now)
        await self._reset_transition_timer(now)
        self.refresh_timer.reset(self.config.refresh_interval.total_seconds())

        self.running = True
        self._emit()

    async def run(self) -> None:
        """Start, then handle queued items until TERMINATE."""
        try:
            await self.start()
            while self.running:
                item = await self.queue.get()
                try:
                    await self.handle(item)
                except Exception as e:
                    logger.exception(f"Unexpected error handling {item!r}: {e}")
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        self.running = False
        self.refresh_timer.stop()
        self.transition_timer.stop()
        await self._close_transport()
        await self.source.close()
        logger.info("busylightd shutting down")

    # =========================================================================
    # Event handling
    # =========================================================================

    async def handle(self, item: Any) -> None:
        """Handle one queued item and show the resulting state."""
        if isinstance(item, TimerFired):
            if not await self._handle_timer(item):
                return
        elif isinstance(item, Notification):
            if not await self._handle_notification(item):
                return
        else:
            logger.warning(f"Ignoring unexpected queue item {item!r}")
            return

        if self.state.active:
            await self._update_calendar_busy(self.clock())
        self._emit()

    async def _handle_timer(self, fired: TimerFired) -> bool:
        timer = self.refresh_timer if fired.kind is TimerKind.PERIODIC_REFRESH else self.transition_timer
        if not timer.is_current(fired):
            logger.debug(f"Dropping stale {fired.kind.value} timer (generation {fired.generation})")
            return False

        now = self.clock()
        if fired.kind is TimerKind.PERIODIC_REFRESH:
            if not self.state.active:
                logger.info("Ignoring scheduled request to refresh calendar since service isn't active now.")
                self.refresh_timer.stop()
                return True
            logger.info("Periodic calendar refresh starts")
            self.refresh_timer.reset(self.config.refresh_interval.total_seconds())
            await self._refresh_schedule(now)
            await self._reset_transition_timer(now)
        else:
            logger.info("Scheduled status change")
            await self._reset_transition_timer(now)
        return True

    async def _handle_notification(self, notification: Notification) -> bool:
        """Apply a notification. Returns False when the loop should stop without a final write."""
        if notification is Notification.TERMINATE:
            logger.info("Received terminate request")
            self.running = False
            return False

        if notification is Notification.TOGGLE_ACTIVE:
            if self.state.active:
                await self._deactivate()
            else:
                await self._activate()
            return True

        if notification is Notification.FORCE_REFRESH:
            if not self.state.active:
                logger.info("Ignoring reload request since service isn't active now.")
                return True
            logger.info("Reloading calendar status by request")
            now = self.clock()
            await self._refresh_schedule(now)
            await self._reset_transition_timer(now)
            return True

        self.state = apply_notification(self.state, notification)
        logger.info(f"{notification.description} ({self._flags()})")
        return True

    # =========================================================================
    # Activation
    # =========================================================================

    async def _activate(self) -> None:
        logger.info("Activating service; re-loading configuration and opening serial port")
        try:
            self._apply_config(self.config_loader(self.config))
        except ConfigError as e:
            logger.error(f"Error loading configuration data. Staying inactive: {e}")
            return

        try:
            self.transport.open()
            await play_pattern(self.transport, STARTUP_PATTERN)
        except TransportError as e:
            logger.error(f"Unable to open light hardware. Staying inactive: {e}")
            self.transport.close()
            return

        # Flags set while inactive carry over; deactivation already reset them
        self.state.active = True
        logger.info("Activating service; getting fresh calendar data")
        now = self.clock()
        await self._refresh_schedule(now)
        await self._update_calendar_busy(now)
        logger.info("Resetting timers")
        self.refresh_timer.reset(self.config.refresh_interval.total_seconds())
        await self._reset_transition_timer(now)

    async def _deactivate(self) -> None:
        logger.info("Stopping timers")
        self.refresh_timer.stop()
        self.transition_timer.stop()
        self.state = DisplayState()
        await self._close_transport()
        logger.info("Daemon in inactive state... zzz")

    def _apply_config(self, config: BusylightConfig) -> None:
        self.config = config
        set_level(config.log_level)
        if isinstance(self.source, GoogleFreeBusySource):
            self.source.config = config
        self.scheduler.calendar_ids = list(config.calendars)
        self.scheduler.lookahead = config.lookahead
        self.scheduler.guard_margin = config.guard_margin
        self.scheduler.stale_after = config.stale_after
        self.transport.close()
        self.transport = self.transport_factory(config)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _refresh_schedule(self, now: datetime) -> None:
        try:
            await self.scheduler.refresh(now)
        except CalendarQueryError as e:
            logger.error(f"Error updating busy/free times from calendar: {e}")

    async def _update_calendar_busy(self, now: datetime) -> None:
        self.state.calendar_busy = await self.scheduler.is_busy_now(now)

    async def _reset_transition_timer(self, now: datetime) -> None:
        next_time = await self.scheduler.next_transition_time(now)
        delay = (next_time - self.clock()).total_seconds()
        self.transition_timer.reset(delay)
        logger.info(f"Next transition check at {next_time.isoformat()}")

    async def _close_transport(self) -> None:
        if not self.transport.is_open:
            return
        try:
            await play_pattern(self.transport, SHUTDOWN_PATTERN)
        except TransportError as e:
            logger.warning(f"Unable to show shutdown pattern: {e}")
        self.transport.close()

    def _emit(self) -> None:
        """Write the current resolved state to the light in a single call."""
        indicator = resolve(self.state)
        self.last_indicator = indicator
        if not self.transport.is_open:
            logger.debug(f"Light not open; not showing {indicator}")
            return
        try:
            self.transport.write(encode(indicator))
        except TransportError as e:
            logger.error(f"Unable to send light signal {indicator}: {e}")
            return
        logger.info(f"Signal {indicator}")

    def _flags(self) -> str:
        s = self.state
        return (
            f"active={s.active} busy={s.calendar_busy} zoom={s.zoom_active} "
            f"muted={s.zoom_muted} urgent={s.urgent} lowpri={s.low_priority}"
        )


async def serve(config_path: str | None = None) -> int:
    """
    Run the daemon until terminated.

    Returns:
        Process exit status (0 on clean shutdown)
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        setup_logging()
        logger.error(f"Unable to start daemon: {e}")
        return 1

    setup_logging(level=config.log_level, log_file=config.path("log_file"))

    pid_file = PidFile(config.path("pid_file"))
    try:
        pid_file.acquire()
    except BusylightError as e:
        logger.error(f"Unable to start daemon: {e}")
        return 1

    try:
        source = GoogleFreeBusySource(config)
        source.check_credentials()
        daemon = BusylightDaemon(
            config,
            source=source,
            config_loader=lambda previous: reload_config(previous, config_path),
        )
        logger.info(f"busylightd started, PID={pid_file.read()}")

        loop = asyncio.get_running_loop()
        install_signal_handlers(loop, daemon.notify)
        try:
            await daemon.run()
        finally:
            remove_signal_handlers(loop)
    except BusylightError as e:
        logger.error(f"Unable to start daemon: {e}")
        return 1
    finally:
        pid_file.release()

    return 0


def main():
    raise SystemExit(asyncio.run(serve()))


if __name__ == "__main__":
    main()
