"""
Tool: Event Loop Timers
Purpose: One-shot timers that post into the daemon's event queue

A timer fire is delivered as a TimerFired item on the same queue as external
notifications, so it is handled in order with everything else. Every stop or
reset bumps the timer's generation; a fire that was already queued under an
older generation is recognised as stale by `is_current` and dropped.

Usage:
    timer = QueueTimer(TimerKind.TRANSITION, queue)
    timer.reset(seconds)
    ...
    item = await queue.get()
    if isinstance(item, TimerFired) and timer.is_current(item):
        ...
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class TimerKind(str, Enum):
    PERIODIC_REFRESH = "periodic_refresh"
    TRANSITION = "transition"


@dataclass(frozen=True)
class TimerFired:
    kind: TimerKind
    generation: int


class QueueTimer:
    """Single pending fire at a time; re-armed explicitly with reset()."""

    def __init__(self, kind: TimerKind, queue: asyncio.Queue):
        self.kind = kind
        self.queue = queue
        self.generation = 0
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def _fire(self, generation: int) -> None:
        self._handle = None
        self.queue.put_nowait(TimerFired(self.kind, generation))

    def stop(self) -> None:
        """Cancel any pending fire and invalidate one already queued."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.generation += 1

    def reset(self, delay_seconds: float) -> None:
        """Arm the timer `delay_seconds` from now, replacing any earlier arming."""
        self.stop()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(0.0, delay_seconds), self._fire, self.generation)
        logger.debug(f"{self.kind.value} timer armed for {delay_seconds:.1f}s (generation {self.generation})")

    def is_current(self, fired: TimerFired) -> bool:
        return fired.kind is self.kind and fired.generation == self.generation


__all__ = ["QueueTimer", "TimerFired", "TimerKind"]
