"""Tests for busylight/daemon/timers.py"""

import asyncio

import pytest

from busylight.daemon.timers import QueueTimer, TimerFired, TimerKind


class TestQueueTimer:
    @pytest.mark.asyncio
    async def test_fire_posts_current_generation(self):
        queue = asyncio.Queue()
        timer = QueueTimer(TimerKind.TRANSITION, queue)

        timer.reset(0)
        fired = await asyncio.wait_for(queue.get(), timeout=1)

        assert fired == TimerFired(TimerKind.TRANSITION, timer.generation)
        assert timer.is_current(fired)
        assert not timer.armed

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_fire(self):
        queue = asyncio.Queue()
        timer = QueueTimer(TimerKind.PERIODIC_REFRESH, queue)

        timer.reset(0.01)
        assert timer.armed
        timer.stop()
        await asyncio.sleep(0.05)

        assert queue.empty()
        assert not timer.armed

    @pytest.mark.asyncio
    async def test_reset_makes_queued_fire_stale(self):
        queue = asyncio.Queue()
        timer = QueueTimer(TimerKind.TRANSITION, queue)

        timer.reset(0)
        stale = await asyncio.wait_for(queue.get(), timeout=1)
        timer.reset(3600)

        assert not timer.is_current(stale)
        timer.stop()

    @pytest.mark.asyncio
    async def test_negative_delay_fires_immediately(self):
        queue = asyncio.Queue()
        timer = QueueTimer(TimerKind.TRANSITION, queue)
        timer.reset(-30)
        fired = await asyncio.wait_for(queue.get(), timeout=1)
        assert timer.is_current(fired)

    def test_other_kind_is_not_current(self):
        timer = QueueTimer(TimerKind.TRANSITION, asyncio.Queue())
        assert not timer.is_current(TimerFired(TimerKind.PERIODIC_REFRESH, timer.generation))

    def test_stop_bumps_generation(self):
        timer = QueueTimer(TimerKind.TRANSITION, asyncio.Queue())
        timer.stop()
        timer.stop()
        assert timer.generation == 2
