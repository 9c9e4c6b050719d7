"""Tests for busylight/schedule/merger.py"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from busylight.schedule.merger import merge_busy_periods
from busylight.schedule.models import BusyPeriod


BASE = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


def period(start_min: int, end_min: int) -> BusyPeriod:
    return BusyPeriod(BASE + timedelta(minutes=start_min), BASE + timedelta(minutes=end_min))


def assert_canonical(schedule):
    for earlier, later in zip(schedule, schedule[1:]):
        assert earlier.start < later.start
        assert earlier.end < later.start


class TestMergeBusyPeriods:
    def test_overlapping_pair_merged(self):
        result = merge_busy_periods([period(10, 20), period(15, 25), period(30, 40)])
        assert result == [period(10, 25), period(30, 40)]

    def test_empty(self):
        assert merge_busy_periods([]) == []

    def test_single(self):
        assert merge_busy_periods([period(5, 10)]) == [period(5, 10)]

    def test_unsorted_input(self):
        result = merge_busy_periods([period(30, 40), period(0, 5), period(15, 20)])
        assert result == [period(0, 5), period(15, 20), period(30, 40)]

    def test_nested_period_absorbed(self):
        assert merge_busy_periods([period(0, 60), period(10, 20)]) == [period(0, 60)]

    def test_touching_periods_combined(self):
        assert merge_busy_periods([period(0, 30), period(30, 60)]) == [period(0, 60)]

    def test_same_start_takes_longest(self):
        result = merge_busy_periods([period(0, 10), period(0, 45), period(0, 20)])
        assert result == [period(0, 45)]

    def test_chain_of_overlaps(self):
        result = merge_busy_periods([period(0, 10), period(5, 15), period(14, 30), period(31, 32)])
        assert result == [period(0, 30), period(31, 32)]

    def test_zero_length_periods(self):
        result = merge_busy_periods([period(5, 5), period(5, 10)])
        assert result == [period(5, 10)]

    def test_accepts_generator(self):
        result = merge_busy_periods(p for p in [period(0, 5), period(3, 8)])
        assert result == [period(0, 8)]


class TestMergeProperties:
    @pytest.mark.parametrize("seed", range(20))
    def test_random_inputs_canonical_and_idempotent(self, seed):
        rng = random.Random(seed)
        periods = []
        for _ in range(rng.randint(0, 25)):
            start = rng.randint(0, 480)
            periods.append(period(start, start + rng.randint(0, 90)))

        merged = merge_busy_periods(periods)

        assert_canonical(merged)
        assert merge_busy_periods(merged) == merged

        # Every input minute is still covered, and nothing new is
        for p in periods:
            assert any(m.start <= p.start and p.end <= m.end for m in merged)
        for m in merged:
            assert any(p.start == m.start for p in periods)
            assert any(p.end == m.end for p in periods)


class TestBusyPeriod:
    def test_rejects_inverted_interval(self):
        with pytest.raises(ValueError):
            BusyPeriod(BASE + timedelta(minutes=5), BASE)

    def test_contains_is_half_open(self):
        p = period(0, 10)
        assert p.contains(BASE)
        assert p.contains(BASE + timedelta(minutes=9))
        assert not p.contains(BASE + timedelta(minutes=10))

    def test_covers_with_tolerance(self):
        p = period(0, 480)
        tolerance = timedelta(seconds=5)
        assert p.covers(BASE + timedelta(seconds=2), BASE + timedelta(minutes=480, seconds=-2), tolerance)
        assert not p.covers(BASE - timedelta(minutes=1), BASE + timedelta(minutes=480), tolerance)
