"""Shared test fixtures for busylight tests.

This module provides common fixtures used across all test modules:
- A fixed, timezone-aware "now"
- A scripted calendar source
- A recording light transport
- Config objects and config files in temporary directories

Usage:
    def test_something(now, static_source):
        static_source.periods = [...]
        ...
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from busylight.calendar.base import CalendarQueryResult, CalendarSource
from busylight.daemon.config import BusylightConfig
from busylight.errors import CalendarQueryError, TransportError
from busylight.hardware.transport import LightTransport
from busylight.schedule.models import BusyPeriod


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
EXAMPLE_CONFIG = PROJECT_ROOT / "args" / "busylight.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────────────────


class StaticCalendarSource(CalendarSource):
    """Returns the configured periods, or raises if `fail` is set."""

    def __init__(self):
        self.periods: list[BusyPeriod] = []
        self.errors: dict[str, list[str]] = {}
        self.fail = False
        self.queries: list[tuple[list[str], datetime, datetime]] = []

    async def query(self, calendar_ids: Iterable[str], window_start: datetime, window_end: datetime):
        self.queries.append((list(calendar_ids), window_start, window_end))
        if self.fail:
            raise CalendarQueryError("calendar unavailable")
        return CalendarQueryResult(busy={"primary": list(self.periods)}, errors=dict(self.errors))


class RecordingTransport(LightTransport):
    """Keeps every payload written while open."""

    def __init__(self):
        self.writes: list[bytes] = []
        self.opened = 0
        self.closed = 0
        self.fail_open = False
        self.fail_write = False
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        if self.fail_open:
            raise TransportError("no device")
        self.opened += 1
        self._open = True

    def close(self) -> None:
        if self._open:
            self.closed += 1
        self._open = False

    def write(self, data: bytes) -> None:
        if self.fail_write:
            raise TransportError("write timed out")
        self.writes.append(data)


# ─────────────────────────────────────────────────────────────────────────────
# Time Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def now() -> datetime:
    """A fixed point in time used as the scheduler's "now"."""
    return datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Collaborator Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def static_source() -> StaticCalendarSource:
    return StaticCalendarSource()


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


# ─────────────────────────────────────────────────────────────────────────────
# Config Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def config(tmp_path: Path) -> BusylightConfig:
    """Config pointing all files into a temporary directory."""
    return BusylightConfig(
        calendars={"primary": {"title": "Work"}},
        token_file=str(tmp_path / "token.json"),
        credential_file=str(tmp_path / "credentials.json"),
        log_file=str(tmp_path / "busylightd.log"),
        pid_file=str(tmp_path / "busylightd.pid"),
        device=str(tmp_path / "ttyFAKE"),
    )


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a config mapping to a YAML file and return its path."""

    def _write(data: dict, name: str = "config.yaml") -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.safe_dump(data, f)
        return path

    return _write
