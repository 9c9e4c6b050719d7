"""
Tool: Daemon Configuration
Purpose: Load and validate the busylight configuration file

The file is YAML (plain JSON works too, being a YAML subset). It is read at
startup and again whenever the daemon is re-activated. The log destination and
PID file are fixed by the first load: later changes to them are reported and
ignored until the daemon is restarted.

Example (~/.busylight/config.yaml):
    calendars:
      primary:
        title: Work
      team@group.calendar.google.com:
        title: Team
        ignore_all_day_events: true
    token_file: ~/.busylight/token.json
    credential_file: ~/.busylight/credentials.json
    log_file: ~/.busylight/busylightd.log
    pid_file: ~/.busylight/busylightd.pid
    device_dir: /dev
    device_regexp: ^cu\\.usbmodem
    baud_rate: 9600
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from busylight import DEFAULT_CONFIG_PATH
from busylight.errors import ConfigError
from busylight.hardware import DEFAULT_BAUD_RATE, DEFAULT_WRITE_TIMEOUT

logger = logging.getLogger(__name__)

# Fields that only take effect on a full restart
FROZEN_FIELDS = ("log_file", "pid_file")


class CalendarSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    title: str = Field(default="")
    ignore_all_day_events: bool = Field(default=False)


class BusylightConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    calendars: dict[str, CalendarSettings] = Field(default_factory=dict)
    token_file: str = Field(default="~/.busylight/token.json")
    credential_file: str = Field(default="~/.busylight/credentials.json")
    log_file: str = Field(default="~/.busylight/busylightd.log")
    pid_file: str = Field(default="~/.busylight/busylightd.pid")

    device: str = Field(default="")
    device_dir: str = Field(default="/dev")
    device_regexp: str = Field(default="")
    baud_rate: int = Field(default=DEFAULT_BAUD_RATE, ge=1)
    write_timeout_seconds: float = Field(default=DEFAULT_WRITE_TIMEOUT, gt=0)

    refresh_interval_minutes: float = Field(default=60, gt=0)
    lookahead_hours: float = Field(default=8, gt=0)
    guard_margin_seconds: float = Field(default=5, ge=0)
    stale_after_minutes: float = Field(default=30, ge=0)
    query_timeout_seconds: float = Field(default=30, gt=0)
    log_level: str = Field(default="INFO")

    def calendar_title(self, calendar_id: str) -> str:
        settings = self.calendars.get(calendar_id)
        if settings is None:
            return f"UNKNOWN<{calendar_id}>"
        return settings.title or calendar_id

    @property
    def refresh_interval(self) -> timedelta:
        return timedelta(minutes=self.refresh_interval_minutes)

    @property
    def lookahead(self) -> timedelta:
        return timedelta(hours=self.lookahead_hours)

    @property
    def guard_margin(self) -> timedelta:
        return timedelta(seconds=self.guard_margin_seconds)

    @property
    def stale_after(self) -> timedelta:
        return timedelta(minutes=self.stale_after_minutes)

    def path(self, field_name: str) -> Path:
        """Return a path-valued field with `~` expanded."""
        return Path(getattr(self, field_name)).expanduser()


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get("BUSYLIGHT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: str | Path | None = None) -> BusylightConfig:
    """
    Read and validate the configuration file.

    Raises:
        ConfigError: the file is missing, unreadable or invalid
    """
    config_path = resolve_config_path(path)

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Unable to read from {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Unable to understand {config_path} configuration: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Unable to understand {config_path} configuration: expected a mapping")

    try:
        return BusylightConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def reload_config(previous: BusylightConfig, path: str | Path | None = None) -> BusylightConfig:
    """
    Re-read the configuration, keeping the frozen fields from `previous`.

    Raises:
        ConfigError: as for load_config
    """
    fresh = load_config(path)
    kept = {}
    for name in FROZEN_FIELDS:
        old_value = getattr(previous, name)
        new_value = getattr(fresh, name)
        if old_value != new_value:
            logger.warning(
                f"{name} changed from {old_value} to {new_value} on reload. "
                "This requires a full restart of the daemon. Ignoring the change for now."
            )
            kept[name] = old_value
    if kept:
        fresh = fresh.model_copy(update=kept)
    return fresh


__all__ = [
    "FROZEN_FIELDS",
    "BusylightConfig",
    "CalendarSettings",
    "load_config",
    "reload_config",
    "resolve_config_path",
]
