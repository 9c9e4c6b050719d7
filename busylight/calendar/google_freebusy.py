"""
Tool: Google Free/Busy Source
Purpose: Query Google Calendar free/busy windows for the monitored calendars

Reads the OAuth client secrets and the cached token written by a prior
authorization. An expired access token is refreshed with the stored refresh
token and the refreshed token is written back to the cache.

Usage:
    from busylight.calendar.google_freebusy import GoogleFreeBusySource

    source = GoogleFreeBusySource(config)
    source.check_credentials()
    result = await source.query(["primary"], start, end)

Dependencies:
    - aiohttp (pip install aiohttp)
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import aiohttp

from busylight.calendar import FREEBUSY_URL, GOOGLE_TOKEN_URL
from busylight.calendar.base import CalendarQueryResult, CalendarSource, drop_full_window_periods
from busylight.daemon.config import BusylightConfig
from busylight.errors import CalendarQueryError, ConfigError
from busylight.schedule.models import BusyPeriod

logger = logging.getLogger(__name__)

# Refresh the access token this long before it actually expires
TOKEN_EXPIRY_SLACK = timedelta(seconds=60)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. Naive results are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def parse_freebusy_response(
    data: dict[str, Any],
    config: BusylightConfig,
    window_start: datetime,
    window_end: datetime,
) -> CalendarQueryResult:
    """
    Convert a freeBusy API response into a CalendarQueryResult.

    Periods with unparseable timestamps are dropped with a warning. Calendars
    flagged `ignore_all_day_events` lose any period covering the whole window.
    """
    result = CalendarQueryResult()

    for calendar_id, calendar_data in (data.get("calendars") or {}).items():
        if calendar_id not in config.calendars:
            logger.warning(
                f"Calendar <{calendar_id}> in API results does not match any in our configuration!"
            )
        title = config.calendar_title(calendar_id)
        settings = config.calendars.get(calendar_id)

        errors = [
            f"{err.get('domain', 'unknown')}: {err.get('reason', 'unknown')}"
            for err in calendar_data.get("errors") or []
        ]
        if errors:
            result.errors[calendar_id] = errors

        periods = []
        for busy in calendar_data.get("busy") or []:
            try:
                start = parse_timestamp(busy["start"])
                end = parse_timestamp(busy["end"])
                period = BusyPeriod(start, end)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"{title}: Unable to parse busy period {busy!r}: {e}")
                continue
            logger.info(f'Calendar "{title}": busy {period}')
            periods.append(period)

        if settings is not None and settings.ignore_all_day_events:
            periods = drop_full_window_periods(periods, window_start, window_end, title)

        result.busy[calendar_id] = periods

    return result


class GoogleFreeBusySource(CalendarSource):
    """CalendarSource backed by the Google Calendar freeBusy endpoint."""

    def __init__(self, config: BusylightConfig):
        self.config = config
        self._token: dict[str, Any] | None = None

    # =========================================================================
    # Credentials
    # =========================================================================

    def _load_client_secrets(self) -> dict[str, str]:
        path = self.config.path("credential_file")
        try:
            with open(path) as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Unable to read client secret file {path}: {e}") from e

        secrets = raw.get("installed") or raw.get("web") or raw
        if not secrets.get("client_id") or not secrets.get("client_secret"):
            raise ConfigError(f"Client secret file {path} has no client_id/client_secret")
        return {
            "client_id": secrets["client_id"],
            "client_secret": secrets["client_secret"],
            "token_uri": secrets.get("token_uri") or GOOGLE_TOKEN_URL,
        }

    def _load_token(self) -> dict[str, Any]:
        path = self.config.path("token_file")
        try:
            with open(path) as f:
                token = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Unable to read token file {path}: {e}") from e

        # Accept both Go oauth2 ("access_token") and google-auth ("token") caches
        if "access_token" not in token and "token" in token:
            token["access_token"] = token["token"]
        return token

    def _save_token(self, token: dict[str, Any]) -> None:
        path = self.config.path("token_file")
        try:
            with open(path, "w") as f:
                json.dump(token, f, indent=2)
        except OSError as e:
            logger.warning(f"Unable to update token cache {path}: {e}")

    def check_credentials(self) -> None:
        """
        Make sure the client secrets and token cache are readable.

        Raises:
            ConfigError: either file is missing or malformed
        """
        self._load_client_secrets()
        self._token = self._load_token()

    def _token_expired(self, token: dict[str, Any], now: datetime) -> bool:
        expiry = token.get("expiry")
        if not expiry:
            return False
        try:
            return parse_timestamp(expiry) <= now + TOKEN_EXPIRY_SLACK
        except ValueError:
            return True

    async def _refresh_token(self, session: aiohttp.ClientSession, token: dict[str, Any]) -> dict[str, Any]:
        refresh_token = token.get("refresh_token")
        if not refresh_token:
            raise CalendarQueryError("Access token expired and no refresh token is cached")

        try:
            secrets = self._load_client_secrets()
        except ConfigError as e:
            raise CalendarQueryError(str(e)) from e

        data = {
            "client_id": secrets["client_id"],
            "client_secret": secrets["client_secret"],
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        async with session.post(secrets["token_uri"], data=data) as resp:
            payload = await self._read_json(resp)
            if resp.status != 200 or "access_token" not in payload:
                raise CalendarQueryError(f"Token refresh failed: HTTP {resp.status} {payload.get('error', '')}")

        expires_in = int(payload.get("expires_in", 3600))
        token = {
            **token,
            "access_token": payload["access_token"],
            "token_type": payload.get("token_type", "Bearer"),
            "expiry": format_timestamp(datetime.now(timezone.utc) + timedelta(seconds=expires_in)),
        }
        token.pop("token", None)
        self._save_token(token)
        logger.info("Refreshed Google access token")
        return token

    async def _access_token(self, session: aiohttp.ClientSession) -> str:
        if self._token is None:
            try:
                self._token = self._load_token()
            except ConfigError as e:
                raise CalendarQueryError(str(e)) from e

        if self._token_expired(self._token, datetime.now(timezone.utc)):
            self._token = await self._refresh_token(session, self._token)

        return self._token["access_token"]

    # =========================================================================
    # Query
    # =========================================================================

    @staticmethod
    async def _read_json(resp: aiohttp.ClientResponse) -> dict[str, Any]:
        try:
            data = await resp.json(content_type=None)
        except (aiohttp.ContentTypeError, json.JSONDecodeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    async def query(
        self,
        calendar_ids: Iterable[str],
        window_start: datetime,
        window_end: datetime,
    ) -> CalendarQueryResult:
        body = {
            "timeMin": format_timestamp(window_start),
            "timeMax": format_timestamp(window_end),
            "items": [{"id": calendar_id} for calendar_id in calendar_ids],
        }
        timeout = aiohttp.ClientTimeout(total=self.config.query_timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                access_token = await self._access_token(session)
                headers = {
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json",
                }
                async with session.post(FREEBUSY_URL, json=body, headers=headers) as resp:
                    data = await self._read_json(resp)
                    if resp.status == 401:
                        # Force a refresh on the next attempt
                        self._token = {**(self._token or {}), "expiry": format_timestamp(window_start)}
                        raise CalendarQueryError("Authentication failed - token may be expired")
                    if resp.status != 200:
                        error = data.get("error")
                        message = error.get("message") if isinstance(error, dict) else error
                        message = message or f"HTTP {resp.status}"
                        raise CalendarQueryError(f"freeBusy query failed: {message}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CalendarQueryError(f"freeBusy request failed: {e!s}") from e

        return parse_freebusy_response(data, self.config, window_start, window_end)


__all__ = [
    "GoogleFreeBusySource",
    "format_timestamp",
    "parse_freebusy_response",
    "parse_timestamp",
]
