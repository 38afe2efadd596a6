"""Google Calendar client producing raw timeline events for a single day."""

from __future__ import annotations

import logging
import time
from datetime import date, datetime, time as time_, timedelta
from typing import Callable, List, Mapping, MutableMapping, Optional, Sequence

from google.auth.credentials import Credentials
from google.auth.exceptions import TransportError
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError
from zoneinfo import ZoneInfo

from ..layout import RawEvent

logger = logging.getLogger(__name__)

# Google Calendar's fixed event palette, keyed by ``colorId``.
EVENT_COLORS: Mapping[str, str] = {
    "1": "#a4bdfc",
    "2": "#7ae7bf",
    "3": "#dbadff",
    "4": "#ff887c",
    "5": "#fbd75b",
    "6": "#ffb878",
    "7": "#46d6db",
    "8": "#e1e1e1",
    "9": "#5484ed",
    "10": "#51b749",
    "11": "#dc2127",
}


class CalendarApiError(RuntimeError):
    """Raised when the Google Calendar API repeatedly fails."""


class GoogleCalendarClient:
    """Client wrapper around the Google Calendar API."""

    def __init__(
        self,
        credentials: Optional[Credentials],
        calendar_ids: Sequence[str],
        timezone: str | ZoneInfo,
        *,
        service: Optional[Resource] = None,
        max_retries: int = 3,
        retry_initial_delay: float = 1.0,
        retry_backoff: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Google API credentials used to authenticate requests. Ignored when
                ``service`` is provided.
            calendar_ids: Google Calendar identifiers to fetch events from.
            timezone: IANA timezone name or ``ZoneInfo`` instance defining which day is fetched.
            service: Pre-built Google API service (primarily for testing).
            max_retries: Maximum number of retries for API calls.
            retry_initial_delay: Base delay before the first retry (seconds).
            retry_backoff: Multiplier applied to the delay after each retry.
            sleep: Sleep function used between retries (primarily for testing).
        """
        if not calendar_ids:
            raise ValueError("At least one calendar ID must be provided.")

        self.calendar_ids: List[str] = list(calendar_ids)
        self.timezone = timezone if isinstance(timezone, ZoneInfo) else ZoneInfo(str(timezone))
        self.max_retries = max_retries
        self.retry_initial_delay = retry_initial_delay
        self.retry_backoff = retry_backoff
        self._sleep = sleep

        if service is not None:
            self._service = service
        else:
            if credentials is None:
                raise ValueError("Credentials must be provided when service is not injected.")
            self._service = build("calendar", "v3", credentials=credentials, cache_discovery=False)

    def fetch_day_events(
        self,
        day: Optional[date] = None,
        *,
        now: Optional[datetime] = None,
    ) -> List[RawEvent]:
        """Return raw events for ``day`` (today in the configured timezone by default).

        Timestamps are passed through as the API reports them, so malformed
        values reach the packer and degrade there instead of failing the fetch.
        """
        if day is None:
            reference = now.astimezone(self.timezone) if now is not None else datetime.now(tz=self.timezone)
            day = reference.date()
        start_of_day = datetime.combine(day, time_.min, tzinfo=self.timezone)
        end_of_day = start_of_day + timedelta(days=1)

        events: List[RawEvent] = []
        for calendar_id in self.calendar_ids:
            events.extend(self._fetch_events_for_calendar(calendar_id, start_of_day, end_of_day))
        return events

    # ------------------------------------------------------------------
    def _fetch_events_for_calendar(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
    ) -> List[RawEvent]:
        def execute_request() -> Mapping[str, object]:
            request = (
                self._service.events()
                .list(
                    calendarId=calendar_id,
                    timeMin=start.isoformat(),
                    timeMax=end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    timeZone=self._timezone_name,
                )
            )
            return request.execute()

        response = self._execute_with_backoff(execute_request)
        items = response.get("items", []) if isinstance(response, MutableMapping) else []
        normalized: List[RawEvent] = []
        for item in items:
            if not isinstance(item, Mapping):
                logger.warning("Skipping malformed event payload from calendar %s", calendar_id)
                continue
            if item.get("status") == "cancelled":
                continue
            normalized.append(self._normalize_event(item))
        logger.debug("Fetched %d events from calendar %s", len(normalized), calendar_id)
        return normalized

    def _normalize_event(self, event: Mapping[str, object]) -> RawEvent:
        title = str(event.get("summary") or "Untitled Event")
        summary = event.get("location") or event.get("description")
        color_id = event.get("colorId")

        return RawEvent(
            start=self._extract_time_info(event.get("start")),
            end=self._extract_time_info(event.get("end")),
            title=title,
            summary=str(summary) if summary is not None else None,
            color=EVENT_COLORS.get(str(color_id)) if color_id is not None else None,
            disabled=self._is_disabled(event),
        )

    def _extract_time_info(self, value: object) -> Optional[str]:
        if not isinstance(value, Mapping):
            return None
        if "dateTime" in value:
            return str(value["dateTime"])
        if "date" in value:
            try:
                dt_date = date.fromisoformat(str(value["date"]))
            except ValueError:
                return str(value["date"])
            return datetime.combine(dt_date, time_.min).isoformat()
        return None

    @staticmethod
    def _is_disabled(event: Mapping[str, object]) -> bool:
        if event.get("transparency") == "transparent":
            return True
        attendees = event.get("attendees")
        if isinstance(attendees, list):
            for attendee in attendees:
                if isinstance(attendee, Mapping) and attendee.get("self"):
                    return attendee.get("responseStatus") == "declined"
        return False

    @property
    def _timezone_name(self) -> str:
        return getattr(self.timezone, "key", str(self.timezone))

    def _execute_with_backoff(self, func: Callable[[], Mapping[str, object]]) -> Mapping[str, object]:
        attempt = 0
        delay = self.retry_initial_delay
        while True:
            try:
                return func()
            except (HttpError, TransportError, TimeoutError) as exc:
                attempt += 1
                if attempt > self.max_retries:
                    raise CalendarApiError("Google Calendar API request failed after retries.") from exc
                logger.warning(
                    "Google Calendar API request failed (attempt %d/%d): %s", attempt, self.max_retries, exc
                )
                self._sleep(delay)
                delay *= self.retry_backoff


__all__ = ["EVENT_COLORS", "GoogleCalendarClient", "CalendarApiError"]
