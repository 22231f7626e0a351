"""Google Calendar client used to store reviewed events.

:class:`GoogleCalendarClient` wraps the ``googleapiclient`` service and
adds duplicate detection: an event whose title matches (case-insensitive)
an existing event overlapping the same time is not inserted again, so
re-scanning the same flyer is harmless.  API methods go through
:func:`~pic_schedule.calendar.exceptions.with_retry`.
"""

from __future__ import annotations

import contextlib
import logging
from datetime import datetime, timedelta
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from pic_schedule.calendar.event_mapper import map_to_google_event
from pic_schedule.calendar.exceptions import with_retry
from pic_schedule.models.events import ScheduledEvent

logger = logging.getLogger(__name__)

# Margin around an event when listing candidates for duplicate checks.
_SEARCH_WINDOW = timedelta(hours=24)


class GoogleCalendarClient:
    """Insert and list events on one Google Calendar.

    Args:
        credentials: Valid OAuth 2.0 credentials.
        timezone: IANA timezone applied to timed events.
        calendar_id: Target calendar (default ``"primary"``).
        service: Pre-built ``googleapiclient`` resource; built from
            *credentials* when ``None``.  Tests pass a mock here.
    """

    def __init__(
        self,
        credentials: Credentials,
        timezone: str,
        calendar_id: str = "primary",
        service: Any | None = None,
    ) -> None:
        self._credentials = credentials
        self._timezone = timezone
        self._calendar_id = calendar_id
        self._service = service or build("calendar", "v3", credentials=credentials)

    def _refresh_credentials(self) -> None:
        """Refresh credentials and rebuild the service (used on 401)."""
        from google.auth.transport.requests import Request

        self._credentials.refresh(Request())
        self._service = build("calendar", "v3", credentials=self._credentials)
        logger.info("Credentials refreshed and service rebuilt")

    @with_retry()
    def insert_event(self, event: ScheduledEvent) -> dict | None:
        """Insert *event* unless an equivalent event already exists.

        Args:
            event: The event to store.

        Returns:
            The stored event resource, or ``None`` if it was skipped as a
            duplicate.
        """
        body = map_to_google_event(event, self._timezone)

        existing = self._list_events_raw(
            event.start - _SEARCH_WINDOW, event.end + _SEARCH_WINDOW
        )
        duplicate = find_duplicate(event, existing)
        if duplicate is not None:
            logger.info(
                "Skipping duplicate event '%s' (matches existing id=%s)",
                event.title,
                duplicate.get("id", "?"),
            )
            return None

        created = (
            self._service.events()
            .insert(calendarId=self._calendar_id, body=body)
            .execute()
        )
        logger.info("Created event '%s' (id=%s)", event.title, created.get("id", "?"))
        return created

    @with_retry()
    def list_events(self, time_min: datetime, time_max: datetime) -> list[dict]:
        """List all events between *time_min* and *time_max*, across pages."""
        events = self._list_events_raw(time_min, time_max)
        logger.info(
            "Listed %d event(s) between %s and %s",
            len(events),
            time_min.isoformat(),
            time_max.isoformat(),
        )
        return events

    def _list_events_raw(self, time_min: datetime, time_max: datetime) -> list[dict]:
        """Paginated ``events().list``; callers provide the retry."""
        items: list[dict] = []
        page_token: str | None = None

        while True:
            response = (
                self._service.events()
                .list(
                    calendarId=self._calendar_id,
                    timeMin=time_min.isoformat() + "Z",
                    timeMax=time_max.isoformat() + "Z",
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(response.get("items", []))
            page_token = response.get("nextPageToken")
            if page_token is None:
                return items


def find_duplicate(event: ScheduledEvent, existing_events: list[dict]) -> dict | None:
    """Return the first existing event with the same title and overlapping time.

    Titles are compared case-insensitively.  Adjacent events (one ends
    when the other starts) do not overlap.
    """
    title = event.title.lower()
    for existing in existing_events:
        if existing.get("summary", "").lower() != title:
            continue
        start, end = _parse_event_times(existing)
        if start is None or end is None:
            continue
        if event.start < end and start < event.end:
            return existing
    return None


def _parse_event_times(event_dict: dict) -> tuple[datetime | None, datetime | None]:
    """Read naive start/end datetimes from a Calendar event resource.

    Handles timed (``dateTime``) and all-day (``date``) events; offsets
    are dropped so the values compare with naive :class:`ScheduledEvent`
    bounds.
    """
    bounds: list[datetime | None] = []
    for key in ("start", "end"):
        obj = event_dict.get(key, {})
        raw = obj.get("dateTime") or obj.get("date")
        parsed = None
        if raw is not None:
            with contextlib.suppress(ValueError):
                parsed = datetime.fromisoformat(raw).replace(tzinfo=None)
        bounds.append(parsed)
    return bounds[0], bounds[1]
