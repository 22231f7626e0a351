"""Map scheduled events to Google Calendar request bodies.

Timed events use ``dateTime`` plus the configured IANA timezone; all-day
events use ``date`` with an exclusive end date, as the Calendar API
expects.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pic_schedule.models.events import ScheduledEvent

logger = logging.getLogger(__name__)

SOURCE_TAG = "Added by PicSchedule"


def map_to_google_event(event: ScheduledEvent, timezone: str) -> dict:
    """Convert a :class:`ScheduledEvent` into a Calendar ``Event`` body.

    Args:
        event: The event to send.
        timezone: IANA timezone for timed events (e.g.
            ``"America/Vancouver"``).

    Returns:
        A dict ready for ``events().insert()``.

    Raises:
        ValueError: If the event ends before or when it starts.
    """
    if event.end <= event.start:
        raise ValueError(
            f"end ({event.end.isoformat()}) must be after start ({event.start.isoformat()})"
        )

    if event.all_day:
        start = {"date": event.start.date().isoformat()}
        end = {"date": event.end.date().isoformat()}
    else:
        start = _format_datetime(event.start, timezone)
        end = _format_datetime(event.end, timezone)

    description = SOURCE_TAG
    if event.description:
        description = f"{event.description}\n\n{SOURCE_TAG}"

    body = {
        "summary": event.title,
        "start": start,
        "end": end,
        "description": description,
    }
    logger.debug("Mapped '%s' to calendar body: %s", event.title, body)
    return body


def _format_datetime(dt: datetime, timezone: str) -> dict:
    return {"dateTime": dt.isoformat(), "timeZone": timezone}
