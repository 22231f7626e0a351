"""Save reviewed event records to the user's calendar.

:func:`save_events` is the persistence boundary of the scan flow: it takes
the ordered records plus the user identifier and returns the stored rows.
One failing record does not stop the rest of the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from pic_schedule.calendar.client import GoogleCalendarClient
from pic_schedule.models.events import CalendarEventRecord, ScheduledEvent
from pic_schedule.models.scan import SaveResult

logger = logging.getLogger(__name__)


def save_events(
    records: Sequence[CalendarEventRecord],
    client: GoogleCalendarClient,
    user: str,
    now: datetime | None = None,
) -> SaveResult:
    """Store *records* on the calendar behind *client*.

    Each record is converted with :meth:`ScheduledEvent.from_record`, so a
    record with an invalid date is saved on *now*'s day rather than
    rejected.

    Args:
        records: Records to store, in order.
        client: Calendar client authenticated as *user*.
        user: Opaque user identifier recorded on the result.
        now: Sentinel for invalid dates.  Defaults to :meth:`datetime.now`.

    Returns:
        A :class:`SaveResult` with the stored rows, skipped duplicates and
        per-record failures.
    """
    now = now or datetime.now()
    result = SaveResult(user=user)

    logger.info("Saving %d event(s) for %s", len(records), user)

    for record in records:
        try:
            stored = client.insert_event(ScheduledEvent.from_record(record, now))
        except Exception as exc:
            logger.error("Failed to save event '%s': %s", record.title, exc)
            result.failures.append({"event": record.title, "error": str(exc)})
            continue

        if stored is None:
            result.skipped.append(record.title)
        else:
            result.saved.append(stored)

    logger.info(
        "Save complete: %d saved, %d skipped, %d failure(s)",
        result.saved_count,
        len(result.skipped),
        len(result.failures),
    )
    return result
