"""Placeholder events shown when the vision model is unavailable.

The scan flow never leaves the user empty-handed: if inference fails or
returns nothing, these demo records are offered for review instead, on
the current day so they appear in today's calendar view.
"""

from __future__ import annotations

from datetime import datetime

from pic_schedule.models.events import CalendarEventRecord


def placeholder_events(now: datetime) -> list[CalendarEventRecord]:
    """Return the fixed placeholder record set dated on *now*'s day."""
    day = datetime.combine(now.date(), datetime.min.time()).isoformat()
    return [
        CalendarEventRecord(
            title="Team Meeting",
            date=day,
            time="10:00 AM",
            description="Weekly sync with the development team",
        ),
        CalendarEventRecord(
            title="Lunch with Client",
            date=day,
            time="12:30 PM",
            description="Discussion about new project requirements",
        ),
    ]
