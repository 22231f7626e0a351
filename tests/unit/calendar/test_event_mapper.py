"""Tests for mapping scheduled events to Calendar request bodies."""

from __future__ import annotations

from datetime import datetime

import pytest

from pic_schedule.calendar.event_mapper import SOURCE_TAG, map_to_google_event
from pic_schedule.models.events import ScheduledEvent

TIMEZONE = "America/Vancouver"


def test_timed_event(timed_event: ScheduledEvent) -> None:
    body = map_to_google_event(timed_event, TIMEZONE)

    assert body == {
        "summary": "Team Sync",
        "start": {"dateTime": "2025-04-10T14:30:00", "timeZone": TIMEZONE},
        "end": {"dateTime": "2025-04-10T15:30:00", "timeZone": TIMEZONE},
        "description": f"quarterly planning\n\n{SOURCE_TAG}",
    }


def test_all_day_event_uses_dates(all_day_event: ScheduledEvent) -> None:
    body = map_to_google_event(all_day_event, TIMEZONE)

    assert body["start"] == {"date": "2025-04-12"}
    assert body["end"] == {"date": "2025-04-13"}


def test_missing_description_is_just_the_tag(all_day_event: ScheduledEvent) -> None:
    assert map_to_google_event(all_day_event, TIMEZONE)["description"] == SOURCE_TAG


def test_timezone_is_applied() -> None:
    event = ScheduledEvent(
        title="Call",
        start=datetime(2025, 1, 1, 9),
        end=datetime(2025, 1, 1, 10),
    )

    body = map_to_google_event(event, "Europe/Berlin")

    assert body["start"]["timeZone"] == "Europe/Berlin"


@pytest.mark.parametrize("end_hour", [8, 9])
def test_end_not_after_start_raises(end_hour: int) -> None:
    event = ScheduledEvent(
        title="Backwards",
        start=datetime(2025, 1, 1, 9),
        end=datetime(2025, 1, 1, end_hour),
    )

    with pytest.raises(ValueError, match="must be after start"):
        map_to_google_event(event, TIMEZONE)
