"""Event models shared by the extractor, the parsers and the calendar layer.

- :class:`DraftEvent` -- partially populated event built while scanning
  text (stdlib frozen dataclass, replaced rather than mutated).
- :class:`ExtractorState` -- the extractor's state between two lines.
- :class:`CalendarEventRecord` -- an extracted event as shown to the user
  and sent to storage (date as an ISO 8601 string, time verbatim).
- :class:`ScheduledEvent` -- calendar-ready event with real ``datetime``
  bounds, built from a record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pic_schedule.dates import is_valid_date, parse_time, repair_date

_DEFAULT_DURATION = timedelta(hours=1)


# ---------------------------------------------------------------------------
# CalendarEventRecord
# ---------------------------------------------------------------------------


class CalendarEventRecord(BaseModel):
    """A single extracted calendar event.

    Attributes:
        title: Event title; never empty.
        date: ISO 8601 date string (``2025-04-10T00:00:00``).  Records
            decoded from a model answer may carry an unparseable value
            here; see :attr:`has_valid_date`.
        time: Time as written in the source (``"14:30"``, ``"2:30 PM"``),
            or ``None``.
        description: Free-text details, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    date: str
    time: str | None = None
    description: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be empty")
        return value

    @property
    def has_valid_date(self) -> bool:
        """Whether :attr:`date` parses as ISO 8601."""
        return is_valid_date(self.date)

    def to_json_dict(self) -> dict[str, Any]:
        """Return the JSON form, omitting unset optional fields."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Extractor accumulator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DraftEvent:
    """An event under construction during a single extraction pass.

    Attributes:
        title: Title text, or ``None`` until a title marker is seen.
        date: Normalized ISO 8601 date, or ``None``.
        time: Time text as found, or ``None``.
        description: Description text, or ``None``.
    """

    title: str | None = None
    date: str | None = None
    time: str | None = None
    description: str | None = None

    @property
    def is_complete(self) -> bool:
        """A draft can be emitted once it has both a title and a date."""
        return bool(self.title) and bool(self.date)

    def to_record(self) -> CalendarEventRecord:
        """Freeze the draft into a :class:`CalendarEventRecord`.

        Raises:
            ValueError: If the draft is not complete.
        """
        if not self.is_complete:
            raise ValueError("Draft event needs a title and a date")
        return CalendarEventRecord(
            title=self.title,
            date=self.date,
            time=self.time,
            description=self.description,
        )


@dataclass(frozen=True)
class ExtractorState:
    """Extractor state between two lines.

    Attributes:
        draft: The event currently being assembled.
        events: Records emitted so far, in input order.
    """

    draft: DraftEvent = field(default_factory=DraftEvent)
    events: tuple[CalendarEventRecord, ...] = ()


# ---------------------------------------------------------------------------
# ScheduledEvent -- calendar-ready
# ---------------------------------------------------------------------------


class ScheduledEvent(BaseModel):
    """A calendar event with resolved start and end.

    Attributes:
        title: Event title.
        start: Start of the event (midnight for all-day events).
        end: End of the event.  All-day events end at midnight of the
            following day; timed events default to one hour.
        all_day: ``True`` when the record had no usable time.
        description: Event description, or ``None``.
    """

    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    description: str | None = None

    @classmethod
    def from_record(
        cls,
        record: CalendarEventRecord,
        now: datetime,
    ) -> ScheduledEvent:
        """Build a :class:`ScheduledEvent` from an extracted record.

        An invalid record date is replaced by *now* (logged, not raised).
        A time that reads as a clock time gives a one-hour event; anything
        else gives an all-day event.

        Args:
            record: The extracted record.
            now: Sentinel date for records whose date does not parse.

        Returns:
            The calendar-ready event.
        """
        day = repair_date(record.date, now).date()
        clock = parse_time(record.time)

        if clock is None:
            start = datetime.combine(day, datetime.min.time())
            return cls(
                title=record.title,
                start=start,
                end=start + timedelta(days=1),
                all_day=True,
                description=record.description,
            )

        start = datetime.combine(day, clock)
        return cls(
            title=record.title,
            start=start,
            end=start + _DEFAULT_DURATION,
            all_day=False,
            description=record.description,
        )
