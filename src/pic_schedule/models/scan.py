"""Models for scan results and calendar save results.

- :class:`VisionResponseEvent` -- one item of the JSON array returned by
  the vision model, validated leniently.
- :class:`ScanResult` -- the records derived from one model answer.
- :class:`SaveResult` -- outcome of saving records to the calendar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pic_schedule.models.events import CalendarEventRecord

ScanSource = Literal["json", "text", "placeholder"]


class VisionResponseEvent(BaseModel):
    """A single event object as written by the vision model.

    Every field is optional and unknown keys are ignored; numbers are
    accepted where strings are expected.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: str | None = None
    date: str | None = None
    time: str | None = None
    description: str | None = None


class ScanResult(BaseModel):
    """Records derived from one vision-model answer.

    Attributes:
        text: The raw model answer (empty for placeholder results).
        events: Records with a valid date, in source order.
        all_events: Every record, including those with invalid dates.
        source: How the records were obtained: ``"json"`` (decoded JSON
            array), ``"text"`` (heuristic text extraction) or
            ``"placeholder"`` (inference failed).
        model_used: Model identifier, or ``None``.
        timestamp: When the answer was parsed.
    """

    text: str = ""
    events: list[CalendarEventRecord] = Field(default_factory=list)
    all_events: list[CalendarEventRecord] = Field(default_factory=list)
    source: ScanSource = "json"
    model_used: str | None = None
    timestamp: datetime

    @property
    def invalid_events(self) -> list[CalendarEventRecord]:
        """Records dropped from :attr:`events` because of an invalid date."""
        return [e for e in self.all_events if not e.has_valid_date]

    def to_json_dict(self) -> dict[str, Any]:
        """Return the JSON form used by the CLI and API callers."""
        return {
            "text": self.text,
            "events": [e.to_json_dict() for e in self.events],
            "allEvents": [e.to_json_dict() for e in self.all_events],
            "source": self.source,
            "modelUsed": self.model_used,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class SaveResult:
    """Outcome of saving a batch of records for one user.

    Attributes:
        user: Opaque user identifier (the calendar owner's account).
        saved: Stored rows as returned by the calendar API.
        skipped: Titles of records skipped as duplicates.
        failures: One dict per failed record with ``"event"`` and
            ``"error"`` keys.
    """

    user: str
    saved: list[dict] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    @property
    def saved_count(self) -> int:
        """Number of records stored."""
        return len(self.saved)

    @property
    def has_failures(self) -> bool:
        """Whether any record failed to save."""
        return len(self.failures) > 0
