"""Data models for pic-schedule."""

from __future__ import annotations

from pic_schedule.models.events import (
    CalendarEventRecord,
    DraftEvent,
    ExtractorState,
    ScheduledEvent,
)
from pic_schedule.models.scan import SaveResult, ScanResult, VisionResponseEvent

__all__ = [
    "CalendarEventRecord",
    "DraftEvent",
    "ExtractorState",
    "SaveResult",
    "ScanResult",
    "ScheduledEvent",
    "VisionResponseEvent",
]
