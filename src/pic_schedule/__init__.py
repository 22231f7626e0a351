"""pic-schedule: photos of schedules to calendar events.

Reads events off an image with a vision model, turns the answer into
event records (with a heuristic text extractor as fallback) and saves
them to Google Calendar.
"""

from __future__ import annotations

from pic_schedule.exceptions import (
    InferenceConfigError,
    InferenceConnectionError,
    InferenceError,
    InferenceServiceError,
    InferenceTimeoutError,
    InvalidImageError,
)
from pic_schedule.extractor import extract_events
from pic_schedule.models.events import (
    CalendarEventRecord,
    DraftEvent,
    ExtractorState,
    ScheduledEvent,
)
from pic_schedule.models.scan import SaveResult, ScanResult
from pic_schedule.vision_output import parse_vision_response

__version__ = "0.1.0"

__all__ = [
    "CalendarEventRecord",
    "DraftEvent",
    "ExtractorState",
    "InferenceConfigError",
    "InferenceConnectionError",
    "InferenceError",
    "InferenceServiceError",
    "InferenceTimeoutError",
    "InvalidImageError",
    "SaveResult",
    "ScanResult",
    "ScheduledEvent",
    "extract_events",
    "parse_vision_response",
]
