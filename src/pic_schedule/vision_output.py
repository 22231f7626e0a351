"""Parse vision-model answers into event records.

The model is asked for a JSON array of ``{title, date, time, description}``
objects, but answers vary: the array may be wrapped in Markdown fences or
prose, or the model may fall back to plain ``Title: ...`` lines.  JSON is
tried first; anything that does not decode to a list of objects goes
through the heuristic :func:`~pic_schedule.extractor.extract_events`.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime

from pydantic import ValidationError

from pic_schedule.dates import normalize_date
from pic_schedule.extractor import UNTITLED_TITLE, extract_events
from pic_schedule.models.events import CalendarEventRecord
from pic_schedule.models.scan import ScanResult, VisionResponseEvent

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class _NotAnEventArray(ValueError):
    """The answer does not contain a usable JSON array of events."""


def parse_vision_response(
    raw: str,
    now: datetime,
    model_used: str | None = None,
) -> ScanResult:
    """Turn a raw model answer into a :class:`ScanResult`.

    Args:
        raw: The text returned by the vision model.
        now: Parse instant, used for dates without a year and for the
            extractor's fallback record.
        model_used: Model identifier recorded on the result.

    Returns:
        A :class:`ScanResult` whose ``events`` hold the records with valid
        dates and whose ``all_events`` hold every record.
    """
    try:
        records = _records_from_json(raw, now)
        source = "json"
    except _NotAnEventArray as exc:
        logger.info("Model answer is not a JSON event array (%s), extracting from text", exc)
        records = extract_events(raw, now)
        source = "text"

    valid = [r for r in records if r.has_valid_date]
    if len(valid) < len(records):
        logger.warning(
            "Dropping %d event(s) with invalid dates", len(records) - len(valid)
        )

    return ScanResult(
        text=raw,
        events=valid,
        all_events=records,
        source=source,
        model_used=model_used,
        timestamp=now,
    )


def strip_code_fences(raw: str) -> str:
    """Remove Markdown code fences (```` ```json ```` and ```` ``` ````)."""
    return _FENCE_RE.sub("", raw.strip())


def _records_from_json(raw: str, now: datetime) -> list[CalendarEventRecord]:
    cleaned = strip_code_fences(raw or "")
    match = _ARRAY_RE.search(cleaned)
    if match is None:
        raise _NotAnEventArray("no JSON array found")

    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise _NotAnEventArray(f"invalid JSON: {exc}") from exc

    if not isinstance(items, list):
        raise _NotAnEventArray("JSON value is not an array")

    records: list[CalendarEventRecord] = []
    for index, item in enumerate(items):
        try:
            event = VisionResponseEvent.model_validate(item)
        except ValidationError as exc:
            raise _NotAnEventArray(f"item {index} is not an event object") from exc
        records.append(_to_record(event, now))
    return records


def _to_record(event: VisionResponseEvent, now: datetime) -> CalendarEventRecord:
    title = (event.title or "").strip() or UNTITLED_TITLE
    raw_date = (event.date or "").strip()
    date = normalize_date(raw_date, now) or raw_date
    return CalendarEventRecord(
        title=title,
        date=date,
        time=(event.time or "").strip() or None,
        description=(event.description or "").strip() or None,
    )
