"""Heuristic event extraction from free-form schedule text.

Turns OCR or vision-model text such as::

    Title: Team Sync
    Date: 04/10/2025
    Time: 14:30
    Details: quarterly planning

into an ordered list of :class:`~pic_schedule.models.events.CalendarEventRecord`.

The extractor is a small state machine.  Each non-blank line is matched
against :data:`LINE_RULES` in order and only the first matching rule is
applied; :func:`step` is a pure function from one
:class:`~pic_schedule.models.events.ExtractorState` to the next.  A new
``title:`` / ``event:`` marker closes the current draft once it has both
a title and a date.  Lines that match no rule are dropped.

:func:`extract_events` never raises and always returns at least one
record: when nothing could be assembled, the whole text becomes the
description of a single fallback record.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from functools import reduce

from pic_schedule.dates import DATE_PATTERN, TIME_PATTERN, normalize_date
from pic_schedule.models.events import CalendarEventRecord, DraftEvent, ExtractorState

logger = logging.getLogger(__name__)

UNTITLED_TITLE = "Untitled Event"
FALLBACK_TITLE = "Extracted Event"

_TITLE_MARKERS = ("title:", "event:")
_DATE_MARKER = "date:"
_TIME_MARKER = "time:"
_DESCRIPTION_MARKERS = ("description:", "details:")


@dataclass(frozen=True)
class LineRule:
    """One entry of the line classification table.

    Attributes:
        name: Short rule name used in logs and tests.
        matches: ``(line, draft) -> bool``; *line* is stripped, matching
            is case-insensitive.
        apply: ``(state, line, now) -> state``.
    """

    name: str
    matches: Callable[[str, DraftEvent], bool]
    apply: Callable[[ExtractorState, str, datetime], ExtractorState]


# ---------------------------------------------------------------------------
# Rule predicates
# ---------------------------------------------------------------------------


def _has_marker(line: str, markers: Iterable[str]) -> bool:
    lowered = line.lower()
    return any(marker in lowered for marker in markers)


def _after_colon(line: str) -> str:
    """Return the trimmed text after the first ``:`` of *line*."""
    _, _, rest = line.partition(":")
    return rest.strip()


def _is_title(line: str, draft: DraftEvent) -> bool:
    return _has_marker(line, _TITLE_MARKERS)


def _is_date(line: str, draft: DraftEvent) -> bool:
    return _has_marker(line, (_DATE_MARKER,)) or DATE_PATTERN.search(line) is not None


def _is_time(line: str, draft: DraftEvent) -> bool:
    return _has_marker(line, (_TIME_MARKER,)) or TIME_PATTERN.search(line) is not None


def _is_description(line: str, draft: DraftEvent) -> bool:
    return _has_marker(line, _DESCRIPTION_MARKERS)


def _is_continuation(line: str, draft: DraftEvent) -> bool:
    return draft.title is not None and draft.description is None


# ---------------------------------------------------------------------------
# Rule transitions
# ---------------------------------------------------------------------------


def _apply_title(state: ExtractorState, line: str, now: datetime) -> ExtractorState:
    draft, events = state.draft, state.events
    if draft.is_complete:
        events = (*events, draft.to_record())
        draft = DraftEvent()
    title = _after_colon(line) or UNTITLED_TITLE
    return ExtractorState(draft=replace(draft, title=title), events=events)


def _apply_date(state: ExtractorState, line: str, now: datetime) -> ExtractorState:
    match = DATE_PATTERN.search(line)
    token = match.group(0) if match else _after_colon(line)
    normalized = normalize_date(token, now)
    if normalized is None:
        logger.debug("Ignoring unparseable date %r in line %r", token, line)
        return state
    return replace(state, draft=replace(state.draft, date=normalized))


def _apply_time(state: ExtractorState, line: str, now: datetime) -> ExtractorState:
    match = TIME_PATTERN.search(line)
    value = match.group(0) if match else _after_colon(line)
    if not value:
        return state
    return replace(state, draft=replace(state.draft, time=value))


def _apply_description(state: ExtractorState, line: str, now: datetime) -> ExtractorState:
    value = _after_colon(line)
    if not value:
        return state
    return replace(state, draft=replace(state.draft, description=value))


def _apply_continuation(state: ExtractorState, line: str, now: datetime) -> ExtractorState:
    return replace(state, draft=replace(state.draft, description=line.strip()))


LINE_RULES: tuple[LineRule, ...] = (
    LineRule("title", _is_title, _apply_title),
    LineRule("date", _is_date, _apply_date),
    LineRule("time", _is_time, _apply_time),
    LineRule("description", _is_description, _apply_description),
    LineRule("continuation", _is_continuation, _apply_continuation),
)
"""Line rules in precedence order; the first match wins."""


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


def classify_line(line: str, draft: DraftEvent) -> LineRule | None:
    """Return the first rule of :data:`LINE_RULES` matching *line*.

    Args:
        line: A stripped, non-blank line.
        draft: The current draft (the continuation rule depends on it).

    Returns:
        The matching :class:`LineRule`, or ``None`` if the line is ignored.
    """
    for rule in LINE_RULES:
        if rule.matches(line, draft):
            return rule
    return None


def step(state: ExtractorState, line: str, now: datetime) -> ExtractorState:
    """Advance the extractor by one line.

    Args:
        state: The state before *line*.
        line: The next input line.  Blank lines leave *state* unchanged.
        now: Reference instant for dates without a year.

    Returns:
        The new state; *state* itself is never modified.
    """
    stripped = line.strip()
    if not stripped:
        return state

    rule = classify_line(stripped, state.draft)
    if rule is None:
        logger.debug("Dropping unclassified line: %r", stripped)
        return state
    return rule.apply(state, stripped, now)


def finish(state: ExtractorState) -> tuple[CalendarEventRecord, ...]:
    """Return the emitted records, including the final draft if complete."""
    if state.draft.is_complete:
        return (*state.events, state.draft.to_record())
    return state.events


def fallback_record(text: str, now: datetime) -> CalendarEventRecord:
    """Build the single record used when no event could be assembled."""
    return CalendarEventRecord(
        title=FALLBACK_TITLE,
        date=now.isoformat(),
        description=text.strip(),
    )


def extract_events(
    text: str,
    now: datetime | None = None,
) -> list[CalendarEventRecord]:
    """Extract calendar events from free-form text.

    Args:
        text: Raw OCR or model output, one field per line.
        now: The parse instant, used for the fallback record's date and for
            written dates without a year.  Defaults to :meth:`datetime.now`.

    Returns:
        A non-empty list of records in the order their titles appeared.
    """
    now = now or datetime.now()
    text = text or ""

    lines = [line for line in text.splitlines() if line.strip()]
    final_state = reduce(lambda state, line: step(state, line, now), lines, ExtractorState())
    events = list(finish(final_state))

    if not events:
        logger.info("No structured events found in %d line(s), using fallback record", len(lines))
        return [fallback_record(text, now)]

    logger.info("Extracted %d event(s) from %d line(s)", len(events), len(lines))
    return events
