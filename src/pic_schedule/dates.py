"""Date and time helpers shared by the extractor and the calendar layer.

Dates are month-first (US style), matching what schedule flyers and the
vision model produce: ``04/10/2025`` is April 10 2025.  Normalized dates
are ISO 8601 strings at midnight (``2025-04-10T00:00:00``); times are kept
as written and only interpreted when an event is sent to the calendar.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, time

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# D/M/Y-like token: 1-2 digit month and day, 2-4 digit year, "/" or "-".
DATE_PATTERN = re.compile(r"\b\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\b")

# H:MM token with a 1-2 digit hour; an attached meridiem ("7:30pm") is allowed.
TIME_PATTERN = re.compile(r"(?<!\d)\d{1,2}:\d{2}(?!\d)")

# A whole-string numeric date; group 1 is the month.
_NUMERIC_DATE_RE = re.compile(r"^(\d{1,2})[-/]\d{1,2}[-/]\d{2,4}$")

_CLOCK_RE = re.compile(
    r"^\s*(\d{1,2})(?::(\d{2}))?\s*([ap])?\.?\s*(?:m\.?)?\s*$",
    re.IGNORECASE,
)


def _midnight(dt: datetime) -> datetime:
    return datetime.combine(dt.date(), time())


def parse_date(value: str | None, now: datetime | None = None) -> datetime | None:
    """Parse a free-form date string into a naive ``datetime`` at midnight.

    Accepts ISO 8601 (``2025-04-10``, ``2025-04-10T09:00:00Z``), numeric
    month-first forms (``04/10/2025``, ``4-10-25``) and written dates
    (``April 10, 2025``).  Numeric forms whose first field is not a month
    (``13/10/2025``) are rejected.  Missing components such as the year are
    taken from *now*.

    Args:
        value: The text to parse.  ``None`` and blank strings give ``None``.
        now: Reference instant for missing components.  Defaults to
            :meth:`datetime.now`.

    Returns:
        The parsed date at midnight, or ``None`` if *value* is not a date.
    """
    if value is None or not value.strip():
        return None

    text = value.strip()
    try:
        return _midnight(dateutil_parser.isoparse(text))
    except (ValueError, OverflowError):
        pass

    numeric = _NUMERIC_DATE_RE.match(text)
    if numeric is not None and not 1 <= int(numeric.group(1)) <= 12:
        # dateutil would silently swap to day-first here.
        logger.debug("Not a month-first date: %r", text)
        return None

    reference = _midnight(now or datetime.now())
    try:
        parsed = dateutil_parser.parse(text, default=reference, dayfirst=False)
    except (ValueError, OverflowError) as exc:
        logger.debug("Not a date: %r (%s)", text, exc)
        return None
    return _midnight(parsed)


def normalize_date(value: str | None, now: datetime | None = None) -> str | None:
    """Return *value* as an ISO 8601 date string, or ``None`` if unparseable."""
    parsed = parse_date(value, now)
    return parsed.isoformat() if parsed is not None else None


def is_valid_date(value: str | None) -> bool:
    """Whether *value* is a parseable ISO 8601 date or datetime."""
    if not value:
        return False
    try:
        dateutil_parser.isoparse(value)
    except (ValueError, OverflowError):
        return False
    return True


def repair_date(value: str | None, now: datetime) -> datetime:
    """Parse an ISO date, substituting *now* when it is invalid.

    Invalid dates are a recovered-locally failure: the sentinel is logged
    at WARNING and never raised.

    Args:
        value: ISO 8601 date string from an event record.
        now: Sentinel used when *value* cannot be parsed.

    Returns:
        A naive ``datetime``; timezone-aware values are converted to naive
        by dropping the offset.
    """
    try:
        parsed = dateutil_parser.isoparse(value or "")
    except (ValueError, OverflowError):
        logger.warning("Invalid event date %r, using %s instead", value, now.isoformat())
        return now
    return parsed.replace(tzinfo=None)


def parse_time(value: str | None) -> time | None:
    """Interpret a clock time such as ``"14:30"``, ``"2:30 PM"`` or ``"9am"``.

    Args:
        value: Time text as written on the event record.

    Returns:
        A :class:`datetime.time`, or ``None`` when *value* is missing or is
        not a clock time (``"noon"``, ``"25:00"``, ``"all day"``).
    """
    if not value:
        return None

    match = _CLOCK_RE.match(value)
    if match is None:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower()

    if match.group(2) is None and not meridiem:
        # A bare number is not a time.
        return None

    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if meridiem == "p" else 0)

    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)
