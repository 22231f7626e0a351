"""Prompt text for the vision model.

The model is asked for a bare JSON array.  When it answers with prose or
``Title: ...`` lines instead, :mod:`pic_schedule.vision_output` falls back
to heuristic text extraction, so the line labels below are kept in the
same vocabulary the extractor recognises.
"""

from __future__ import annotations

from datetime import datetime

_SCAN_PROMPT_TEMPLATE = """\
Analyze this image and extract any calendar events, appointments, or \
scheduled activities you can find. Look for dates, times, event titles, \
locations, and descriptions.

Today's date is {today}. Use it to complete dates that do not show a year.

Return your response as a JSON array of events in this exact format:
[
  {{
    "title": "Event title",
    "date": "YYYY-MM-DD",
    "time": "HH:MM AM/PM",
    "description": "Event description or location"
  }}
]

If you find multiple events, include them all in the array. If no events \
are found, return an empty array [].
Only return valid JSON - no additional text or explanations.
If you cannot produce JSON, list each event as lines starting with \
"Title:", "Date:", "Time:" and "Details:"."""


def build_scan_prompt(current_datetime: datetime) -> str:
    """Build the instruction sent alongside the image.

    Args:
        current_datetime: The current date/time; its date is included so
            the model can resolve dates printed without a year.

    Returns:
        The prompt text.
    """
    return _SCAN_PROMPT_TEMPLATE.format(
        today=current_datetime.strftime("%A, %Y-%m-%d"),
    )
