"""Console report for a scan.

Renders a :class:`~pic_schedule.pipeline.ScanPipelineResult` as the
review screen of the scan flow: image details, the extracted events, what
happened on the calendar, and a summary.

:func:`format_scan_result` returns the text; :func:`print_scan_result`
writes it to stdout.
"""

from __future__ import annotations

import sys

from pic_schedule.dates import parse_date
from pic_schedule.models.events import CalendarEventRecord
from pic_schedule.pipeline import ScanPipelineResult

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH

_SOURCE_LABELS = {
    "json": "structured model answer",
    "text": "text extraction",
    "placeholder": "example events (AI service unavailable)",
}


def format_scan_result(result: ScanPipelineResult) -> str:
    """Render *result* as a multi-line string."""
    lines: list[str] = [_SEPARATOR, "  PICSCHEDULE: IMAGE TO CALENDAR", _SEPARATOR]

    _append_image(lines, result)
    _append_events(lines, result)
    _append_calendar(lines, result)
    _append_summary(lines, result)
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def print_scan_result(result: ScanPipelineResult) -> None:
    """Format *result* and write it to stdout."""
    sys.stdout.write(format_scan_result(result) + "\n")


def format_record(record: CalendarEventRecord, index: int) -> list[str]:
    """Render one record as indented report lines."""
    lines = [f"  Event {index}: {record.title}", f"    When: {_format_when(record)}"]
    if record.description:
        lines.append(f"    Details: {record.description}")
    return lines


def _append_image(lines: list[str], result: ScanPipelineResult) -> None:
    lines.append("")
    lines.append("--- IMAGE ---")
    lines.append(f"  File: {result.image_path}")
    lines.append(f"  Size: {result.image_size / 1024:.1f} KB")
    if result.scan is not None and result.scan.model_used:
        lines.append(f"  Model: {result.scan.model_used}")


def _append_events(lines: list[str], result: ScanPipelineResult) -> None:
    lines.append("")
    lines.append("--- EVENTS ---")

    scan = result.scan
    if scan is None or not scan.events:
        lines.append(
            "  No events found in the image. Try another image with clearer "
            "event details, or create your event manually."
        )
        return

    lines.append(f"  Found {len(scan.events)} event(s) from {_SOURCE_LABELS[scan.source]}")
    for idx, record in enumerate(scan.events, start=1):
        lines.append("")
        lines.extend(format_record(record, idx))

    for record in scan.invalid_events:
        lines.append(f'  [SKIPPED] "{record.title}" -> unreadable date {record.date!r}')


def _append_calendar(lines: list[str], result: ScanPipelineResult) -> None:
    lines.append("")
    lines.append("--- CALENDAR ---")

    if result.used_placeholders:
        lines.append("  Example events are not saved.")
        return

    if result.dry_run:
        for record in result.scan.events if result.scan else []:
            lines.append(f'  [DRY RUN] Would save "{record.title}"')
        if not (result.scan and result.scan.events):
            lines.append("  Nothing to save.")
        return

    save = result.save
    if save is None:
        lines.append("  Nothing saved.")
        return

    for stored in save.saved:
        lines.append(f'  [SAVED] "{stored.get("summary", "?")}" (ID: {stored.get("id", "?")})')
    for title in save.skipped:
        lines.append(f'  [SKIP] "{title}" -> already on the calendar')
    for failure in save.failures:
        lines.append(f'  [FAILED] "{failure["event"]}" -> Error: {failure["error"]}')


def _append_summary(lines: list[str], result: ScanPipelineResult) -> None:
    lines.append("")
    lines.append("--- SUMMARY ---")
    found = len(result.scan.events) if result.scan else 0
    lines.append(f"  Events found: {found}")
    if result.save is not None:
        lines.append(f"  Saved: {result.save.saved_count}")
        lines.append(f"  Skipped: {len(result.save.skipped)}")
        lines.append(f"  Failed: {len(result.save.failures)}")
    lines.append(f"  Warnings: {len(result.warnings)}")
    for warning in result.warnings:
        lines.append(f"    - {warning}")
    lines.append(f"  Duration: {result.duration_seconds:.1f}s")


def _format_when(record: CalendarEventRecord) -> str:
    """Human-readable date plus the time as written."""
    parsed = parse_date(record.date)
    day = parsed.strftime("%A %Y-%m-%d") if parsed is not None else record.date
    if record.time:
        return f"{day}, {record.time}"
    return f"{day} (all day)"
