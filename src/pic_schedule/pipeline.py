"""Pipeline orchestrator for the image-to-calendar workflow.

Wires the components together: image loading, the vision model, answer
parsing and calendar storage.  :func:`run_scan` returns a
:class:`ScanPipelineResult` for :mod:`pic_schedule.report` to render.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pic_schedule.calendar.auth import get_calendar_credentials
from pic_schedule.calendar.client import GoogleCalendarClient
from pic_schedule.calendar.exceptions import CalendarAPIError
from pic_schedule.calendar.store import save_events
from pic_schedule.config import Settings, load_settings
from pic_schedule.exceptions import InferenceError, describe_failure
from pic_schedule.images import ImagePayload, load_image
from pic_schedule.models.scan import SaveResult, ScanResult
from pic_schedule.placeholders import placeholder_events
from pic_schedule.vision import GeminiVisionClient
from pic_schedule.vision_output import parse_vision_response

logger = logging.getLogger(__name__)


@dataclass
class ScanPipelineResult:
    """Aggregated result of one scan.

    Attributes:
        image_path: The scanned image.
        image_size: Image size in bytes.
        scan: Records derived from the model answer (or placeholders).
        save: Calendar save outcome, or ``None`` when nothing was saved
            (dry run, no events, placeholders, or calendar unavailable).
        warnings: Non-fatal problems, already phrased for the user.
        duration_seconds: Wall-clock time of the whole run.
        dry_run: Whether saving was skipped on request.
    """

    image_path: Path
    image_size: int = 0
    scan: ScanResult | None = None
    save: SaveResult | None = None
    warnings: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    dry_run: bool = False

    @property
    def used_placeholders(self) -> bool:
        return self.scan is not None and self.scan.source == "placeholder"


def run_scan(
    image_path: Path | str,
    dry_run: bool = False,
    current_datetime: datetime | None = None,
    settings: Settings | None = None,
) -> ScanPipelineResult:
    """Scan an image for events and save them to the calendar.

    1. **Load** the image (type and size checks).
    2. **Read** it with the vision model.  Inference failures and empty
       answers are not fatal: a warning is recorded and the placeholder
       events are used instead.
    3. **Parse** the answer into event records.
    4. **Save** the records with valid dates, unless *dry_run*, there are
       none, or they are placeholders.

    Args:
        image_path: Image file to scan.
        dry_run: If ``True``, stop after parsing.
        current_datetime: Override for "now" (tests).  Defaults to
            :meth:`datetime.now`.
        settings: Settings to use; loaded from the environment if ``None``.

    Returns:
        A :class:`ScanPipelineResult`.

    Raises:
        FileNotFoundError: If *image_path* does not exist.
        InvalidImageError: If the image is unsupported or too large.
        ConfigError: If *settings* is ``None`` and the environment is
            incomplete.
    """
    started = time.monotonic()
    now = current_datetime or datetime.now()
    settings = settings or load_settings()

    result = ScanPipelineResult(image_path=Path(image_path), dry_run=dry_run)

    # ------------------------------------------------------------------
    # Stage 1: Load image
    # ------------------------------------------------------------------
    logger.info("Stage 1: Loading image %s", image_path)
    image = load_image(image_path)
    result.image_size = image.size

    # ------------------------------------------------------------------
    # Stages 2-3: Read and parse
    # ------------------------------------------------------------------
    logger.info("Stage 2: Reading image with %s", settings.gemini_model)
    result.scan = _read_and_parse(image, settings, now, result.warnings)

    if result.scan.invalid_events:
        result.warnings.append(
            f"{len(result.scan.invalid_events)} event(s) had an unreadable date "
            "and were left out"
        )

    logger.info(
        "Stage 3 complete: %d event(s) ready (source=%s)",
        len(result.scan.events),
        result.scan.source,
    )

    # ------------------------------------------------------------------
    # Stage 4: Save
    # ------------------------------------------------------------------
    if dry_run:
        logger.info("Stage 4: Dry-run mode -- skipping calendar save")
    elif not result.scan.events:
        logger.info("Stage 4: No events to save")
    elif result.used_placeholders:
        logger.info("Stage 4: Placeholder events are not saved")
    else:
        result.save = _save(result.scan, settings, now, result.warnings)

    result.duration_seconds = time.monotonic() - started
    logger.info("Scan complete in %.1fs", result.duration_seconds)
    return result


def _read_and_parse(
    image: ImagePayload,
    settings: Settings,
    now: datetime,
    warnings: list[str],
) -> ScanResult:
    """Run the vision model and parse its answer, degrading to placeholders."""
    try:
        client = GeminiVisionClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout_seconds=settings.inference_timeout_seconds,
        )
        raw = client.read_image(image, now)
    except InferenceError as exc:
        logger.error("Vision inference failed: %s", exc)
        warnings.append(describe_failure(exc))
        return _placeholder_scan(now, settings.gemini_model)

    if not raw.strip():
        logger.warning("Vision model returned an empty answer")
        warnings.append(
            "No text could be read from the image. Showing example events instead."
        )
        return _placeholder_scan(now, settings.gemini_model)

    return parse_vision_response(raw, now, model_used=settings.gemini_model)


def _placeholder_scan(now: datetime, model: str) -> ScanResult:
    events = placeholder_events(now)
    return ScanResult(
        events=events,
        all_events=events,
        source="placeholder",
        model_used=model,
        timestamp=now,
    )


def _save(
    scan: ScanResult,
    settings: Settings,
    now: datetime,
    warnings: list[str],
) -> SaveResult | None:
    """Authenticate and save *scan*'s valid events; failures become warnings."""
    logger.info("Stage 4: Saving %d event(s) to Google Calendar", len(scan.events))
    try:
        creds = get_calendar_credentials(settings.credentials_path, settings.token_path)
        client = GoogleCalendarClient(
            credentials=creds,
            timezone=settings.timezone,
            calendar_id=settings.calendar_id,
        )
    except CalendarAPIError as exc:
        logger.error("Calendar unavailable: %s", exc)
        warnings.append(f"Events were not saved: {exc}")
        return None

    saved = save_events(scan.events, client, settings.google_account_email, now)
    for failure in saved.failures:
        warnings.append(f"Failed to save '{failure['event']}': {failure['error']}")
    return saved
