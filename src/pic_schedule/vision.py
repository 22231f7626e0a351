"""Gemini vision client for reading events off schedule images.

Wraps the Google ``google-genai`` SDK: sends the scan prompt together with
the image bytes, returns the model's text answer, and classifies failures
into the :mod:`pic_schedule.exceptions` hierarchy.  Connection failures
are retried with a progressive delay; timeouts and service errors are not.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from pic_schedule.exceptions import (
    InferenceConfigError,
    InferenceConnectionError,
    InferenceServiceError,
    InferenceTimeoutError,
)
from pic_schedule.images import ImagePayload
from pic_schedule.models.scan import ScanResult
from pic_schedule.prompts import build_scan_prompt
from pic_schedule.vision_output import parse_vision_response

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiVisionClient:
    """Client for extracting event text from images via Google Gemini.

    Args:
        api_key: Google Gemini API key.
        model: Model identifier.  Defaults to ``"gemini-2.0-flash"``.
        timeout_seconds: Per-request timeout.  Defaults to 90 seconds.
        max_retries: Retries after a connection failure.  Defaults to 2,
            i.e. three attempts in total.
        retry_delay: Base delay in seconds; attempt *n* waits
            ``retry_delay * n`` before the next try.

    Raises:
        InferenceConfigError: If *api_key* is empty.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout_seconds: float = 90.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ) -> None:
        if not api_key or not api_key.strip():
            raise InferenceConfigError("Gemini API key is not configured")

        self._client = genai.Client(
            api_key=api_key,
            http_options=genai_types.HttpOptions(timeout=int(timeout_seconds * 1000)),
        )
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        return self._model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_image(
        self,
        image: ImagePayload,
        current_datetime: datetime | None = None,
    ) -> str:
        """Ask the model to describe the events in *image*.

        Args:
            image: The image to analyse.
            current_datetime: Included in the prompt so the model can
                complete dates without a year.  Defaults to now.

        Returns:
            The model's answer text (possibly empty).

        Raises:
            InferenceConfigError: The API key was rejected (401/403).
            InferenceConnectionError: The service was unreachable on every
                attempt.
            InferenceTimeoutError: The request timed out.
            InferenceServiceError: Any other API error.
        """
        prompt = build_scan_prompt(current_datetime or datetime.now())
        contents = [
            genai_types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
            prompt,
        ]
        config = genai_types.GenerateContentConfig(
            temperature=0.1,
            max_output_tokens=1000,
        )

        logger.info(
            "Sending %s (%d bytes) to %s", image.name, image.size, self._model
        )
        text = self._call_with_retry(contents, config)
        logger.debug("Raw vision response:\n%s", text)
        return text

    def scan(
        self,
        image: ImagePayload,
        current_datetime: datetime | None = None,
    ) -> ScanResult:
        """Read *image* and parse the answer into event records.

        Raises:
            InferenceError: Any failure of :meth:`read_image`.
        """
        now = current_datetime or datetime.now()
        raw = self.read_image(image, now)
        result = parse_vision_response(raw, now, model_used=self._model)
        logger.info(
            "Scan of %s produced %d event(s) (%d with valid dates, source=%s)",
            image.name,
            len(result.all_events),
            len(result.events),
            result.source,
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call_with_retry(
        self,
        contents: list,
        config: genai_types.GenerateContentConfig,
    ) -> str:
        """Call the API, retrying connection failures only."""
        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            logger.info("Vision request attempt %d/%d", attempt, attempts)
            try:
                return self._call_api(contents, config)
            except httpx.TimeoutException as exc:
                logger.error("Vision request timed out: %s", exc)
                raise InferenceTimeoutError(
                    f"Request timed out after {self._timeout_seconds:g} seconds"
                ) from exc
            except httpx.TransportError as exc:
                if attempt >= attempts:
                    logger.error(
                        "Vision service unreachable after %d attempts: %s",
                        attempts,
                        exc,
                    )
                    raise InferenceConnectionError(
                        f"Network connection failed after {attempts} attempts: {exc}",
                        attempts=attempts,
                    ) from exc
                delay = self._retry_delay * attempt
                logger.warning(
                    "Network error, retrying in %.1fs (attempt %d/%d): %s",
                    delay,
                    attempt,
                    attempts,
                    exc,
                )
                time.sleep(delay)

        # range() above always returns or raises.
        raise InferenceConnectionError("Retry loop exhausted unexpectedly")  # pragma: no cover

    def _call_api(
        self,
        contents: list,
        config: genai_types.GenerateContentConfig,
    ) -> str:
        """Call ``generate_content`` once and map API errors.

        Raises:
            InferenceConfigError: HTTP 401 or 403.
            InferenceServiceError: Any other :class:`APIError`.
        """
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise _classify_api_error(exc, self._model) from exc

        return response.text or ""


def _classify_api_error(
    exc: genai_errors.APIError,
    model: str,
) -> InferenceConfigError | InferenceServiceError:
    """Map a Gemini :class:`APIError` to an inference exception."""
    status = exc.code
    logger.error("Gemini API error (HTTP %s): %s", status, exc)

    if status in (401, 403):
        return InferenceConfigError(
            f"Invalid Gemini API key or insufficient permissions: {exc}"
        )
    if status == 404:
        return InferenceServiceError(f"Model {model} not available: {exc}", status_code=404)
    if status == 503:
        return InferenceServiceError(
            f"Model is currently overloaded or loading, please try again: {exc}",
            status_code=503,
        )
    return InferenceServiceError(f"Gemini API error: {exc}", status_code=status)
