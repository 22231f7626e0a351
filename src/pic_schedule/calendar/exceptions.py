"""Calendar API exceptions and the ``@with_retry`` decorator.

Exception hierarchy::

    CalendarAPIError           (base for all Calendar API errors)
    +-- CalendarAuthError      (401 / no usable credentials)
    +-- CalendarRateLimitError (429)
    +-- CalendarNotFoundError  (404)
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class CalendarAPIError(Exception):
    """Base exception for Google Calendar API errors.

    Attributes:
        status_code: HTTP status code, or ``None`` when the error did not
            come from an HTTP response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CalendarAuthError(CalendarAPIError):
    """The user is not authenticated (HTTP 401 or missing OAuth secrets)."""

    def __init__(self, message: str = "Calendar authentication failed") -> None:
        super().__init__(message, status_code=401)


class CalendarRateLimitError(CalendarAPIError):
    """The Calendar API rejected the call with HTTP 429."""

    def __init__(self, message: str = "Calendar API rate limit exceeded") -> None:
        super().__init__(message, status_code=429)


class CalendarNotFoundError(CalendarAPIError):
    """The calendar or event does not exist (HTTP 404)."""

    def __init__(self, message: str = "Calendar resource not found") -> None:
        super().__init__(message, status_code=404)


_ERRORS_BY_STATUS: dict[int, type[CalendarAPIError]] = {
    401: CalendarAuthError,
    404: CalendarNotFoundError,
    429: CalendarRateLimitError,
}


def classify_http_error(error: HttpError) -> CalendarAPIError:
    """Map an ``HttpError`` to the matching :class:`CalendarAPIError`."""
    status = error.resp.status
    error_cls = _ERRORS_BY_STATUS.get(status)
    if error_cls is not None:
        return error_cls(str(error))
    return CalendarAPIError(str(error), status_code=status)


def with_retry(max_retries: int = 3, base_delay: float = 1.0) -> Callable[[F], F]:
    """Retry a Calendar client method on transient failures.

    - 429 and network errors (``OSError``): exponential backoff
      (``base_delay * 2**attempt``), at most *max_retries* retries.
    - 401: call ``self._refresh_credentials()`` if the instance has one,
      then retry once.
    - 404 and any other HTTP error: raised immediately as the matching
      :class:`CalendarAPIError`.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            refreshed = False
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except HttpError as exc:
                    error = classify_http_error(exc)
                    if isinstance(error, CalendarAuthError) and not refreshed:
                        refreshed = True
                        _refresh(args[0] if args else None)
                        continue
                    if not isinstance(error, CalendarRateLimitError) or attempt >= max_retries:
                        logger.error("Calendar API error (HTTP %s): %s", error.status_code, exc)
                        raise error from exc
                    cause: Exception = error
                except OSError as exc:
                    if attempt >= max_retries:
                        logger.error("Network error after %d retries: %s", max_retries, exc)
                        raise CalendarAPIError(
                            f"Network error after {max_retries} retries: {exc}"
                        ) from exc
                    cause = exc

                delay = base_delay * (2**attempt)
                attempt += 1
                logger.warning(
                    "Calendar call failed (%s), retrying in %.1fs (attempt %d/%d)",
                    cause,
                    delay,
                    attempt,
                    max_retries,
                )
                time.sleep(delay)

        return wrapper  # type: ignore[return-value]

    return decorator


def _refresh(instance: object) -> None:
    """Refresh *instance*'s credentials after a 401, if it knows how."""
    refresh = getattr(instance, "_refresh_credentials", None)
    if not callable(refresh):
        logger.warning("Auth expired (401) and no credential refresh available")
        return
    logger.warning("Auth expired (401), refreshing credentials")
    try:
        refresh()
    except Exception as exc:
        logger.error("Token refresh failed: %s", exc)
        raise CalendarAuthError(f"Token refresh failed: {exc}") from exc
