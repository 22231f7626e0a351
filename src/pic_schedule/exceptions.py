"""Custom exceptions for image scanning and event inference.

Inference failures are split by cause so the caller can show a distinct
message for each one.  Every :class:`InferenceError` carries a
``user_message`` suitable for display, while ``str(exc)`` keeps the
technical detail for the logs.

Exception hierarchy::

    InferenceError              (base for all vision-model failures)
    +-- InferenceConfigError    (missing or rejected API key)
    +-- InferenceConnectionError (service unreachable after retries)
    +-- InferenceTimeoutError   (request exceeded the timeout)
    +-- InferenceServiceError   (any other error returned by the service)
    InvalidImageError           (unsupported, oversized or malformed image)
"""

from __future__ import annotations


class InferenceError(Exception):
    """Base exception for failures of the upstream vision model."""

    user_message = "An unexpected error occurred. Please try again or create your event manually."


class InferenceConfigError(InferenceError):
    """Raised when the API key is missing or rejected (HTTP 401/403)."""

    user_message = (
        "AI service configuration issue. Please create your event manually "
        "or contact support."
    )


class InferenceConnectionError(InferenceError):
    """Raised when the service cannot be reached after all retries.

    Attributes:
        attempts: Number of attempts made before giving up.
    """

    user_message = (
        "Unable to connect to the AI service. Check your internet connection "
        "and firewall settings, or create your event manually."
    )

    def __init__(self, message: str, attempts: int = 1) -> None:
        super().__init__(message)
        self.attempts = attempts


class InferenceTimeoutError(InferenceError):
    """Raised when the service does not answer within the timeout."""

    user_message = (
        "The AI service is taking too long. Please try again or create your "
        "event manually."
    )


class InferenceServiceError(InferenceError):
    """Raised for any other error reported by the service.

    Attributes:
        status_code: HTTP status code from the service, or ``None``.
    """

    user_message = "The AI service returned an error. Please try again later."

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidImageError(ValueError):
    """Raised when an image is missing, unsupported, too large or malformed."""


def describe_failure(exc: BaseException) -> str:
    """Return the message shown to the user for *exc*.

    Args:
        exc: Any exception raised while scanning an image.

    Returns:
        The ``user_message`` of an :class:`InferenceError`, the exception
        text of an :class:`InvalidImageError`, or a generic message.
    """
    if isinstance(exc, InferenceError):
        return exc.user_message
    if isinstance(exc, InvalidImageError):
        return str(exc)
    return InferenceError.user_message
