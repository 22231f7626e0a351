"""Configuration loading for pic-schedule.

Reads settings from environment variables (with .env support via
python-dotenv) and validates that the required values are present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        gemini_api_key: API key for the Gemini vision model.
        google_account_email: Google account that owns the target calendar.
            Used as the user identifier when saving events.
        log_level: Logging level (default ``"INFO"``).
        timezone: IANA timezone applied to saved events.
        gemini_model: Gemini model identifier.
        calendar_id: Google Calendar identifier (default ``"primary"``).
        inference_timeout_seconds: Timeout for one vision-model request.
        credentials_path: OAuth client secrets file.
        token_path: Cached OAuth token file.
    """

    gemini_api_key: str
    google_account_email: str
    log_level: str = "INFO"
    timezone: str = "America/Vancouver"
    gemini_model: str = "gemini-2.0-flash"
    calendar_id: str = "primary"
    inference_timeout_seconds: float = 90.0
    credentials_path: Path = Path("credentials.json")
    token_path: Path = Path("token.json")

    def __repr__(self) -> str:
        return (
            f"Settings(gemini_api_key='***', "
            f"google_account_email={self.google_account_email!r}, "
            f"log_level={self.log_level!r}, "
            f"timezone={self.timezone!r}, "
            f"gemini_model={self.gemini_model!r}, "
            f"calendar_id={self.calendar_id!r}, "
            f"inference_timeout_seconds={self.inference_timeout_seconds!r})"
        )


_REQUIRED = {
    "GEMINI_API_KEY": "gemini_api_key",
    "GOOGLE_ACCOUNT_EMAIL": "google_account_email",
}

_OPTIONAL_STR = {
    "LOG_LEVEL": "log_level",
    "TIMEZONE": "timezone",
    "GEMINI_MODEL": "gemini_model",
    "CALENDAR_ID": "calendar_id",
}

_OPTIONAL_PATH = {
    "GOOGLE_CREDENTIALS_PATH": "credentials_path",
    "GOOGLE_TOKEN_PATH": "token_path",
}


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the working
    directory is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any required variable is missing, empty or
            whitespace-only (the message names **all** of them), or if
            ``INFERENCE_TIMEOUT_SECONDS`` is not a positive number.
    """
    load_dotenv()

    values: dict[str, object] = {}
    missing: list[str] = []

    for env_var, field_name in _REQUIRED.items():
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            missing.append(env_var)
        else:
            values[field_name] = raw.strip()

    if missing:
        names = ", ".join(missing)
        raise ConfigError(f"Missing required environment variables: {names}")

    for env_var, field_name in _OPTIONAL_STR.items():
        raw = os.environ.get(env_var, "").strip()
        if raw:
            values[field_name] = raw

    for env_var, field_name in _OPTIONAL_PATH.items():
        raw = os.environ.get(env_var, "").strip()
        if raw:
            values[field_name] = Path(raw)

    timeout = os.environ.get("INFERENCE_TIMEOUT_SECONDS", "").strip()
    if timeout:
        values["inference_timeout_seconds"] = _parse_timeout(timeout)

    return Settings(**values)


def _parse_timeout(raw: str) -> float:
    try:
        seconds = float(raw)
    except ValueError:
        raise ConfigError(
            f"INFERENCE_TIMEOUT_SECONDS must be a number, got {raw!r}"
        ) from None
    if seconds <= 0:
        raise ConfigError(
            f"INFERENCE_TIMEOUT_SECONDS must be positive, got {raw!r}"
        )
    return seconds
