"""Google OAuth 2.0 login for calendar access.

Uses the installed-application flow from ``google-auth-oauthlib``.  A
cached token is reused while valid, refreshed when expired, and replaced
through a browser login otherwise.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from pic_schedule.calendar.exceptions import CalendarAuthError

logger = logging.getLogger(__name__)

SCOPES: list[str] = ["https://www.googleapis.com/auth/calendar.events"]
"""Saving events needs read/write access to events only."""


def get_calendar_credentials(
    credentials_path: Path | str,
    token_path: Path | str,
) -> Credentials:
    """Return valid OAuth credentials for the calendar owner.

    1. Load the cached token at *token_path*; return it if valid.
    2. If it is expired and has a refresh token, refresh and re-save it.
    3. Otherwise run the browser login with the client secrets at
       *credentials_path* and cache the new token.

    Args:
        credentials_path: OAuth client secrets (``credentials.json``).
        token_path: Cached user token (``token.json``), created as needed.

    Returns:
        Valid :class:`google.oauth2.credentials.Credentials`.

    Raises:
        CalendarAuthError: If the client secrets file is missing, i.e. the
            user cannot be authenticated.
    """
    credentials_path = Path(credentials_path)
    token_path = Path(token_path)

    creds = _load_cached_token(token_path)
    if creds is not None and creds.valid:
        logger.info("Using cached calendar token from %s", token_path)
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        refreshed = _refresh_token(creds)
        if refreshed is not None:
            _save_token(refreshed, token_path)
            return refreshed
        logger.warning("Token refresh failed, falling back to browser login")

    creds = _run_browser_flow(credentials_path)
    _save_token(creds, token_path)
    return creds


def _load_cached_token(token_path: Path) -> Credentials | None:
    """Load the cached token, or ``None`` if missing or unreadable."""
    if not token_path.exists():
        logger.info("No cached token at %s", token_path)
        return None
    try:
        return Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except (json.JSONDecodeError, ValueError, KeyError) as exc:
        logger.warning("Ignoring unreadable token at %s: %s", token_path, exc)
        return None


def _refresh_token(creds: Credentials) -> Credentials | None:
    """Refresh expired credentials, returning ``None`` on failure."""
    try:
        creds.refresh(Request())
    except GoogleAuthError as exc:
        logger.warning("Token refresh failed: %s", exc)
        return None
    logger.info("Calendar token refreshed")
    return creds


def _run_browser_flow(credentials_path: Path) -> Credentials:
    """Authenticate through the browser using the client secrets file.

    Raises:
        CalendarAuthError: If *credentials_path* does not exist.
    """
    if not credentials_path.exists():
        msg = f"OAuth client secrets file not found: {credentials_path}"
        logger.error(msg)
        raise CalendarAuthError(msg)

    logger.info("Starting browser login")
    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes=SCOPES)
    creds = flow.run_local_server(port=0)
    logger.info("Browser login completed")
    return creds


def _save_token(creds: Credentials, token_path: Path) -> None:
    """Write *creds* to *token_path*, creating parent directories."""
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    logger.info("Calendar token saved to %s", token_path)
