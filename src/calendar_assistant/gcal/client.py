"""Google Calendar API client implementation.

This module provides the calendar reader/writer used by the assistant.

Notes:
    The Google API client is synchronous. This project wraps those calls using
    `asyncio.to_thread` so the rest of the codebase can remain async-friendly.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from calendar_assistant.config import Settings
from calendar_assistant.exceptions import (
    AuthenticationError,
    CalendarAPIError,
    ConfigurationError,
    NotFoundError,
    RateLimitError,
)
from calendar_assistant.gcal.parsing import build_event_body, item_to_calendar_event, item_to_committed_event
from calendar_assistant.models import CalendarEvent, CommittedEvent

logger = structlog.get_logger()


def map_http_error(exc: Exception) -> CalendarAPIError:
    """Translate a googleapiclient ``HttpError`` into a CalendarAPIError subclass."""
    resp = getattr(exc, "resp", None)
    status = getattr(resp, "status", None)
    try:
        code = int(status) if status is not None else None
    except (TypeError, ValueError):
        code = None

    if code in (401, 403):
        return AuthenticationError("Google Calendar authentication failed. Please check your credentials.")
    if code == 404:
        return NotFoundError("Calendar not found. Please check the configured calendar ID.")
    if code == 429:
        return RateLimitError("Google Calendar API rate limit exceeded. Please try again later.")
    return CalendarAPIError(f"Google Calendar request failed: {exc}")


class GoogleCalendarClient:
    """Google Calendar API client for event operations.

    This client handles authentication, event listing and event creation.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize Google Calendar client.

        Args:
            settings: Application settings. If None, uses default settings.
        """
        from calendar_assistant.config import get_settings

        self.settings = settings or get_settings()
        self._service: Any | None = None
        logger.info("calendar_client_initialized", calendar_id=self.settings.calendar_id)

    async def authenticate(self) -> None:
        """Authenticate with Google Calendar API using OAuth2.

        Raises:
            ConfigurationError: If the credentials file is missing.
            AuthenticationError: If authentication fails.
        """

        if self._service is not None:
            return

        credentials_path = Path(self.settings.google_credentials_path)
        token_path = Path(self.settings.google_token_path)
        scope = self.settings.calendar_scope

        if not credentials_path.exists() and not token_path.exists():
            raise ConfigurationError(
                f"Google credentials file not found: {credentials_path}. "
                "Create OAuth client credentials with the Calendar API enabled."
            )

        logger.info(
            "calendar_authentication_started",
            credentials_path=str(credentials_path),
            token_path=str(token_path),
            scope=scope,
        )

        try:
            self._service = await asyncio.to_thread(
                self._build_service,
                credentials_path,
                token_path,
                scope,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("calendar_authentication_failed", error=str(exc))
            raise AuthenticationError(str(exc)) from exc

        logger.info("calendar_authentication_completed")

    async def list_events(
        self,
        start: datetime,
        end: datetime,
        max_results: int = 10,
    ) -> list[CalendarEvent]:
        """List events between two instants.

        Recurring events are expanded into single instances and results are
        ordered by start time.

        Args:
            start: Lower bound (timezone-aware).
            end: Upper bound (timezone-aware).
            max_results: Maximum number of events to return.

        Returns:
            Events sorted ascending by start.

        Raises:
            CalendarAPIError: If the API request fails.
        """

        await self._ensure_authenticated()

        logger.info(
            "listing_events",
            time_min=start.isoformat(),
            time_max=end.isoformat(),
            max_results=max_results,
        )

        try:
            items = await asyncio.to_thread(self._list_events_sync, start, end, max_results)
        except Exception as exc:  # noqa: BLE001
            error = self._translate(exc)
            logger.error("calendar_list_events_failed", error=str(exc))
            raise error from exc

        return [item_to_calendar_event(item) for item in items]

    async def create_event(
        self,
        summary: str,
        description: str,
        date: str,
        start_time: str,
        end_time: str,
        timezone: str,
    ) -> CommittedEvent:
        """Create a timed event.

        Args:
            summary: Event title.
            description: Event description (falls back to summary).
            date: Event date as YYYY-MM-DD.
            start_time: Start time as HH:MM.
            end_time: End time as HH:MM.
            timezone: IANA timezone of the wall-clock times.

        Returns:
            The created event.

        Raises:
            CalendarAPIError: If the API request fails.
        """

        await self._ensure_authenticated()

        body = build_event_body(
            summary=summary,
            description=description,
            date=date,
            start_time=start_time,
            end_time=end_time,
            timezone=timezone,
        )
        logger.info("creating_event", summary=summary, date=date, start_time=start_time)

        try:
            created = await asyncio.to_thread(self._insert_event_sync, body)
        except Exception as exc:  # noqa: BLE001
            error = self._translate(exc)
            logger.error("calendar_create_event_failed", error=str(exc))
            raise error from exc

        event = item_to_committed_event(created)
        logger.info("calendar_event_created", event_id=event.id, summary=event.summary)
        return event

    async def _ensure_authenticated(self) -> None:
        if self._service is None:
            raise AuthenticationError(
                "Calendar client is not authenticated. Call await GoogleCalendarClient.authenticate() first."
            )

    @staticmethod
    def _translate(exc: Exception) -> CalendarAPIError:
        from googleapiclient.errors import HttpError

        if isinstance(exc, CalendarAPIError):
            return exc
        if isinstance(exc, HttpError):
            return map_http_error(exc)
        return CalendarAPIError(str(exc))

    def _build_service(self, credentials_path: Path, token_path: Path, scope: str) -> Any:
        # Imported lazily to keep import-time cost low and tests fast.
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials
        from google_auth_oauthlib.flow import InstalledAppFlow
        from googleapiclient.discovery import build

        creds: Credentials | None = None
        if token_path.exists():
            creds = Credentials.from_authorized_user_file(str(token_path), scopes=[scope])

        if creds is not None and creds.expired and creds.refresh_token:
            creds.refresh(Request())
            token_path.write_text(creds.to_json(), encoding="utf-8")

        if creds is None or not creds.valid:
            flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes=[scope])
            creds = flow.run_local_server(port=0)
            token_path.parent.mkdir(parents=True, exist_ok=True)
            token_path.write_text(creds.to_json(), encoding="utf-8")

        # cache_discovery=False prevents writing discovery docs to disk.
        return build("calendar", "v3", credentials=creds, cache_discovery=False)

    def _list_events_sync(self, start: datetime, end: datetime, max_results: int) -> list[dict[str, Any]]:
        assert self._service is not None
        request = self._service.events().list(
            calendarId=self.settings.calendar_id,
            timeMin=start.isoformat(),
            timeMax=end.isoformat(),
            maxResults=max_results,
            singleEvents=True,
            orderBy="startTime",
        )
        response = request.execute()
        return list(response.get("items", []) or [])

    def _insert_event_sync(self, body: dict[str, Any]) -> dict[str, Any]:
        assert self._service is not None
        request = self._service.events().insert(calendarId=self.settings.calendar_id, body=body)
        return request.execute()
