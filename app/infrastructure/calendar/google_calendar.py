from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import google.auth.transport.requests
import httpx
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account

from app.application.exceptions import UpstreamUnavailable
from app.application.ports.calendar import CalendarPort
from app.application.utils.availability import parse_busy_intervals
from app.core.config import settings
from app.domain.entities.busy_interval import BusyInterval

SCOPES = ["https://www.googleapis.com/auth/calendar"]
BASE_URL = "https://www.googleapis.com/calendar/v3"


class GoogleCalendar(CalendarPort):
    def __init__(
        self,
        credentials_json: str | None = None,
        calendar_id: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        credentials_json = credentials_json or settings.GOOGLE_CREDENTIALS
        self._calendar_id = calendar_id or settings.GOOGLE_CALENDAR_ID

        if not credentials_json:
            raise ValueError("GOOGLE_CREDENTIALS is required for Google Calendar")
        if not self._calendar_id:
            raise ValueError("GOOGLE_CALENDAR_ID is required for Google Calendar")

        self._credentials = service_account.Credentials.from_service_account_info(
            json.loads(credentials_json), scopes=SCOPES
        )
        self._client = client or httpx.Client(
            base_url=BASE_URL, timeout=timeout or settings.UPSTREAM_TIMEOUT_SECONDS
        )
        self._logger = logging.getLogger(__name__)

    def fetch_busy_intervals(self, start: datetime, end: datetime) -> list[BusyInterval]:
        payload = {
            "timeMin": start.isoformat(),
            "timeMax": end.isoformat(),
            "items": [{"id": self._calendar_id}],
        }
        data = self._request("POST", "/freeBusy", json=payload)

        calendar = (data.get("calendars") or {}).get(self._calendar_id) or {}
        if calendar.get("errors"):
            self._logger.error("Free/busy query rejected", extra={"error": calendar["errors"]})
            raise UpstreamUnavailable(f"Free/busy query failed: {calendar['errors']}")

        return parse_busy_intervals(calendar.get("busy") or [])

    def book_slot(self, title: str, start: datetime, end: datetime) -> str:
        payload = {
            "summary": title,
            "start": {"dateTime": start.isoformat()},
            "end": {"dateTime": end.isoformat()},
        }
        data = self._request("POST", f"/calendars/{quote(self._calendar_id, safe='')}/events", json=payload)

        event_id = data.get("id")
        if not event_id:
            raise UpstreamUnavailable("No event ID returned from Google Calendar")

        self._logger.info("Calendar event created", extra={"event_id": event_id, "title": title})
        return str(event_id)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, headers=self._auth_headers(), **kwargs)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, GoogleAuthError, ValueError) as e:
            self._logger.error("Google Calendar request failed", extra={"error": str(e), "path": path})
            raise UpstreamUnavailable(f"Google Calendar {method} {path} failed: {e}") from e

    def _auth_headers(self) -> dict[str, str]:
        if not self._credentials.valid:
            self._credentials.refresh(google.auth.transport.requests.Request())
        return {"Authorization": f"Bearer {self._credentials.token}"}
