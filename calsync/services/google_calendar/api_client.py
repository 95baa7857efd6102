"""Google Calendar API client

REST calls to Google Calendar API v3 over a shared httpx.AsyncClient.
Authentication is a bearer token obtained by the caller
(see calsync.lib.credentials). Only talks to the API; no sync logic here.

Calls are awaited one at a time. There is no retry or backoff:
any HTTP error is raised as httpx.HTTPStatusError.
"""

from typing import Any, TypedDict
from urllib.parse import quote

import httpx

from calsync.lib.logger import setup_logger

logger = setup_logger(__name__)

# =============================================================================
# Configuration
# =============================================================================

CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"
CALENDAR_WEB_URL = "https://calendar.google.com/calendar/u/0/r?cid="
MAX_RESULTS_PER_PAGE = 2500
MAX_EVENTS_TO_FETCH = 2500
CALENDAR_LIST_PAGE_SIZE = 250


# =============================================================================
# Types
# =============================================================================


class GCalDateTime(TypedDict, total=False):
    """Google Calendar API DateTime"""
    date: str  # YYYY-MM-DD (all-day)
    dateTime: str  # ISO 8601
    timeZone: str


class GCalEvent(TypedDict, total=False):
    """Google Calendar API Event"""
    id: str
    status: str  # confirmed / tentative / cancelled
    visibility: str
    htmlLink: str
    summary: str
    description: str
    location: str
    colorId: str
    start: GCalDateTime
    end: GCalDateTime


class GCalCalendar(TypedDict, total=False):
    """Google Calendar API Calendar / CalendarList entry"""
    id: str
    summary: str
    description: str
    timeZone: str
    accessRole: str
    primary: bool


def calendar_url(calendar_id: str) -> str:
    """Web URL of a calendar"""
    return f"{CALENDAR_WEB_URL}{calendar_id}"


# =============================================================================
# Client
# =============================================================================


class CalendarApiClient:
    """Thin async wrapper over the calendars, calendarList and events resources"""

    def __init__(self, http: httpx.AsyncClient, access_token: str):
        self.http = http
        self.headers = {"Authorization": f"Bearer {access_token}"}

    def _events_url(self, calendar_id: str) -> str:
        return f"{CALENDAR_API_BASE}/calendars/{quote(calendar_id, safe='')}/events"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = await self.http.request(method, url, headers=self.headers, **kwargs)
        response.raise_for_status()
        return response

    async def get_calendar(self, calendar_id: str) -> GCalCalendar:
        """Calendar metadata (calendars.get)"""
        url = f"{CALENDAR_API_BASE}/calendars/{quote(calendar_id, safe='')}"
        response = await self._request("GET", url)
        return response.json()

    async def fetch_calendar_list(self) -> list[GCalCalendar]:
        """Every calendar visible to the caller (calendarList.list)"""
        all_calendars: list[GCalCalendar] = []
        page_token: str | None = None

        while True:
            params: dict[str, Any] = {"maxResults": CALENDAR_LIST_PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token

            url = f"{CALENDAR_API_BASE}/users/me/calendarList"
            response = await self._request("GET", url, params=params)
            data = response.json()

            if data.get("items"):
                all_calendars.extend(data["items"])

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return all_calendars

    async def list_events(
        self,
        calendar_id: str,
        max_events: int = MAX_EVENTS_TO_FETCH,
    ) -> list[GCalEvent]:
        """Events in a calendar, ordered by start time (events.list)

        Follows nextPageToken until exhausted or ``max_events`` is reached.

        Args:
            calendar_id: calendar ID
            max_events: upper bound on the number of events returned

        Returns:
            Events as returned by the API
        """
        all_events: list[GCalEvent] = []
        page_token: str | None = None

        while len(all_events) < max_events:
            params: dict[str, Any] = {
                "maxResults": min(MAX_RESULTS_PER_PAGE, max_events - len(all_events)),
                "singleEvents": "true",
                "orderBy": "startTime",
            }
            if page_token:
                params["pageToken"] = page_token

            response = await self._request("GET", self._events_url(calendar_id), params=params)
            data = response.json()

            if data.get("items"):
                all_events.extend(data["items"])

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return all_events[:max_events]

    async def insert_event(self, calendar_id: str, event: GCalEvent) -> GCalEvent:
        """Create an event (events.insert)"""
        response = await self._request("POST", self._events_url(calendar_id), json=event)
        return response.json()

    async def delete_event(self, calendar_id: str, event_id: str) -> None:
        """Delete an event (events.delete)"""
        url = f"{self._events_url(calendar_id)}/{quote(event_id, safe='')}"
        await self._request("DELETE", url)
