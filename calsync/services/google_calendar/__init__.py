"""Google Calendar API v3 access

Module layout:
- api_client.py: REST calls (calendars, calendarList, events)
"""

from calsync.services.google_calendar.api_client import CalendarApiClient, GCalEvent, calendar_url

__all__ = ["CalendarApiClient", "GCalEvent", "calendar_url"]
