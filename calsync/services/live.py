"""Live calendar: shows API -> Google Calendar

Shows are timed events, 21:00 to midnight local time, one per show.
"""

from datetime import datetime, time, timedelta
from typing import Any, Mapping, TypedDict

import httpx

from calsync.lib.logger import setup_logger
from calsync.sync.models import CalendarItem, TimedWindow
from calsync.sync.source import CalendarSource, extract_records, lookup_color, nested

logger = setup_logger(__name__)

SHOW_START = time(21, 0)
SHOW_DURATION = timedelta(hours=3)
RESPONSE_KEYS = ("data", "shows", "events")

GENRE_COLORS = {
    "Pop": "1",
    "Rock": "2",
    "Hip Hop": "3",
    "Electronic": "4",
    "Jazz": "5",
    "Classical": "6",
    "Country": "7",
    "R&B": "8",
    "Reggae": "9",
    "Folk": "10",
    "default": "1",
}


# =============================================================================
# Types
# =============================================================================


class ShowArtist(TypedDict, total=False):
    name: str
    genre: str


class ShowVenue(TypedDict, total=False):
    name: str
    address: str


class ShowTicketera(TypedDict, total=False):
    name: str
    url: str


class ShowRecord(TypedDict, total=False):
    """Shows API item"""
    id: str
    show_date: str  # ISO 8601
    city: str
    country: str
    status: str
    artist: ShowArtist
    venue: ShowVenue
    ticketera: ShowTicketera


# =============================================================================
# Source
# =============================================================================


class LiveShowsSource(CalendarSource):
    """Shows from the live-events API"""

    label = "shows"

    async def fetch_records(self, http: httpx.AsyncClient) -> list[ShowRecord]:
        logger.info(f"Fetching shows from {self.config.api_url}")
        response = await http.get(self.config.api_url, headers=self.config.api_headers)
        response.raise_for_status()
        return extract_records(response.json(), RESPONSE_KEYS)

    def missing_fields(self, record: Mapping[str, Any]) -> list[str]:
        required = {
            "artist.name": nested(record, "artist", "name"),
            "venue.name": nested(record, "venue", "name"),
            "show_date": record.get("show_date"),
            "city": record.get("city"),
            "country": record.get("country"),
        }
        return [name for name, value in required.items() if not value]

    def raw_date(self, record: Mapping[str, Any]) -> Any:
        return record.get("show_date")

    def describe(self, record: Mapping[str, Any]) -> str:
        artist = nested(record, "artist", "name") or "Unknown artist"
        venue = nested(record, "venue", "name") or "Unknown venue"
        return f"show {artist} - {venue} ({record.get('show_date') or 'no date'})"

    @property
    def stats_dimensions(self):
        return {
            "artists": lambda r: nested(r, "artist", "name"),
            "venues": lambda r: nested(r, "venue", "name"),
            "cities": lambda r: r.get("city"),
            "countries": lambda r: r.get("country"),
            "genres": lambda r: nested(r, "artist", "genre"),
        }

    def to_calendar_item(self, record: Mapping[str, Any]) -> CalendarItem:
        show_date = self.record_date(record)
        artist = nested(record, "artist", "name")
        venue = nested(record, "venue", "name")
        genre = nested(record, "artist", "genre")
        city = record.get("city")
        country = record.get("country")

        start = datetime.combine(show_date, SHOW_START, tzinfo=self.tz)
        end = start + SHOW_DURATION

        description = "\n".join([
            f"🎤 Artista: {artist}",
            f"🏟️ Venue: {venue}",
            f"📍 Ciudad: {city}, {country}",
            f"📊 Status: {record.get('status') or 'N/A'}",
            f"🎫 Ticketera: {nested(record, 'ticketera', 'name') or 'N/A'}",
            f"🔗 URL: {nested(record, 'ticketera', 'url') or 'N/A'}",
            f"⭐ Género: {genre or 'N/A'}",
        ])

        return CalendarItem(
            title=f"{artist} - {venue}",
            description=description,
            window=TimedWindow(start=start, end=end, time_zone=self.time_zone),
            location=nested(record, "venue", "address") or f"{venue}, {city}, {country}",
            color_id=lookup_color(GENRE_COLORS, genre),
        )
