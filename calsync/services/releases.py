"""Releases calendar: releases API -> Google Calendar

Each release becomes an all-day event on its release date. Field names
vary between API versions, so every field has an ordered list of
fallbacks.

When no release is usable the calendar is left as it is.
"""

from datetime import timedelta
from typing import Any, Mapping, TypedDict

import httpx

from calsync.lib.logger import setup_logger
from calsync.sync.models import AllDayWindow, CalendarItem
from calsync.sync.source import CalendarSource, extract_records, first_present, lookup_color, nested

logger = setup_logger(__name__)

RESPONSE_KEYS = ("data", "releases")
DATE_FIELDS = ("release_date", "date", "created_at")

UNKNOWN_ARTIST = "Artista Desconocido"
UNKNOWN_TITLE = "Título Desconocido"
DEFAULT_TYPE = "Release"

TYPE_COLORS = {
    "album": "1",
    "single": "2",
    "ep": "3",
    "mixtape": "4",
    "compilation": "5",
    "default": "6",
}


# =============================================================================
# Types
# =============================================================================


class ReleaseArtist(TypedDict, total=False):
    name: str
    genre: str


class ReleaseExternalUrls(TypedDict, total=False):
    spotify: str
    apple: str


class ReleaseRecord(TypedDict, total=False):
    """Releases API item"""
    id: str
    title: str
    name: str
    type: str
    release_type: str
    release_date: str
    date: str
    created_at: str
    genre: str
    label: str
    label_name: str
    description: str
    overview: str
    cover: str
    cover_url: str
    artwork_url: str
    spotify_url: str
    apple_url: str
    artist_name: str
    artist: ReleaseArtist
    external_urls: ReleaseExternalUrls


# =============================================================================
# Field access
# =============================================================================


def release_artist(r: Mapping[str, Any]) -> str:
    return str(first_present(nested(r, "artist", "name"), r.get("artist_name")) or UNKNOWN_ARTIST)


def release_title(r: Mapping[str, Any]) -> str:
    return str(first_present(r.get("title"), r.get("name")) or UNKNOWN_TITLE)


def release_type(r: Mapping[str, Any]) -> str:
    return str(first_present(r.get("type"), r.get("release_type")) or DEFAULT_TYPE)


def release_genre(r: Mapping[str, Any]) -> str:
    return str(first_present(r.get("genre"), nested(r, "artist", "genre")) or "N/A")


def release_description(r: Mapping[str, Any]) -> str:
    """Fixed header lines, then optional blocks"""
    text = "\n".join([
        f"🎵 Artista: {release_artist(r)}",
        f"📀 Título: {release_title(r)}",
        f"📋 Tipo: {release_type(r)}",
        f"🎭 Género: {release_genre(r)}",
        f"🏷️  Sello: {first_present(r.get('label'), r.get('label_name')) or 'N/A'}",
    ])

    overview = first_present(r.get("description"), r.get("overview"))
    spotify = first_present(r.get("spotify_url"), nested(r, "external_urls", "spotify"))
    apple = first_present(r.get("apple_url"), nested(r, "external_urls", "apple"))
    cover = first_present(r.get("cover"), r.get("cover_url"), r.get("artwork_url"))

    if overview:
        text += f"\n\n📝 Descripción:\n{overview}"
    if spotify:
        text += f"\n\n🎧 Spotify: {spotify}"
    if apple:
        text += f"\n🍎 Apple Music: {apple}"
    if cover:
        text += f"\n\n🖼️  Portada: {cover}"
    return text


# =============================================================================
# Source
# =============================================================================


class ReleasesSource(CalendarSource):
    """Releases from the records API"""

    label = "releases"
    reset_when_empty = False

    async def fetch_records(self, http: httpx.AsyncClient) -> list[ReleaseRecord]:
        logger.info(f"Fetching releases from {self.config.api_url}")
        response = await http.get(self.config.api_url, headers=self.config.api_headers)
        response.raise_for_status()
        return extract_records(response.json(), RESPONSE_KEYS)

    def missing_fields(self, record: Mapping[str, Any]) -> list[str]:
        if self.raw_date(record) is None:
            return ["release_date"]
        return []

    def raw_date(self, record: Mapping[str, Any]) -> Any:
        return first_present(*(record.get(name) for name in DATE_FIELDS))

    def describe(self, record: Mapping[str, Any]) -> str:
        return f"release {release_artist(record)} - {release_title(record)}"

    @property
    def stats_dimensions(self):
        return {
            "artists": release_artist,
            "types": release_type,
            "genres": release_genre,
        }

    def to_calendar_item(self, record: Mapping[str, Any]) -> CalendarItem:
        released = self.record_date(record)

        return CalendarItem(
            title=f"{release_artist(record)} - {release_title(record)}",
            description=release_description(record),
            window=AllDayWindow(start_date=released, end_date=released + timedelta(days=1)),
            color_id=lookup_color(TYPE_COLORS, release_type(record).lower()),
        )
