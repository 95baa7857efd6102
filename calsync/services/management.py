"""Management calendar: mgm_events table -> Google Calendar

Every row becomes an all-day event on its show date.
"""

import asyncio
from datetime import timedelta
from numbers import Number
from typing import Any, Mapping, TypedDict

import httpx

from calsync.lib.db import fetch_rows
from calsync.lib.logger import setup_logger
from calsync.sync.models import AllDayWindow, CalendarItem
from calsync.sync.source import CalendarSource, format_es_ar

logger = setup_logger(__name__)

LARGE_VENUE_CAPACITY = 10000

# colorId per rule, first match wins
FESTIVAL_COLOR = "2"
ACOUSTIC_COLOR = "5"
LARGE_SHOW_COLOR = "1"
CONFIRMED_COLOR = "10"
DEFAULT_COLOR = "6"


# =============================================================================
# Types
# =============================================================================


class ManagementEventRow(TypedDict, total=False):
    """mgm_events row joined with artists and venues"""
    artist_id: int
    show_date: Any  # date
    country: str
    city: str
    venue_id: int | None
    nombre_festi: str | None
    status: str | None
    aforo: int | None
    formato: str | None
    acuerdo: str | None
    garantia: str | None
    overage: str | None
    wht: str | None
    com_promotor: str | None
    spliteo: str | None
    artist_name: str | None
    artist_genre: str | None
    venue_name: str | None
    venue_address: str | None


def management_color(row: Mapping[str, Any]) -> str:
    """Color from festival / format / capacity / status, in that order"""
    if row.get("nombre_festi"):
        return FESTIVAL_COLOR
    formato = row.get("formato")
    if formato and "acústico" in str(formato).lower():
        return ACOUSTIC_COLOR
    aforo = row.get("aforo")
    if isinstance(aforo, Number) and aforo > LARGE_VENUE_CAPACITY:
        return LARGE_SHOW_COLOR
    if row.get("status") == "confirmed":
        return CONFIRMED_COLOR
    return DEFAULT_COLOR


def management_title(artist: str, place: str | None) -> str:
    """Artist plus festival or venue, or the artist alone"""
    return f"{artist} - {place}" if place else artist


def _format_capacity(aforo: Any) -> str:
    if isinstance(aforo, Number):
        return f"{aforo:,}"
    return str(aforo)


# =============================================================================
# Source
# =============================================================================


class ManagementEventsSource(CalendarSource):
    """Rows of mgm_events"""

    label = "management events"

    async def fetch_records(self, http: httpx.AsyncClient) -> list[ManagementEventRow]:
        logger.info("Fetching management events from the database...")
        rows = await asyncio.to_thread(fetch_rows, self.config.database_url, self.config.query)
        for row in rows[:3]:
            logger.debug(f"Sample: {self.describe(row)} ({row.get('status')})")
        return rows

    def missing_fields(self, record: Mapping[str, Any]) -> list[str]:
        return [
            name
            for name in ("artist_name", "show_date", "city", "country")
            if not record.get(name)
        ]

    def raw_date(self, record: Mapping[str, Any]) -> Any:
        return record.get("show_date")

    def describe(self, record: Mapping[str, Any]) -> str:
        return (
            f"management event {record.get('artist_name') or 'Unknown artist'} - "
            f"{record.get('venue_name') or 'Unknown venue'} ({record.get('show_date') or 'no date'})"
        )

    @property
    def stats_dimensions(self):
        return {
            "artists": lambda r: r.get("artist_name"),
            "venues": lambda r: r.get("venue_name"),
            "cities": lambda r: r.get("city"),
            "countries": lambda r: r.get("country"),
            "festivals": lambda r: r.get("nombre_festi"),
        }

    def to_calendar_item(self, record: Mapping[str, Any]) -> CalendarItem:
        show_date = self.record_date(record)
        artist = record.get("artist_name")
        venue = record.get("venue_name")
        city = record.get("city")
        country = record.get("country")
        festival = record.get("nombre_festi")

        lines = [
            f"🎤 Artista: {artist or 'N/A'}",
            f"🏟️ Venue: {venue or 'N/A'}",
            f"📍 Ciudad: {city}, {country}",
            f"📅 Fecha: {format_es_ar(show_date)}",
            f"📊 Status: {record.get('status') or 'N/A'}",
        ]
        optional = [
            ("🎵 Género", record.get("artist_genre")),
            ("👥 Aforo", _format_capacity(record["aforo"]) if record.get("aforo") else None),
            ("🎭 Formato", record.get("formato")),
            ("🎪 Festival", festival),
            ("💰 Garantía", record.get("garantia")),
            ("📋 Acuerdo", record.get("acuerdo")),
            ("📈 Overage", record.get("overage")),
            ("🤝 Com. Promotor", record.get("com_promotor")),
            ("⚖️ Spliteo", record.get("spliteo")),
        ]
        lines += [f"{label}: {value}" for label, value in optional if value]

        return CalendarItem(
            title=management_title(artist, festival or venue),
            description="\n".join(lines),
            window=AllDayWindow(start_date=show_date, end_date=show_date + timedelta(days=1)),
            location=record.get("venue_address") or ", ".join(p for p in (venue, city, country) if p),
            color_id=management_color(record),
        )
