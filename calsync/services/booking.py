"""Booking calendar: booking_events table -> Google Calendar

Each booking is a two-hour timed event starting at its hora_salida
(21:00 when unset) on its start_date.
"""

import asyncio
from datetime import datetime, time, timedelta
from typing import Any, Mapping, TypedDict

import httpx

from calsync.lib.db import fetch_rows
from calsync.lib.logger import setup_logger
from calsync.sync.models import CalendarItem, TimedWindow
from calsync.sync.source import (
    CalendarSource,
    format_optional_date,
    lookup_color,
    parse_time,
)

logger = setup_logger(__name__)

DEFAULT_START = time(21, 0)
EVENT_DURATION = timedelta(hours=2)
FALLBACK_TITLE = "Evento de Booking"

CATEGORY_COLORS = {
    "Concierto": "1",
    "Festival": "2",
    "Teatro": "3",
    "Deporte": "4",
    "Cultural": "5",
    "Comedia": "6",
    "Danza": "7",
    "Otro": "8",
    "default": "1",
}


# =============================================================================
# Types
# =============================================================================


class BookingEventRow(TypedDict, total=False):
    """booking_events row joined with artists, venues and ticketeras"""
    id: int
    title: str | None
    start_date: Any  # date / timestamp
    category: str | None
    status: str | None
    capacity: int | None
    tickets_sold: int | None
    price: Any  # numeric
    currency: str | None
    deleted_at: Any
    show_type: str | None
    festival_name: str | None
    city: str | None
    country: str | None
    sale_date: Any
    hora_salida: Any  # "HH:MM" or time
    comments: str | None
    fecha_preventa: Any
    artist_name: str | None
    artist_genre: str | None
    venue_name: str | None
    venue_address: str | None
    ticketera_name: str | None
    ticketera_url: str | None


def booking_title(row: Mapping[str, Any]) -> str:
    artist = row.get("artist_name")
    if not artist:
        return FALLBACK_TITLE
    venue = row.get("venue_name")
    return f"{artist} - {venue}" if venue else artist


def booking_location(row: Mapping[str, Any]) -> str:
    location = row.get("venue_address") or row.get("venue_name") or ""
    city, country = row.get("city"), row.get("country")
    if city and country:
        location = f"{location}, {city}, {country}" if location else f"{city}, {country}"
    return location


def booking_description(row: Mapping[str, Any]) -> str:
    """Labeled lines in fixed order; absent fields are left out"""
    get = row.get
    lines = []

    if get("artist_name"):
        lines.append(f"🎤 Artista: {get('artist_name')}")
    if get("venue_name"):
        lines.append(f"🏟️ Venue: {get('venue_name')}")
    if get("city") and get("country"):
        lines.append(f"📍 Ubicación: {get('city')}, {get('country')}")
    if get("show_type"):
        lines.append(f"🎭 Tipo: {get('show_type')}")
    if get("festival_name"):
        lines.append(f"🎪 Festival: {get('festival_name')}")
    if get("category"):
        lines.append(f"📂 Categoría: {get('category')}")
    if get("status"):
        lines.append(f"📊 Status: {get('status')}")
    if get("capacity"):
        lines.append(f"👥 Capacidad: {get('capacity')}")
    if get("tickets_sold"):
        lines.append(f"🎫 Tickets vendidos: {get('tickets_sold')}")
    if get("price") and get("currency"):
        lines.append(f"💰 Precio: {get('currency')} {get('price')}")
    if get("ticketera_name"):
        lines.append(f"🎟️ Ticketera: {get('ticketera_name')}")
    if get("ticketera_url"):
        lines.append(f"🔗 URL: {get('ticketera_url')}")
    if get("sale_date"):
        lines.append(f"📅 Fecha de venta: {format_optional_date(get('sale_date'))}")
    if get("fecha_preventa"):
        lines.append(f"🎫 Preventa: {format_optional_date(get('fecha_preventa'))}")
    if get("comments"):
        lines.append(f"💬 Comentarios: {get('comments')}")

    return "\n".join(lines)


# =============================================================================
# Source
# =============================================================================


class BookingEventsSource(CalendarSource):
    """Rows of booking_events"""

    label = "booking events"

    async def fetch_records(self, http: httpx.AsyncClient) -> list[BookingEventRow]:
        logger.info("Fetching booking events from the database...")
        return await asyncio.to_thread(fetch_rows, self.config.database_url, self.config.query)

    def missing_fields(self, record: Mapping[str, Any]) -> list[str]:
        missing = []
        if not record.get("start_date"):
            missing.append("start_date")
        if record.get("deleted_at"):
            missing.append("deleted_at IS NULL")
        return missing

    def raw_date(self, record: Mapping[str, Any]) -> Any:
        return record.get("start_date")

    def describe(self, record: Mapping[str, Any]) -> str:
        return f"booking {booking_title(record)} ({record.get('start_date') or 'no date'})"

    @property
    def stats_dimensions(self):
        return {
            "artists": lambda r: r.get("artist_name"),
            "venues": lambda r: r.get("venue_name"),
            "cities": lambda r: r.get("city"),
            "countries": lambda r: r.get("country"),
            "categories": lambda r: r.get("category"),
        }

    def to_calendar_item(self, record: Mapping[str, Any]) -> CalendarItem:
        event_date = self.record_date(record)
        start_at = parse_time(record["hora_salida"]) if record.get("hora_salida") else DEFAULT_START

        start = datetime.combine(event_date, start_at, tzinfo=self.tz)
        end = start + EVENT_DURATION

        return CalendarItem(
            title=booking_title(record),
            description=booking_description(record),
            window=TimedWindow(start=start, end=end, time_zone=self.time_zone),
            location=booking_location(record),
            color_id=lookup_color(CATEGORY_COLORS, record.get("category")),
        )
