"""Booking events source tests"""

from datetime import date, datetime, time
from unittest.mock import patch

import pytest

from calsync.services.booking import (
    BookingEventRow,
    BookingEventsSource,
    booking_description,
    booking_location,
    booking_title,
)
from calsync.sync.routine import prepare_items


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def source(make_config):
    return BookingEventsSource(make_config("booking", calendar_name="Booking"))


@pytest.fixture
def sample_row() -> BookingEventRow:
    return BookingEventRow(
        id=42,
        title=None,
        start_date=date(2025, 6, 10),
        category="Festival",
        status="confirmed",
        capacity=5000,
        tickets_sold=1200,
        price=15000,
        currency="ARS",
        deleted_at=None,
        show_type="Headline",
        festival_name=None,
        city="Rosario",
        country="Argentina",
        sale_date=date(2025, 3, 1),
        hora_salida="20:00",
        comments=None,
        fecha_preventa=None,
        artist_name="Miranda!",
        artist_genre="Pop",
        venue_name="Metropolitano",
        venue_address="Av. Eva Perón 3200",
        ticketera_name="Ticketek",
        ticketera_url=None,
    )


# =============================================================================
# Transform
# =============================================================================


def test_late_show_crosses_midnight(source):
    """22:30 start on a bare row: 00:30 next day, default color, fallback title"""
    row = {"start_date": "2025-06-10", "hora_salida": "22:30", "artist_name": "Miranda!"}

    body = source.to_calendar_item(row).to_gcal_event()

    assert body["start"] == {
        "dateTime": "2025-06-10T22:30:00-03:00",
        "timeZone": "America/Argentina/Buenos_Aires",
    }
    assert body["end"]["dateTime"] == "2025-06-11T00:30:00-03:00"
    assert body["colorId"] == "1"
    assert body["summary"] == "Miranda!"
    assert "location" not in body


def test_default_start_time(source, sample_row):
    row = dict(sample_row, hora_salida=None)
    item = source.to_calendar_item(row)

    assert item.window.start.time() == time(21, 0)
    assert item.window.end.time() == time(23, 0)


def test_time_object_start(source, sample_row):
    item = source.to_calendar_item(dict(sample_row, hora_salida=time(19, 45)))
    assert item.window.start.time() == time(19, 45)


def test_full_row(source, sample_row):
    body = source.to_calendar_item(sample_row).to_gcal_event()

    assert body["summary"] == "Miranda! - Metropolitano"
    assert body["location"] == "Av. Eva Perón 3200, Rosario, Argentina"
    assert body["colorId"] == "2"
    assert body["description"].splitlines() == [
        "🎤 Artista: Miranda!",
        "🏟️ Venue: Metropolitano",
        "📍 Ubicación: Rosario, Argentina",
        "🎭 Tipo: Headline",
        "📂 Categoría: Festival",
        "📊 Status: confirmed",
        "👥 Capacidad: 5000",
        "🎫 Tickets vendidos: 1200",
        "💰 Precio: ARS 15000",
        "🎟️ Ticketera: Ticketek",
        "📅 Fecha de venta: 1/3/2025",
    ]


def test_title_and_location_fallbacks():
    assert booking_title({}) == "Evento de Booking"
    assert booking_title({"artist_name": "A"}) == "A"
    assert booking_location({"venue_name": "V"}) == "V"
    assert booking_location({"city": "C", "country": "AR"}) == "C, AR"
    assert booking_location({"venue_name": "V", "city": "C"}) == "V"
    assert booking_description({}) == ""


def test_invalid_hora_salida_is_skipped(source, sample_row):
    row = dict(sample_row, hora_salida="tarde")
    with patch("calsync.sync.routine.logger") as mock_logger:
        kept, items, skipped = prepare_items(source, [row, sample_row])

    assert skipped == 1
    assert len(items) == 1
    assert "invalid time" in mock_logger.warning.call_args.args[0]


# =============================================================================
# Filter
# =============================================================================


def test_missing_fields(source, sample_row):
    assert source.missing_fields(sample_row) == []
    assert source.missing_fields(dict(sample_row, start_date=None)) == ["start_date"]
    assert source.missing_fields(
        dict(sample_row, deleted_at=datetime(2025, 1, 1))
    ) == ["deleted_at IS NULL"]


@pytest.mark.asyncio
async def test_fetch_records_reads_query(source, sample_row):
    with patch("calsync.services.booking.fetch_rows", return_value=[sample_row]) as mock_fetch:
        rows = await source.fetch_records(http=None)

    assert rows == [sample_row]
    mock_fetch.assert_called_once()


def test_malformed_optional_dates_keep_the_booking(source):
    """Bad sale_date / fecha_preventa only affect their own description lines"""
    row = {
        "start_date": "2025-06-10",
        "artist_name": "X",
        "venue_name": "Y",
        "sale_date": "pronto",
        "fecha_preventa": "2025-05-02",
    }

    kept, items, skipped = prepare_items(source, [row])

    assert skipped == 0
    assert len(items) == 1
    assert items[0].title == "X - Y"
    assert "📅 Fecha de venta: pronto" in items[0].description
    assert "🎫 Preventa: 2/5/2025" in items[0].description
