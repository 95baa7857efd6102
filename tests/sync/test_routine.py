"""Generic clear-and-reload routine tests"""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from calsync.sync.models import AllDayWindow, CalendarItem, InvalidRecordError
from calsync.sync.report import format_run_report
from calsync.sync.routine import (
    CalendarNotFoundError,
    load_items,
    reset_calendar,
    resolve_calendar,
    run_sync_job,
)
from calsync.sync.source import CalendarSource


# =============================================================================
# Fixtures
# =============================================================================


class StubSource(CalendarSource):
    """Records are {"name", "day"}; "bad" in name fails the transform"""

    label = "stubs"

    def __init__(self, config, records=None, reset_when_empty=True):
        super().__init__(config)
        self.records = records or []
        self.reset_when_empty = reset_when_empty

    async def fetch_records(self, http):
        return self.records

    def missing_fields(self, record):
        return [] if record.get("name") else ["name"]

    def raw_date(self, record):
        return record.get("day")

    def describe(self, record):
        return f"stub {record.get('name')}"

    @property
    def stats_dimensions(self):
        return {"names": lambda r: r.get("name")}

    def to_calendar_item(self, record):
        if "bad" in record["name"]:
            raise InvalidRecordError("unusable")
        d = self.record_date(record)
        return CalendarItem(
            title=record["name"],
            description="",
            window=AllDayWindow(d, d + timedelta(days=1)),
        )


def _item(title: str) -> CalendarItem:
    return CalendarItem(
        title=title,
        description="",
        window=AllDayWindow(date(2025, 1, 1), date(2025, 1, 2)),
    )


def _existing(n: int) -> list[dict]:
    return [{"id": f"old-{i}", "summary": f"Old {i}"} for i in range(n)]


# =============================================================================
# Reset
# =============================================================================


@pytest.mark.asyncio
async def test_reset_deletes_everything(fake_client):
    fake_client.events = {e["id"]: e for e in _existing(120)}

    result = await reset_calendar(fake_client, "cal-1")

    assert result.found == 120
    assert result.deleted == 120
    assert result.failed == 0
    assert await fake_client.list_events("cal-1") == []


@pytest.mark.asyncio
async def test_reset_counts_failures_and_continues(fake_client):
    fake_client.events = {e["id"]: e for e in _existing(5)}
    fake_client.fail_delete = {"old-1", "old-3"}

    result = await reset_calendar(fake_client, "cal-1")

    assert result.found == 5
    assert result.deleted == 3
    assert result.failed == 2
    assert sorted(fake_client.events) == ["old-1", "old-3"]


@pytest.mark.asyncio
async def test_reset_empty_calendar(fake_client):
    result = await reset_calendar(fake_client, "cal-1")
    assert (result.found, result.deleted, result.failed) == (0, 0, 0)


# =============================================================================
# Load
# =============================================================================


@pytest.mark.asyncio
async def test_load_inserts_in_order(fake_client):
    items = [_item(f"Event {i}") for i in range(7)]

    result = await load_items(fake_client, "cal-1", items)

    assert result.inserted == 7
    assert result.failed == 0
    assert [e["summary"] for e in fake_client.inserted] == [f"Event {i}" for i in range(7)]


@pytest.mark.asyncio
async def test_load_single_failure_does_not_stop(fake_client):
    fake_client.fail_insert = {"Event 2"}
    items = [_item(f"Event {i}") for i in range(4)]

    result = await load_items(fake_client, "cal-1", items)

    assert result.inserted == 3
    assert result.failed == 1
    assert len(result.errors) == 1
    assert "Event 2" in result.errors[0]
    assert "400" in result.errors[0]


# =============================================================================
# Calendar resolution
# =============================================================================


@pytest.mark.asyncio
async def test_resolve_forced_id(fake_client, make_config):
    calendar = await resolve_calendar(fake_client, make_config())
    assert calendar["id"] == "cal-1"


@pytest.mark.asyncio
async def test_resolve_forced_without_id(fake_client, make_config):
    with pytest.raises(CalendarNotFoundError, match="CALSYNC_LIVE_CALENDAR_ID"):
        await resolve_calendar(fake_client, make_config(calendar_id=""))


@pytest.mark.asyncio
async def test_resolve_by_name(fake_client, make_config):
    fake_client.calendar_list = [
        {"id": "other", "summary": "Other"},
        {"id": "cal-1", "summary": "Live"},
    ]
    config = make_config(calendar_id="", calendar_name="Live", force_calendar_id=False)

    calendar = await resolve_calendar(fake_client, config)

    assert calendar["id"] == "cal-1"


@pytest.mark.asyncio
async def test_resolve_by_id_before_name(fake_client, make_config):
    fake_client.calendar_list = [
        {"id": "by-name", "summary": "Live"},
        {"id": "by-id", "summary": "Something else"},
    ]
    config = make_config(calendar_id="by-id", calendar_name="Live", force_calendar_id=False)

    calendar = await resolve_calendar(fake_client, config)

    assert calendar["id"] == "by-id"


@pytest.mark.asyncio
async def test_resolve_not_found(fake_client, make_config):
    config = make_config(calendar_id="", calendar_name="Nope", force_calendar_id=False)
    with pytest.raises(CalendarNotFoundError, match="Nope"):
        await resolve_calendar(fake_client, config)


# =============================================================================
# Job
# =============================================================================


@pytest.mark.asyncio
async def test_run_sync_job_replaces_contents(fake_client, make_config):
    fake_client.events = {e["id"]: e for e in _existing(3)}
    source = StubSource(
        make_config(),
        records=[
            {"name": "a", "day": "2024-01-01"},
            {"name": "b", "day": "2030-01-01"},
            {"name": "", "day": "2030-01-02"},
            {"name": "bad one", "day": "2030-01-03"},
            {"name": "c", "day": "not a date"},
        ],
    )

    result = await run_sync_job(source, fake_client, http=MagicMock(), today=date(2025, 1, 1))

    assert result.total_records == 5
    assert result.valid_records == 2
    assert result.skipped == 3
    assert result.deleted == 3
    assert result.inserted == 2
    assert result.failed == 0
    assert result.calendar_item_count == 2
    assert result.stats == {"names": 2}
    assert result.first_date == date(2024, 1, 1)
    assert result.last_date == date(2030, 1, 1)
    assert (result.past_records, result.future_records) == (1, 1)
    assert sorted(e["summary"] for e in fake_client.events.values()) == ["a", "b"]

    report = format_run_report(result)
    assert "Inserted:        2" in report
    assert "1/1/2024 - 1/1/2030" in report


@pytest.mark.asyncio
async def test_run_sync_job_empty_source_still_resets(fake_client, make_config):
    fake_client.events = {e["id"]: e for e in _existing(2)}
    source = StubSource(make_config(), records=[])

    result = await run_sync_job(source, fake_client, http=MagicMock())

    assert result.deleted == 2
    assert result.inserted == 0
    assert fake_client.events == {}


@pytest.mark.asyncio
async def test_run_sync_job_empty_source_no_reset(fake_client, make_config):
    fake_client.events = {e["id"]: e for e in _existing(2)}
    source = StubSource(make_config(), records=[], reset_when_empty=False)

    result = await run_sync_job(source, fake_client, http=MagicMock())

    assert result.reset_skipped is True
    assert len(fake_client.events) == 2
    assert "left untouched" in format_run_report(result)


@pytest.mark.asyncio
async def test_run_sync_job_fetch_error_propagates(fake_client, make_config):
    source = StubSource(make_config())
    source.fetch_records = AsyncMock(side_effect=ConnectionError("db down"))
    fake_client.events = {e["id"]: e for e in _existing(2)}

    with pytest.raises(ConnectionError, match="db down"):
        await run_sync_job(source, fake_client, http=MagicMock())

    assert len(fake_client.events) == 2
