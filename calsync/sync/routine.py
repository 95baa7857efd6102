"""Clear-and-reload synchronization

The routine every job runs, whatever its source:

1. fetch records from the source
2. drop invalid records (counted as skipped)
3. transform the rest into calendar items
4. delete every event currently in the target calendar
5. insert the new items one by one
6. aggregate statistics and read the calendar back

Deletion and insertion are sequential and best-effort: one failing item is
logged and counted, the loop goes on. Nothing is rolled back.
"""

import time
from datetime import date
from typing import Any, Mapping, Sequence

import httpx

from calsync.lib.config import JobConfig
from calsync.lib.logger import setup_logger
from calsync.services.google_calendar.api_client import (
    CalendarApiClient,
    GCalCalendar,
    calendar_url,
)
from calsync.sync.models import (
    CalendarItem,
    InvalidRecordError,
    LoadResult,
    ResetResult,
    RunResult,
)
from calsync.sync.report import aggregate
from calsync.sync.source import CalendarSource

logger = setup_logger(__name__)

DELETE_PROGRESS_EVERY = 50
INSERT_PROGRESS_EVERY = 5


class CalendarNotFoundError(ValueError):
    """The target calendar cannot be resolved"""


def _http_error_detail(e: Exception) -> str:
    if isinstance(e, httpx.HTTPStatusError):
        return f"{e.response.status_code} {e.response.text}"
    return str(e)


# =============================================================================
# Calendar resolution
# =============================================================================


async def resolve_calendar(client: CalendarApiClient, config: JobConfig) -> GCalCalendar:
    """Find the target calendar

    With force_calendar_id the configured ID is fetched directly. Otherwise
    the calendar list is searched by ID, then by display name.

    Raises:
        CalendarNotFoundError: nothing matches
        httpx.HTTPStatusError: calendars.get failed
    """
    logger.info(f"Connecting to calendar: {config.calendar_name}")

    if config.force_calendar_id:
        if not config.calendar_id:
            raise CalendarNotFoundError(
                f"No calendar ID configured for {config.key} "
                f"(set CALSYNC_{config.key.upper()}_CALENDAR_ID)"
            )
        calendar = await client.get_calendar(config.calendar_id)
    else:
        calendars = await client.fetch_calendar_list()
        logger.info(f"{len(calendars)} calendars visible to the service account")
        calendar = next(
            (c for c in calendars if config.calendar_id and c.get("id") == config.calendar_id),
            None,
        ) or next(
            (c for c in calendars if c.get("summary") == config.calendar_name),
            None,
        )
        if calendar is None:
            raise CalendarNotFoundError(f"Calendar not found: {config.calendar_name}")

    logger.info(
        f"Calendar found: {calendar.get('summary')} "
        f"(id: {calendar['id']}, time zone: {calendar.get('timeZone', 'N/A')})"
    )
    return calendar


# =============================================================================
# Filter + transform
# =============================================================================


def prepare_items(
    source: CalendarSource,
    records: Sequence[Mapping[str, Any]],
) -> tuple[list[Mapping[str, Any]], list[CalendarItem], int]:
    """Filter and transform source records

    Returns:
        (records kept, their calendar items in the same order, skipped count)
    """
    kept: list[Mapping[str, Any]] = []
    items: list[CalendarItem] = []
    skipped = 0

    for record in records:
        if not source.is_valid(record):
            skipped += 1
            continue
        try:
            item = source.to_calendar_item(record)
        except InvalidRecordError as e:
            logger.warning(f"Skipping {source.describe(record)}: {e}")
            skipped += 1
            continue
        kept.append(record)
        items.append(item)

    return kept, items, skipped


# =============================================================================
# Reset + load
# =============================================================================


async def reset_calendar(client: CalendarApiClient, calendar_id: str) -> ResetResult:
    """Delete every event in the calendar, one at a time

    Raises:
        httpx.HTTPError: listing the events failed
    """
    events = await client.list_events(calendar_id)
    result = ResetResult(found=len(events))
    logger.info(f"Found {result.found} existing events to delete")

    for event in events:
        try:
            await client.delete_event(calendar_id, event["id"])
            result.deleted += 1
            if result.deleted % DELETE_PROGRESS_EVERY == 0:
                logger.info(f"Progress: {result.deleted}/{result.found} events deleted")
        except Exception as e:
            result.failed += 1
            logger.error(f"Failed to delete event {event.get('id')}: {_http_error_detail(e)}")

    logger.info(f"Deleted {result.deleted} events")
    if result.failed:
        logger.warning(f"{result.failed} events could not be deleted")
    return result


async def load_items(
    client: CalendarApiClient,
    calendar_id: str,
    items: Sequence[CalendarItem],
) -> LoadResult:
    """Insert items one at a time; a failed insert does not stop the loop"""
    result = LoadResult()
    total = len(items)
    logger.info(f"Inserting {total} events into {calendar_id}")

    for index, item in enumerate(items, start=1):
        try:
            created = await client.insert_event(calendar_id, item.to_gcal_event())
            result.inserted += 1
            logger.debug(
                f"Inserted {index}/{total}: {item.title} ({item.start_label}) "
                f"-> {created.get('id')}"
            )
            if result.inserted % INSERT_PROGRESS_EVERY == 0:
                logger.info(f"Progress: {result.inserted}/{total} events inserted")
        except Exception as e:
            result.failed += 1
            message = f"Failed to insert {index}/{total} '{item.title}': {_http_error_detail(e)}"
            result.errors.append(message)
            logger.error(message)

    logger.info(f"Insert completed: {result.inserted} inserted, {result.failed} failed")
    return result


async def _read_back(client: CalendarApiClient, result: RunResult) -> None:
    """Count the events now in the calendar; failures are only logged"""
    try:
        calendar = await client.get_calendar(result.calendar_id)
        events = await client.list_events(result.calendar_id)
        result.calendar_item_count = len(events)
        logger.info(
            f"Calendar {calendar.get('summary')} now holds {len(events)} events "
            f"({calendar_url(result.calendar_id)})"
        )
    except httpx.HTTPError as e:
        logger.warning(f"Could not read calendar back: {e}")


# =============================================================================
# Job
# =============================================================================


async def run_sync_job(
    source: CalendarSource,
    client: CalendarApiClient,
    http: httpx.AsyncClient,
    today: date | None = None,
) -> RunResult:
    """Replace the contents of the source's calendar with its current records

    Args:
        source: data source strategy
        client: authenticated calendar client
        http: HTTP client for API-backed sources
        today: reference day for the past/future split

    Returns:
        Run result

    Raises:
        Any source read, authentication or calendar resolution error.
    """
    start_time = time.perf_counter()
    config = source.config
    logger.info(f"Starting sync: {config.calendar_name}")

    try:
        calendar = await resolve_calendar(client, config)
        calendar_id = calendar["id"]
        result = RunResult(job=config.key, calendar_id=calendar_id, calendar_name=config.calendar_name)

        # 1. fetch
        records = await source.fetch_records(http)
        result.total_records = len(records)
        logger.info(f"Fetched {len(records)} {source.label}")

        # 2-3. filter + transform
        kept, items, skipped = prepare_items(source, records)
        result.valid_records = len(kept)
        result.skipped = skipped
        logger.info(f"Valid {source.label}: {len(kept)} ({skipped} skipped)")

        aggregate(source, kept, result, today=today)

        if not items and not source.reset_when_empty:
            logger.warning(f"No valid {source.label}; leaving {config.calendar_name} untouched")
            result.reset_skipped = True
            result.elapsed_seconds = round(time.perf_counter() - start_time, 2)
            return result

        # 4. reset
        logger.info("Step 1: deleting all existing events...")
        reset = await reset_calendar(client, calendar_id)
        result.deleted = reset.deleted
        result.delete_failed = reset.failed

        # 5. load
        logger.info("Step 2: loading events...")
        load = await load_items(client, calendar_id, items)
        result.inserted = load.inserted
        result.failed = load.failed

        # 6. read back
        await _read_back(client, result)

        result.elapsed_seconds = round(time.perf_counter() - start_time, 2)
        logger.info(
            f"Sync of {config.calendar_name} completed in {result.elapsed_seconds}s: "
            f"{result.inserted} inserted, {result.failed} failed, {result.skipped} skipped"
        )
        return result

    except Exception as e:
        elapsed = round(time.perf_counter() - start_time, 2)
        logger.error(f"Sync of {config.calendar_name} failed after {elapsed}s: {e}")
        raise
