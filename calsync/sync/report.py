"""Run statistics and the human-readable job summary"""

from datetime import date
from typing import Any, Hashable, Mapping, Sequence

from calsync.services.google_calendar.api_client import calendar_url
from calsync.sync.models import RunResult
from calsync.sync.source import CalendarSource


def distinct_count(records: Sequence[Mapping[str, Any]], getter) -> int:
    """Number of distinct non-empty values; unhashable values compare as text"""
    return len({
        value if isinstance(value, Hashable) else str(value)
        for value in map(getter, records)
        if value not in (None, "")
    })


def aggregate(
    source: CalendarSource,
    records: Sequence[Mapping[str, Any]],
    result: RunResult,
    today: date | None = None,
) -> RunResult:
    """Fill the source-derived statistics of ``result``

    Args:
        source: strategy that produced the records
        records: the records that became calendar items
        result: result to update in place
        today: reference day for the past/future split

    Returns:
        The same result
    """
    today = today or date.today()

    result.stats = {
        name: distinct_count(records, getter)
        for name, getter in source.stats_dimensions.items()
    }

    dates = sorted(source.record_date(record) for record in records)
    if dates:
        result.first_date = dates[0]
        result.last_date = dates[-1]
    result.past_records = sum(1 for d in dates if d < today)
    result.future_records = len(dates) - result.past_records

    return result


def _es_ar(d: date) -> str:
    return f"{d.day}/{d.month}/{d.year}"


def format_run_report(result: RunResult) -> str:
    """Multi-line summary of one job"""
    lines = [
        "=" * 60,
        f"{result.calendar_name}: sync completed in {result.elapsed_seconds}s",
        "=" * 60,
        f"  Records fetched: {result.total_records}",
        f"  Valid records:   {result.valid_records}",
        f"  Skipped:         {result.skipped}",
    ]

    if result.reset_skipped:
        lines.append("  Calendar left untouched (no valid records)")
    else:
        lines += [
            f"  Deleted:         {result.deleted} (failed: {result.delete_failed})",
            f"  Inserted:        {result.inserted}",
            f"  Failed:          {result.failed}",
        ]

    if result.stats:
        lines.append("  Statistics:")
        lines += [f"    - {name}: {count}" for name, count in result.stats.items()]

    if result.first_date and result.last_date:
        lines.append(f"  Date range: {_es_ar(result.first_date)} - {_es_ar(result.last_date)}")
        lines.append(f"  Past: {result.past_records}, upcoming: {result.future_records}")

    if result.calendar_item_count is not None:
        lines.append(f"  Items now in calendar: {result.calendar_item_count}")

    lines.append(f"  URL: {calendar_url(result.calendar_id)}")
    return "\n".join(lines)
