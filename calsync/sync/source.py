"""Source strategy for the generic sync routine

A CalendarSource knows how to read its records, which of them are usable,
and how to map one record to a CalendarItem. Everything else (reset, load,
report) is shared.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Mapping
from zoneinfo import ZoneInfo

import httpx

from calsync.lib.config import DEFAULT_TIME_ZONE, JobConfig
from calsync.lib.logger import setup_logger
from calsync.sync.models import CalendarItem, InvalidRecordError

logger = setup_logger(__name__)

DEFAULT_COLOR_KEY = "default"


# =============================================================================
# Helpers
# =============================================================================


def parse_date(value: Any) -> date:
    """Nominal calendar date of a date, datetime or ISO-8601 string

    The date is taken as written; no timezone conversion is applied.

    Raises:
        InvalidRecordError: empty or unparseable value
    """
    if value is None or value == "":
        raise InvalidRecordError("missing date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise InvalidRecordError(f"invalid date: {value!r}") from None
    raise InvalidRecordError(f"invalid date: {value!r}")


def parse_time(value: Any) -> time:
    """Time of day from a time object or an "HH:MM[:SS]" string

    Raises:
        InvalidRecordError: unparseable value
    """
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, str):
        parts = value.strip().split(":")
        try:
            hour, minute = int(parts[0]), int(parts[1])
            second = int(float(parts[2])) if len(parts) > 2 else 0
            return time(hour, minute, second)
        except (IndexError, ValueError):
            raise InvalidRecordError(f"invalid time: {value!r}") from None
    raise InvalidRecordError(f"invalid time: {value!r}")


def format_es_ar(value: Any) -> str:
    """d/m/yyyy, as es-AR short dates are written"""
    d = parse_date(value)
    return f"{d.day}/{d.month}/{d.year}"


def format_optional_date(value: Any) -> str:
    """format_es_ar for optional fields; unparseable values are shown as written"""
    try:
        return format_es_ar(value)
    except InvalidRecordError:
        return str(value)


def lookup_color(table: Mapping[str, str], key: Any) -> str:
    """Color for ``key`` (compared as text), or the table's default entry"""
    if key not in (None, "") and str(key) in table:
        return table[str(key)]
    return table[DEFAULT_COLOR_KEY]


def first_present(*values: Any) -> Any:
    """First non-empty value, or None"""
    for value in values:
        if value not in (None, ""):
            return value
    return None


def extract_records(payload: Any, keys: Iterable[str]) -> list[dict[str, Any]]:
    """Records from a bare JSON array or an object wrapping it

    Args:
        payload: decoded JSON body
        keys: fields that may hold the array, tried in order

    Returns:
        The array, or an empty list for any other shape
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def nested(record: Mapping[str, Any], key: str, field: str) -> Any:
    """record[key][field] when record[key] is a mapping"""
    value = record.get(key)
    if isinstance(value, Mapping):
        return value.get(field)
    return None


# =============================================================================
# Strategy
# =============================================================================


class CalendarSource(ABC):
    """One data source feeding one calendar"""

    label: str = "records"
    # Leave the calendar untouched when nothing valid was fetched
    reset_when_empty: bool = True

    def __init__(self, config: JobConfig, time_zone: str = DEFAULT_TIME_ZONE):
        self.config = config
        self.time_zone = time_zone
        self.tz = ZoneInfo(time_zone)

    @abstractmethod
    async def fetch_records(self, http: httpx.AsyncClient) -> list[dict[str, Any]]:
        """Read every record from the source"""

    @abstractmethod
    def missing_fields(self, record: Mapping[str, Any]) -> list[str]:
        """Mandatory fields that are absent from the record"""

    @abstractmethod
    def raw_date(self, record: Mapping[str, Any]) -> Any:
        """The record's nominal date field, unparsed"""

    @abstractmethod
    def describe(self, record: Mapping[str, Any]) -> str:
        """Short identity for log lines"""

    @abstractmethod
    def to_calendar_item(self, record: Mapping[str, Any]) -> CalendarItem:
        """Map one valid record; raises InvalidRecordError on malformed input"""

    @property
    @abstractmethod
    def stats_dimensions(self) -> dict[str, Callable[[Mapping[str, Any]], Any]]:
        """Dimension name -> value getter, for distinct counts"""

    def record_date(self, record: Mapping[str, Any]) -> date:
        return parse_date(self.raw_date(record))

    def is_valid(self, record: Mapping[str, Any]) -> bool:
        """All mandatory fields present and the date parses"""
        missing = self.missing_fields(record)
        if missing:
            logger.warning(
                f"Skipping {self.describe(record)}: missing {', '.join(missing)}"
            )
            return False
        try:
            self.record_date(record)
        except InvalidRecordError as e:
            logger.warning(f"Skipping {self.describe(record)}: {e}")
            return False
        return True
