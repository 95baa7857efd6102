"""Type definitions shared by every sync job"""

from dataclasses import dataclass, field
from datetime import date, datetime

from calsync.services.google_calendar.api_client import GCalEvent


class InvalidRecordError(ValueError):
    """A source record cannot be turned into a calendar item; skip it"""


# =============================================================================
# Calendar item
# =============================================================================


@dataclass(frozen=True)
class TimedWindow:
    """Start/end instants in a named time zone"""
    start: datetime
    end: datetime
    time_zone: str

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimedWindow needs timezone-aware datetimes")
        if self.end < self.start:
            raise ValueError(f"TimedWindow ends before it starts: {self.start} > {self.end}")


@dataclass(frozen=True)
class AllDayWindow:
    """Date range, end exclusive"""
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date <= self.start_date:
            raise ValueError(
                f"AllDayWindow must span at least one day: {self.start_date} - {self.end_date}"
            )


@dataclass(frozen=True)
class CalendarItem:
    """Normalized event, the same for every source"""
    title: str
    description: str
    window: TimedWindow | AllDayWindow
    location: str = ""
    color_id: str = "1"
    status: str = "confirmed"
    visibility: str = "public"

    @property
    def is_all_day(self) -> bool:
        return isinstance(self.window, AllDayWindow)

    @property
    def start_label(self) -> str:
        """Start as shown in log lines"""
        if isinstance(self.window, AllDayWindow):
            return self.window.start_date.isoformat()
        return self.window.start.isoformat()

    def to_gcal_event(self) -> GCalEvent:
        """Request body for events.insert"""
        if isinstance(self.window, AllDayWindow):
            start = {"date": self.window.start_date.isoformat()}
            end = {"date": self.window.end_date.isoformat()}
        else:
            start = {"dateTime": self.window.start.isoformat(), "timeZone": self.window.time_zone}
            end = {"dateTime": self.window.end.isoformat(), "timeZone": self.window.time_zone}

        event = GCalEvent(
            summary=self.title,
            description=self.description,
            start=start,
            end=end,
            status=self.status,
            visibility=self.visibility,
            colorId=self.color_id,
        )
        if self.location:
            event["location"] = self.location
        return event


# =============================================================================
# Results
# =============================================================================


@dataclass
class ResetResult:
    """Collection reset outcome"""
    found: int = 0
    deleted: int = 0
    failed: int = 0


@dataclass
class LoadResult:
    """Insert loop outcome"""
    inserted: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class RunResult:
    """Outcome of one sync job"""
    job: str
    calendar_id: str
    calendar_name: str
    total_records: int = 0
    valid_records: int = 0
    skipped: int = 0
    inserted: int = 0
    failed: int = 0
    deleted: int = 0
    delete_failed: int = 0
    reset_skipped: bool = False
    stats: dict[str, int] = field(default_factory=dict)
    first_date: date | None = None
    last_date: date | None = None
    past_records: int = 0
    future_records: int = 0
    calendar_item_count: int | None = None
    elapsed_seconds: float = 0.0
