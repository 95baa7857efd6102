"""Generic clear-and-reload sync routine

Module layout:
- models.py: CalendarItem, time windows, results
- source.py: CalendarSource strategy and parsing helpers
- routine.py: reset, load and the job runner
- report.py: statistics and summary text
"""

from calsync.sync.models import CalendarItem, InvalidRecordError, RunResult
from calsync.sync.routine import run_sync_job
from calsync.sync.source import CalendarSource

__all__ = ["CalendarItem", "CalendarSource", "InvalidRecordError", "RunResult", "run_sync_job"]
