"""Calendar sync orchestrator

Runs the jobs one after another: Live → Management → Booking → Releases.
A failing job is logged and recorded; the next one still runs.
"""

import asyncio
import time
from dataclasses import dataclass, field

import httpx

from calsync.lib.config import JobConfig, Settings, build_job_configs
from calsync.lib.credentials import get_access_token, load_service_account
from calsync.lib.logger import setup_logger
from calsync.services.booking import BookingEventsSource
from calsync.services.google_calendar import CalendarApiClient, calendar_url
from calsync.services.live import LiveShowsSource
from calsync.services.management import ManagementEventsSource
from calsync.services.releases import ReleasesSource
from calsync.sync import CalendarSource, RunResult, run_sync_job
from calsync.sync.report import format_run_report

logger = setup_logger(__name__)

SOURCES: dict[str, type[CalendarSource]] = {
    "live": LiveShowsSource,
    "management": ManagementEventsSource,
    "booking": BookingEventsSource,
    "releases": ReleasesSource,
}


@dataclass
class Scoreboard:
    """Per-job outcome of a full run"""
    succeeded: dict[str, bool] = field(default_factory=dict)
    results: dict[str, RunResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return sum(1 for ok in self.succeeded.values() if ok)

    @property
    def all_succeeded(self) -> bool:
        return bool(self.succeeded) and all(self.succeeded.values())

    def summary(self) -> str:
        lines = ["=" * 60, "Summary", "=" * 60]
        for key, ok in self.succeeded.items():
            status = "OK" if ok else f"FAILED ({self.errors.get(key, 'unknown error')})"
            lines.append(f"  {key}: {status}")
        lines.append(f"{self.success_count}/{len(self.succeeded)} calendars updated")

        if self.all_succeeded:
            lines.append("")
            lines.append("Calendars:")
            for result in self.results.values():
                lines.append(f"  {result.calendar_name}: {calendar_url(result.calendar_id)}")
        return "\n".join(lines)


def build_source(config: JobConfig, settings: Settings) -> CalendarSource:
    return SOURCES[config.key](config, time_zone=settings.time_zone)


async def run_job(config: JobConfig, settings: Settings) -> RunResult:
    """Authenticate and run one sync job

    Args:
        config: job configuration
        settings: process settings (credentials path, time zone, timeout)

    Returns:
        Run result

    Raises:
        CredentialsNotFoundError: no service account key
        Any error raised by the sync routine.
    """
    info = load_service_account(settings.service_account_file)
    access_token = await asyncio.to_thread(get_access_token, info)

    source = build_source(config, settings)
    async with httpx.AsyncClient(timeout=settings.http_timeout) as http:
        client = CalendarApiClient(http, access_token)
        result = await run_sync_job(source, client, http)

    print(format_run_report(result))
    return result


async def run_all_jobs(
    settings: Settings,
    configs: dict[str, JobConfig] | None = None,
) -> Scoreboard:
    """Run every job sequentially, continuing past failures

    Args:
        settings: process settings
        configs: job configurations (default: built from settings)

    Returns:
        Scoreboard
    """
    start_time = time.perf_counter()
    configs = configs or build_job_configs(settings)
    board = Scoreboard()
    logger.info(f"Starting full calendar sync ({len(configs)} jobs)")

    for step, (key, config) in enumerate(configs.items(), start=1):
        logger.info(f"Step {step}: {config.calendar_name}...")
        try:
            board.results[key] = await run_job(config, settings)
            board.succeeded[key] = True
        except Exception as e:
            board.succeeded[key] = False
            board.errors[key] = str(e)
            logger.error(f"Job {key} failed: {e}")

    elapsed = round(time.perf_counter() - start_time, 2)
    logger.info(
        f"Full calendar sync completed in {elapsed}s: "
        f"{board.success_count}/{len(configs)} calendars updated"
    )
    if not board.all_succeeded:
        failed = [key for key, ok in board.succeeded.items() if not ok]
        logger.warning(f"Some jobs failed: {failed}")

    print(board.summary())
    return board
