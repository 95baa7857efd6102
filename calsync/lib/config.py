"""Configuration for the calendar sync jobs

Settings come from environment variables. A local ``.env`` file is loaded
when present (development only).

Each job gets a static ``JobConfig``: target calendar, display name, the
force-calendar-id flag and either a SQL query or an HTTP endpoint.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_SERVICE_ACCOUNT_FILE = "service-account.json"
DEFAULT_TIME_ZONE = "America/Argentina/Buenos_Aires"
DEFAULT_HTTP_TIMEOUT = 30.0

DEFAULT_SHOWS_API_URL = "https://malbec-tcsm.vercel.app/api/calendar/events-shows"
DEFAULT_RELEASES_API_URL = "https://malbec-records2-0.vercel.app/api/releases"
DEFAULT_RELEASES_API_ORIGIN = "https://malbec.vercel.app"

JOB_KEYS = ("live", "management", "booking", "releases")

DEFAULT_CALENDAR_NAMES = {
    "live": "Live",
    "management": "Management",
    "booking": "Booking",
    "releases": "Records",
}

MANAGEMENT_QUERY = """
    SELECT
        me.artist_id,
        me.show_date,
        me.country,
        me.city,
        me.venue_id,
        me.nombre_festi,
        me.status,
        me.aforo,
        me.formato,
        me.acuerdo,
        me.garantia,
        me.overage,
        me.wht,
        me.com_promotor,
        me.spliteo,
        a.name AS artist_name,
        a.genre AS artist_genre,
        v.name AS venue_name,
        v.address AS venue_address
    FROM mgm_events me
    LEFT JOIN artists a ON me.artist_id = a.id
    LEFT JOIN venues v ON me.venue_id = v.id
    WHERE me.show_date IS NOT NULL
    AND me.artist_id IS NOT NULL
    ORDER BY me.show_date ASC
"""

BOOKING_QUERY = """
    SELECT
        be.id,
        be.title,
        be.description,
        be.start_date,
        be.end_date,
        be.venue_id,
        be.artist_id,
        be.ticketera_id,
        be.category,
        be.status,
        be.capacity,
        be.tickets_sold,
        be.price,
        be.currency,
        be.deleted_at,
        be.show_type,
        be.festival_name,
        be.city,
        be.country,
        be.sale_date,
        be.hora_salida,
        be.comments,
        be.fecha_preventa,
        be.hs_preventa,
        be.aforo,
        be.formato,
        a.name AS artist_name,
        a.genre AS artist_genre,
        v.name AS venue_name,
        v.address AS venue_address,
        t.name AS ticketera_name,
        t.url AS ticketera_url
    FROM booking_events be
    LEFT JOIN artists a ON be.artist_id = a.id
    LEFT JOIN venues v ON be.venue_id = v.id
    LEFT JOIN ticketeras t ON be.ticketera_id = t.id
    WHERE be.start_date IS NOT NULL
    AND be.deleted_at IS NULL
    ORDER BY be.start_date ASC
"""


# =============================================================================
# Types
# =============================================================================


@dataclass
class Settings:
    """Process-wide settings, loaded once at startup"""
    service_account_file: str = DEFAULT_SERVICE_ACCOUNT_FILE
    database_url: str | None = None
    time_zone: str = DEFAULT_TIME_ZONE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    force_calendar_id: bool = True
    calendar_ids: dict[str, str] = field(default_factory=dict)
    calendar_names: dict[str, str] = field(default_factory=dict)
    shows_api_url: str = DEFAULT_SHOWS_API_URL
    releases_api_url: str = DEFAULT_RELEASES_API_URL
    releases_api_origin: str = DEFAULT_RELEASES_API_ORIGIN


@dataclass
class JobConfig:
    """Static configuration of one sync job"""
    key: str
    calendar_id: str
    calendar_name: str
    force_calendar_id: bool = True
    query: str | None = None
    database_url: str | None = None
    api_url: str | None = None
    api_headers: dict[str, str] = field(default_factory=dict)


# =============================================================================
# Loading
# =============================================================================


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Read settings from the environment (and .env when present)"""
    load_dotenv()

    calendar_ids = {}
    calendar_names = {}
    for key in JOB_KEYS:
        env_prefix = f"CALSYNC_{key.upper()}"
        calendar_ids[key] = os.environ.get(f"{env_prefix}_CALENDAR_ID", "")
        calendar_names[key] = os.environ.get(
            f"{env_prefix}_CALENDAR_NAME", DEFAULT_CALENDAR_NAMES[key]
        )

    return Settings(
        service_account_file=os.environ.get(
            "CALSYNC_SERVICE_ACCOUNT_FILE", DEFAULT_SERVICE_ACCOUNT_FILE
        ),
        database_url=os.environ.get("CALSYNC_DATABASE_URL") or os.environ.get("DATABASE_URL"),
        time_zone=os.environ.get("CALSYNC_TIME_ZONE", DEFAULT_TIME_ZONE),
        http_timeout=float(os.environ.get("CALSYNC_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))),
        force_calendar_id=_env_flag("CALSYNC_FORCE_CALENDAR_ID", True),
        calendar_ids=calendar_ids,
        calendar_names=calendar_names,
        shows_api_url=os.environ.get("CALSYNC_SHOWS_API_URL", DEFAULT_SHOWS_API_URL),
        releases_api_url=os.environ.get("CALSYNC_RELEASES_API_URL", DEFAULT_RELEASES_API_URL),
        releases_api_origin=os.environ.get(
            "CALSYNC_RELEASES_API_ORIGIN", DEFAULT_RELEASES_API_ORIGIN
        ),
    )


def build_job_configs(settings: Settings) -> dict[str, JobConfig]:
    """Build the four job configurations, keyed and ordered by job key"""
    def base(key: str) -> dict:
        return {
            "key": key,
            "calendar_id": settings.calendar_ids.get(key, ""),
            "calendar_name": settings.calendar_names.get(key, DEFAULT_CALENDAR_NAMES[key]),
            "force_calendar_id": settings.force_calendar_id,
        }

    return {
        "live": JobConfig(**base("live"), api_url=settings.shows_api_url),
        "management": JobConfig(
            **base("management"),
            query=MANAGEMENT_QUERY,
            database_url=settings.database_url,
        ),
        "booking": JobConfig(
            **base("booking"),
            query=BOOKING_QUERY,
            database_url=settings.database_url,
        ),
        "releases": JobConfig(
            **base("releases"),
            api_url=settings.releases_api_url,
            api_headers={"Origin": settings.releases_api_origin},
        ),
    }
