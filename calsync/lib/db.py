"""PostgreSQL access for the database-backed jobs

Read-only. One connection per query, always closed afterwards.
TLS is required but the server certificate is not verified
(libpq ``sslmode=require`` semantics).
"""

from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2.extras import RealDictCursor

from calsync.lib.logger import setup_logger

logger = setup_logger(__name__)

SSL_MODE = "require"


@contextmanager
def get_connection(database_url: str) -> Generator[psycopg2.extensions.connection, None, None]:
    """DB connection context manager"""
    if not database_url:
        raise ValueError("CALSYNC_DATABASE_URL (or DATABASE_URL) is required")

    conn = psycopg2.connect(database_url, sslmode=SSL_MODE)
    try:
        yield conn
    finally:
        conn.close()
        logger.info("Database connection closed")


def fetch_rows(database_url: str, query: str) -> list[dict[str, Any]]:
    """Run a parameterless read-only query and return rows as dicts

    Args:
        database_url: PostgreSQL connection string
        query: fixed SQL query

    Returns:
        Rows keyed by column name
    """
    with get_connection(database_url) as conn:
        conn.set_session(readonly=True)
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(query)
            rows = cur.fetchall()

    return [dict(row) for row in rows]
