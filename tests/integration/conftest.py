"""Integration test fixtures and configuration."""

import os

import pytest


@pytest.fixture(scope="session")
def database_url() -> str:
    """Return database connection string, or skip without one."""
    url = os.environ.get("CALSYNC_DATABASE_URL") or os.environ.get("DATABASE_URL")
    if not url:
        pytest.skip("CALSYNC_DATABASE_URL is not set")
    return url
