"""Service account credentials for the Google Calendar API

The service account key is read from a local JSON file, or from the
CALSYNC_SERVICE_ACCOUNT_JSON environment variable (raw JSON or Base64).
The target calendars must be shared with the service account's email
with write permission.

The bearer token is obtained once per job run.
"""

import base64
import binascii
import json
import os
from pathlib import Path
from typing import Any, TypedDict

from google.auth.transport.requests import Request
from google.oauth2 import service_account

from calsync.lib.logger import setup_logger

logger = setup_logger(__name__)

CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"
SERVICE_ACCOUNT_ENV = "CALSYNC_SERVICE_ACCOUNT_JSON"


class CredentialsNotFoundError(FileNotFoundError):
    """No service account key is available"""


class ServiceAccountInfo(TypedDict, total=False):
    """Service account key file (subset)"""
    type: str
    project_id: str
    private_key_id: str
    private_key: str
    client_email: str
    client_id: str
    token_uri: str


def has_service_account(path: str) -> bool:
    """True when a key is available from the file or the environment"""
    return bool(os.environ.get(SERVICE_ACCOUNT_ENV)) or Path(path).is_file()


def _decode_service_account_json(raw: str) -> ServiceAccountInfo:
    """Parse raw JSON, or Base64-encoded JSON when it does not start with '{'"""
    text = raw.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to decode service_account_json as Base64: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse service_account_json: {e}") from e


def load_service_account(path: str) -> ServiceAccountInfo:
    """Load and validate the service account key

    Args:
        path: key file path (ignored when CALSYNC_SERVICE_ACCOUNT_JSON is set)

    Returns:
        Parsed key

    Raises:
        CredentialsNotFoundError: neither the env var nor the file exists
        ValueError: malformed key
    """
    raw = os.environ.get(SERVICE_ACCOUNT_ENV)
    if raw:
        info = _decode_service_account_json(raw)
    else:
        key_file = Path(path)
        if not key_file.is_file():
            raise CredentialsNotFoundError(f"Service account file not found: {path}")
        info = _decode_service_account_json(key_file.read_text(encoding="utf-8"))

    if not info.get("client_email") or not info.get("private_key"):
        raise ValueError("Service account key missing client_email or private_key")

    logger.info(f"Service account loaded: {info['client_email']} (project: {info.get('project_id', 'N/A')})")
    return info


def get_access_token(info: ServiceAccountInfo) -> str:
    """Exchange the service account key for a bearer token

    Args:
        info: service account key

    Returns:
        OAuth 2.0 access token scoped to calendar read/write
    """
    credentials = service_account.Credentials.from_service_account_info(
        info, scopes=[CALENDAR_SCOPE]
    )
    logger.info("Authenticating with Google...")
    credentials.refresh(Request())
    logger.info("Access token obtained")
    return credentials.token


def print_setup_instructions(path: str) -> None:
    """Print how to provision the service account key"""
    lines = [
        "=" * 60,
        "Service account setup",
        "=" * 60,
        "",
        "1. Open the Google Cloud Console: https://console.cloud.google.com/",
        "2. Create or select a project",
        "3. Enable the Google Calendar API:",
        "   https://console.cloud.google.com/apis/library/calendar-json.googleapis.com",
        "4. Create a service account:",
        "   https://console.cloud.google.com/iam-admin/serviceaccounts",
        "5. Download its JSON key",
        f"6. Save it as {path} (or set {SERVICE_ACCOUNT_ENV})",
        "7. Share each target calendar with the service account email",
        "   (\"Make changes to events\" permission)",
        "",
        "Then run: python -m calsync",
    ]
    print("\n".join(lines))
