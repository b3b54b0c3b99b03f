"""
Google Sheets v4 values API client.

Authenticates with a service account (google-auth) and talks to the REST API
through `AuthorizedSession`, which refreshes the access token as needed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional
from urllib.parse import quote

from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
_TIMEOUT_SECONDS = 15


def load_service_account_credentials(
    credentials_json: Optional[str] = None,
    credentials_file: Optional[str] = None,
) -> service_account.Credentials:
    if credentials_json:
        try:
            info = json.loads(credentials_json)
        except ValueError as exc:
            raise ConfigurationError("GOOGLE_SHEETS_CREDENTIALS is not valid JSON") from exc
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    if credentials_file:
        return service_account.Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
    raise ConfigurationError(
        "Google Sheets credentials not configured. Set GOOGLE_SHEETS_CREDENTIALS "
        "or GOOGLE_SHEETS_CREDENTIALS_FILE."
    )


class GoogleSheetsClient:
    """Thin wrapper over the `spreadsheets.values` endpoints used by the repositories."""

    def __init__(self, spreadsheet_id: str, session: Any) -> None:
        if not spreadsheet_id:
            raise ConfigurationError("Missing GOOGLE_SHEETS_ID.")
        self._spreadsheet_id = spreadsheet_id
        self._session = session

    @classmethod
    def from_credentials(
        cls,
        spreadsheet_id: str,
        credentials_json: Optional[str] = None,
        credentials_file: Optional[str] = None,
    ) -> "GoogleSheetsClient":
        credentials = load_service_account_credentials(credentials_json, credentials_file)
        logger.info("Google Sheets connection initialized")
        return cls(spreadsheet_id, AuthorizedSession(credentials))

    def _values_url(self, range_: str, suffix: str = "") -> str:
        return f"{_BASE_URL}/{self._spreadsheet_id}/values/{quote(range_, safe='!:')}{suffix}"

    def read_range(self, range_: str) -> List[List[str]]:
        response = self._session.get(self._values_url(range_), timeout=_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.json().get("values", [])

    def append_row(self, range_: str, values: List[str]) -> None:
        response = self._session.post(
            self._values_url(range_, ":append"),
            params={"valueInputOption": "RAW"},
            json={"values": [values]},
            timeout=_TIMEOUT_SECONDS,
        )
        response.raise_for_status()

    def update_row(self, range_: str, values: List[str]) -> None:
        response = self._session.put(
            self._values_url(range_),
            params={"valueInputOption": "RAW"},
            json={"values": [values]},
            timeout=_TIMEOUT_SECONDS,
        )
        response.raise_for_status()


__all__ = ["GoogleSheetsClient", "load_service_account_credentials", "SCOPES"]
