"""Google Sheets reader for reminder rows."""
import json
import logging
from datetime import date
from typing import Any, List, Optional
from urllib.parse import quote

import requests
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from sources.deadline import request_timeout

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]


def build_sheets_session(credentials_json: str) -> requests.Session:
    """
    Build an authorized HTTP session from a service-account key.

    Args:
        credentials_json: Service-account key file contents (JSON)

    Returns:
        requests.Session that signs requests with the service account
    """
    info = json.loads(credentials_json)
    credentials = service_account.Credentials.from_service_account_info(
        info, scopes=SCOPES
    )
    return AuthorizedSession(credentials)


class GoogleSheetReader:
    """Reads reminder rows from a Google Sheets spreadsheet."""

    BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
    DEFAULT_RANGE = "reminder!A:D"
    # Rows with a blank end date come back without the trailing cell
    MIN_CELLS_TO_PAD = 3
    ROW_WIDTH = 4

    def __init__(
        self,
        session: requests.Session,
        spreadsheet_id: str,
        read_range: str = DEFAULT_RANGE,
        timeout: int = 30
    ):
        """
        Initialize the sheet reader.

        Args:
            session: Authorized HTTP session (see build_sheets_session)
            spreadsheet_id: ID of the spreadsheet to read
            read_range: A1 notation range holding the reminder table
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.session = session
        self.spreadsheet_id = spreadsheet_id
        self.read_range = read_range
        self.timeout = timeout

    def fetch_rows(
        self,
        target_date: Optional[date] = None,
        deadline: Optional[float] = None
    ) -> List[List[Any]]:
        """
        Fetch every row of the reminder range, header included.

        The sheet is always read in full; target_date is accepted for
        interface compatibility and filtering happens in the caller.

        Args:
            target_date: Unused
            deadline: Absolute time.monotonic() value the read must finish by

        Returns:
            List of rows

        Raises:
            requests.RequestException: If the request fails
            DeadlineExceeded: If the deadline has already passed
        """
        url = f"{self.BASE_URL}/{self.spreadsheet_id}/values/{quote(self.read_range, safe='')}"
        logger.info(f"Fetching sheet range {self.read_range}")

        response = self.session.get(url, timeout=request_timeout(self.timeout, deadline))
        response.raise_for_status()

        values = response.json().get('values', [])
        rows = [self._pad_row(row) for row in values]

        logger.info(f"Fetched {len(rows)} rows from sheet")
        return rows

    def _pad_row(self, row: List[Any]) -> List[Any]:
        if self.MIN_CELLS_TO_PAD <= len(row) < self.ROW_WIDTH:
            return row + [''] * (self.ROW_WIDTH - len(row))
        return row
