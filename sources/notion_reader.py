"""Notion database reader for reminder rows."""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from sources.deadline import request_timeout

logger = logging.getLogger(__name__)


class NotionReader:
    """Reads reminder pages from a Notion database as four-cell rows."""

    BASE_URL = "https://api.notion.com/v1"
    NOTION_VERSION = "2022-06-28"
    HEADER_ROW = ['Name', 'Interval', 'Start', 'End']

    def __init__(self, api_key: str, database_id: str, timeout: int = 30):
        """
        Initialize the Notion reader.

        Args:
            api_key: Notion integration token
            database_id: ID of the reminder database
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.api_key = api_key
        self.database_id = database_id
        self.timeout = timeout

    def fetch_rows(
        self,
        target_date: Optional[date] = None,
        deadline: Optional[float] = None
    ) -> List[List[str]]:
        """
        Query the database and flatten each page into a row.

        When a target date is given, Notion pre-filters pages to those whose
        Start is on or before the date and whose End is empty or on or after
        it. A header row is prepended so the result has the same shape as a
        sheet read. Every page request is bounded by the deadline, so a long
        pagination stops once it passes.

        Args:
            target_date: Date used to pre-filter pages, or None for all pages
            deadline: Absolute time.monotonic() value the read must finish by

        Returns:
            Header row followed by one row per page

        Raises:
            requests.RequestException: If a request fails
            DeadlineExceeded: If the deadline passes before the last page
        """
        url = f"{self.BASE_URL}/databases/{self.database_id}/query"
        headers = {
            'Authorization': f"Bearer {self.api_key}",
            'Notion-Version': self.NOTION_VERSION,
            'Content-Type': 'application/json'
        }
        body: Dict[str, Any] = {}
        if target_date is not None:
            body['filter'] = self._build_filter(target_date)

        rows = [list(self.HEADER_ROW)]
        while True:
            response = requests.post(
                url,
                json=body,
                headers=headers,
                timeout=request_timeout(self.timeout, deadline)
            )
            response.raise_for_status()
            data = response.json()

            rows.extend(self._page_to_row(page) for page in data.get('results', []))

            if not data.get('has_more') or not data.get('next_cursor'):
                break
            body['start_cursor'] = data['next_cursor']

        logger.info(f"Fetched {len(rows) - 1} pages from Notion")
        return rows

    def _build_filter(self, target_date: date) -> Dict[str, Any]:
        day = target_date.isoformat()
        return {
            'and': [
                {'property': 'Start', 'date': {'on_or_before': day}},
                {
                    'or': [
                        {'property': 'End', 'date': {'is_empty': True}},
                        {'property': 'End', 'date': {'on_or_after': day}},
                    ]
                },
            ]
        }

    def _page_to_row(self, page: Dict[str, Any]) -> List[str]:
        """
        Convert a Notion page into [name, interval, start, end].

        Missing properties become empty cells so the row parser reports them.
        """
        properties = page.get('properties', {})

        title = properties.get('Name', {}).get('title') or []
        name = ''.join(part.get('plain_text', '') for part in title)

        select = properties.get('Interval', {}).get('select') or {}
        interval = select.get('name', '')

        return [
            name,
            interval,
            self._date_text(properties.get('Start', {})),
            self._date_text(properties.get('End', {})),
        ]

    def _date_text(self, prop: Dict[str, Any]) -> str:
        value = prop.get('date') or {}
        start = value.get('start') or ''
        # Datetime values carry a time part after the date
        return start[:10]
