"""Discord webhook notifier for reminder schedules."""
import logging
from datetime import date
from typing import Any, Dict, List

import requests

from processor.models import Schedule

logger = logging.getLogger(__name__)

GREEN = 0x3fb950
GRAY = 0xcccccc

WEEKDAY_NAMES = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')


class DiscordNotifier:
    """Posts schedules to a Discord channel through a webhook."""

    MAX_EMBEDS_PER_MESSAGE = 10  # Discord webhook limit
    MAX_FIELDS_PER_EMBED = 25  # Discord embed limit
    MAX_FIELD_NAME_LENGTH = 256  # Discord field name limit
    MAX_MESSAGE_CHARS = 6000  # Discord limit across all embeds of a message

    def __init__(self, webhook_url: str, username: str = 'remind', timeout: int = 30):
        """
        Initialize the notifier.

        Args:
            webhook_url: Discord webhook URL
            username: Name the webhook posts as
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.webhook_url = webhook_url
        self.username = username
        self.timeout = timeout

    def post_schedules(self, schedules: List[Schedule], today: date) -> int:
        """
        Post one embed per schedule.

        Embeds are grouped into as few messages as Discord's per-message
        embed count and character limits allow.

        Args:
            schedules: Schedules to post, in display order
            today: Current date, used to highlight today's schedule

        Returns:
            Number of webhook messages sent

        Raises:
            requests.RequestException: If a webhook request fails
        """
        if not schedules:
            logger.info("No schedules to post")
            return 0

        embeds = [self.build_embed(schedule, today) for schedule in schedules]

        sent = 0
        for batch in self._batch_embeds(embeds):
            response = requests.post(
                self.webhook_url,
                json={'username': self.username, 'embeds': batch},
                timeout=self.timeout
            )
            response.raise_for_status()
            sent += 1

        logger.info(f"Posted {len(embeds)} schedules in {sent} messages")
        return sent

    def build_embed(self, schedule: Schedule, today: date) -> Dict[str, Any]:
        """
        Render a schedule as a Discord embed.

        Long event names are shortened and fields past Discord's limits are
        dropped, so one oversized schedule cannot make the post fail.

        Args:
            schedule: Schedule to render
            today: Current date; today's schedule is shown in green

        Returns:
            Embed payload dictionary
        """
        day = schedule.date
        events = list(schedule.events)

        if len(events) > self.MAX_FIELDS_PER_EMBED:
            logger.warning(
                f"{len(events)} events due on {day.isoformat()}; "
                f"only the first {self.MAX_FIELDS_PER_EMBED} are posted"
            )
            events = events[:self.MAX_FIELDS_PER_EMBED]

        embed = {
            'title': f"{day.isoformat()} ({WEEKDAY_NAMES[day.weekday()]}) のイベント",
            'color': GREEN if day == today else GRAY,
            'fields': [
                {
                    'name': self._truncate(event.name, self.MAX_FIELD_NAME_LENGTH),
                    'value': f"Interval: {event.interval}",
                    'inline': False
                }
                for event in events
            ]
        }

        dropped = 0
        while embed['fields'] and self._embed_size(embed) > self.MAX_MESSAGE_CHARS:
            embed['fields'].pop()
            dropped += 1
        if dropped:
            logger.warning(
                f"Dropped {dropped} events due on {day.isoformat()} "
                f"to stay within {self.MAX_MESSAGE_CHARS} characters"
            )

        return embed

    def _batch_embeds(self, embeds: List[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
        batches: List[List[Dict[str, Any]]] = []
        batch: List[Dict[str, Any]] = []
        batch_size = 0

        for embed in embeds:
            size = self._embed_size(embed)
            if batch and (
                len(batch) >= self.MAX_EMBEDS_PER_MESSAGE
                or batch_size + size > self.MAX_MESSAGE_CHARS
            ):
                batches.append(batch)
                batch, batch_size = [], 0
            batch.append(embed)
            batch_size += size

        if batch:
            batches.append(batch)
        return batches

    def _embed_size(self, embed: Dict[str, Any]) -> int:
        # Discord counts title, field names and field values
        return len(embed['title']) + sum(
            len(field['name']) + len(field['value']) for field in embed['fields']
        )

    def _truncate(self, text: str, limit: int) -> str:
        if len(text) <= limit:
            return text
        return text[:limit - 1] + '…'
