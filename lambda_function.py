"""AWS Lambda handler for the scheduled reminder bot."""
import json
import logging
import os
import time
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from notifier.discord_notifier import DiscordNotifier
from settings.config import Config, ConfigError, load_config
from sources.event_source import EventSource, RawRowProvider, collect_schedules
from sources.notion_reader import NotionReader
from sources.sheet_reader import GoogleSheetReader, build_sheets_session

# Attributes present on every LogRecord; anything else came from `extra`
_RECORD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}

# Time kept back from the Lambda timeout for posting to Discord
POST_RESERVE_SECONDS = 5


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including fields passed via extra."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def current_date(timezone: str) -> date:
    """Return today's calendar date in the given IANA time zone."""
    return datetime.now(ZoneInfo(timezone)).date()


def target_dates(today: date) -> List[date]:
    """Return the dates a run reports on: today and tomorrow."""
    return [today, today + timedelta(days=1)]


def fetch_deadline(context: Any) -> Optional[float]:
    """
    Derive the monotonic deadline for reading events from the Lambda context.

    Args:
        context: Lambda context object

    Returns:
        Absolute time.monotonic() value, or None when the context does not
        report its remaining time
    """
    get_remaining = getattr(context, 'get_remaining_time_in_millis', None)
    if get_remaining is None:
        return None

    remaining_seconds = get_remaining() / 1000 - POST_RESERVE_SECONDS
    return time.monotonic() + remaining_seconds


def build_provider(config: Config) -> RawRowProvider:
    """
    Create the raw row provider selected by the configuration.

    Args:
        config: Loaded configuration

    Returns:
        GoogleSheetReader or NotionReader
    """
    if config.event_source == 'notion':
        return NotionReader(
            api_key=config.notion_api_key,
            database_id=config.notion_database_id,
            timeout=config.timeout_seconds
        )

    return GoogleSheetReader(
        session=build_sheets_session(config.google_credentials),
        spreadsheet_id=config.google_spreadsheet_id,
        read_range=config.sheet_range,
        timeout=config.timeout_seconds
    )


def _error_response(message: str, error: Exception, start_time: float) -> Dict[str, Any]:
    return {
        'statusCode': 500,
        'body': json.dumps({
            'message': message,
            'error': str(error),
            'error_type': type(error).__name__,
            'duration_seconds': round(time.time() - start_time, 2)
        })
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the reminder bot.

    Fetches the events due today and tomorrow and posts them to Discord.
    A failed fetch for one date does not stop the other; the run fails only
    when every date failed or the Discord post failed.

    Args:
        event: EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info("Lambda execution started")

    try:
        try:
            config = load_config()
        except ConfigError as e:
            logger.error(f"Failed to load config: {e}", exc_info=True)
            return _error_response('Invalid configuration', e, start_time)

        # LOG_LEVEL may have come from SSM
        setup_logging(config.log_level)

        today = current_date(config.timezone)
        dates = target_dates(today)
        logger.info(
            "Collecting schedules",
            extra={
                'event_source': config.event_source,
                'dates': [d.isoformat() for d in dates]
            }
        )

        source = EventSource(build_provider(config))
        schedules, fetch_errors = collect_schedules(
            source, dates, deadline=fetch_deadline(context)
        )

        if not schedules:
            logger.error(
                "Failed to fetch events for every date",
                extra={'errors': fetch_errors}
            )
            duration = time.time() - start_time
            return {
                'statusCode': 500,
                'body': json.dumps({
                    'message': 'Failed to fetch events',
                    'errors': fetch_errors,
                    'duration_seconds': round(duration, 2)
                })
            }

        notifier = DiscordNotifier(
            webhook_url=config.discord_webhook_url,
            username=config.discord_bot_name,
            timeout=config.timeout_seconds
        )
        try:
            notifier.post_schedules(schedules, today)
        except Exception as e:
            logger.error(
                f"Failed to post events to Discord: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return _error_response('Failed to post schedules', e, start_time)

        duration = time.time() - start_time
        events_posted = sum(len(s.events) for s in schedules)

        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'schedules_posted': len(schedules),
                'events_posted': events_posted,
                'errors': fetch_errors
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Reminders posted successfully',
                'statistics': {
                    'dates': [s.date.isoformat() for s in schedules],
                    'events_posted': events_posted,
                    'duration_seconds': round(duration, 2)
                },
                'errors': fetch_errors
            })
        }

    except Exception as e:
        logger.error(
            f"Lambda execution failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response('Reminder run failed', e, start_time)
