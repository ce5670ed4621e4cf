"""Configuration loading from environment variables and SSM Parameter Store."""
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, MutableMapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import boto3

logger = logging.getLogger(__name__)

SOURCES = ('sheet', 'notion')
TRUE_VALUES = ('1', 't', 'true', 'yes', 'on')
FALSE_VALUES = ('', '0', 'f', 'false', 'no', 'off')


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


@dataclass
class Config:
    """Runtime configuration for the reminder Lambda."""
    discord_webhook_url: str
    discord_bot_name: str = 'remind'
    event_source: str = 'sheet'
    google_credentials: str = ''
    google_spreadsheet_id: str = ''
    sheet_range: str = 'reminder!A:D'
    notion_api_key: str = ''
    notion_database_id: str = ''
    timezone: str = 'Asia/Tokyo'
    timeout_seconds: int = 30
    log_level: str = 'INFO'


def ssm_export_rules(app_env: str) -> List[Tuple[str, str]]:
    """Return (parameter path, environment prefix) pairs for an environment."""
    return [
        (f"/{app_env}/remind/discord", 'DISCORD_'),
        (f"/{app_env}/remind/notion", 'NOTION_'),
        (f"/{app_env}/remind/google", 'GOOGLE_'),
    ]


def export_ssm_parameters(
    rules: List[Tuple[str, str]],
    environ: MutableMapping[str, str],
    ssm_client=None
) -> int:
    """
    Copy SSM parameters into the environment.

    Each parameter under a rule's path is exported as prefix + the
    upper-cased last segment of its name, e.g. /dev/remind/discord/webhook_url
    becomes DISCORD_WEBHOOK_URL.

    Args:
        rules: (path, prefix) pairs
        environ: Mapping to export into
        ssm_client: boto3 SSM client (default: a new client)

    Returns:
        Number of parameters exported
    """
    client = ssm_client or boto3.client('ssm')
    paginator = client.get_paginator('get_parameters_by_path')
    exported = 0

    for path, prefix in rules:
        for page in paginator.paginate(Path=path, WithDecryption=True):
            for parameter in page.get('Parameters', []):
                key = prefix + parameter['Name'].rsplit('/', 1)[-1].upper()
                environ[key] = parameter['Value']
                exported += 1

    logger.info(f"Exported {exported} parameters from SSM")
    return exported


def _parse_bool(name: str, value: str) -> bool:
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def load_config(
    environ: Optional[MutableMapping[str, str]] = None,
    ssm_client=None
) -> Config:
    """
    Load configuration from the environment.

    When USE_SSM is true, parameters for APP_ENV are first exported from
    SSM Parameter Store into the environment.

    Args:
        environ: Environment mapping (default: os.environ)
        ssm_client: boto3 SSM client used when USE_SSM is set

    Returns:
        Config

    Raises:
        ConfigError: If a required value is missing or a value is invalid
    """
    env = os.environ if environ is None else environ

    if _parse_bool('USE_SSM', env.get('USE_SSM', 'false')):
        app_env = env.get('APP_ENV', 'dev')
        export_ssm_parameters(ssm_export_rules(app_env), env, ssm_client)

    event_source = env.get('EVENT_SOURCE', 'sheet').strip().lower()
    if event_source not in SOURCES:
        raise ConfigError(
            f"EVENT_SOURCE must be one of {', '.join(SOURCES)}, got {event_source!r}"
        )

    required: Dict[str, List[str]] = {
        'sheet': ['GOOGLE_CREDENTIALS', 'GOOGLE_SPREADSHEET_ID'],
        'notion': ['NOTION_API_KEY', 'NOTION_DATABASE_ID'],
    }
    missing = [
        key for key in ['DISCORD_WEBHOOK_URL'] + required[event_source]
        if not env.get(key)
    ]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    try:
        timeout_seconds = int(env.get('TIMEOUT_SECONDS', '30'))
    except ValueError:
        raise ConfigError(
            f"TIMEOUT_SECONDS must be an integer, got {env.get('TIMEOUT_SECONDS')!r}"
        )

    timezone = env.get('TIMEZONE', 'Asia/Tokyo')
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"Unknown TIMEZONE: {timezone!r}")

    return Config(
        discord_webhook_url=env['DISCORD_WEBHOOK_URL'],
        discord_bot_name=env.get('DISCORD_BOT_NAME', 'remind'),
        event_source=event_source,
        google_credentials=env.get('GOOGLE_CREDENTIALS', ''),
        google_spreadsheet_id=env.get('GOOGLE_SPREADSHEET_ID', ''),
        sheet_range=env.get('SHEET_RANGE', 'reminder!A:D'),
        notion_api_key=env.get('NOTION_API_KEY', ''),
        notion_database_id=env.get('NOTION_DATABASE_ID', ''),
        timezone=timezone,
        timeout_seconds=timeout_seconds,
        log_level=env.get('LOG_LEVEL', 'INFO')
    )
