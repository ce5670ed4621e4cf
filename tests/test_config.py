"""Unit tests for configuration loading."""
import boto3
import pytest
from moto import mock_aws

from settings.config import ConfigError, export_ssm_parameters, load_config, ssm_export_rules


@pytest.fixture
def sheet_env():
    """Minimal environment for the Google Sheets source."""
    return {
        'DISCORD_WEBHOOK_URL': 'https://discord.com/api/webhooks/1/token',
        'GOOGLE_CREDENTIALS': '{"type": "service_account"}',
        'GOOGLE_SPREADSHEET_ID': 'sheet-123',
    }


@pytest.fixture
def ssm_client():
    """Create a mock SSM client with reminder parameters."""
    with mock_aws():
        client = boto3.client('ssm', region_name='us-east-1')
        client.put_parameter(
            Name='/dev/remind/discord/webhook_url',
            Value='https://discord.com/api/webhooks/2/token',
            Type='SecureString'
        )
        client.put_parameter(Name='/dev/remind/discord/bot_name', Value='reminder', Type='String')
        client.put_parameter(Name='/dev/remind/notion/api_key', Value='secret', Type='SecureString')
        client.put_parameter(Name='/dev/remind/notion/database_id', Value='db-123', Type='String')
        client.put_parameter(Name='/prod/remind/notion/api_key', Value='prod-secret', Type='String')
        yield client


class TestLoadConfig:
    """Test cases for load_config."""

    def test_defaults(self, sheet_env):
        """Test default values for optional settings."""
        config = load_config(sheet_env)

        assert config.event_source == 'sheet'
        assert config.google_spreadsheet_id == 'sheet-123'
        assert config.sheet_range == 'reminder!A:D'
        assert config.discord_bot_name == 'remind'
        assert config.timezone == 'Asia/Tokyo'
        assert config.timeout_seconds == 30
        assert config.log_level == 'INFO'

    def test_overrides(self, sheet_env):
        """Test that optional settings are read from the environment."""
        sheet_env.update({
            'SHEET_RANGE': 'events!A:D',
            'DISCORD_BOT_NAME': 'bot',
            'TIMEZONE': 'UTC',
            'TIMEOUT_SECONDS': '5',
            'LOG_LEVEL': 'DEBUG',
        })

        config = load_config(sheet_env)

        assert config.sheet_range == 'events!A:D'
        assert config.discord_bot_name == 'bot'
        assert config.timezone == 'UTC'
        assert config.timeout_seconds == 5
        assert config.log_level == 'DEBUG'

    def test_missing_required_values(self):
        """Test that every missing required key is reported."""
        with pytest.raises(ConfigError) as exc_info:
            load_config({})

        message = str(exc_info.value)
        assert 'DISCORD_WEBHOOK_URL' in message
        assert 'GOOGLE_CREDENTIALS' in message
        assert 'GOOGLE_SPREADSHEET_ID' in message

    def test_notion_source_requires_notion_keys(self):
        """Test required keys for the Notion source."""
        env = {'EVENT_SOURCE': 'notion', 'DISCORD_WEBHOOK_URL': 'https://example.com/hook'}

        with pytest.raises(ConfigError, match='NOTION_API_KEY, NOTION_DATABASE_ID'):
            load_config(env)

    @pytest.mark.parametrize('key, value', [
        ('EVENT_SOURCE', 'excel'),
        ('TIMEOUT_SECONDS', 'soon'),
        ('TIMEZONE', 'Mars/Olympus'),
        ('USE_SSM', 'maybe'),
    ])
    def test_invalid_values(self, sheet_env, key, value):
        """Test that invalid values raise ConfigError."""
        sheet_env[key] = value

        with pytest.raises(ConfigError):
            load_config(sheet_env)

    def test_use_ssm_exports_parameters(self, ssm_client):
        """Test that SSM parameters fill in the environment."""
        env = {'USE_SSM': 'true', 'APP_ENV': 'dev', 'EVENT_SOURCE': 'notion'}

        config = load_config(env, ssm_client=ssm_client)

        assert config.discord_webhook_url == 'https://discord.com/api/webhooks/2/token'
        assert config.discord_bot_name == 'reminder'
        assert config.notion_api_key == 'secret'
        assert config.notion_database_id == 'db-123'


class TestExportSsmParameters:
    """Test cases for export_ssm_parameters."""

    def test_export_by_prefix(self, ssm_client):
        """Test parameter names map to prefixed upper-case keys."""
        env = {}

        exported = export_ssm_parameters(ssm_export_rules('prod'), env, ssm_client)

        assert exported == 1
        assert env == {'NOTION_API_KEY': 'prod-secret'}

    def test_rules_for_environment(self):
        """Test SSM paths are scoped by environment."""
        assert ssm_export_rules('dev') == [
            ('/dev/remind/discord', 'DISCORD_'),
            ('/dev/remind/notion', 'NOTION_'),
            ('/dev/remind/google', 'GOOGLE_'),
        ]
