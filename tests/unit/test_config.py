"""Unit tests for config."""
import os

import pytest

from masterclass import config
from masterclass.config import Settings, load_settings


ENV_KEYS = [
    "DATA_DIR", "REGISTRATIONS_FILE", "VIEWS_FILE", "PUBLIC_DIR", "EMAIL_LOG_FILE",
    "APP_BASE_URL", "BASE_URL", "SITE_TIMEZONE", "SMTP_HOST", "SMTP_PORT",
    "GMAIL_USER", "GMAIL_PASS", "MAIL_FROM_NAME", "ADMIN_EMAILS",
    "AIRTABLE_API_KEY", "AIRTABLE_BASE_ID", "AIRTABLE_TABLE_NAME",
    "WEBINAR_TITLE", "BOOKING_URL", "HOST", "PORT", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without any app variable and without .env loading."""
    monkeypatch.setattr(config, "_ENV_LOADED", True)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestLoadSettings:
    """Test load_settings."""

    def test_defaults(self, clean_env):
        settings = load_settings()

        assert settings.registrations_file == os.path.join("data", "registrations.json")
        assert settings.port == 3000
        assert settings.site_timezone == "Europe/Paris"
        assert settings.app_base_url is None
        assert settings.admin_emails == []
        assert settings.smtp_configured is False
        assert settings.airtable_configured is False

    def test_data_dir_moves_store_files(self, clean_env):
        clean_env.setenv("DATA_DIR", "/srv/masterclass")

        settings = load_settings()

        assert settings.registrations_file == os.path.join("/srv/masterclass", "registrations.json")
        assert settings.views_file == os.path.join("/srv/masterclass", "views.json")

    def test_app_base_url_wins_over_base_url(self, clean_env):
        clean_env.setenv("BASE_URL", "http://fallback.local")
        assert load_settings().app_base_url == "http://fallback.local"

        clean_env.setenv("APP_BASE_URL", "https://masterclass.example.com")
        assert load_settings().app_base_url == "https://masterclass.example.com"

    def test_gmail_password_whitespace_removed(self, clean_env):
        clean_env.setenv("GMAIL_USER", "laurence@example.com")
        clean_env.setenv("GMAIL_PASS", "abcd efgh ijkl mnop")

        settings = load_settings()

        assert settings.smtp_password == "abcdefghijklmnop"
        assert settings.smtp_configured is True

    def test_admin_emails_split_and_trimmed(self, clean_env):
        clean_env.setenv("ADMIN_EMAILS", " a@example.com, ,b@example.com ")

        assert load_settings().admin_emails == ["a@example.com", "b@example.com"]

    def test_airtable_needs_key_and_base(self, clean_env):
        clean_env.setenv("AIRTABLE_API_KEY", "key")
        assert load_settings().airtable_configured is False

        clean_env.setenv("AIRTABLE_BASE_ID", "app123")
        assert load_settings().airtable_configured is True

    def test_invalid_port_raises(self, clean_env):
        clean_env.setenv("PORT", "web")

        with pytest.raises(ValueError):
            load_settings()


class TestSettings:
    """Test the Settings dataclass."""

    def test_admin_emails_not_shared_between_instances(self):
        first = Settings()
        first.admin_emails.append("a@example.com")

        assert Settings().admin_emails == []
