"""Tests for fpl_reminder/config.py."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fpl_reminder.config import Settings

ENV_VARS = [
    "RESEND_API_KEY", "EMAIL_TO", "EMAIL_FROM", "DRY_RUN",
    "REMINDER_WINDOWS", "SENT_REMINDERS_PATH", "CHECK_INTERVAL_MINUTES",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.resend_api_key is None
        assert settings.email_to is None
        assert settings.email_from == "onboarding@resend.dev"
        assert settings.dry_run is False
        assert settings.reminder_windows == [48, 24, 2]
        assert settings.sent_reminders_path == Path("sent-reminders.json")
        assert settings.check_interval_minutes == 60


class TestEnvironment:
    def test_reads_env(self, clean_env):
        clean_env.setenv("RESEND_API_KEY", "re_abc")
        clean_env.setenv("EMAIL_TO", "me@example.com")
        clean_env.setenv("DRY_RUN", "true")
        clean_env.setenv("REMINDER_WINDOWS", "[72, 12.5, 1]")
        clean_env.setenv("SENT_REMINDERS_PATH", "/data/sent.json")

        settings = Settings(_env_file=None)

        assert settings.resend_api_key == "re_abc"
        assert settings.email_to == "me@example.com"
        assert settings.dry_run is True
        assert settings.reminder_windows == [72, 12.5, 1]
        assert settings.sent_reminders_path == Path("/data/sent.json")

    def test_reads_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("EMAIL_TO=dotenv@example.com\nEMAIL_FROM=fpl@example.com\n")
        settings = Settings(_env_file=env_file)
        assert settings.email_to == "dotenv@example.com"
        assert settings.email_from == "fpl@example.com"


class TestWindowValidation:
    def test_rejects_empty(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, reminder_windows=[])

    def test_rejects_non_positive(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, reminder_windows=[24, 0])

    def test_keeps_configured_order(self, clean_env):
        assert Settings(_env_file=None, reminder_windows=[2, 48, 24]).reminder_windows == [2, 48, 24]


class TestTimezoneValidation:
    def test_rejects_unknown_zone(self, clean_env):
        with pytest.raises(ValidationError, match="unknown timezone"):
            Settings(_env_file=None, display_timezone="Mars/Olympus")

    def test_accepts_known_zone(self, clean_env):
        assert Settings(_env_file=None, display_timezone="America/New_York").display_timezone == "America/New_York"
