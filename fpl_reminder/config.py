from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized application configuration loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    dry_run: bool = Field(default=False, validation_alias="DRY_RUN")

    # FPL
    fpl_api_url: str = Field(
        default="https://fantasy.premierleague.com/api/bootstrap-static/", validation_alias="FPL_API_URL"
    )
    fpl_site_url: str = Field(default="https://fantasy.premierleague.com/", validation_alias="FPL_SITE_URL")
    display_timezone: str = Field(default="Europe/London", validation_alias="DISPLAY_TIMEZONE")

    # Resend / email
    resend_api_key: Optional[str] = Field(default=None, validation_alias="RESEND_API_KEY")
    resend_api_url: str = Field(default="https://api.resend.com/emails", validation_alias="RESEND_API_URL")
    email_to: Optional[str] = Field(default=None, validation_alias="EMAIL_TO")
    email_from: str = Field(default="onboarding@resend.dev", validation_alias="EMAIL_FROM")

    request_timeout: float = Field(default=15.0, validation_alias="REQUEST_TIMEOUT")

    # Reminder windows, in hours before the deadline, checked in this order
    reminder_windows: List[float] = Field(default_factory=lambda: [48, 24, 2], validation_alias="REMINDER_WINDOWS")
    check_interval_minutes: int = Field(default=60, validation_alias="CHECK_INTERVAL_MINUTES")

    # Reminder persistence
    sent_reminders_path: Path = Field(default=Path("sent-reminders.json"), validation_alias="SENT_REMINDERS_PATH")

    @field_validator("reminder_windows")
    @classmethod
    def _windows_positive(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("at least one reminder window is required")
        if any(window <= 0 for window in value):
            raise ValueError("reminder windows must be positive hours")
        return value

    @field_validator("display_timezone")
    @classmethod
    def _timezone_known(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Provide a cached Settings instance."""

    return Settings()
