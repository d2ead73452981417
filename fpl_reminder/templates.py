from datetime import datetime
from html import escape
from zoneinfo import ZoneInfo

from .models import Gameweek

UK_TIMEZONE = "Europe/London"


def format_deadline(deadline: datetime, timezone_name: str = UK_TIMEZONE) -> str:
    """Render a deadline like ``Friday 16 August 2024 at 18:30 (UK Time)``."""

    local = deadline.astimezone(ZoneInfo(timezone_name))
    label = "UK Time" if timezone_name == UK_TIMEZONE else timezone_name
    return f"{local:%A} {local.day} {local:%B %Y} at {local:%H:%M} ({label})"


def render_subject(gameweek: Gameweek, window: float) -> str:
    return f"⚽ FPL Reminder: Gameweek {gameweek.id} deadline in {window:g} hours!"


def render_html(gameweek: Gameweek, site_url: str, timezone_name: str = UK_TIMEZONE) -> str:
    deadline = escape(format_deadline(gameweek.deadline_time, timezone_name))
    return (
        "<h2>Fantasy Premier League Reminder</h2>\n"
        f"<p><strong>Gameweek {gameweek.id}</strong></p>\n"
        f"<p><strong>Deadline:</strong> {deadline}</p>\n"
        "<p>Don't forget to set up your team!</p>\n"
        f'<p><a href="{escape(site_url, quote=True)}">Go to FPL →</a></p>\n'
    )
