from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

import requests
from pydantic import ValidationError

from .config import Settings
from .models import Gameweek

logger = logging.getLogger(__name__)


class FplApiError(Exception):
    pass


class FplClient:
    """Read-only wrapper around the FPL bootstrap-static endpoint."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def fetch_bootstrap(self) -> dict:
        url = self.settings.fpl_api_url
        try:
            response = requests.get(url, timeout=self.settings.request_timeout)
            response.raise_for_status()
            return response.json()
        except requests.JSONDecodeError as exc:
            logger.exception("FPL response was not valid JSON: %s", exc)
            raise FplApiError(f"FPL response was not valid JSON: {exc}") from exc
        except requests.RequestException as exc:
            logger.exception("Failed to fetch FPL data: %s", exc)
            raise FplApiError(f"Failed to fetch FPL data: {exc}") from exc

    def list_gameweeks(self) -> List[Gameweek]:
        data = self.fetch_bootstrap()
        events = data.get("events") if isinstance(data, dict) else None
        if not isinstance(events, list):
            raise FplApiError("FPL response is missing the 'events' list")
        try:
            return [Gameweek.model_validate(event) for event in events]
        except ValidationError as exc:
            raise FplApiError(f"Malformed gameweek in FPL response: {exc}") from exc


def select_next_deadline(events: Iterable[Gameweek], now: datetime) -> Optional[Gameweek]:
    """Return the gameweek with the earliest deadline strictly after ``now``.

    Gameweeks sharing a deadline resolve to the lowest id.
    """

    upcoming = [event for event in events if event.deadline_time > now]
    if not upcoming:
        return None
    return min(upcoming, key=lambda event: (event.deadline_time, event.id))
