"""
Shared test fixtures for the FPL reminder.

All HTTP calls are mocked and every ledger lives under ``tmp_path``.
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

from fpl_reminder.config import Settings
from fpl_reminder.models import Gameweek

NOW = datetime(2024, 8, 14, 17, 18, tzinfo=timezone.utc)


def mock_response(json_data, status_code=200):
    """Create a mock requests.Response."""
    resp = MagicMock()
    resp.json.return_value = json_data
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.reason = "OK" if resp.ok else "Error"
    resp.text = json.dumps(json_data)
    resp.content = resp.text.encode()
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        resp.raise_for_status.return_value = None
    return resp


def make_gameweek(gw_id, hours_from_now, now=NOW):
    return Gameweek(id=gw_id, deadline_time=now + timedelta(hours=hours_from_now))


def bootstrap_payload(*deadlines):
    """bootstrap-static shaped payload; ``deadlines`` are (id, datetime) pairs."""
    return {
        "events": [
            {
                "id": gw_id,
                "name": f"Gameweek {gw_id}",
                "deadline_time": deadline.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "finished": deadline < NOW,
                "is_next": False,
            }
            for gw_id, deadline in deadlines
        ],
        "teams": [],
        "elements": [],
    }


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "state" / "sent-reminders.json"


@pytest.fixture
def settings(ledger_path):
    return Settings(
        _env_file=None,
        resend_api_key="re_test_key",
        email_to="manager@example.com",
        email_from="reminders@example.com",
        dry_run=False,
        reminder_windows=[48, 24, 2],
        sent_reminders_path=ledger_path,
    )


@pytest.fixture
def dry_run_settings(settings):
    return settings.model_copy(update={"dry_run": True})
