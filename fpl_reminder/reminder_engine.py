from __future__ import annotations

import logging
import signal
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from apscheduler.schedulers.blocking import BlockingScheduler

from .config import Settings
from .email_service import DeliveryError, EmailService
from .fpl_client import FplApiError, FplClient, select_next_deadline
from .models import CheckResult, ReminderDecision
from .reminder_state import ReminderLedger, reminder_key
from .templates import render_html, render_subject

logger = logging.getLogger(__name__)

# Hourly runs rarely land exactly on a window, so each window matches +/- 30 minutes.
WINDOW_TOLERANCE_HOURS = 0.5


def hours_until(deadline: datetime, now: datetime) -> float:
    return (deadline - now) / timedelta(hours=1)


def find_due_window(
    gameweek_id: int,
    deadline: datetime,
    now: datetime,
    windows: Sequence[float],
    ledger: ReminderLedger,
) -> ReminderDecision:
    """Pick the first window, in configured order, that is due and not yet sent.

    At most one window is reported per check. Windows skipped while nothing
    was running are not caught up later.
    """

    remaining = hours_until(deadline, now)
    for window in windows:
        lower = window - WINDOW_TOLERANCE_HOURS
        upper = window + WINDOW_TOLERANCE_HOURS
        if lower <= remaining <= upper and not ledger.has(reminder_key(gameweek_id, window)):
            return ReminderDecision(should_send=True, window=window)
    return ReminderDecision()


class ReminderEngine:
    """Check the next FPL deadline and email a reminder when a window is hit."""

    def __init__(
        self,
        fpl_client: FplClient,
        email_service: EmailService,
        settings: Settings,
        ledger: ReminderLedger,
    ) -> None:
        self.fpl = fpl_client
        self.email = email_service
        self.settings = settings
        self.ledger = ledger
        self.scheduler: Optional[BlockingScheduler] = None

    def run_once(self, now: Optional[datetime] = None) -> CheckResult:
        now = now or datetime.now(timezone.utc)
        result = CheckResult(checked_at=now)

        logger.info("Fetching FPL data")
        gameweek = select_next_deadline(self.fpl.list_gameweeks(), now)
        if gameweek is None:
            logger.info("No upcoming gameweeks found")
            return result

        remaining = hours_until(gameweek.deadline_time, now)
        result.gameweek = gameweek
        result.hours_remaining = remaining
        logger.info(
            "Next deadline: Gameweek %s at %s (%.1fh away)",
            gameweek.id,
            gameweek.deadline_time.isoformat(),
            remaining,
        )

        decision = find_due_window(gameweek.id, gameweek.deadline_time, now, self.settings.reminder_windows, self.ledger)
        result.decision = decision
        if not decision.should_send:
            logger.info("No reminder needed at this time")
            return result

        logger.info("Sending %gh reminder for gameweek %s", decision.window, gameweek.id)
        message = self.email.build_message(
            subject=render_subject(gameweek, decision.window),
            html=render_html(gameweek, self.settings.fpl_site_url, self.settings.display_timezone),
        )
        receipt = self.email.send(message)
        if receipt is None:
            # Dry run: nothing was delivered, so nothing is recorded.
            return result

        result.receipt = receipt
        key = reminder_key(gameweek.id, decision.window)
        try:
            self.ledger.record(key, datetime.now(timezone.utc))
        except OSError as exc:
            logger.exception("Email %s was sent but reminder %s could not be recorded: %s", receipt.id, key, exc)
            return result
        result.recorded = True
        return result

    def _tick(self) -> None:
        try:
            self.run_once()
        except (FplApiError, DeliveryError) as exc:
            logger.error("Reminder check failed: %s", exc)

    def start(self) -> None:
        """Run a check now and then every ``check_interval_minutes`` until interrupted."""

        if self.scheduler is not None:
            return
        interval = self.settings.check_interval_minutes
        logger.info("Starting reminder scheduler (every %s minutes)", interval)
        self.scheduler = BlockingScheduler(timezone="UTC")
        self.scheduler.add_job(
            self._tick,
            "interval",
            minutes=interval,
            id="reminder-check",
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        previous_handler = self._install_sigterm_handler()
        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Stopping reminder scheduler")
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGTERM, previous_handler)
            self.stop()

    @staticmethod
    def _install_sigterm_handler():
        """Turn SIGTERM into SystemExit so the scheduler shuts down like on Ctrl-C."""

        if threading.current_thread() is not threading.main_thread():
            return None

        def _handle_sigterm(signum, frame):
            raise SystemExit(128 + signum)

        return signal.signal(signal.SIGTERM, _handle_sigterm)

    def stop(self) -> None:
        if self.scheduler is not None:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)
            self.scheduler = None
