from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from .config import Settings, get_settings
from .email_service import DeliveryError, EmailService
from .fpl_client import FplApiError, FplClient
from .reminder_engine import ReminderEngine
from .reminder_state import JsonFileLedger

logger = logging.getLogger("fpl_reminder")


class ServiceContainer:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.fpl_client = FplClient(settings)
        self.email_service = EmailService(settings)
        self.ledger = JsonFileLedger(settings.sent_reminders_path)
        self.reminder_engine = ReminderEngine(
            fpl_client=self.fpl_client,
            email_service=self.email_service,
            settings=settings,
            ledger=self.ledger,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fpl-reminder",
        description="Email a reminder when the next FPL deadline enters a reminder window.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Log the email instead of sending it")
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Keep running and check on an interval instead of exiting after one check",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s - %(message)s")


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    if args.dry_run:
        settings = settings.model_copy(update={"dry_run": True})

    configure_logging("DEBUG" if args.verbose else settings.log_level.upper())
    logger.info("FPL reminder check running at %s", datetime.now(timezone.utc).isoformat())
    if settings.dry_run:
        logger.info("Running in DRY RUN mode - no emails will be sent")

    container = ServiceContainer(settings)
    if args.schedule:
        container.reminder_engine.start()
        return 0

    try:
        container.reminder_engine.run_once()
    except (FplApiError, DeliveryError) as exc:
        logger.error("Reminder check failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
