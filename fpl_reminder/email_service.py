import logging
from typing import Optional

import requests

from .config import Settings
from .models import DeliveryReceipt, EmailMessage

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    pass


class MissingCredentialsError(DeliveryError):
    pass


class EmailService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def build_message(self, subject: str, html: str) -> EmailMessage:
        return EmailMessage(
            sender=self.settings.email_from,
            to=self.settings.email_to or "",
            subject=subject,
            html=html,
        )

    def send(self, message: EmailMessage) -> Optional[DeliveryReceipt]:
        """Deliver ``message`` through Resend, or only log it in dry-run mode."""

        if self.settings.dry_run:
            logger.info(
                "DRY RUN - would send email\nTo: %s\nFrom: %s\nSubject: %s\nBody: %s",
                message.to,
                message.sender,
                message.subject,
                message.html,
            )
            return None

        if not self.settings.resend_api_key or not message.to:
            raise MissingCredentialsError("Missing required environment variables: RESEND_API_KEY and EMAIL_TO")

        try:
            response = requests.post(
                self.settings.resend_api_url,
                headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
                json={
                    "from": message.sender,
                    "to": [message.to],
                    "subject": message.subject,
                    "html": message.html,
                },
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as exc:
            logger.exception("Failed to send email: %s", exc)
            raise DeliveryError(f"Failed to send email: {exc}") from exc

        if not response.ok:
            detail = _error_detail(response)
            logger.error("Resend rejected email with status %s: %s", response.status_code, detail)
            raise DeliveryError(f"Resend rejected email with status {response.status_code}: {detail}")

        try:
            payload = response.json()
        except requests.JSONDecodeError as exc:
            logger.exception("Resend response was not valid JSON: %s", exc)
            raise DeliveryError(f"Resend response was not valid JSON: {exc}") from exc

        message_id = payload.get("id") if isinstance(payload, dict) else None
        if not message_id:
            raise DeliveryError(f"Resend did not return a message id: {payload!r}")
        logger.info("Sent email %s to %s", message_id, message.to)
        return DeliveryReceipt(id=message_id)


def _error_detail(response) -> str:
    """Pull Resend's error message out of a failed response, falling back to the raw body."""

    try:
        payload = response.json()
    except requests.JSONDecodeError:
        return response.text or response.reason or ""
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("error") or str(payload)
    return str(payload)
