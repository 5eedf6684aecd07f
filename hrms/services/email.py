"""
Outbound email.

`EmailSender` is the interface the leave workflow and the attendance
reconciler depend on. `SESEmailSender` delivers through AWS SES;
`LoggingEmailSender` is used when email is disabled (development) and
`RecordingEmailSender` captures messages in tests.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from html import escape
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from hrms.core.config import settings
from hrms.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def _checkout_reminder_body(name: str) -> str:
    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #2563eb;">Checkout Reminder</h2>
        <p>Hello {escape(name)},</p>
        <p>You checked in today but have not checked out yet. Please remember to check out
        before midnight; open check-ins are closed automatically and do not earn overtime.</p>
        <p><a href="{settings.email.app_url}/attendance">Go to attendance</a></p>
        <p>Best regards,<br>HRMS Team</p>
      </div>
    """


_LEAVE_SUBJECTS = {
    "submit": "New leave request from {employee_name}",
    "approve": "Your {leave_type} leave has been approved",
    "reject": "Your {leave_type} leave has been rejected",
}


def _leave_body(action: str, details: Dict[str, Any]) -> str:
    lines = [
        f"<p>Leave type: {escape(str(details.get('leave_type')))}</p>",
        f"<p>Dates: {details.get('start_date')} to {details.get('end_date')} ({details.get('total_days')} days)</p>",
    ]
    if action == "submit":
        lines.insert(0, f"<p>{escape(str(details.get('employee_name')))} has requested leave.</p>")
        lines.append(f"<p>Reason: {escape(str(details.get('reason')))}</p>")
    elif action == "reject":
        lines.append(f"<p>Reason: {escape(details.get('rejection_reason') or 'No reason provided')}</p>")
    return "<div style=\"font-family: Arial, sans-serif;\">" + "".join(lines) + "</div>"


class EmailSender(ABC):
    @abstractmethod
    def send(self, *, to_address: str, subject: str, html_body: str) -> None:
        """Deliver one message. Raises ExternalServiceError on failure."""

    def send_checkout_reminder(self, to_address: str, name: str) -> None:
        self.send(
            to_address=to_address,
            subject="HRMS - Don't forget to check out",
            html_body=_checkout_reminder_body(name),
        )

    def send_leave_notification(self, to_address: str, action: str, details: Dict[str, Any]) -> None:
        subject = _LEAVE_SUBJECTS[action].format(
            employee_name=details.get("employee_name", ""),
            leave_type=details.get("leave_type", ""),
        )
        self.send(to_address=to_address, subject=subject, html_body=_leave_body(action, details))


class SESEmailSender(EmailSender):
    def __init__(self, from_address: str, region: Optional[str] = None, client=None):
        self.from_address = from_address
        self._client = client or boto3.client("ses", region_name=region)

    def send(self, *, to_address: str, subject: str, html_body: str) -> None:
        try:
            resp = self._client.send_email(
                Source=self.from_address,
                Destination={"ToAddresses": [to_address]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": html_body, "Charset": "UTF-8"}},
                },
            )
            logger.info("SES send_email ok: MessageId=%s", resp.get("MessageId"))
        except (ClientError, BotoCoreError) as e:
            logger.error("SES send_email failed: %s", e, exc_info=True)
            raise ExternalServiceError(f"Failed to send email to {to_address}") from e


class LoggingEmailSender(EmailSender):
    def send(self, *, to_address: str, subject: str, html_body: str) -> None:
        logger.info(f"Email delivery disabled; would send '{subject}' to {to_address}")


class RecordingEmailSender(EmailSender):
    """Keeps sent messages in memory. Addresses in `failing` raise ExternalServiceError."""

    def __init__(self, failing: Optional[List[str]] = None):
        self.sent: List[Dict[str, str]] = []
        self.failing = set(failing or [])

    def send(self, *, to_address: str, subject: str, html_body: str) -> None:
        if to_address in self.failing:
            raise ExternalServiceError(f"Failed to send email to {to_address}")
        self.sent.append({"to": to_address, "subject": subject, "html": html_body})


def get_email_sender() -> EmailSender:
    """FastAPI dependency: SES when enabled, otherwise log-only."""
    if settings.email.enabled:
        return SESEmailSender(settings.email.from_address, settings.email.aws_region)
    return LoggingEmailSender()
