"""
Mail transport for the reminder digest.

SmtpTransport sends through the configured SMTP server. Anything that goes
wrong (missing settings, connection refused, auth failure, rejected
recipient) is raised as DeliveryError; the reminder job decides what to do
with it.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol, runtime_checkable

from tasktrack.core.config.models import MailConfig
from tasktrack.core.exceptions import DeliveryError
from tasktrack.core.reminders.models import Digest

logger = logging.getLogger(__name__)

SENDER_NAME = "Task Manager"


def build_message(digest: Digest, sender: str | None, recipient: str) -> MIMEMultipart:
    """Build a multipart/alternative message with text and HTML parts."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = digest.subject
    msg["From"] = f'"{SENDER_NAME}" <{sender}>' if sender else SENDER_NAME
    msg["To"] = recipient
    msg.attach(MIMEText(digest.text, "plain", "utf-8"))
    msg.attach(MIMEText(digest.html, "html", "utf-8"))
    return msg


@runtime_checkable
class MailTransport(Protocol):
    """Anything that can deliver a digest to one recipient."""

    def send(self, digest: Digest, recipient: str) -> None:
        """Deliver ``digest`` or raise DeliveryError."""
        ...


class SmtpTransport:
    """
    SMTP delivery using smtplib.

    Uses STARTTLS when the server offers it, or implicit TLS when
    ``use_tls`` is set; logs in only when a user is configured.
    """

    def __init__(self, config: MailConfig):
        self.config = config

    def _connect(self) -> smtplib.SMTP:
        host = self.config.host or ""
        if self.config.use_tls:
            return smtplib.SMTP_SSL(host, self.config.port, timeout=self.config.timeout)
        return smtplib.SMTP(host, self.config.port, timeout=self.config.timeout)

    def send(self, digest: Digest, recipient: str) -> None:
        if not self.config.is_configured:
            raise DeliveryError("SMTP host is not configured", recipient=recipient)

        sender = self.config.from_address
        msg = build_message(digest, sender, recipient)

        try:
            with self._connect() as server:
                if not self.config.use_tls:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                        server.ehlo()
                if self.config.user:
                    server.login(self.config.user, self.config.password or "")
                response = server.sendmail(sender or recipient, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP delivery failed: {e}", recipient=recipient) from e

        if response:
            # sendmail returns the recipients it refused
            raise DeliveryError(f"Recipient refused: {response}", recipient=recipient)

        logger.debug("SMTP accepted digest for %s via %s", recipient, self.config.host)
