"""skyfeed.mail.mailer

Delivery of account-action tokens.

The transport is plain SMTP. Messages are short plain-text notes carrying
the token; the recipient is always the address on the account record.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from skyfeed.core.config import MailConfig
from skyfeed.core.exceptions import DeliveryFailure

logger = logging.getLogger(__name__)

CONFIRM_EMAIL_SUBJECT = "Confirm your email"
CONFIRM_EMAIL_BODY = """\
Use the code below to confirm your email address.

    {token}

If you did not request this, you can ignore this message.
"""

ACCOUNT_DELETE_SUBJECT = "Account deletion request"
ACCOUNT_DELETE_BODY = """\
We received a request to delete your account. To confirm, enter this code:

    {token}

If you did not request this, do not share the code. Your account is unchanged.
"""


class Mailer(Protocol):
    def send_confirm_email(self, email: str, token: str) -> None: ...

    def send_account_delete(self, email: str, token: str) -> None: ...


def build_message(*, sender: str, to: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return msg


class SmtpMailer:
    """An SMTP session per message."""

    def __init__(self, cfg: MailConfig) -> None:
        self.cfg = cfg

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self.cfg.host, port=self.cfg.port, timeout=self.cfg.timeout_seconds)

    def send_message(self, message: EmailMessage) -> None:
        if not self.cfg.host:
            raise DeliveryFailure("mail transport is not configured")
        try:
            with self._new_connection() as conn:
                if self.cfg.use_tls:
                    conn.starttls()
                if self.cfg.username:
                    conn.login(self.cfg.username, self.cfg.password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryFailure(f"smtp delivery failed: {type(e).__name__}") from e
        logger.info("mail_sent", extra={"subject": message["Subject"]})

    def send_confirm_email(self, email: str, token: str) -> None:
        self.send_message(
            build_message(
                sender=self.cfg.from_address,
                to=email,
                subject=CONFIRM_EMAIL_SUBJECT,
                body=CONFIRM_EMAIL_BODY.format(token=token),
            )
        )

    def send_account_delete(self, email: str, token: str) -> None:
        self.send_message(
            build_message(
                sender=self.cfg.from_address,
                to=email,
                subject=ACCOUNT_DELETE_SUBJECT,
                body=ACCOUNT_DELETE_BODY.format(token=token),
            )
        )
