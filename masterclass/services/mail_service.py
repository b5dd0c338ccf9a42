"""Outbound email over SMTP with an append-only send log."""
import logging
import os
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Iterable, Union

from masterclass.config import Settings
from masterclass.utils.date_utils import to_iso_utc, utc_now

logger = logging.getLogger(__name__)

Recipients = Union[str, Iterable[str]]


def _as_address_list(to: Recipients) -> list:
    if isinstance(to, str):
        return [part.strip() for part in to.split(",") if part.strip()]
    return [address.strip() for address in to if address and address.strip()]


class SmtpMailer:
    """
    Send HTML emails through the configured SMTP account.

    Every attempt, successful or not, is appended to the email log file.
    Failures are logged and reported through the return value only.
    """

    def __init__(self, settings: Settings, smtp_factory=None):
        self.settings = settings
        self.smtp_factory = smtp_factory

    @property
    def sender(self) -> str:
        return formataddr((self.settings.mail_from_name, self.settings.smtp_user))

    def send(self, to: Recipients, subject: str, html: str) -> bool:
        """
        Send one HTML email.

        Args:
            to: Address, comma-separated addresses, or an iterable of addresses
            subject: Email subject
            html: HTML body

        Returns:
            True if the SMTP server accepted the message, False otherwise
        """
        recipients = _as_address_list(to)
        if not recipients:
            logger.warning(f"No recipient for email '{subject}', skipping")
            return False

        if not self.settings.smtp_configured:
            logger.warning("SMTP credentials are not configured. Skipping email delivery.")
            self._append_log(recipients, subject, "SKIPPED: SMTP not configured")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            with self._connect() as server:
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.sendmail(self.settings.smtp_user, recipients, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email '{subject}' to {msg['To']}: {e}")
            self._append_log(recipients, subject, f"ERROR: {e}")
            return False

        logger.info(f"Email sent to {msg['To']}: {subject}")
        self._append_log(recipients, subject, "Message sent")
        return True

    def _connect(self):
        if self.smtp_factory is not None:
            return self.smtp_factory(self.settings.smtp_host, self.settings.smtp_port)

        if self.settings.smtp_port == 465:
            return smtplib.SMTP_SSL(
                self.settings.smtp_host,
                self.settings.smtp_port,
                context=ssl.create_default_context(),
            )

        server = smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port)
        server.starttls(context=ssl.create_default_context())
        return server

    def _append_log(self, recipients: list, subject: str, outcome: str) -> None:
        log_path = self.settings.email_log_file
        if not log_path:
            return

        entry = (
            f"---\nDate: {to_iso_utc(utc_now())}\nTo: {', '.join(recipients)}\n"
            f"Subject: {subject}\n{outcome}\n\n"
        )
        try:
            log_dir = os.path.dirname(log_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(entry)
        except OSError as e:
            logger.error(f"Cannot append to email log {log_path}: {e}")
