"""
Outgoing email for password reset codes.

EMAIL_BACKEND picks the transport: 'console' (default) keeps messages in an
in-process outbox and logs them, 'smtp' delivers through SMTP_* settings.
"""
import os
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage

from app.models.password_reset import CODE_LIFETIME

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    body: str
    html: str = None


class EmailBackend(ABC):

    @abstractmethod
    def send(self, email: OutgoingEmail):
        """Deliver one message or raise."""


class ConsoleBackend(EmailBackend):
    """Keeps sent messages in ``outbox`` for development and tests."""

    def __init__(self):
        self.outbox = []

    def send(self, email):
        self.outbox.append({'to': email.to, 'subject': email.subject, 'body': email.body})
        logger.info("Email to %s: %s\n%s", email.to, email.subject, email.body)


class SMTPBackend(EmailBackend):

    def __init__(self, host=None, port=None, username=None, password=None, sender=None):
        self.host = host or os.getenv('SMTP_HOST')
        self.port = port or int(os.getenv('SMTP_PORT', '587'))
        self.username = username or os.getenv('SMTP_USER')
        self.password = password or os.getenv('SMTP_PASS')
        self.sender = sender or os.getenv('SMTP_FROM_EMAIL') or self.username
        self.starttls = os.getenv('SMTP_USE_TLS', 'true').lower() == 'true'

        missing = [name for name, value in (('SMTP_HOST', self.host),
                                            ('SMTP_USER', self.username),
                                            ('SMTP_PASS', self.password)) if not value]
        if missing:
            raise ValueError(f"SMTP email backend is missing settings: {', '.join(missing)}")

    def _build(self, email):
        message = EmailMessage()
        message['Subject'] = email.subject
        message['From'] = self.sender
        message['To'] = email.to
        message.set_content(email.body)
        if email.html:
            message.add_alternative(email.html, subtype='html')
        return message

    def send(self, email):
        try:
            with smtplib.SMTP(self.host, self.port, timeout=15) as server:
                if self.starttls:
                    server.starttls()
                server.login(self.username, self.password)
                server.send_message(self._build(email))
        except (smtplib.SMTPException, OSError):
            logger.error("SMTP delivery to %s failed", email.to, exc_info=True)
            raise
        logger.info("Email delivered via SMTP to %s", email.to)


_console_backend = ConsoleBackend()


def get_email_backend() -> EmailBackend:
    name = os.getenv('EMAIL_BACKEND', 'console').lower()
    if name == 'console':
        return _console_backend
    if name == 'smtp':
        return SMTPBackend()
    raise ValueError(f"Unknown EMAIL_BACKEND: {name}")


def send_password_reset_email(to_email, code):
    minutes = int(CODE_LIFETIME.total_seconds() // 60)
    body = (
        f"Your password reset code is: {code}\n\n"
        f"Enter it in the app within {minutes} minutes to choose a new password. "
        f"If you did not ask for this, no action is needed."
    )
    html = (
        f'<p>Your password reset code is:</p>'
        f'<p style="font-size: 28px; font-weight: bold; letter-spacing: 4px;">{code}</p>'
        f'<p>It expires in {minutes} minutes.</p>'
    )
    get_email_backend().send(OutgoingEmail(
        to=to_email,
        subject="Your Medic Reminder password reset code",
        body=body,
        html=html,
    ))
    logger.info("Password reset code sent to user email")
