"""Outbound email: SMTP for real delivery, a logging sender for development."""
import asyncio
import logging
import smtplib
from email.mime.text import MIMEText

from gatehouse.config import Settings

logger = logging.getLogger(__name__)


def _verification_body(code: str) -> str:
    return f"Your verification code is {code}. It expires in a few minutes."


def _reset_body(reset_url: str) -> str:
    return (
        "We received a request to reset your password.\n\n"
        f"Open this link to choose a new one: {reset_url}\n\n"
        "If you did not ask for this, you can ignore this message."
    )


def _welcome_body(first_name: str) -> str:
    return f"Hi {first_name},\n\nWelcome aboard. Your account has been created."


class SmtpEmailSender:
    """Sends plain-text mail through an SMTP relay on a worker thread."""

    def __init__(self, settings: Settings) -> None:
        self._host = settings.smtp_host
        self._port = settings.smtp_port
        self._user = settings.smtp_user
        self._password = settings.smtp_password
        self._use_tls = settings.smtp_use_tls
        self._sender = settings.smtp_from

    async def send_verification_code(self, to: str, code: str) -> None:
        await self._send(to, "Verify your email", _verification_body(code))

    async def send_password_reset(self, to: str, reset_url: str) -> None:
        await self._send(to, "Reset your password", _reset_body(reset_url))

    async def send_welcome(self, to: str, first_name: str) -> None:
        await self._send(to, "Welcome", _welcome_body(first_name))

    async def _send(self, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain")
        msg["From"] = self._sender
        msg["To"] = to
        msg["Subject"] = subject
        await asyncio.to_thread(self._deliver, msg)
        logger.info("Email %r sent to %s", subject, to)

    def _deliver(self, msg: MIMEText) -> None:
        with smtplib.SMTP(self._host, self._port) as server:
            if self._use_tls:
                server.starttls()
            if self._user:
                server.login(self._user, self._password)
            server.send_message(msg)


class LoggingEmailSender:
    """Writes messages to the log instead of sending them."""

    async def send_verification_code(self, to: str, code: str) -> None:
        logger.info("Verification code for %s: %s", to, code)

    async def send_password_reset(self, to: str, reset_url: str) -> None:
        logger.info("Password reset link for %s: %s", to, reset_url)

    async def send_welcome(self, to: str, first_name: str) -> None:
        logger.info("Welcome email for %s (%s)", to, first_name)


def build_email_sender(settings: Settings) -> SmtpEmailSender | LoggingEmailSender:
    if settings.smtp_host:
        return SmtpEmailSender(settings)
    return LoggingEmailSender()
