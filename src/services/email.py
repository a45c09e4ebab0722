"""Email delivery over SMTP."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from src.config import get_settings
from src.models.user import User

logger = logging.getLogger(__name__)


class EmailService:
    """Sends welcome and password-reset emails.

    Without an SMTP host configured, messages are logged instead of sent.
    """

    def __init__(self) -> None:
        self.settings = get_settings()

    async def send_welcome(self, user: User, url: str) -> None:
        """Welcome a freshly signed-up user."""
        first_name = user.name.split(" ")[0]
        await self.send(
            to=user.email,
            subject="Welcome to the Tour Booking family!",
            body=(
                f"Hi {first_name},\n\n"
                "Welcome aboard! We're glad to have you.\n"
                f"Upload a photo and manage your account at {url}\n"
            ),
        )

    async def send_password_reset(self, user: User, url: str) -> None:
        """Mail the raw reset token as a link."""
        minutes = self.settings.password_reset_expiration_minutes
        first_name = user.name.split(" ")[0]
        await self.send(
            to=user.email,
            subject=f"Your password reset token (valid for only {minutes} minutes)",
            body=(
                f"Hi {first_name},\n\n"
                "Forgot your password? Submit a PATCH request with your new password "
                f"and password_confirm to: {url}\n"
                "If you didn't forget your password, please ignore this email.\n"
            ),
        )

    async def send(self, to: str, subject: str, body: str) -> None:
        """Send a plain-text message. SMTP failures propagate to the caller."""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.email_from
        msg["To"] = to
        msg.set_content(body)

        if not self.settings.smtp_host:
            logger.info(f"SMTP not configured, email to {to} not sent: {subject}")
            logger.debug(body)
            return

        # smtplib blocks, keep it off the event loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send_smtp, msg)
        logger.info(f"Email sent to {to}: {subject}")

    def _send_smtp(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as server:
            if self.settings.smtp_use_tls:
                server.starttls()
            if self.settings.smtp_username and self.settings.smtp_password:
                server.login(self.settings.smtp_username, self.settings.smtp_password)
            server.send_message(msg)
