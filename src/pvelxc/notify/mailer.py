"""Email notification over SMTP."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from pvelxc.models.config import LxcConfig
from pvelxc.models.report import StepOutcome


logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 30


class Mailer:
    """Sends the run report through the configured SMTP relay."""

    def __init__(self, config: LxcConfig):
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.smtp_enabled

    def build_message(self, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.smtp_from
        message["To"] = self.config.smtp_to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, subject: str, body: str) -> None:
        """Send synchronously with STARTTLS and login."""
        message = self.build_message(subject, body)
        with smtplib.SMTP(self.config.smtp_server, self.config.smtp_port, timeout=SMTP_TIMEOUT) as server:
            server.starttls()
            server.login(self.config.smtp_user, self.config.smtp_password)
            server.send_message(message)

    async def notify(self, subject: str, body: str) -> StepOutcome:
        """Send the notification; a failure never aborts the run."""
        if not self.enabled:
            return StepOutcome.skipped("email", "smtp_enabled is off")

        logger.info("Sending email notification...")
        try:
            await asyncio.to_thread(self.send, subject, body)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Failed to send email: {e}")
            return StepOutcome.warning("email", str(e))

        logger.info("Email sent successfully")
        return StepOutcome.ok("email")
