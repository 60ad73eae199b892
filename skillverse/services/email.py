"""Email service"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from starlette.concurrency import run_in_threadpool

from skillverse.core.config import Settings
from skillverse.core.exceptions import ExternalServiceException

logger = logging.getLogger(__name__)


class EmailService:
    """Outbound mail over SMTP; logs messages when SMTP is not configured"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def is_configured(self) -> bool:
        """Check if email service is configured"""
        return self.settings.smtp_configured()

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Deliver a plain text email

        Raises:
            ExternalServiceException: If the SMTP exchange fails
        """
        if not self.is_configured():
            logger.info(f"SMTP not configured, email to {to} logged only: {subject}")
            logger.debug(body)
            return

        message = EmailMessage()
        message["From"] = formataddr(
            (
                self.settings.EMAILS_FROM_NAME,
                self.settings.EMAILS_FROM_EMAIL or self.settings.SMTP_USER,
            )
        )
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {to} could not be sent: {e}")
            raise ExternalServiceException("SMTP", "Email could not be sent")

        logger.info(f"Email sent to {to}: {subject}")

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(
            self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=self.settings.HTTP_TIMEOUT
        ) as smtp:
            if self.settings.SMTP_TLS:
                smtp.starttls()
            smtp.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)
            smtp.send_message(message)

    async def send_login_notification(self, email: str, name: str, via: str = "") -> None:
        """Login notification; failures are logged and never raised"""
        method = f" via {via}" if via else ""
        body = (
            f"Hello {name},\n\n"
            f"This is a notification to confirm that you have successfully logged into "
            f"your SkillVerse account{method} just now.\n\n"
            "If this was not you, please secure your account immediately by resetting "
            "your password.\n\n"
            "Best regards,\nThe SkillVerse Team"
        )
        try:
            await self.send(email, "Successful Login to SkillVerse", body)
        except ExternalServiceException as e:
            logger.warning(f"Failed to send login notification email: {e.message}")

    async def send_password_reset_email(self, email: str, reset_url: str) -> None:
        """Send password reset email; raises on delivery failure"""
        minutes = self.settings.PASSWORD_RESET_EXPIRE_MINUTES
        body = (
            "You requested a password reset for your SkillVerse account.\n\n"
            "Please click the link below to reset your password:\n"
            f"{reset_url}\n\n"
            f"This link will expire in {minutes} minutes.\n\n"
            "If you didn't request this, please ignore this email.\n\n"
            "Best regards,\nThe SkillVerse Team"
        )
        await self.send(email, "Password Reset Request - SkillVerse", body)
