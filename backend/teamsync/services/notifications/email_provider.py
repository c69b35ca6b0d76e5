import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from teamsync.core.config import settings
from teamsync.services.notifications.base import NotificationProvider

logger = logging.getLogger(__name__)


class EmailProvider(NotificationProvider):
    def __init__(
        self,
        smtp_host: str = None,
        smtp_port: int = None,
        smtp_user: str = None,
        smtp_password: str = None,
        emails_from: str = None,
    ):
        self.smtp_host = smtp_host if smtp_host is not None else settings.SMTP_HOST
        self.smtp_port = smtp_port or settings.SMTP_PORT
        self.smtp_user = smtp_user if smtp_user is not None else settings.SMTP_USER
        self.smtp_password = smtp_password if smtp_password is not None else settings.SMTP_PASSWORD
        self.emails_from = emails_from or settings.EMAILS_FROM_EMAIL

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            if self.smtp_user and self.smtp_password:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

    async def send(self, destination: str, subject: str, message: str) -> bool:
        if not self.smtp_host:
            logger.warning(f"SMTP_HOST not configured. Skipping email to {destination}: {subject}")
            return False

        msg = MIMEMultipart("alternative")
        msg["From"] = self.emails_from
        msg["To"] = destination
        msg["Subject"] = subject
        msg.attach(MIMEText(message, "plain"))

        try:
            await asyncio.to_thread(self._deliver, msg)
            logger.info(f"Email sent to {destination}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {destination}: {e}")
            return False
