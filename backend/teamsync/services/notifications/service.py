import logging
from dataclasses import dataclass
from typing import Optional

from teamsync.core.config import settings
from teamsync.core.metrics import notifications_sent_total
from teamsync.services.notifications.base import NotificationProvider
from teamsync.services.notifications.email_provider import EmailProvider
from teamsync.services.notifications.templates import get_team_invite_text

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    success: bool
    error: Optional[str] = None


class NotificationService:
    def __init__(self, email_provider: Optional[NotificationProvider] = None):
        self.email_provider = email_provider or EmailProvider()

    async def notify_invite(
        self,
        email: str,
        team_name: str,
        inviter_name: str,
        message: Optional[str] = None,
    ) -> NotificationResult:
        """
        Tell a participant they were invited to a team.

        Never raises: delivery problems are reported in the result so the
        caller can keep the invite regardless.
        """
        subject = f"{settings.PROJECT_NAME} - You're invited to join {team_name}"
        body = get_team_invite_text(
            team_name=team_name,
            inviter_name=inviter_name,
            message=message,
            link=f"{settings.FRONTEND_BASE_URL}/dashboard",
            project_name=settings.PROJECT_NAME,
            valid_hours=settings.INVITE_EXPIRY_HOURS,
        )

        try:
            delivered = await self.email_provider.send(email, subject, body)
        except Exception as e:
            logger.warning(f"Invite notification to {email} failed: {e}")
            notifications_sent_total.labels(channel="email", outcome="error").inc()
            return NotificationResult(success=False, error=str(e))

        notifications_sent_total.labels(channel="email", outcome="sent" if delivered else "skipped").inc()
        if not delivered:
            return NotificationResult(success=False, error="Email delivery is not available")
        return NotificationResult(success=True)
