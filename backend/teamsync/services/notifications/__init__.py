from teamsync.services.notifications.service import NotificationResult, NotificationService

__all__ = ["NotificationResult", "NotificationService"]
