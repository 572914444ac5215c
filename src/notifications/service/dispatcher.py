"""Core notification dispatcher service."""

import typing as t

import structlog

from accounts.models import RoleHubUser
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.signals import notification_requested

logger = structlog.get_logger(__name__)


def create_notification(
    notification_type: NotificationType | str,
    user: RoleHubUser,
    context: dict[str, t.Any],
) -> Notification:
    """Create a notification record.

    Title and body are rendered later by the dispatch task.
    """
    notification_type = NotificationType(notification_type)
    notification = Notification.objects.create(
        notification_type=notification_type,
        user=user,
        context=context,
    )

    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        notification_type=notification_type,
        user_id=str(user.id),
    )
    return notification


class SignalNotificationSink:
    """Default NotificationSink: emits ``notification_requested`` for the in-app pipeline."""

    def notify(self, user: RoleHubUser, notification_type: NotificationType, context: dict[str, t.Any]) -> None:
        notification_requested.send(
            sender=self.__class__,
            notification_type=notification_type,
            user=user,
            context=context,
        )
