"""Signal handlers for notification system."""

import typing as t

import structlog
from django.db import transaction
from django.dispatch import receiver

from notifications.service.dispatcher import create_notification
from notifications.signals import notification_requested

logger = structlog.get_logger(__name__)


@receiver(notification_requested)
def handle_notification_request(sender: t.Any, **kwargs: t.Any) -> None:
    """Handle notification_requested signal.

    Creates the notification record and dispatches it to the async task once the
    surrounding transaction commits.

    This handler MUST NOT raise: notification failures are logged and swallowed so
    they never roll back the attendance or ticketing operation that emitted them.
    """
    notification_type = kwargs.get("notification_type")
    user = kwargs.get("user")
    context = kwargs.get("context", {})

    if not notification_type or not user:
        logger.error("invalid_notification_request", notification_type=notification_type, sender=str(sender))
        return

    try:
        with transaction.atomic():
            notification = create_notification(notification_type=notification_type, user=user, context=context)
    except Exception as e:
        logger.exception(
            "notification_request_failed",
            notification_type=notification_type,
            user_id=str(user.id),
            error_type=type(e).__name__,
        )
        return

    from notifications.tasks import dispatch_notification

    notification_id = str(notification.id)
    transaction.on_commit(lambda: dispatch_notification.delay(notification_id))
