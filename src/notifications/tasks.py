"""Celery tasks for notification dispatch."""

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone, translation

from notifications.models import Notification
from notifications.service.rendering import render

logger = structlog.get_logger(__name__)


@shared_task
def dispatch_notification(notification_id: str) -> None:
    """Render a notification in the recipient's language and mark it delivered in-app."""
    notification = Notification.objects.select_related("user").get(pk=notification_id)
    if notification.delivered_at:
        logger.info("notification_already_delivered", notification_id=notification_id)
        return

    user_language = getattr(notification.user, "language", None) or settings.LANGUAGE_CODE
    with translation.override(user_language):
        notification.title, notification.body = render(notification)
    notification.delivered_at = timezone.now()
    notification.save(update_fields=["title", "body", "delivered_at", "updated_at"])

    logger.info(
        "notification_delivered",
        notification_id=notification_id,
        notification_type=notification.notification_type,
        user_language=user_language,
    )
