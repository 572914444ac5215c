"""API controller for in-app notifications."""

from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, paginate

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.schema import ResponseOk
from common.throttling import UserDefaultThrottle, WriteThrottle
from notifications.models import Notification
from notifications.schema import NotificationSchema


@api_controller(
    "/notifications",
    tags=["Notifications"],
    auth=I18nJWTAuth(),
    throttle=UserDefaultThrottle(),
)
class NotificationController(UserAwareController):
    @route.get(
        "",
        url_name="list_notifications",
        response=PageNumberPaginationExtra.get_response_schema(NotificationSchema),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_notifications(self, unread_only: bool = False) -> QuerySet[Notification]:
        """List the caller's notifications, newest first."""
        qs = Notification.objects.filter(user=self.user())
        if unread_only:
            qs = qs.filter(read_at__isnull=True)
        return qs.order_by("-created_at")

    @route.post(
        "/{notification_id}/read",
        url_name="mark_notification_read",
        response={200: ResponseOk},
        throttle=WriteThrottle(),
    )
    def mark_read(self, notification_id: UUID) -> ResponseOk:
        """Mark a notification as read."""
        notification = get_object_or_404(Notification, id=notification_id, user=self.user())
        notification.mark_read()
        return ResponseOk()
