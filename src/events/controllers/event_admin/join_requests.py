from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import I18nJWTAuth
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import IsEventOrganizer
from events.service.attendance import decide_join_request

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=I18nJWTAuth(),
    permissions=[IsEventOrganizer()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminJoinRequestsController(EventAdminBaseController):
    """Join request review for private events."""

    @route.get(
        "/join-requests",
        url_name="list_join_requests",
        response=PaginatedResponseSchema[schema.AttendanceSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_join_requests(self, event_id: UUID) -> QuerySet[models.Attendance]:
        """List join requests awaiting a decision, oldest first."""
        event = self.get_one(event_id)
        return models.Attendance.objects.awaiting_decision().with_user().filter(event=event).order_by("created_at")

    @route.post(
        "/join-requests/{user_id}/approve",
        url_name="approve_join_request",
        response={200: schema.AttendanceSchema},
    )
    def approve_join_request(self, event_id: UUID, user_id: UUID) -> models.Attendance | None:
        """Approve a pending join request. On a paid event this unlocks checkout instead of confirming."""
        event = self.get_one(event_id)
        join_request = self.get_object_or_exception(
            models.Attendance.objects.awaiting_decision(), event=event, user_id=user_id
        )
        user = join_request.user
        return decide_join_request(self.user(), event, user, approve=True)

    @route.post(
        "/join-requests/{user_id}/reject",
        url_name="reject_join_request",
        response={204: None},
    )
    def reject_join_request(self, event_id: UUID, user_id: UUID) -> tuple[int, None]:
        """Reject a pending join request. The request is removed."""
        event = self.get_one(event_id)
        join_request = self.get_object_or_exception(
            models.Attendance.objects.awaiting_decision(), event=event, user_id=user_id
        )
        user = join_request.user
        decide_join_request(self.user(), event, user, approve=False)
        return 204, None
