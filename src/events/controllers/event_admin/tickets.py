from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import I18nJWTAuth
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import IsEventOrganizer
from events.service import ticket_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=I18nJWTAuth(),
    permissions=[IsEventOrganizer()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminTicketsController(EventAdminBaseController):
    """Issued ticket management endpoints."""

    @route.get(
        "/tickets",
        url_name="admin_list_tickets",
        response=PaginatedResponseSchema[schema.TicketSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_tickets(self, event_id: UUID, status: models.Ticket.TicketStatus | None = None) -> QuerySet[models.Ticket]:
        """List the tickets sold for an event, optionally filtered by status."""
        event = self.get_one(event_id)
        qs = models.Ticket.objects.full().filter(event=event)
        if status:
            qs = qs.filter(status=status)
        return qs.order_by("-created_at")

    @route.post("/tickets/{ticket_id}/check-in", url_name="check_in_ticket", response=schema.TicketSchema)
    def check_in(self, event_id: UUID, ticket_id: UUID) -> models.Ticket:
        """Check in an attendee. Only valid tickets can be checked in, and only once."""
        return ticket_service.check_in_ticket(self.user(), self.get_one(event_id), ticket_id)

    @route.post("/tickets/{ticket_id}/cancel", url_name="cancel_ticket", response=schema.TicketSchema)
    def cancel(self, event_id: UUID, ticket_id: UUID) -> models.Ticket:
        """Cancel a valid ticket and release the attendance it granted.

        Refunds are handled in the MercadoPago dashboard.
        """
        return ticket_service.cancel_ticket(self.user(), self.get_one(event_id), ticket_id)
