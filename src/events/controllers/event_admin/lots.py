from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.schema import ValidationErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import IsEventOrganizer
from events.service import lot_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=I18nJWTAuth(),
    permissions=[IsEventOrganizer()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminLotsController(EventAdminBaseController):
    """Ticket lot management endpoints."""

    @route.get(
        "/lots",
        url_name="admin_list_lots",
        response=list[schema.TicketLotSchema],
        throttle=UserDefaultThrottle(),
    )
    def list_lots(self, event_id: UUID) -> QuerySet[models.TicketLot]:
        """List all lots of an event, including inactive ones."""
        return lot_service.list_lots(self.get_one(event_id), include_inactive=True)

    @route.post(
        "/lots",
        url_name="create_lot",
        response={201: schema.TicketLotSchema, 400: ValidationErrorResponse},
    )
    def create_lot(self, event_id: UUID, payload: schema.TicketLotCreateSchema) -> tuple[int, models.TicketLot]:
        """Create a ticket lot. Lot names are unique within an event."""
        return 201, lot_service.create_lot(self.user(), self.get_one(event_id), payload)

    @route.patch(
        "/lots/{lot_id}",
        url_name="update_lot",
        response={200: schema.TicketLotSchema, 400: ValidationErrorResponse},
    )
    def update_lot(self, event_id: UUID, lot_id: UUID, payload: schema.TicketLotUpdateSchema) -> models.TicketLot:
        """Update a lot. Tickets already issued keep the price they were sold at."""
        event = self.get_one(event_id)
        lot = get_object_or_404(models.TicketLot, pk=lot_id, event=event)
        return lot_service.update_lot(self.user(), lot, payload)

    @route.delete("/lots/{lot_id}", url_name="delete_lot", response={204: None})
    def delete_lot(self, event_id: UUID, lot_id: UUID) -> tuple[int, None]:
        """Delete a lot. Lots that already sold tickets are deactivated instead."""
        event = self.get_one(event_id)
        lot = get_object_or_404(models.TicketLot, pk=lot_id, event=event)
        lot_service.delete_lot(self.user(), lot)
        return 204, None
