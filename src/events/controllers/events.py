import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import I18nJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.schema import ResponseMessage
from common.throttling import PaymentThrottle, WriteThrottle
from events import models, schema
from events.service import lot_service, mercadopago_service
from events.service.attendance import AttendanceManager, JoinResult


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventController(UserAwareController):
    """Public event endpoints: details, lots, attendance and checkout."""

    def get_one(self, event_id: UUID) -> models.Event:
        return t.cast(
            models.Event,
            self.get_object_or_exception(models.Event.objects.with_organizer(), pk=event_id),
        )

    @route.get("/{uuid:event_id}", url_name="get_event", response=schema.EventSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Get an event with its authoritative price and confirmed participant count."""
        return self.get_one(event_id)

    @route.get("/{uuid:event_id}/lots", url_name="list_event_lots", response=list[schema.TicketLotSchema])
    def list_lots(self, event_id: UUID) -> QuerySet[models.TicketLot]:
        """List the ticket lots currently on sale for this event."""
        return lot_service.list_lots(self.get_one(event_id))

    @route.get(
        "/{uuid:event_id}/attendees",
        url_name="list_attendees",
        response=PaginatedResponseSchema[schema.AttendeeSchema],
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_attendees(self, event_id: UUID) -> QuerySet[models.Attendance]:
        """List confirmed attendees. Pending join requests are not shown."""
        event = self.get_one(event_id)
        return models.Attendance.objects.confirmed().with_user().filter(event=event)

    @route.get(
        "/{uuid:event_id}/my-status",
        url_name="my_status",
        response=schema.MyStatusSchema,
        auth=I18nJWTAuth(),
    )
    def my_status(self, event_id: UUID) -> schema.MyStatusSchema:
        """Get the caller's attendance status and valid ticket for this event."""
        event = self.get_one(event_id)
        attendance = models.Attendance.objects.filter(event=event, user=self.user()).first()
        ticket = models.Ticket.objects.valid().filter(event=event, user=self.user()).first()
        if attendance is None:
            return schema.MyStatusSchema(event_id=event.pk, ticket_id=ticket.pk if ticket else None)
        return schema.MyStatusSchema(
            event_id=event.pk,
            status=attendance.status,
            origin=attendance.origin,
            ticket_id=ticket.pk if ticket else None,
            can_leave=ticket is None and attendance.origin != models.Attendance.Origin.TICKET,
            awaiting_payment=attendance.awaiting_payment,
        )

    @route.post(
        "/{uuid:event_id}/join",
        url_name="join_event",
        response={200: JoinResult},
        auth=I18nJWTAuth(),
        throttle=WriteThrottle(),
    )
    def join(self, event_id: UUID) -> JoinResult:
        """Ask to attend an event.

        Public free events confirm immediately. Private events create a pending request
        for the organizer to decide. Paid events answer `checkout_required`: call
        `/checkout` to buy a ticket; attendance is confirmed once the payment clears.
        """
        return AttendanceManager(self.user(), self.get_one(event_id)).request_join()

    @route.post(
        "/{uuid:event_id}/leave",
        url_name="leave_event",
        response={200: ResponseMessage},
        auth=I18nJWTAuth(),
        throttle=WriteThrottle(),
    )
    def leave(self, event_id: UUID) -> ResponseMessage:
        """Leave an event or withdraw a pending join request.

        Attendance obtained by buying a ticket cannot be cancelled here.
        """
        AttendanceManager(self.user(), self.get_one(event_id)).leave()
        return ResponseMessage(message="You are no longer attending this event.")

    @route.post(
        "/{uuid:event_id}/checkout",
        url_name="event_checkout",
        response={200: schema.CheckoutResponse},
        auth=I18nJWTAuth(),
        throttle=PaymentThrottle(),
    )
    def checkout(self, event_id: UUID, payload: schema.CheckoutPayload) -> schema.CheckoutResponse:
        """Start a MercadoPago checkout for this event, optionally for a specific lot.

        The charged amount is always the stored lot or event price. Redirect the user
        to `redirect_url`; they come back to the frontend's /payment/* pages.
        """
        session = mercadopago_service.create_checkout(
            self.get_one(event_id), self.user(), lot_id=payload.lot_id, client_price=payload.price
        )
        return schema.CheckoutResponse(checkout_id=session.checkout_id, redirect_url=session.redirect_url)
