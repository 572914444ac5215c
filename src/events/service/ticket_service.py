"""Organizer-side ticket operations: check-in and cancellation."""

from uuid import UUID

import structlog
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import RoleHubUser
from events.exceptions import NotOrganizerError, TicketNotValidError
from events.models import Attendance, Event, Ticket

logger = structlog.get_logger(__name__)

INVALID_STATUS_MESSAGES = {
    Ticket.TicketStatus.USED: _("This ticket has already been checked in."),
    Ticket.TicketStatus.CANCELLED: _("This ticket has been cancelled."),
}


def _get_valid_ticket(organizer: RoleHubUser, event: Event, ticket_id: UUID) -> Ticket:
    if not event.is_organizer(organizer):
        raise NotOrganizerError()
    ticket = get_object_or_404(Ticket.objects.select_for_update().select_related("user"), pk=ticket_id, event=event)
    if ticket.status != Ticket.TicketStatus.VALID:
        raise TicketNotValidError(INVALID_STATUS_MESSAGES.get(ticket.status))
    return ticket


@transaction.atomic
def check_in_ticket(organizer: RoleHubUser, event: Event, ticket_id: UUID) -> Ticket:
    """Check in an attendee by scanning their ticket."""
    ticket = _get_valid_ticket(organizer, event, ticket_id)
    ticket.status = Ticket.TicketStatus.USED
    ticket.checked_in_at = timezone.now()
    ticket.save(update_fields=["status", "checked_in_at", "updated_at"])
    logger.info("ticket_checked_in", event_id=str(event.pk), ticket_id=str(ticket.pk))
    return ticket


@transaction.atomic
def cancel_ticket(organizer: RoleHubUser, event: Event, ticket_id: UUID) -> Ticket:
    """Cancel a valid ticket and remove the attendance it backs.

    This is the support path for paid attendees, who cannot leave on their own.
    Refunds are handled in the gateway dashboard.
    """
    ticket = _get_valid_ticket(organizer, event, ticket_id)
    ticket.status = Ticket.TicketStatus.CANCELLED
    ticket.save(update_fields=["status", "updated_at"])

    deleted, _deleted_by_model = Attendance.objects.filter(
        event=event, user=ticket.user, status=Attendance.Status.CONFIRMED, origin=Attendance.Origin.TICKET
    ).delete()
    if deleted:
        event.decrement_participants()
    logger.info(
        "ticket_cancelled",
        event_id=str(event.pk),
        ticket_id=str(ticket.pk),
        attendance_removed=bool(deleted),
    )
    return ticket
