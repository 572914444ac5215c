"""Organizer-scoped management of ticket lots."""

import structlog
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import RoleHubUser
from events.exceptions import NotOrganizerError
from events.models import Event, TicketLot
from events.schema import TicketLotCreateSchema, TicketLotUpdateSchema
from events.service import update_db_instance

logger = structlog.get_logger(__name__)


def _assert_organizer(user: RoleHubUser, event: Event) -> None:
    if not event.is_organizer(user):
        logger.warning("lot_mutation_denied", event_id=str(event.pk), user_id=str(user.pk))
        raise NotOrganizerError()


def list_lots(event: Event, *, include_inactive: bool = False) -> QuerySet[TicketLot]:
    """List an event's lots. Public callers only see lots that are on sale."""
    lots = TicketLot.objects.filter(event=event)
    return lots if include_inactive else lots.on_sale()


def create_lot(organizer: RoleHubUser, event: Event, payload: TicketLotCreateSchema) -> TicketLot:
    _assert_organizer(organizer, event)
    lot = TicketLot.objects.create(event=event, **payload.model_dump())
    logger.info("lot_created", event_id=str(event.pk), lot_id=str(lot.pk), price=str(lot.price))
    return lot


def update_lot(organizer: RoleHubUser, lot: TicketLot, payload: TicketLotUpdateSchema) -> TicketLot:
    """Partially update a lot. Only the fields present in the payload change."""
    _assert_organizer(organizer, lot.event)
    lot = update_db_instance(lot, payload)
    logger.info("lot_updated", event_id=str(lot.event_id), lot_id=str(lot.pk), fields=sorted(payload.model_fields_set))
    return lot


@transaction.atomic
def delete_lot(organizer: RoleHubUser, lot: TicketLot) -> bool:
    """Delete a lot, or deactivate it when tickets already reference it.

    Returns:
        True if the lot was deleted, False if it was deactivated.
    """
    _assert_organizer(organizer, lot.event)
    if lot.tickets.exists() or lot.payment_intents.exists():
        update_db_instance(lot, active=False)
        logger.info("lot_deactivated", event_id=str(lot.event_id), lot_id=str(lot.pk))
        return False
    lot_id = str(lot.pk)
    lot.delete()
    logger.info("lot_deleted", event_id=str(lot.event_id), lot_id=lot_id)
    return True
