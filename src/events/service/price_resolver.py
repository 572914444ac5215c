"""Authoritative price resolution for paid events.

Prices always come from the database. Whatever amount a client sends along with
a checkout request is discarded by the callers of this module.
"""

import typing as t
from decimal import Decimal
from uuid import UUID

import structlog

from events.exceptions import InvalidLotError, InvalidPriceError
from events.models import Event, TicketLot

logger = structlog.get_logger(__name__)


class ResolvedPrice(t.NamedTuple):
    price: Decimal
    currency: str
    display_name: str
    lot: TicketLot | None


def resolve_price(event: Event, lot_id: UUID | None = None, *, include_inactive: bool = False) -> ResolvedPrice:
    """Resolve the price to charge for an event, optionally for one of its lots.

    Args:
        event: The event being purchased.
        lot_id: The selected lot. The lot is looked up scoped to the event.
        include_inactive: Accept deactivated lots. Used when reconciling a payment for
            a lot that was deactivated after the buyer paid.

    Raises:
        InvalidLotError: The lot does not belong to the event or is inactive.
        InvalidPriceError: The stored price is negative.
    """
    # re-read: the event instance may have been loaded before an organizer edit
    price, currency, title = Event.objects.values_list("price", "currency", "title").get(pk=event.pk)
    lot: TicketLot | None = None
    display_name = title

    if lot_id is not None:
        lots = TicketLot.objects.filter(event_id=event.pk)
        if not include_inactive:
            lots = lots.active()
        lot = lots.filter(pk=lot_id).first()
        if lot is None:
            logger.warning("invalid_lot_requested", event_id=str(event.pk), lot_id=str(lot_id))
            raise InvalidLotError()
        price = lot.price
        display_name = f"{title} - {lot.name}"

    if price < 0:
        logger.error("negative_price_resolved", event_id=str(event.pk), lot_id=str(lot_id) if lot_id else None)
        raise InvalidPriceError()

    return ResolvedPrice(price=price, currency=currency, display_name=display_name, lot=lot)
