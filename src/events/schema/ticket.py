"""Ticket, checkout and payment schemas."""

from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from events.models import Ticket
from events.enums import ReconciliationOutcome

from .lot import TicketLotSchema


class TicketEventSchema(Schema):
    id: UUID
    title: str


class TicketSchema(ModelSchema):
    event: TicketEventSchema
    lot: TicketLotSchema | None = None

    class Meta:
        model = Ticket
        fields = ["id", "status", "price_paid", "currency", "qr_code", "checked_in_at", "created_at"]


class CheckoutPayload(Schema):
    lot_id: UUID | None = None
    # accepted for compatibility, never charged
    price: Decimal | None = None


class CheckoutResponse(Schema):
    checkout_id: str
    redirect_url: str


class PaymentReturnPayload(Schema):
    payment_id: str = Field(..., min_length=1, max_length=64)
    status: str = Field(..., max_length=32)
    preference_id: str | None = Field(None, max_length=255)


class ReconciliationSchema(Schema):
    outcome: ReconciliationOutcome
    ticket: TicketSchema | None = None
