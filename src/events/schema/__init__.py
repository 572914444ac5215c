"""Events schema package.

Schemas are organized into modules that mirror the models package.
"""

from .attendance import AttendanceSchema, AttendeeSchema, MyStatusSchema
from .event import EventSchema
from .lot import TicketLotCreateSchema, TicketLotSchema, TicketLotUpdateSchema
from .ticket import (
    CheckoutPayload,
    CheckoutResponse,
    PaymentReturnPayload,
    ReconciliationSchema,
    TicketSchema,
)

__all__ = [
    "AttendanceSchema",
    "AttendeeSchema",
    "CheckoutPayload",
    "CheckoutResponse",
    "EventSchema",
    "MyStatusSchema",
    "PaymentReturnPayload",
    "ReconciliationSchema",
    "TicketLotCreateSchema",
    "TicketLotSchema",
    "TicketLotUpdateSchema",
    "TicketSchema",
]
