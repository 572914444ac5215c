# src/events/admin/__init__.py
"""Admin registrations for events, lots, attendance, tickets and payment intents."""

from .event import AttendanceAdmin, EventAdmin, TicketLotAdmin
from .ticket import PaymentIntentAdmin, TicketAdmin

__all__ = ["AttendanceAdmin", "EventAdmin", "PaymentIntentAdmin", "TicketAdmin", "TicketLotAdmin"]
