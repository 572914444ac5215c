from .attendance import Attendance
from .event import Event
from .lot import TicketLot
from .payment import PaymentIntent
from .ticket import Ticket

__all__ = [
    "Attendance",
    "Event",
    "PaymentIntent",
    "Ticket",
    "TicketLot",
]
