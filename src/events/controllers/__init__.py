from .event_admin import EVENT_ADMIN_CONTROLLERS
from .events import EventController
from .payments import PaymentController
from .tickets import TicketController

__all__ = ["EVENT_ADMIN_CONTROLLERS", "EventController", "PaymentController", "TicketController"]
