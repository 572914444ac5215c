"""Event admin controllers package.

Organizer-only endpoints, split by the resource they manage.
"""

from .join_requests import EventAdminJoinRequestsController
from .lots import EventAdminLotsController
from .tickets import EventAdminTicketsController

EVENT_ADMIN_CONTROLLERS: list[type] = [
    EventAdminLotsController,
    EventAdminJoinRequestsController,
    EventAdminTicketsController,
]

__all__ = [
    "EventAdminLotsController",
    "EventAdminJoinRequestsController",
    "EventAdminTicketsController",
    "EVENT_ADMIN_CONTROLLERS",
]
