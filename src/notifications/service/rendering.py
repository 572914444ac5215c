"""In-app titles and bodies per notification type."""

from django.utils.translation import gettext as _
from django.utils.translation import gettext_noop

from notifications.enums import NotificationType
from notifications.models import Notification

TEMPLATES: dict[str, tuple[str, str]] = {
    NotificationType.JOIN_REQUEST_RECEIVED: (
        gettext_noop("New join request"),
        gettext_noop("{requester_name} wants to join {event_title}."),
    ),
    NotificationType.ATTENDANCE_CONFIRMED: (
        gettext_noop("New attendee"),
        gettext_noop("{attendee_name} is going to {event_title}."),
    ),
    NotificationType.JOIN_REQUEST_APPROVED: (
        gettext_noop("Request approved"),
        gettext_noop("Your request to join {event_title} was approved."),
    ),
    NotificationType.JOIN_REQUEST_REJECTED: (
        gettext_noop("Request declined"),
        gettext_noop("Your request to join {event_title} was declined."),
    ),
    NotificationType.TICKET_ISSUED: (
        gettext_noop("Ticket confirmed"),
        gettext_noop("Your ticket for {event_title} is confirmed."),
    ),
}


def render(notification: Notification) -> tuple[str, str]:
    """Render (title, body) in the active language."""
    title, body = TEMPLATES[notification.notification_type]
    return _(title), _(body).format(**notification.context)
