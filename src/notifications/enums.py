from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All notification types emitted by the attendance and ticketing flows."""

    # Organizer notifications
    JOIN_REQUEST_RECEIVED = "join_request_received"
    ATTENDANCE_CONFIRMED = "attendance_confirmed"

    # Attendee notifications
    JOIN_REQUEST_APPROVED = "join_request_approved"
    JOIN_REQUEST_REJECTED = "join_request_rejected"
    TICKET_ISSUED = "ticket_issued"
