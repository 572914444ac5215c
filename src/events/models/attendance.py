import typing as t

from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class AttendanceQuerySet(models.QuerySet["Attendance"]):
    def with_user(self) -> t.Self:
        return self.select_related("user")

    def confirmed(self) -> t.Self:
        return self.filter(status=Attendance.Status.CONFIRMED)

    def pending(self) -> t.Self:
        return self.filter(status=Attendance.Status.PENDING)

    def awaiting_decision(self) -> t.Self:
        """Pending requests the organizer has not approved yet."""
        return self.pending().filter(approved_at__isnull=True)


class AttendanceManager(models.Manager["Attendance"]):
    def get_queryset(self) -> AttendanceQuerySet:
        return AttendanceQuerySet(self.model, using=self._db)

    def with_user(self) -> AttendanceQuerySet:
        return self.get_queryset().with_user()

    def confirmed(self) -> AttendanceQuerySet:
        return self.get_queryset().confirmed()

    def pending(self) -> AttendanceQuerySet:
        return self.get_queryset().pending()

    def awaiting_decision(self) -> AttendanceQuerySet:
        return self.get_queryset().awaiting_decision()


class Attendance(TimeStampedModel):
    """A user's relationship to an event. No row means the user is not attending."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"

    class Origin(models.TextChoices):
        FREE_JOIN = "free_join", "Free join"
        APPROVAL = "approval", "Organizer approval"
        TICKET = "ticket", "Ticket purchase"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="attendances")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="attendances")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    origin = models.CharField(max_length=20, choices=Origin.choices, default=Origin.FREE_JOIN)
    # set when the organizer approves a request on a paid event; the record stays pending until payment
    approved_at = models.DateTimeField(null=True, blank=True)

    objects = AttendanceManager()

    validate_constraints_on_save = False

    class Meta:
        db_table = "events_attendees"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="unique_attendance_event_user"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.event_id} ({self.status})"

    @property
    def awaiting_payment(self) -> bool:
        return self.status == self.Status.PENDING and self.approved_at is not None
