import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel


class TicketQuerySet(models.QuerySet["Ticket"]):
    def valid(self) -> t.Self:
        return self.filter(status=Ticket.TicketStatus.VALID)

    def full(self) -> t.Self:
        """Select everything needed to render a ticket."""
        return self.select_related("event", "lot", "user")


class TicketManager(models.Manager["Ticket"]):
    def get_queryset(self) -> TicketQuerySet:
        return TicketQuerySet(self.model, using=self._db)

    def valid(self) -> TicketQuerySet:
        return self.get_queryset().valid()

    def full(self) -> TicketQuerySet:
        return self.get_queryset().full()


class Ticket(TimeStampedModel):
    class TicketStatus(models.TextChoices):
        VALID = "valid", "Valid"
        USED = "used", "Used"
        CANCELLED = "cancelled", "Cancelled"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tickets")
    lot = models.ForeignKey(
        "events.TicketLot", on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets"
    )
    payment_intent = models.OneToOneField(
        "events.PaymentIntent", on_delete=models.SET_NULL, null=True, blank=True, related_name="ticket"
    )
    status = models.CharField(
        choices=TicketStatus.choices, default=TicketStatus.VALID, max_length=20, db_index=True
    )
    price_paid = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    qr_code = models.CharField(max_length=255, unique=True)
    payment_id = models.CharField(max_length=64, db_index=True, blank=True, default="")
    checked_in_at = models.DateTimeField(null=True, blank=True)

    objects = TicketManager()

    validate_constraints_on_save = False

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=Q(status="valid"),
                name="unique_valid_ticket_per_event_user",
            ),
            models.UniqueConstraint(
                fields=["payment_id"],
                condition=~Q(payment_id=""),
                name="unique_ticket_payment_id",
            ),
        ]

    def __str__(self) -> str:
        return f"Ticket {self.id} ({self.status})"
