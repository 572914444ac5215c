import typing as t
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel


class TicketLotQuerySet(models.QuerySet["TicketLot"]):
    def active(self) -> t.Self:
        return self.filter(active=True)

    def on_sale(self) -> t.Self:
        """Active lots whose sale start date has been reached."""
        today = timezone.localdate()
        return self.active().filter(models.Q(start_date__isnull=True) | models.Q(start_date__lte=today))


class TicketLotManager(models.Manager["TicketLot"]):
    def get_queryset(self) -> TicketLotQuerySet:
        return TicketLotQuerySet(self.model, using=self._db)

    def active(self) -> TicketLotQuerySet:
        return self.get_queryset().active()

    def on_sale(self) -> TicketLotQuerySet:
        return self.get_queryset().on_sale()


class TicketLot(TimeStampedModel):
    """A named, priced ticket tier of an event.

    Lots are optional: an event without lots is sold at its base price.
    The quantity is informational and is not decremented on purchase.
    """

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="lots")
    name = models.CharField(max_length=100, db_index=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(null=True, blank=True, help_text="Advertised number of tickets.")
    start_date = models.DateField(null=True, blank=True, help_text="Date the lot goes on sale.")
    active = models.BooleanField(default=True, db_index=True)

    objects = TicketLotManager()

    class Meta:
        ordering = ["price", "start_date", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_event_lot_name"),
        ]

    def __str__(self) -> str:
        return f"{self.event} - {self.name}"

    def is_on_sale(self) -> bool:
        if not self.active:
            return False
        return self.start_date is None or self.start_date <= timezone.localdate()
