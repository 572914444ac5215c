import typing as t
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F

from common.models import TimeStampedModel


class EventQuerySet(models.QuerySet["Event"]):
    def with_organizer(self) -> t.Self:
        """Select the related organizer."""
        return self.select_related("organizer")


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        """Get base queryset."""
        return EventQuerySet(self.model, using=self._db)

    def with_organizer(self) -> EventQuerySet:
        """Returns a queryset with the organizer selected."""
        return self.get_queryset().with_organizer()


class Event(TimeStampedModel):
    class Privacy(models.TextChoices):
        PUBLIC = "public", "Public"
        PRIVATE = "private", "Private"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")
    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    start = models.DateTimeField(null=True, blank=True, db_index=True)
    privacy = models.CharField(max_length=10, choices=Privacy.choices, default=Privacy.PUBLIC, db_index=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(0)],
        help_text="Base price, used when the event has no ticket lots.",
    )
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY, help_text="ISO 4217 currency code")
    max_participants = models.PositiveIntegerField(null=True, blank=True)
    participant_count = models.PositiveIntegerField(
        default=0, editable=False, help_text="Number of confirmed attendees."
    )

    objects = EventManager()

    class Meta:
        ordering = ["-start", "-created_at"]

    def __str__(self) -> str:
        return self.title

    @property
    def is_private(self) -> bool:
        return self.privacy == self.Privacy.PRIVATE

    @property
    def is_paid(self) -> bool:
        """Whether joining requires a purchase.

        An event is paid if its base price is positive or any active lot is priced.
        """
        if self.price > 0:
            return True
        return self.lots.filter(active=True, price__gt=0).exists()

    def is_organizer(self, user: t.Any) -> bool:
        return bool(user.is_authenticated and self.organizer_id == user.id)

    def is_full(self) -> bool:
        return self.max_participants is not None and self.participant_count >= self.max_participants

    def increment_participants(self) -> None:
        Event.objects.filter(pk=self.pk).update(participant_count=F("participant_count") + 1)
        self.refresh_from_db(fields=["participant_count"])

    def decrement_participants(self) -> None:
        Event.objects.filter(pk=self.pk, participant_count__gt=0).update(
            participant_count=F("participant_count") - 1
        )
        self.refresh_from_db(fields=["participant_count"])
