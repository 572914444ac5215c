from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class PaymentIntent(TimeStampedModel):
    """A checkout attempt, persisted before the buyer is sent to the gateway.

    The intent id travels as the preference's external_reference, so the gateway
    confirmation can be attributed to (user, event, lot) on any device.
    """

    class IntentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        REJECTED = "rejected", "Rejected"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payment_intents")
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="payment_intents")
    lot = models.ForeignKey(
        "events.TicketLot", on_delete=models.SET_NULL, null=True, blank=True, related_name="payment_intents"
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    preference_id = models.CharField(max_length=255, unique=True)
    payment_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    status = models.CharField(
        max_length=20, choices=IntentStatus.choices, default=IntentStatus.PENDING, db_index=True
    )
    raw_response = models.JSONField(blank=True, default=dict)  # last gateway payload, for auditing
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"PaymentIntent {self.id} ({self.status})"
