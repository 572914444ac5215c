# src/events/admin/ticket.py
"""Admin classes for Ticket and PaymentIntent models."""

from django.contrib import admin
from django.http import HttpRequest
from unfold.admin import ModelAdmin

from events import models
from events.admin.base import EventLinkMixin, UserLinkMixin


@admin.register(models.Ticket)
class TicketAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    list_display = ["id", "event_link", "user_link", "lot_name", "price_paid", "status", "checked_in_at"]
    list_filter = ["status", "event__title"]
    search_fields = ["event__title", "user__username", "qr_code", "payment_id"]
    autocomplete_fields = ["event", "user", "lot"]
    readonly_fields = ["id", "qr_code", "payment_id", "payment_intent", "price_paid", "checked_in_at"]
    date_hierarchy = "created_at"

    @admin.display(description="Lot")
    def lot_name(self, obj: models.Ticket) -> str:
        return obj.lot.name if obj.lot else "-"


@admin.register(models.PaymentIntent)
class PaymentIntentAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    """Checkout attempts. Support resolves unmatched payments from here."""

    list_display = ["id", "event_link", "user_link", "amount", "currency", "status", "payment_id", "created_at"]
    list_filter = ["status"]
    search_fields = ["id", "preference_id", "payment_id", "user__username"]
    readonly_fields = [
        "id",
        "user",
        "event",
        "lot",
        "amount",
        "currency",
        "preference_id",
        "payment_id",
        "raw_response",
        "completed_at",
    ]
    date_hierarchy = "created_at"

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False
