# src/events/admin/event.py
"""Admin classes for Event, TicketLot and Attendance models."""

from django.contrib import admin
from unfold.admin import ModelAdmin

from events import models
from events.admin.base import EventLinkMixin, TicketLotInline, UserLinkMixin


@admin.register(models.Event)
class EventAdmin(ModelAdmin, UserLinkMixin):  # type: ignore[misc]
    list_display = ["title", "user_link", "start", "privacy", "price", "participant_count", "max_participants"]
    list_filter = ["privacy", "start"]
    search_fields = ["title", "organizer__username"]
    autocomplete_fields = ["organizer"]
    readonly_fields = ["participant_count", "created_at", "updated_at"]
    date_hierarchy = "start"
    inlines = [TicketLotInline]


@admin.register(models.TicketLot)
class TicketLotAdmin(ModelAdmin, EventLinkMixin):  # type: ignore[misc]
    list_display = ["name", "event_link", "price", "quantity", "start_date", "active"]
    list_filter = ["active"]
    search_fields = ["name", "event__title"]
    autocomplete_fields = ["event"]


@admin.register(models.Attendance)
class AttendanceAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    """Attendance records.

    Editing status here does not update `Event.participant_count`; use the API flows.
    """

    list_display = ["event_link", "user_link", "status", "origin", "approved_at", "created_at"]
    list_filter = ["status", "origin"]
    search_fields = ["event__title", "user__username"]
    autocomplete_fields = ["event", "user"]
    readonly_fields = ["created_at", "updated_at"]
