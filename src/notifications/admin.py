from django.contrib import admin
from unfold.admin import ModelAdmin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["notification_type", "user", "delivered_at", "read_at", "created_at"]
    list_filter = ["notification_type"]
    search_fields = ["user__username"]
    readonly_fields = ["context", "title", "body", "delivered_at", "read_at"]
