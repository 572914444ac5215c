"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import RoleHubUser


@admin.register(RoleHubUser)
class RoleHubUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[misc]
    list_display = ["username", "email", "display_name", "language", "is_staff", "date_joined"]
    search_fields = ["username", "email", "first_name", "last_name", "preferred_name"]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Profile", {"fields": ("preferred_name", "language")}),
    )
