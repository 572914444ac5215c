import re
import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class RoleHubUserQueryset(models.QuerySet["RoleHubUser"]):
    """Queryset for RoleHubUser."""


class RoleHubUserManager(UserManager["RoleHubUser"]):
    def get_queryset(self) -> RoleHubUserQueryset:
        """Get queryset for RoleHubUser."""
        return RoleHubUserQueryset(self.model)


class RoleHubUser(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")
    language = models.CharField(
        max_length=7,
        choices=settings.LANGUAGES,
        default=settings.LANGUAGE_CODE,
        help_text="User's preferred language",
    )

    objects = RoleHubUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )

    def payer_name_parts(self) -> tuple[str, str]:
        """Split the user's name into (name, surname) for payment gateways."""
        if self.first_name or self.last_name:
            return self.first_name, self.last_name
        name, _, surname = self.get_display_name().partition(" ")
        return name, surname

    def __str__(self) -> str:
        return t.cast(str, self.username)
