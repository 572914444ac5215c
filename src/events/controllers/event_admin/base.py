import typing as t
from uuid import UUID

from django.db.models import QuerySet

from common.controllers import UserAwareController
from events import models


class EventAdminBaseController(UserAwareController):
    """Base controller for event admin endpoints.

    Object permissions run on the event fetched by `get_one`, so every route must
    resolve the event through it before touching related objects.
    """

    def get_queryset(self) -> QuerySet[models.Event]:
        return models.Event.objects.with_organizer()

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))
