from ninja import ModelSchema

from accounts.schema import MinimalRoleHubUserSchema
from events.models import Event


class EventSchema(ModelSchema):
    organizer: MinimalRoleHubUserSchema
    is_paid: bool

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "start",
            "privacy",
            "price",
            "currency",
            "max_participants",
            "participant_count",
        ]

    @staticmethod
    def resolve_is_paid(obj: Event) -> bool:
        return obj.is_paid
