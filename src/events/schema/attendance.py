from datetime import datetime
from uuid import UUID

from ninja import ModelSchema, Schema

from accounts.schema import MinimalRoleHubUserSchema
from events.models import Attendance


class AttendanceSchema(ModelSchema):
    user: MinimalRoleHubUserSchema

    class Meta:
        model = Attendance
        fields = ["id", "status", "origin", "approved_at", "created_at"]


class AttendeeSchema(Schema):
    user: MinimalRoleHubUserSchema
    joined_at: datetime

    @staticmethod
    def resolve_joined_at(obj: Attendance) -> datetime:
        return obj.created_at


class MyStatusSchema(Schema):
    event_id: UUID
    status: Attendance.Status | None = None
    origin: Attendance.Origin | None = None
    ticket_id: UUID | None = None
    can_leave: bool = False
    awaiting_payment: bool = False
