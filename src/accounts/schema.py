from ninja import ModelSchema
from pydantic import UUID4

from accounts.models import RoleHubUser


class MinimalRoleHubUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = RoleHubUser
        fields = ["id", "preferred_name", "first_name", "last_name"]
