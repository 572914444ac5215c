import typing as t

from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import RoleHubUser


class UserAwareController(ControllerBase):
    def maybe_user(self) -> RoleHubUser | AnonymousUser:
        """Get the user for this request."""
        return t.cast(RoleHubUser | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> RoleHubUser:
        """Get the user for this request."""
        return t.cast(RoleHubUser, self.context.request.user)  # type: ignore[union-attr]
