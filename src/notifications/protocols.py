"""Protocol definitions for notification sinks.

Services that emit user-facing alerts depend on this protocol rather than on a
delivery mechanism, so tests and alternative transports can be swapped in.
"""

import typing as t
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from accounts.models import RoleHubUser
    from notifications.enums import NotificationType


class NotificationSink(Protocol):
    """Receives side-effect events for delivery. Delivery is fire-and-forget."""

    def notify(
        self,
        user: "RoleHubUser",
        notification_type: "NotificationType",
        context: dict[str, t.Any],
    ) -> None:
        """Queue a notification for a user.

        Implementations must not raise: a failed notification never aborts the
        operation that emitted it.
        """
        ...
