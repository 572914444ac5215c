"""Tests for the notification pipeline: signal, record and dispatch task."""

import typing as t
from unittest.mock import patch

import pytest

from accounts.models import RoleHubUser
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.service.dispatcher import SignalNotificationSink
from notifications.tasks import dispatch_notification

pytestmark = pytest.mark.django_db

CONTEXT = {"event_id": "e1", "event_title": "Rolê no Parque", "ticket_id": "t1"}


class TestSignalNotificationSink:
    def test_notify_stores_notification(self, user: RoleHubUser) -> None:
        SignalNotificationSink().notify(user, NotificationType.TICKET_ISSUED, CONTEXT)

        notification = Notification.objects.get(user=user)
        assert notification.notification_type == NotificationType.TICKET_ISSUED
        assert notification.context == CONTEXT
        assert notification.delivered_at is None

    def test_dispatch_is_queued_on_commit(
        self, user: RoleHubUser, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            SignalNotificationSink().notify(user, NotificationType.TICKET_ISSUED, CONTEXT)

        assert len(callbacks) == 1
        notification = Notification.objects.get(user=user)
        assert notification.delivered_at is not None
        assert notification.title == "Ticket confirmed"
        assert notification.body == "Your ticket for Rolê no Parque is confirmed."

    def test_failures_never_propagate(self, user: RoleHubUser) -> None:
        with patch(
            "notifications.service.signal_handlers.create_notification", side_effect=RuntimeError("db down")
        ):
            SignalNotificationSink().notify(user, NotificationType.TICKET_ISSUED, CONTEXT)

        assert not Notification.objects.exists()


class TestDispatchNotification:
    def test_renders_and_marks_delivered(self, user: RoleHubUser) -> None:
        notification = Notification.objects.create(
            user=user,
            notification_type=NotificationType.JOIN_REQUEST_RECEIVED,
            context={"event_title": "Jantar Secreto", "requester_name": "Ana"},
        )

        dispatch_notification(str(notification.pk))

        notification.refresh_from_db()
        assert notification.title == "New join request"
        assert notification.body == "Ana wants to join Jantar Secreto."
        assert notification.delivered_at is not None

    def test_redelivery_is_a_no_op(self, user: RoleHubUser) -> None:
        notification = Notification.objects.create(
            user=user, notification_type=NotificationType.JOIN_REQUEST_REJECTED, context={"event_title": "X"}
        )
        dispatch_notification(str(notification.pk))
        notification.refresh_from_db()
        delivered_at = notification.delivered_at

        dispatch_notification(str(notification.pk))

        notification.refresh_from_db()
        assert notification.delivered_at == delivered_at
