"""AttendanceManager: per-(event, user) membership transitions.

NotAttending -> Pending -> Confirmed for private events, NotAttending -> Confirmed for
public free events. Paid events are confirmed only by payment reconciliation.
Every transition is a conditional write on the expected prior state.
"""

import typing as t

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.models import RoleHubUser
from events.enums import JoinOutcome
from events.exceptions import (
    EventFullError,
    NotAttendingError,
    NotOrganizerError,
    PaidAttendanceError,
    StaleAttendanceStateError,
)
from events.models import Attendance, Event, Ticket
from notifications.enums import NotificationType
from notifications.protocols import NotificationSink
from notifications.service.dispatcher import SignalNotificationSink

from .types import JoinResult

logger = structlog.get_logger(__name__)

SELF_SERVICE_LEAVE_ORIGINS = (Attendance.Origin.FREE_JOIN, Attendance.Origin.APPROVAL)


def _event_context(event: Event) -> dict[str, t.Any]:
    return {"event_id": str(event.pk), "event_title": event.title}


class AttendanceManager:
    """Handles join requests and self-service leaving for one user on one event."""

    def __init__(self, user: RoleHubUser, event: Event, notification_sink: NotificationSink | None = None) -> None:
        self.user = user
        self.event = event
        self.notification_sink = notification_sink or SignalNotificationSink()

    def get_attendance(self) -> Attendance | None:
        return Attendance.objects.filter(event=self.event, user=self.user).first()

    @transaction.atomic
    def request_join(self) -> JoinResult:
        """Request to join the event.

        - an existing pending or confirmed record is returned unchanged;
        - private events (unless the user organizes them) create a pending record and
          notify the organizer;
        - paid events create nothing and ask the client to check out;
        - anything else is confirmed directly.

        Raises:
            EventFullError: the event has reached max_participants.
        """
        if existing := self.get_attendance():
            return self._existing_result(existing)

        is_organizer = self.event.is_organizer(self.user)

        if self.event.is_private and not is_organizer:
            attendance = self._insert(Attendance.Status.PENDING, Attendance.Origin.APPROVAL)
            if attendance is None:
                return self._existing_result(self._get_existing())
            logger.info("join_requested", event_id=str(self.event.pk), user_id=str(self.user.pk))
            self.notification_sink.notify(
                self.event.organizer,
                NotificationType.JOIN_REQUEST_RECEIVED,
                {**_event_context(self.event), "requester_id": str(self.user.pk), "requester_name": self.user.display_name},
            )
            return JoinResult(outcome=JoinOutcome.PENDING, event_id=self.event.pk, status=attendance.status)

        if self.event.is_paid and not is_organizer:
            return JoinResult(outcome=JoinOutcome.CHECKOUT_REQUIRED, event_id=self.event.pk)

        self._assert_capacity()
        attendance = self._insert(Attendance.Status.CONFIRMED, Attendance.Origin.FREE_JOIN)
        if attendance is None:
            return self._existing_result(self._get_existing())
        self.event.increment_participants()
        logger.info(
            "attendance_confirmed",
            event_id=str(self.event.pk),
            user_id=str(self.user.pk),
            participant_count=self.event.participant_count,
        )
        if not is_organizer:
            self.notification_sink.notify(
                self.event.organizer,
                NotificationType.ATTENDANCE_CONFIRMED,
                {**_event_context(self.event), "attendee_id": str(self.user.pk), "attendee_name": self.user.display_name},
            )
        return JoinResult(outcome=JoinOutcome.CONFIRMED, event_id=self.event.pk, status=attendance.status)

    @transaction.atomic
    def leave(self) -> None:
        """Leave the event, or withdraw a pending request.

        Attendance backed by a ticket cannot be cancelled here.

        Raises:
            NotAttendingError: there is no record to remove.
            PaidAttendanceError: the record comes from a ticket purchase.
            StaleAttendanceStateError: the record changed concurrently.
        """
        attendance = Attendance.objects.select_for_update().filter(event=self.event, user=self.user).first()
        if attendance is None:
            raise NotAttendingError()
        if attendance.origin == Attendance.Origin.TICKET or self._has_valid_ticket():
            logger.warning("paid_attendance_leave_rejected", event_id=str(self.event.pk), user_id=str(self.user.pk))
            raise PaidAttendanceError()

        deleted, _ = Attendance.objects.filter(
            pk=attendance.pk, status=attendance.status, origin__in=SELF_SERVICE_LEAVE_ORIGINS
        ).delete()
        if not deleted:
            raise StaleAttendanceStateError()

        if attendance.status == Attendance.Status.CONFIRMED:
            self.event.decrement_participants()
        logger.info(
            "attendance_left",
            event_id=str(self.event.pk),
            user_id=str(self.user.pk),
            previous_status=attendance.status,
        )

    def _insert(self, status: Attendance.Status, origin: Attendance.Origin) -> Attendance | None:
        """Insert the record, or return None if a concurrent request inserted it first."""
        try:
            with transaction.atomic():
                return Attendance.objects.create(event=self.event, user=self.user, status=status, origin=origin)
        except IntegrityError:
            logger.info("attendance_insert_conflict", event_id=str(self.event.pk), user_id=str(self.user.pk))
            return None

    def _get_existing(self) -> Attendance:
        return Attendance.objects.get(event=self.event, user=self.user)

    def _existing_result(self, attendance: Attendance) -> JoinResult:
        if attendance.awaiting_payment:
            return JoinResult(outcome=JoinOutcome.CHECKOUT_REQUIRED, event_id=self.event.pk, status=attendance.status)
        outcome = (
            JoinOutcome.ALREADY_REQUESTED
            if attendance.status == Attendance.Status.PENDING
            else JoinOutcome.ALREADY_ATTENDING
        )
        return JoinResult(outcome=outcome, event_id=self.event.pk, status=attendance.status)

    def _assert_capacity(self) -> None:
        # lock the event row so concurrent confirmations see each other's counts
        locked = Event.objects.select_for_update().get(pk=self.event.pk)
        if locked.is_full():
            raise EventFullError()

    def _has_valid_ticket(self) -> bool:
        return Ticket.objects.valid().filter(event=self.event, user=self.user).exists()


@transaction.atomic
def decide_join_request(
    organizer: RoleHubUser,
    event: Event,
    user: RoleHubUser,
    *,
    approve: bool,
    notification_sink: NotificationSink | None = None,
) -> Attendance | None:
    """Approve or reject a pending join request.

    On a paid event an approved request stays pending until the ticket is bought.

    Returns:
        The attendance on approval, None on rejection.

    Raises:
        NotOrganizerError: the caller does not organize the event.
        StaleAttendanceStateError: there is no pending request for the user anymore.
        EventFullError: approving would exceed max_participants.
    """
    if not event.is_organizer(organizer):
        logger.warning("join_decision_denied", event_id=str(event.pk), caller_id=str(organizer.pk))
        raise NotOrganizerError()

    sink = notification_sink or SignalNotificationSink()
    pending = Attendance.objects.awaiting_decision().filter(event=event, user=user)

    if approve:
        now = timezone.now()
        if event.is_paid:
            # approval only unlocks checkout; the purchase confirms the record
            updated = pending.update(approved_at=now, updated_at=now)
            if not updated:
                raise StaleAttendanceStateError()
            logger.info("join_request_approved", event_id=str(event.pk), user_id=str(user.pk), awaiting_payment=True)
            sink.notify(user, NotificationType.JOIN_REQUEST_APPROVED, _event_context(event))
            return Attendance.objects.get(event=event, user=user)

        if Event.objects.select_for_update().get(pk=event.pk).is_full():
            raise EventFullError()
        updated = pending.update(status=Attendance.Status.CONFIRMED, approved_at=now, updated_at=now)
        if not updated:
            raise StaleAttendanceStateError()
        event.increment_participants()
        logger.info("join_request_approved", event_id=str(event.pk), user_id=str(user.pk))
        sink.notify(user, NotificationType.JOIN_REQUEST_APPROVED, _event_context(event))
        return Attendance.objects.get(event=event, user=user)

    deleted, _ = pending.delete()
    if not deleted:
        raise StaleAttendanceStateError()
    logger.info("join_request_rejected", event_id=str(event.pk), user_id=str(user.pk))
    sink.notify(user, NotificationType.JOIN_REQUEST_REJECTED, _event_context(event))
    return None
