from datetime import datetime
from decimal import Decimal

import pytest

from accounts.models import RoleHubUser
from events.models import Attendance, Event, PaymentIntent, TicketLot
from events.tests.helpers import RecordingNotificationSink


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def public_event(organizer: RoleHubUser, next_week: datetime) -> Event:
    return Event.objects.create(organizer=organizer, title="Rolê no Parque", start=next_week)


@pytest.fixture
def private_event(organizer: RoleHubUser, next_week: datetime) -> Event:
    return Event.objects.create(
        organizer=organizer, title="Jantar Secreto", start=next_week, privacy=Event.Privacy.PRIVATE
    )


@pytest.fixture
def paid_event(organizer: RoleHubUser, next_week: datetime) -> Event:
    return Event.objects.create(organizer=organizer, title="Festa Junina", start=next_week, price=Decimal("30.00"))


@pytest.fixture
def early_lot(paid_event: Event) -> TicketLot:
    return TicketLot.objects.create(event=paid_event, name="Early", price=Decimal("20.00"), quantity=50)


@pytest.fixture
def regular_lot(paid_event: Event) -> TicketLot:
    return TicketLot.objects.create(event=paid_event, name="Regular", price=Decimal("40.00"), quantity=100)


@pytest.fixture
def pending_intent(paid_event: Event, user: RoleHubUser, early_lot: TicketLot) -> PaymentIntent:
    return PaymentIntent.objects.create(
        user=user,
        event=paid_event,
        lot=early_lot,
        amount=early_lot.price,
        preference_id="pref-123",
    )


@pytest.fixture
def confirmed_attendance(public_event: Event, user: RoleHubUser) -> Attendance:
    attendance = Attendance.objects.create(
        event=public_event, user=user, status=Attendance.Status.CONFIRMED, origin=Attendance.Origin.FREE_JOIN
    )
    public_event.increment_participants()
    return attendance
