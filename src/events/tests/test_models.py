from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from freezegun import freeze_time

from accounts.models import RoleHubUser
from events.models import Attendance, Event, Ticket, TicketLot

pytestmark = pytest.mark.django_db


class TestEvent:
    def test_is_paid(self, public_event: Event, paid_event: Event) -> None:
        assert not public_event.is_paid
        assert paid_event.is_paid

    def test_inactive_priced_lot_does_not_make_event_paid(self, public_event: Event) -> None:
        TicketLot.objects.create(event=public_event, name="Old", price=Decimal("10.00"), active=False)

        assert not public_event.is_paid

    def test_negative_price_is_invalid(self, organizer: RoleHubUser) -> None:
        with pytest.raises(ValidationError):
            Event.objects.create(organizer=organizer, title="Bad", price=Decimal("-5.00"))

    def test_participant_counter(self, public_event: Event) -> None:
        public_event.increment_participants()
        public_event.increment_participants()
        public_event.decrement_participants()

        assert public_event.participant_count == 1

    def test_counter_never_goes_negative(self, public_event: Event) -> None:
        public_event.decrement_participants()

        assert public_event.participant_count == 0

    def test_is_full(self, public_event: Event) -> None:
        assert not public_event.is_full()

        public_event.max_participants = 1
        public_event.increment_participants()

        assert public_event.is_full()


class TestTicketLot:
    def test_on_sale_window(self, paid_event: Event) -> None:
        lot = TicketLot.objects.create(
            event=paid_event, name="Second", price=Decimal("40.00"), start_date=timezone.localdate() + timedelta(days=2)
        )

        assert not lot.is_on_sale()
        with freeze_time(timezone.now() + timedelta(days=3)):
            assert lot.is_on_sale()
            assert list(TicketLot.objects.on_sale().filter(pk=lot.pk)) == [lot]

    def test_names_are_unique_per_event(self, paid_event: Event, public_event: Event, early_lot: TicketLot) -> None:
        TicketLot.objects.create(event=public_event, name="Early", price=Decimal("5.00"))

        with pytest.raises(ValidationError):
            TicketLot.objects.create(event=paid_event, name="Early", price=Decimal("5.00"))


class TestUniqueness:
    def test_one_valid_ticket_per_user_and_event(self, user: RoleHubUser, paid_event: Event) -> None:
        Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-a")

        with pytest.raises(IntegrityError), transaction.atomic():
            Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-b")

    def test_used_tickets_do_not_block_a_valid_one(self, user: RoleHubUser, paid_event: Event) -> None:
        Ticket.objects.create(
            event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-a", status=Ticket.TicketStatus.USED
        )

        Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-b")

        assert Ticket.objects.valid().count() == 1

    def test_one_attendance_per_user_and_event(self, user: RoleHubUser, public_event: Event) -> None:
        Attendance.objects.create(event=public_event, user=user)

        with pytest.raises(IntegrityError), transaction.atomic():
            Attendance.objects.create(event=public_event, user=user, status=Attendance.Status.CONFIRMED)

    def test_payment_id_issues_one_ticket(
        self, user: RoleHubUser, other_user: RoleHubUser, paid_event: Event, public_event: Event
    ) -> None:
        Ticket.objects.create(
            event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-a", payment_id="987654321"
        )

        with pytest.raises(IntegrityError), transaction.atomic():
            Ticket.objects.create(
                event=public_event,
                user=other_user,
                price_paid=Decimal("30.00"),
                qr_code="RH-b",
                payment_id="987654321",
            )

    def test_tickets_without_payment_id_do_not_collide(
        self, user: RoleHubUser, other_user: RoleHubUser, paid_event: Event
    ) -> None:
        Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("0"), qr_code="RH-a")
        Ticket.objects.create(event=paid_event, user=other_user, price_paid=Decimal("0"), qr_code="RH-b")

        assert Ticket.objects.filter(payment_id="").count() == 2
