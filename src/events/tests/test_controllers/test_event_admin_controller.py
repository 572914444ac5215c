"""Tests for the organizer endpoints: lots, join requests and tickets."""

from decimal import Decimal

import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import RoleHubUser
from events.models import Attendance, Event, PaymentIntent, Ticket, TicketLot

pytestmark = pytest.mark.django_db


class TestLots:
    def test_create_lot(self, organizer_client: Client, paid_event: Event) -> None:
        url = reverse("api:create_lot", kwargs={"event_id": paid_event.pk})

        response = organizer_client.post(
            url, data={"name": "Early", "price": "20.00", "quantity": 50}, content_type="application/json"
        )

        assert response.status_code == 201
        assert response.json()["name"] == "Early"
        assert paid_event.lots.get().price == Decimal("20.00")

    def test_negative_price_is_rejected(self, organizer_client: Client, paid_event: Event) -> None:
        url = reverse("api:create_lot", kwargs={"event_id": paid_event.pk})

        response = organizer_client.post(url, data={"name": "Bad", "price": "-1"}, content_type="application/json")

        assert response.status_code == 422
        assert not paid_event.lots.exists()

    def test_duplicate_name_is_a_validation_error(
        self, organizer_client: Client, paid_event: Event, early_lot: TicketLot
    ) -> None:
        url = reverse("api:create_lot", kwargs={"event_id": paid_event.pk})

        response = organizer_client.post(url, data={"name": "Early", "price": "5"}, content_type="application/json")

        assert response.status_code == 400
        assert "errors" in response.json()

    def test_non_organizer_is_forbidden(self, user_client: Client, paid_event: Event) -> None:
        url = reverse("api:create_lot", kwargs={"event_id": paid_event.pk})

        response = user_client.post(url, data={"name": "Early", "price": "20"}, content_type="application/json")

        assert response.status_code == 403
        assert not paid_event.lots.exists()

    def test_admin_list_includes_inactive(self, organizer_client: Client, paid_event: Event, early_lot: TicketLot) -> None:
        TicketLot.objects.create(event=paid_event, name="Closed", price=Decimal("10.00"), active=False)

        response = organizer_client.get(reverse("api:admin_list_lots", kwargs={"event_id": paid_event.pk}))

        assert response.status_code == 200
        assert {lot["name"] for lot in response.json()} == {"Early", "Closed"}

    def test_update_lot(self, organizer_client: Client, paid_event: Event, early_lot: TicketLot) -> None:
        url = reverse("api:update_lot", kwargs={"event_id": paid_event.pk, "lot_id": early_lot.pk})

        response = organizer_client.patch(url, data={"active": False}, content_type="application/json")

        assert response.status_code == 200
        early_lot.refresh_from_db()
        assert early_lot.active is False
        assert early_lot.price == Decimal("20.00")

    def test_delete_sold_lot_deactivates_it(
        self, organizer_client: Client, paid_event: Event, early_lot: TicketLot, pending_intent: PaymentIntent
    ) -> None:
        url = reverse("api:delete_lot", kwargs={"event_id": paid_event.pk, "lot_id": early_lot.pk})

        response = organizer_client.delete(url)

        assert response.status_code == 204
        early_lot.refresh_from_db()
        assert early_lot.active is False


class TestJoinRequests:
    @pytest.fixture
    def pending_request(self, user: RoleHubUser, private_event: Event) -> Attendance:
        return Attendance.objects.create(
            event=private_event, user=user, status=Attendance.Status.PENDING, origin=Attendance.Origin.APPROVAL
        )

    def test_list_pending_requests(
        self, organizer_client: Client, private_event: Event, pending_request: Attendance
    ) -> None:
        response = organizer_client.get(reverse("api:list_join_requests", kwargs={"event_id": private_event.pk}))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["status"] == "pending"

    def test_approve(
        self, organizer_client: Client, user: RoleHubUser, private_event: Event, pending_request: Attendance
    ) -> None:
        url = reverse("api:approve_join_request", kwargs={"event_id": private_event.pk, "user_id": user.pk})

        response = organizer_client.post(url)

        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        private_event.refresh_from_db()
        assert private_event.participant_count == 1

    def test_approve_on_paid_event_keeps_request_pending(
        self, organizer_client: Client, user: RoleHubUser, private_event: Event, pending_request: Attendance
    ) -> None:
        Event.objects.filter(pk=private_event.pk).update(price=Decimal("50.00"))
        url = reverse("api:approve_join_request", kwargs={"event_id": private_event.pk, "user_id": user.pk})

        response = organizer_client.post(url)

        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["approved_at"] is not None
        private_event.refresh_from_db()
        assert private_event.participant_count == 0
        listing = organizer_client.get(reverse("api:list_join_requests", kwargs={"event_id": private_event.pk}))
        assert listing.json()["count"] == 0

    def test_reject(
        self, organizer_client: Client, user: RoleHubUser, private_event: Event, pending_request: Attendance
    ) -> None:
        url = reverse("api:reject_join_request", kwargs={"event_id": private_event.pk, "user_id": user.pk})

        response = organizer_client.post(url)

        assert response.status_code == 204
        assert not Attendance.objects.filter(pk=pending_request.pk).exists()

    def test_approve_twice_is_not_found(
        self, organizer_client: Client, user: RoleHubUser, private_event: Event, pending_request: Attendance
    ) -> None:
        url = reverse("api:approve_join_request", kwargs={"event_id": private_event.pk, "user_id": user.pk})
        organizer_client.post(url)

        response = organizer_client.post(url)

        assert response.status_code == 404
        private_event.refresh_from_db()
        assert private_event.participant_count == 1

    def test_attendee_cannot_approve_themselves(
        self, user_client: Client, user: RoleHubUser, private_event: Event, pending_request: Attendance
    ) -> None:
        url = reverse("api:approve_join_request", kwargs={"event_id": private_event.pk, "user_id": user.pk})

        response = user_client.post(url)

        assert response.status_code == 403
        pending_request.refresh_from_db()
        assert pending_request.status == Attendance.Status.PENDING


class TestTickets:
    @pytest.fixture
    def ticket(self, user: RoleHubUser, paid_event: Event) -> Ticket:
        Attendance.objects.create(
            event=paid_event, user=user, status=Attendance.Status.CONFIRMED, origin=Attendance.Origin.TICKET
        )
        paid_event.increment_participants()
        return Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-9-x-1")

    def test_list_tickets(self, organizer_client: Client, paid_event: Event, ticket: Ticket) -> None:
        response = organizer_client.get(reverse("api:admin_list_tickets", kwargs={"event_id": paid_event.pk}))

        assert response.status_code == 200
        assert response.json()["results"][0]["id"] == str(ticket.pk)

    def test_check_in(self, organizer_client: Client, paid_event: Event, ticket: Ticket) -> None:
        url = reverse("api:check_in_ticket", kwargs={"event_id": paid_event.pk, "ticket_id": ticket.pk})

        first = organizer_client.post(url)
        second = organizer_client.post(url)

        assert first.status_code == 200
        assert first.json()["status"] == "used"
        assert second.status_code == 400

    def test_cancel(self, organizer_client: Client, user: RoleHubUser, paid_event: Event, ticket: Ticket) -> None:
        url = reverse("api:cancel_ticket", kwargs={"event_id": paid_event.pk, "ticket_id": ticket.pk})

        response = organizer_client.post(url)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert not Attendance.objects.filter(event=paid_event, user=user).exists()

    def test_non_organizer_cannot_check_in(self, user_client: Client, paid_event: Event, ticket: Ticket) -> None:
        url = reverse("api:check_in_ticket", kwargs={"event_id": paid_event.pk, "ticket_id": ticket.pk})

        response = user_client.post(url)

        assert response.status_code == 403
        ticket.refresh_from_db()
        assert ticket.status == Ticket.TicketStatus.VALID
