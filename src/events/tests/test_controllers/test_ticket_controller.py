from decimal import Decimal

import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import RoleHubUser
from events.models import Event, Ticket

pytestmark = pytest.mark.django_db


class TestMyTickets:
    def test_lists_only_own_tickets(
        self, user_client: Client, user: RoleHubUser, other_user: RoleHubUser, paid_event: Event
    ) -> None:
        mine = Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-mine")
        Ticket.objects.create(event=paid_event, user=other_user, price_paid=Decimal("30.00"), qr_code="RH-theirs")

        response = user_client.get(reverse("api:my_tickets"))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == str(mine.pk)
        assert data["results"][0]["qr_code"] == "RH-mine"
        assert data["results"][0]["event"]["title"] == "Festa Junina"

    def test_filter_by_status(self, user_client: Client, user: RoleHubUser, paid_event: Event) -> None:
        Ticket.objects.create(
            event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-used", status=Ticket.TicketStatus.USED
        )

        response = user_client.get(reverse("api:my_tickets"), {"status": "valid"})

        assert response.json()["count"] == 0

    def test_requires_authentication(self, client: Client) -> None:
        assert client.get(reverse("api:my_tickets")).status_code == 401
