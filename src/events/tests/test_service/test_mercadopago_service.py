"""Tests for MercadoPago checkout creation and webhook signature checks."""

import hashlib
import hmac
import typing as t
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
import requests
from django.utils import timezone

from accounts.models import RoleHubUser
from events.exceptions import (
    AlreadyAttendingError,
    EventFullError,
    GatewayUnavailableError,
    InvalidLotError,
    InvalidPriceError,
    UserNotApprovedError,
)
from events.models import Attendance, Event, PaymentIntent, Ticket, TicketLot
from events.service import mercadopago_service
from events.tests.helpers import mock_sdk

pytestmark = pytest.mark.django_db


@pytest.fixture
def sdk() -> t.Iterator[t.Any]:
    sdk = mock_sdk()
    with patch("events.service.mercadopago_service.get_sdk", return_value=sdk):
        yield sdk


def sent_preference(sdk: t.Any) -> dict[str, t.Any]:
    return t.cast(dict[str, t.Any], sdk.preference.return_value.create.call_args.args[0])


class TestCreateCheckout:
    def test_checkout_charges_stored_base_price(self, sdk: t.Any, user: RoleHubUser, paid_event: Event) -> None:
        session = mercadopago_service.create_checkout(paid_event, user)

        item = sent_preference(sdk)["items"][0]
        assert item["unit_price"] == 30.0
        assert item["quantity"] == 1
        assert item["currency_id"] == "BRL"
        assert item["title"] == "Festa Junina"
        assert session.checkout_id == "pref-abc"
        assert session.intent.amount == Decimal("30.00")
        assert session.intent.status == PaymentIntent.IntentStatus.PENDING

    def test_client_price_is_ignored(
        self, sdk: t.Any, user: RoleHubUser, paid_event: Event, early_lot: TicketLot, regular_lot: TicketLot
    ) -> None:
        """Buying the Early lot while claiming a price of 1 still charges 20."""
        session = mercadopago_service.create_checkout(paid_event, user, lot_id=early_lot.pk, client_price=Decimal("1"))

        item = sent_preference(sdk)["items"][0]
        assert item["unit_price"] == 20.0
        assert item["title"] == "Festa Junina - Early"
        assert item["id"] == str(early_lot.pk)
        assert session.intent.amount == Decimal("20.00")
        assert session.intent.lot == early_lot

    def test_preference_correlates_back_to_the_intent(self, sdk: t.Any, user: RoleHubUser, paid_event: Event) -> None:
        session = mercadopago_service.create_checkout(paid_event, user)

        preference = sent_preference(sdk)
        assert preference["external_reference"] == str(session.intent.pk)
        assert preference["metadata"] == {"user_id": str(user.pk), "event_id": str(paid_event.pk), "lot_id": None}
        assert preference["back_urls"]["success"] == "https://rolehub.test/payment/success"
        assert preference["auto_return"] == "approved"
        assert preference["payer"]["email"] == user.email
        assert "notification_url" not in preference

    def test_notification_url_is_sent_when_configured(
        self, sdk: t.Any, settings: t.Any, user: RoleHubUser, paid_event: Event
    ) -> None:
        settings.MERCADOPAGO_NOTIFICATION_URL = "https://api.rolehub.test/api/payments/mercadopago/webhook"

        mercadopago_service.create_checkout(paid_event, user)

        assert sent_preference(sdk)["notification_url"] == settings.MERCADOPAGO_NOTIFICATION_URL

    def test_redirect_url_follows_sandbox_setting(
        self, sdk: t.Any, settings: t.Any, user: RoleHubUser, paid_event: Event
    ) -> None:
        assert "sandbox" in mercadopago_service.create_checkout(paid_event, user).redirect_url

        settings.MERCADOPAGO_SANDBOX = False
        assert "sandbox" not in mercadopago_service.create_checkout(paid_event, user).redirect_url

    def test_free_event_cannot_be_checked_out(self, sdk: t.Any, user: RoleHubUser, public_event: Event) -> None:
        with pytest.raises(InvalidPriceError):
            mercadopago_service.create_checkout(public_event, user)

        sdk.preference.return_value.create.assert_not_called()

    def test_lot_before_sale_start_is_rejected(self, sdk: t.Any, user: RoleHubUser, paid_event: Event) -> None:
        later = TicketLot.objects.create(
            event=paid_event,
            name="Second",
            price=Decimal("45.00"),
            start_date=timezone.localdate() + timedelta(days=3),
        )

        with pytest.raises(InvalidLotError):
            mercadopago_service.create_checkout(paid_event, user, lot_id=later.pk)

        assert not PaymentIntent.objects.exists()

    def test_gateway_error_persists_nothing(self, user: RoleHubUser, paid_event: Event) -> None:
        sdk = mock_sdk(preference_response={"status": 400, "response": {"message": "invalid access token"}})
        with patch("events.service.mercadopago_service.get_sdk", return_value=sdk):
            with pytest.raises(GatewayUnavailableError):
                mercadopago_service.create_checkout(paid_event, user)

        assert not PaymentIntent.objects.exists()

    def test_gateway_network_error(self, user: RoleHubUser, paid_event: Event) -> None:
        sdk = mock_sdk()
        sdk.preference.return_value.create.side_effect = requests.ConnectionError("boom")
        with patch("events.service.mercadopago_service.get_sdk", return_value=sdk):
            with pytest.raises(GatewayUnavailableError):
                mercadopago_service.create_checkout(paid_event, user)

        assert not PaymentIntent.objects.exists()

    def test_user_with_valid_ticket_cannot_buy_again(self, sdk: t.Any, user: RoleHubUser, paid_event: Event) -> None:
        Ticket.objects.create(event=paid_event, user=user, price_paid=Decimal("30.00"), qr_code="RH-existing")

        with pytest.raises(AlreadyAttendingError):
            mercadopago_service.create_checkout(paid_event, user)

    def test_organizer_cannot_buy_own_ticket(self, sdk: t.Any, organizer: RoleHubUser, paid_event: Event) -> None:
        with pytest.raises(AlreadyAttendingError):
            mercadopago_service.create_checkout(paid_event, organizer)

    def test_private_event_requires_approval(self, sdk: t.Any, user: RoleHubUser, private_event: Event) -> None:
        Event.objects.filter(pk=private_event.pk).update(price=Decimal("15.00"))
        private_event.refresh_from_db()
        Attendance.objects.create(event=private_event, user=user, status=Attendance.Status.PENDING)

        with pytest.raises(UserNotApprovedError):
            mercadopago_service.create_checkout(private_event, user)

    def test_approved_user_can_buy_private_ticket(self, sdk: t.Any, user: RoleHubUser, private_event: Event) -> None:
        Event.objects.filter(pk=private_event.pk).update(price=Decimal("15.00"))
        private_event.refresh_from_db()
        Attendance.objects.create(
            event=private_event,
            user=user,
            status=Attendance.Status.PENDING,
            origin=Attendance.Origin.APPROVAL,
            approved_at=timezone.now(),
        )

        session = mercadopago_service.create_checkout(private_event, user)

        assert session.intent.amount == Decimal("15.00")

    def test_full_event_cannot_be_bought(self, sdk: t.Any, user: RoleHubUser, paid_event: Event) -> None:
        paid_event.max_participants = 0
        paid_event.save()

        with pytest.raises(EventFullError):
            mercadopago_service.create_checkout(paid_event, user)


    def test_full_event_is_checked_against_the_stored_count(
        self, sdk: t.Any, user: RoleHubUser, paid_event: Event
    ) -> None:
        paid_event.max_participants = 1
        paid_event.save()
        Event.objects.filter(pk=paid_event.pk).update(participant_count=1)

        with pytest.raises(EventFullError):
            mercadopago_service.create_checkout(paid_event, user)

        assert not PaymentIntent.objects.exists()

    def test_free_base_price_with_priced_lots_asks_for_a_lot(
        self, sdk: t.Any, user: RoleHubUser, public_event: Event
    ) -> None:
        TicketLot.objects.create(event=public_event, name="Pista", price=Decimal("25.00"))

        with pytest.raises(InvalidLotError):
            mercadopago_service.create_checkout(public_event, user)

        sdk.preference.return_value.create.assert_not_called()


class TestFetchPayment:
    def test_returns_payment_resource(self) -> None:
        sdk = mock_sdk(payment_response={"id": 1, "status": "approved"})
        with patch("events.service.mercadopago_service.get_sdk", return_value=sdk):
            assert mercadopago_service.fetch_payment("1") == {"id": 1, "status": "approved"}

    def test_lookup_failure_raises(self) -> None:
        sdk = mock_sdk()
        sdk.payment.return_value.get.return_value = {"status": 404, "response": {"message": "not found"}}
        with patch("events.service.mercadopago_service.get_sdk", return_value=sdk):
            with pytest.raises(GatewayUnavailableError):
                mercadopago_service.fetch_payment("1")


class TestVerifyWebhookSignature:
    def _sign(self, secret: str, data_id: str, request_id: str, ts: str) -> str:
        manifest = f"id:{data_id};request-id:{request_id};ts:{ts};"
        return hmac.new(secret.encode(), manifest.encode(), hashlib.sha256).hexdigest()

    def test_valid_signature(self, settings: t.Any) -> None:
        settings.MERCADOPAGO_WEBHOOK_SECRET = "s3cret"
        digest = self._sign("s3cret", "123", "req-1", "1700000000")

        assert mercadopago_service.verify_webhook_signature(
            signature_header=f"ts=1700000000,v1={digest}", request_id="req-1", data_id="123"
        )

    def test_tampered_signature(self, settings: t.Any) -> None:
        settings.MERCADOPAGO_WEBHOOK_SECRET = "s3cret"
        digest = self._sign("other", "123", "req-1", "1700000000")

        assert not mercadopago_service.verify_webhook_signature(
            signature_header=f"ts=1700000000,v1={digest}", request_id="req-1", data_id="123"
        )

    def test_malformed_header(self, settings: t.Any) -> None:
        settings.MERCADOPAGO_WEBHOOK_SECRET = "s3cret"

        assert not mercadopago_service.verify_webhook_signature(
            signature_header="garbage", request_id="req-1", data_id="123"
        )
