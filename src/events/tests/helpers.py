"""Test doubles and gateway payload builders shared by the events tests."""

import typing as t
from decimal import Decimal
from unittest.mock import MagicMock

from accounts.models import RoleHubUser
from events.models import PaymentIntent


class RecordingNotificationSink:
    """NotificationSink that keeps every notification in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[RoleHubUser, str, dict[str, t.Any]]] = []

    def notify(self, user: RoleHubUser, notification_type: str, context: dict[str, t.Any]) -> None:
        self.sent.append((user, notification_type, context))

    @property
    def types(self) -> list[str]:
        return [notification_type for _, notification_type, _ in self.sent]


def make_payment(
    intent: PaymentIntent | None = None,
    *,
    status: str = "approved",
    amount: Decimal | None = None,
    **extra: t.Any,
) -> dict[str, t.Any]:
    """A MercadoPago payment resource as returned by the payments API."""
    payment: dict[str, t.Any] = {"id": 987654321, "status": status, "status_detail": "accredited"}
    if intent is not None:
        payment["external_reference"] = str(intent.pk)
        payment["transaction_amount"] = float(amount if amount is not None else intent.amount)
        payment["metadata"] = {"event_id": str(intent.event_id), "user_id": str(intent.user_id)}
    payment.update(extra)
    return payment


def mock_sdk(
    preference_response: dict[str, t.Any] | None = None,
    payment_response: dict[str, t.Any] | None = None,
) -> MagicMock:
    """A mercadopago.SDK double with canned preference and payment results."""
    sdk = MagicMock()
    sdk.preference.return_value.create.return_value = preference_response or {
        "status": 201,
        "response": {
            "id": "pref-abc",
            "init_point": "https://www.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-abc",
            "sandbox_init_point": "https://sandbox.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-abc",
        },
    }
    if payment_response is not None:
        sdk.payment.return_value.get.return_value = {"status": 200, "response": payment_response}
    return sdk
