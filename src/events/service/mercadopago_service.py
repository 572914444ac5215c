"""MercadoPago Checkout Pro integration.

Creates checkout preferences for a resolved price and verifies payments server-side.
A PaymentIntent is persisted for every preference so the gateway confirmation can be
reconciled regardless of the device the buyer returns on.
"""

import hashlib
import hmac
import typing as t
import uuid
from decimal import Decimal

import mercadopago
import requests
import structlog
from django.conf import settings
from django.utils.translation import gettext_lazy as _

from accounts.models import RoleHubUser
from events.exceptions import (
    AlreadyAttendingError,
    EventFullError,
    GatewayUnavailableError,
    InvalidLotError,
    InvalidPriceError,
    UserNotApprovedError,
)
from events.models import Attendance, Event, PaymentIntent, Ticket
from events.service.price_resolver import ResolvedPrice, resolve_price

logger = structlog.get_logger(__name__)


class CheckoutSession(t.NamedTuple):
    checkout_id: str
    redirect_url: str
    intent: PaymentIntent


def get_sdk() -> mercadopago.SDK:
    return mercadopago.SDK(settings.MERCADOPAGO_ACCESS_TOKEN)


def build_preference(*, intent_id: uuid.UUID, event: Event, user: RoleHubUser, resolved: ResolvedPrice) -> dict[str, t.Any]:
    """Build the single-item preference payload for a ticket purchase."""
    frontend_base_url = settings.FRONTEND_BASE_URL
    name, surname = user.payer_name_parts()
    lot_id = str(resolved.lot.pk) if resolved.lot else None
    data: dict[str, t.Any] = {
        "items": [
            {
                "id": lot_id or str(event.pk),
                "title": resolved.display_name,
                "quantity": 1,
                "unit_price": float(resolved.price),
                "currency_id": resolved.currency,
            }
        ],
        "payer": {"email": user.email, "name": name, "surname": surname},
        "back_urls": {
            "success": f"{frontend_base_url}/payment/success",
            "failure": f"{frontend_base_url}/payment/failure",
            "pending": f"{frontend_base_url}/payment/pending",
        },
        "auto_return": "approved",
        "external_reference": str(intent_id),
        "metadata": {"user_id": str(user.pk), "event_id": str(event.pk), "lot_id": lot_id},
    }
    if settings.MERCADOPAGO_NOTIFICATION_URL:
        data["notification_url"] = settings.MERCADOPAGO_NOTIFICATION_URL
    return data


def _assert_can_checkout(event: Event, user: RoleHubUser) -> None:
    if event.is_organizer(user):
        raise AlreadyAttendingError(_("Organizers do not need a ticket for their own event."))
    if Ticket.objects.valid().filter(event=event, user=user).exists():
        raise AlreadyAttendingError()
    attendance = Attendance.objects.filter(event=event, user=user).first()
    confirmed = attendance is not None and attendance.status == Attendance.Status.CONFIRMED
    if event.is_private and not (confirmed or (attendance is not None and attendance.awaiting_payment)):
        raise UserNotApprovedError()
    if not confirmed and Event.objects.get(pk=event.pk).is_full():
        raise EventFullError()


def _create_preference(data: dict[str, t.Any]) -> dict[str, t.Any]:
    try:
        result = get_sdk().preference().create(data)
    except requests.RequestException as e:
        logger.exception("mercadopago_preference_request_failed")
        raise GatewayUnavailableError() from e

    response = result.get("response") or {}
    if result.get("status") not in (200, 201) or not response.get("id"):
        logger.error(
            "mercadopago_preference_rejected",
            gateway_status=result.get("status"),
            gateway_message=response.get("message"),
        )
        raise GatewayUnavailableError()
    return t.cast(dict[str, t.Any], response)


def create_checkout(
    event: Event,
    user: RoleHubUser,
    lot_id: uuid.UUID | None = None,
    client_price: Decimal | None = None,
) -> CheckoutSession:
    """Start a checkout for a ticket at the authoritative price.

    Nothing is persisted if the gateway call fails, so the buyer can simply retry.

    Raises:
        InvalidLotError, InvalidPriceError: the selection cannot be sold.
        AlreadyAttendingError, UserNotApprovedError, EventFullError: the user cannot buy.
        GatewayUnavailableError: the preference could not be created.
    """
    _assert_can_checkout(event, user)
    resolved = resolve_price(event, lot_id)
    if resolved.lot is not None and not resolved.lot.is_on_sale():
        raise InvalidLotError(_("Sales for this ticket lot have not started yet."))
    if resolved.price == 0 and lot_id is None and event.lots.active().filter(price__gt=0).exists():
        raise InvalidLotError(_("Select a ticket lot."))
    if resolved.price == 0:
        raise InvalidPriceError(_("This ticket is free. Join the event instead."))
    if client_price is not None and client_price != resolved.price:
        logger.warning(
            "client_price_discarded",
            event_id=str(event.pk),
            lot_id=str(lot_id) if lot_id else None,
            client_price=str(client_price),
            resolved_price=str(resolved.price),
        )

    intent_id = uuid.uuid4()
    preference = _create_preference(build_preference(intent_id=intent_id, event=event, user=user, resolved=resolved))

    intent = PaymentIntent.objects.create(
        id=intent_id,
        user=user,
        event=event,
        lot=resolved.lot,
        amount=resolved.price,
        currency=resolved.currency,
        preference_id=preference["id"],
        raw_response=preference,
    )
    redirect_url = preference.get("sandbox_init_point") if settings.MERCADOPAGO_SANDBOX else preference.get("init_point")
    logger.info(
        "checkout_created",
        event_id=str(event.pk),
        user_id=str(user.pk),
        intent_id=str(intent.pk),
        preference_id=intent.preference_id,
        amount=str(intent.amount),
    )
    return CheckoutSession(checkout_id=intent.preference_id, redirect_url=redirect_url or "", intent=intent)


def fetch_payment(payment_id: str) -> dict[str, t.Any]:
    """Fetch a payment from the gateway. The result is the source of truth for its status.

    Raises:
        GatewayUnavailableError: the payment could not be retrieved.
    """
    try:
        result = get_sdk().payment().get(payment_id)
    except requests.RequestException as e:
        logger.exception("mercadopago_payment_request_failed", payment_id=payment_id)
        raise GatewayUnavailableError(_("Could not verify the payment. Please try again.")) from e

    if result.get("status") != 200:
        logger.error("mercadopago_payment_lookup_failed", payment_id=payment_id, gateway_status=result.get("status"))
        raise GatewayUnavailableError(_("Could not verify the payment. Please try again."))
    return t.cast(dict[str, t.Any], result["response"])


def verify_webhook_signature(*, signature_header: str, request_id: str, data_id: str) -> bool:
    """Validate a webhook's ``x-signature`` header.

    The header carries ``ts=<timestamp>,v1=<hmac>``; the HMAC-SHA256 is computed with the
    webhook secret over ``id:<data.id>;request-id:<x-request-id>;ts:<ts>;``.
    """
    parts = dict(part.strip().split("=", 1) for part in signature_header.split(",") if "=" in part)
    ts, received = parts.get("ts"), parts.get("v1")
    if not ts or not received:
        return False
    manifest = f"id:{data_id.lower()};request-id:{request_id};ts:{ts};"
    expected = hmac.new(
        settings.MERCADOPAGO_WEBHOOK_SECRET.encode(), manifest.encode(), hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, received)
