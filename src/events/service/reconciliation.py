"""Turns an approved MercadoPago payment into exactly one valid ticket.

Both the buyer's return redirect and the gateway webhook end up in ``_reconcile``.
The payment status is always re-read from the gateway. At-most-one valid ticket per
(event, user) is enforced by a conditional unique constraint; hitting it is treated
as a successful, already reconciled payment.
"""

import typing as t
import uuid
from decimal import Decimal, InvalidOperation

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.models import RoleHubUser
from events.enums import ReconciliationOutcome
from events.exceptions import PaymentCorrelationMissingError, PaymentNotApprovedError
from events.models import Attendance, PaymentIntent, Ticket
from events.service import mercadopago_service
from events.service.price_resolver import ResolvedPrice, resolve_price
from notifications.enums import NotificationType
from notifications.protocols import NotificationSink
from notifications.service.dispatcher import SignalNotificationSink

logger = structlog.get_logger(__name__)

APPROVED = "approved"
FAILED_PAYMENT_STATUSES = frozenset({"rejected", "cancelled", "refunded", "charged_back"})


class ReconciliationResult(t.NamedTuple):
    outcome: ReconciliationOutcome
    ticket: Ticket | None


def generate_qr_code(payment_id: str, user_id: uuid.UUID) -> str:
    """Opaque ticket code embedding the gateway payment id."""
    timestamp = int(timezone.now().timestamp() * 1000)
    return f"RH-{payment_id}-{user_id.hex[:12]}-{timestamp}"


def reconcile_return(
    user: RoleHubUser,
    payment_id: str,
    status: str,
    preference_id: str | None = None,
    notification_sink: NotificationSink | None = None,
) -> ReconciliationResult:
    """Reconcile the buyer's return from the gateway.

    The status query parameter is only used to short-circuit obvious failures. An
    "approved" status is verified with the gateway before anything is written.

    Raises:
        PaymentNotApprovedError: the return status or the verified status is not approved.
        PaymentCorrelationMissingError: no checkout of this user matches the payment.
        GatewayUnavailableError: the payment could not be verified.
    """
    if status != APPROVED:
        logger.info("payment_return_not_approved", payment_id=payment_id, payment_status=status, user_id=str(user.pk))
        raise PaymentNotApprovedError(status)
    payment = mercadopago_service.fetch_payment(payment_id)
    return _reconcile(payment_id, payment, user=user, preference_id=preference_id, notification_sink=notification_sink)


def reconcile_payment(payment_id: str, notification_sink: NotificationSink | None = None) -> ReconciliationResult:
    """Reconcile a payment notified by the gateway webhook."""
    payment = mercadopago_service.fetch_payment(payment_id)
    return _reconcile(payment_id, payment, user=None, preference_id=None, notification_sink=notification_sink)


def _find_intent(payment: dict[str, t.Any], *, user: RoleHubUser | None, preference_id: str | None) -> PaymentIntent | None:
    """Recover the checkout a payment belongs to.

    A payment carrying an external reference matches that checkout only, and on the
    redirect path it must be the caller's. Without a reference, a returning buyer is
    matched by preference id, then by their most recent pending checkout for the event
    named in the payment metadata, but only when that metadata names them as the buyer.
    """
    intents = PaymentIntent.objects.select_related("event", "lot", "user")

    if reference := payment.get("external_reference"):
        try:
            intent = intents.filter(pk=uuid.UUID(str(reference))).first()
        except ValueError:
            intent = None
        if intent is not None and user is not None and intent.user_id != user.pk:
            logger.warning(
                "payment_claimed_by_other_user",
                intent_id=str(intent.pk),
                owner_id=str(intent.user_id),
                caller_id=str(user.pk),
            )
            return None
        return intent

    metadata = payment.get("metadata") or {}
    if user is None or str(metadata.get("user_id") or "") != str(user.pk):
        return None
    intents = intents.filter(user=user)
    if preference_id and (intent := intents.filter(preference_id=preference_id).first()):
        return intent

    pending = intents.filter(status=PaymentIntent.IntentStatus.PENDING)
    if event_id := metadata.get("event_id"):
        pending = pending.filter(event_id=event_id)
    return pending.order_by("-created_at").first()


def _check_amount(payment: dict[str, t.Any], resolved: ResolvedPrice, intent: PaymentIntent) -> None:
    raw_amount = payment.get("transaction_amount")
    if raw_amount is None:
        return
    try:
        paid = Decimal(str(raw_amount))
    except InvalidOperation:
        paid = None
    if paid != resolved.price:
        logger.warning(
            "payment_amount_mismatch",
            intent_id=str(intent.pk),
            gateway_amount=str(raw_amount),
            resolved_price=str(resolved.price),
        )


def _ensure_confirmed_attendance(intent: PaymentIntent) -> bool:
    """Make sure the buyer has a confirmed, ticket-backed attendance record.

    Returns:
        True if the record became confirmed here.
    """
    try:
        with transaction.atomic():
            Attendance.objects.create(
                event=intent.event,
                user=intent.user,
                status=Attendance.Status.CONFIRMED,
                origin=Attendance.Origin.TICKET,
            )
        return True
    except IntegrityError:
        pass

    existing = Attendance.objects.filter(event=intent.event, user=intent.user)
    now = timezone.now()
    promoted = existing.filter(status=Attendance.Status.PENDING).update(
        status=Attendance.Status.CONFIRMED, origin=Attendance.Origin.TICKET, updated_at=now
    )
    if not promoted:
        existing.update(origin=Attendance.Origin.TICKET, updated_at=now)
    return bool(promoted)


def _redeemed_ticket(payment_id: str, intent: PaymentIntent) -> Ticket | None:
    """The ticket already issued for this gateway payment, if any.

    Raises:
        PaymentCorrelationMissingError: the payment was redeemed by another user.
    """
    ticket = Ticket.objects.filter(payment_id=payment_id).first()
    if ticket is not None and ticket.user_id != intent.user_id:
        logger.error(
            "payment_already_redeemed_by_other_user",
            payment_id=payment_id,
            intent_id=str(intent.pk),
            ticket_id=str(ticket.pk),
        )
        raise PaymentCorrelationMissingError()
    return ticket


def _complete_intent(intent: PaymentIntent, payment_id: str, payment: dict[str, t.Any]) -> None:
    intent.status = PaymentIntent.IntentStatus.COMPLETED
    intent.payment_id = payment_id
    intent.raw_response = payment
    intent.completed_at = timezone.now()
    intent.save(update_fields=["status", "payment_id", "raw_response", "completed_at", "updated_at"])


def _reconcile(
    payment_id: str,
    payment: dict[str, t.Any],
    *,
    user: RoleHubUser | None,
    preference_id: str | None,
    notification_sink: NotificationSink | None,
) -> ReconciliationResult:
    verified_status = str(payment.get("status") or "unknown")
    intent = _find_intent(payment, user=user, preference_id=preference_id)

    if verified_status != APPROVED:
        if intent is not None and verified_status in FAILED_PAYMENT_STATUSES:
            PaymentIntent.objects.filter(pk=intent.pk, status=PaymentIntent.IntentStatus.PENDING).update(
                status=PaymentIntent.IntentStatus.REJECTED, payment_id=payment_id, updated_at=timezone.now()
            )
        logger.info("payment_not_approved", payment_id=payment_id, payment_status=verified_status)
        raise PaymentNotApprovedError(verified_status)

    if intent is None:
        logger.error(
            "payment_correlation_missing",
            payment_id=payment_id,
            user_id=str(user.pk) if user else None,
            external_reference=payment.get("external_reference"),
        )
        raise PaymentCorrelationMissingError()

    with transaction.atomic():
        intent = PaymentIntent.objects.select_for_update().select_related("event", "lot", "user").get(pk=intent.pk)
        if (redeemed := _redeemed_ticket(payment_id, intent)) is not None:
            logger.info("payment_already_redeemed", payment_id=payment_id, ticket_id=str(redeemed.pk))
            return ReconciliationResult(ReconciliationOutcome.ALREADY_RECONCILED, redeemed)
        existing_ticket = Ticket.objects.valid().filter(event=intent.event, user=intent.user).first()

        if intent.status == PaymentIntent.IntentStatus.COMPLETED:
            logger.info("payment_already_reconciled", payment_id=payment_id, intent_id=str(intent.pk))
            return ReconciliationResult(ReconciliationOutcome.ALREADY_RECONCILED, existing_ticket)

        if existing_ticket is not None:
            # a second checkout for the same event was paid: keep the first ticket
            logger.warning(
                "duplicate_payment_for_event",
                payment_id=payment_id,
                intent_id=str(intent.pk),
                ticket_id=str(existing_ticket.pk),
            )
            _complete_intent(intent, payment_id, payment)
            return ReconciliationResult(ReconciliationOutcome.ALREADY_RECONCILED, existing_ticket)

        resolved = resolve_price(intent.event, intent.lot_id, include_inactive=True)
        _check_amount(payment, resolved, intent)

        try:
            with transaction.atomic():
                ticket = Ticket.objects.create(
                    event=intent.event,
                    user=intent.user,
                    lot=resolved.lot,
                    payment_intent=intent,
                    status=Ticket.TicketStatus.VALID,
                    price_paid=resolved.price,
                    currency=resolved.currency,
                    qr_code=generate_qr_code(payment_id, intent.user.pk),
                    payment_id=payment_id,
                )
        except IntegrityError:
            logger.info("ticket_insert_conflict", payment_id=payment_id, intent_id=str(intent.pk))
            return ReconciliationResult(
                ReconciliationOutcome.ALREADY_RECONCILED,
                _redeemed_ticket(payment_id, intent)
                or Ticket.objects.valid().filter(event=intent.event, user=intent.user).first(),
            )

        if _ensure_confirmed_attendance(intent):
            intent.event.increment_participants()
        _complete_intent(intent, payment_id, payment)

        logger.info(
            "ticket_issued",
            payment_id=payment_id,
            intent_id=str(intent.pk),
            ticket_id=str(ticket.pk),
            event_id=str(intent.event_id),
            user_id=str(intent.user_id),
            price_paid=str(ticket.price_paid),
        )
        (notification_sink or SignalNotificationSink()).notify(
            intent.user,
            NotificationType.TICKET_ISSUED,
            {"event_id": str(intent.event_id), "event_title": intent.event.title, "ticket_id": str(ticket.pk)},
        )

    return ReconciliationResult(ReconciliationOutcome.CREATED, ticket)
