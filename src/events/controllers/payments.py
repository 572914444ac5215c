import typing as t

import orjson
import structlog
from django.conf import settings
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.schema import ResponseOk
from common.throttling import PaymentThrottle, WebhookThrottle
from events import schema
from events.exceptions import PaymentNotApprovedError
from events.service import mercadopago_service, reconciliation

logger = structlog.get_logger(__name__)


@api_controller("/payments", tags=["Payments"])
class PaymentController(UserAwareController):
    @route.post(
        "/return",
        url_name="payment_return",
        response={200: schema.ReconciliationSchema},
        auth=I18nJWTAuth(),
        throttle=PaymentThrottle(),
    )
    def payment_return(self, payload: schema.PaymentReturnPayload) -> reconciliation.ReconciliationResult:
        """Confirm a purchase when the buyer returns from MercadoPago.

        Send the `payment_id` and `status` query parameters of the success page. The
        payment is verified with MercadoPago before a ticket is issued. Calling this
        again for the same payment is safe and answers `already_reconciled`.
        """
        return reconciliation.reconcile_return(
            self.user(), payload.payment_id, payload.status, preference_id=payload.preference_id
        )

    @route.post(
        "/mercadopago/webhook",
        url_name="mercadopago_webhook",
        response={200: ResponseOk},
        auth=None,
        throttle=WebhookThrottle(),
    )
    def webhook(self, request: HttpRequest) -> ResponseOk:
        """Handle MercadoPago payment notifications."""
        body = self._parse_body(request)
        topic = request.GET.get("type") or request.GET.get("topic") or body.get("type") or body.get("topic")
        data_id = request.GET.get("data.id") or (body.get("data") or {}).get("id") or request.GET.get("id")
        if topic != "payment" or not data_id:
            logger.info("mercadopago_webhook_ignored", topic=topic)
            return ResponseOk()

        if settings.MERCADOPAGO_WEBHOOK_SECRET and not mercadopago_service.verify_webhook_signature(
            signature_header=request.headers.get("x-signature", ""),
            request_id=request.headers.get("x-request-id", ""),
            data_id=str(data_id),
        ):
            logger.warning("mercadopago_webhook_bad_signature", data_id=str(data_id))
            raise HttpError(400, "Invalid MercadoPago signature")

        try:
            result = reconciliation.reconcile_payment(str(data_id))
        except PaymentNotApprovedError as e:
            # pending and rejected payments are acknowledged so they are not redelivered
            logger.info("mercadopago_webhook_payment_not_approved", payment_id=str(data_id), status=e.payment_status)
            return ResponseOk()
        logger.info("mercadopago_webhook_processed", payment_id=str(data_id), outcome=result.outcome)
        return ResponseOk()

    @staticmethod
    def _parse_body(request: HttpRequest) -> dict[str, t.Any]:
        if request.content_type != "application/json" or not request.body:
            return {}
        try:
            data = orjson.loads(request.body)
        except orjson.JSONDecodeError:
            raise HttpError(400, "Invalid JSON payload")
        return data if isinstance(data, dict) else {}
