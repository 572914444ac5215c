"""Exception handlers for the API."""

import base64
import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events import exceptions

logger = structlog.get_logger(__name__)

EVENT_FLOW_STATUS_CODES: dict[type[exceptions.EventFlowError], int] = {
    exceptions.InvalidLotError: 400,
    exceptions.InvalidPriceError: 400,
    exceptions.GatewayUnavailableError: 502,
    exceptions.PaymentNotApprovedError: 400,
    exceptions.PaymentCorrelationMissingError: 404,
    exceptions.NotOrganizerError: 403,
    exceptions.PaidAttendanceError: 400,
    exceptions.NotAttendingError: 400,
    exceptions.StaleAttendanceStateError: 409,
    exceptions.EventFullError: 400,
    exceptions.AlreadyAttendingError: 400,
    exceptions.UserNotApprovedError: 403,
    exceptions.TicketNotValidError: 400,
}


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    data = {"detail": "Internal Server Error."}
    tb_str = traceback.format_exc()
    is_staff = getattr(request, "user", None) and request.user.is_staff
    json_payload = None
    encoded_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.body:
        try:
            json_payload = obfuscate(orjson.loads(request.body))
        except (orjson.JSONDecodeError, AttributeError):
            encoded_payload = base64.b64encode(request.body).decode("utf-8")
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        path=f"{request.method} {request.path}",
        headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
        json_payload=json_payload,
        encoded_payload=encoded_payload,
        # request.user is set by the auth flow
        user=str(request.user) if getattr(request, "user", None) else None,
    )
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["traceback"] = tb_str
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path)
    if not hasattr(exc, "error_dict"):
        return Response(status=400, data={"errors": {"__all__": exc.messages}})
    error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    return Response(status=400, data={"errors": error_dict})


def handle_event_flow_error(
    request: HttpRequest, exc: exceptions.EventFlowError | t.Type[exceptions.EventFlowError]
) -> Response:
    """Map attendance and ticketing errors to their HTTP status."""
    status = EVENT_FLOW_STATUS_CODES.get(type(exc), 400)  # type: ignore[arg-type]
    logger.info("event_flow_error", path=request.path, error=type(exc).__name__, status=status)
    return Response(status=status, data={"detail": str(exc)})


def handle_payment_not_approved_error(
    request: HttpRequest, exc: exceptions.PaymentNotApprovedError | t.Type[exceptions.PaymentNotApprovedError]
) -> Response:
    """Handle a payment that was not approved, echoing the payment status."""
    payment_status = getattr(exc, "payment_status", None)
    logger.info("payment_not_approved", path=request.path, status=payment_status)
    return Response(status=400, data={"detail": str(exc), "status": payment_status})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "x-signature"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    if not isinstance(data, dict):
        return data
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
