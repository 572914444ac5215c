from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers import EVENT_ADMIN_CONTROLLERS, EventController, PaymentController, TicketController
from events.exceptions import EventFlowError, PaymentNotApprovedError
from notifications.controllers import NotificationController

from .exception_handlers import (
    handle_django_validation_error,
    handle_event_flow_error,
    handle_general_exception,
    handle_payment_not_approved_error,
)

api = NinjaExtraAPI(
    title="RoleHub Backend API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"RoleHub API {settings.VERSION}",
    app_name=f"rolehub-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    # Event controllers
    EventController,
    *EVENT_ADMIN_CONTROLLERS,
    TicketController,
    PaymentController,
    # Notification controllers
    NotificationController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    EventFlowError: handle_event_flow_error,
    PaymentNotApprovedError: handle_payment_not_approved_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
