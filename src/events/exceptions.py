from django.utils.translation import gettext_lazy as _


class EventFlowError(Exception):
    """Base class for errors raised by the attendance and ticketing services."""

    default_message = _("The request could not be completed.")

    def __init__(self, message: str | None = None) -> None:
        super().__init__(str(message or self.default_message))


class InvalidLotError(EventFlowError):
    """Raised when a referenced ticket lot does not exist for the event, is inactive or not on sale."""

    default_message = _("The selected ticket lot is not available.")


class InvalidPriceError(EventFlowError):
    """Raised when the resolved price cannot be charged."""

    default_message = _("Invalid price for this event.")


class GatewayUnavailableError(EventFlowError):
    """Raised when the payment gateway fails or rejects a request. No local state is committed."""

    default_message = _("Could not start the payment. Please try again.")


class PaymentNotApprovedError(EventFlowError):
    """Raised when a payment is not approved. No ticket is issued."""

    default_message = _("The payment was not approved.")

    def __init__(self, payment_status: str, message: str | None = None) -> None:
        super().__init__(message)
        self.payment_status = payment_status


class PaymentCorrelationMissingError(EventFlowError):
    """Raised when an approved payment cannot be attributed to a checkout. Requires support."""

    default_message = _("We could not find the purchase for this payment. Please contact support.")


class NotOrganizerError(EventFlowError):
    """Raised when a non-organizer attempts an organizer-only action."""

    default_message = _("Only the event organizer can perform this action.")


class PaidAttendanceError(EventFlowError):
    """Raised when a paid attendee tries to leave on their own."""

    default_message = _("Paid attendance cannot be cancelled here. Please contact support.")


class NotAttendingError(EventFlowError):
    """Raised when leaving an event the user is not attending."""

    default_message = _("You are not attending this event.")


class StaleAttendanceStateError(EventFlowError):
    """Raised when a conditional attendance update matches no row."""

    default_message = _("This request has already been handled.")


class EventFullError(EventFlowError):
    """Raised when an event has reached its maximum number of participants."""

    default_message = _("Event is full.")


class AlreadyAttendingError(EventFlowError):
    """Raised when a user who already holds a valid ticket tries to buy another one."""

    default_message = _("You already have a ticket for this event.")


class UserNotApprovedError(EventFlowError):
    """Raised when a user buys a ticket for a private event without organizer approval."""

    default_message = _("Your request to join this event must be approved first.")


class TicketNotValidError(EventFlowError):
    """Raised when checking in or cancelling a ticket that is no longer valid."""

    default_message = _("This ticket is not valid.")
