"""Outcomes reported by the attendance and ticketing flows."""

from enum import StrEnum


class JoinOutcome(StrEnum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    ALREADY_REQUESTED = "already_requested"
    ALREADY_ATTENDING = "already_attending"
    CHECKOUT_REQUIRED = "checkout_required"


class ReconciliationOutcome(StrEnum):
    CREATED = "created"
    # a valid ticket already existed: refreshes and duplicate callbacks land here
    ALREADY_RECONCILED = "already_reconciled"
