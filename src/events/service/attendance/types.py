"""Result types for the attendance flow."""

import uuid

from pydantic import BaseModel

from events.enums import JoinOutcome


class JoinResult(BaseModel):
    """Result of a join request for a user on an event."""

    outcome: JoinOutcome
    event_id: uuid.UUID
    status: str | None = None  # attendance status after the request, None when no record exists
