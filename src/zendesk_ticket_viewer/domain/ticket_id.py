from __future__ import annotations

from typing import Any

from zendesk_ticket_viewer.domain.error_messages import ErrorMessages
from zendesk_ticket_viewer.domain.errors import InvalidTicketIdError


def _parse_id_text(text: str) -> int | None:
    # The detail route also accepts the path form "/tickets/123".
    last_segment = text.strip().rstrip("/").rpartition("/")[2]
    if not (last_segment.isascii() and last_segment.isdigit()):
        return None
    return int(last_segment)


def coerce_ticket_id(value: Any) -> int | None:
    """Return a positive ticket id, or None when `value` is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        ticket_id: int | None = value
    elif isinstance(value, str):
        ticket_id = _parse_id_text(value)
    else:
        return None
    if ticket_id is None or ticket_id <= 0:
        return None
    return ticket_id


def require_ticket_id(value: Any) -> int:
    ticket_id = coerce_ticket_id(value)
    if ticket_id is None:
        raise InvalidTicketIdError(ErrorMessages.INVALID_TICKET_ID.format(value=value))
    return ticket_id
