from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from zendesk_ticket_viewer.domain.error_messages import ErrorMessages
from zendesk_ticket_viewer.domain.errors import MissingSideloadDataError


class NamedEntity(Protocol):
    name: str | None


def resolve_requester_name(users: Sequence[NamedEntity], ticket_id: int) -> str:
    """
    Return the requester's display name from the users sideloaded with a ticket.

    Detail requests sideload only the requester, so the first user is taken.
    Matching by ``requester_id`` would need upstream to guarantee the sideload
    always contains that user; it does not document such a guarantee.
    """
    if not users:
        raise MissingSideloadDataError(ErrorMessages.MISSING_REQUESTER.format(ticket_id=ticket_id))
    return users[0].name or ""
