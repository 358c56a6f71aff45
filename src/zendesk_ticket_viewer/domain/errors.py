from __future__ import annotations


class TicketSourceError(Exception):
    """Base class for every failure surfaced by the ticket source.

    Each error is scoped to a single request; callers render it and move on.
    """


class DecodeError(TicketSourceError):
    """Upstream returned malformed JSON or an unexpected document shape."""


class MissingSideloadDataError(TicketSourceError):
    """A detail fetch succeeded but carried no sideloaded requester."""


class InvalidTicketIdError(TicketSourceError):
    """The ticket identifier is not a positive integer."""
