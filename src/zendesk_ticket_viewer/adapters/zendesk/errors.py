from __future__ import annotations

from zendesk_ticket_viewer.domain.error_messages import ErrorMessages, format_status_error
from zendesk_ticket_viewer.domain.errors import TicketSourceError


class TransportError(TicketSourceError):
    """Network failure or timeout talking to the Zendesk API (after retries)."""


class UpstreamError(TicketSourceError):
    """Zendesk answered with an HTTP status >= 400."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or format_status_error(status_code))


class UnauthorizedError(UpstreamError):
    """Credentials were rejected (HTTP 401)."""


class UpstreamUnavailableError(UpstreamError):
    """Zendesk or a gateway in front of it is temporarily down (HTTP 502)."""


def classify_status(status_code: int) -> UpstreamError:
    """Map an upstream error status to its error kind; the body is not inspected."""
    if status_code < 400:
        raise ValueError(f"status {status_code} is not an error status")
    if status_code == 401:
        return UnauthorizedError(status_code, ErrorMessages.UNAUTHORIZED)
    if status_code == 502:
        return UpstreamUnavailableError(status_code, ErrorMessages.UPSTREAM_UNAVAILABLE)
    return UpstreamError(status_code)
