"""Error message constants for consistent error handling.

Upstream error payloads differ between endpoints, so user-facing messages are
fixed here instead of being read from response bodies.
"""
from __future__ import annotations


class ErrorMessages:
    """Centralized error message constants."""

    # Upstream status errors
    UNAUTHORIZED = "unauthorized access: check your credentials"
    UPSTREAM_UNAVAILABLE = "the API is temporarily unavailable, please try again later"
    UPSTREAM_STATUS = "there was an error with the API, Status Code {status}"

    # Transport errors
    HTTP_TIMEOUT = "the API did not respond in time after {attempts} attempt(s)"
    HTTP_REQUEST_ERROR = "could not reach the API after {attempts} attempt(s)"

    # Payload errors
    INVALID_JSON = "the API returned invalid JSON (status={status})"
    UNEXPECTED_SHAPE = "the API returned an unexpected {resource} document: {detail}"
    MISSING_REQUESTER = "ticket {ticket_id} was returned without its requester"
    INVALID_TICKET_ID = "invalid ticket id: {value!r}"


def format_status_error(status: int) -> str:
    """Format the message for an unmapped upstream status code."""
    return ErrorMessages.UPSTREAM_STATUS.format(status=status)
