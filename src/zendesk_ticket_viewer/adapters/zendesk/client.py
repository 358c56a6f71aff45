from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from zendesk_ticket_viewer.adapters.http_util import build_async_client
from zendesk_ticket_viewer.adapters.zendesk.errors import TransportError
from zendesk_ticket_viewer.domain.error_messages import ErrorMessages
from zendesk_ticket_viewer.domain.ticket_id import require_ticket_id

log = structlog.get_logger(__name__)

LIST_TICKETS_PATH = "tickets/"
SIDELOAD_PARAMS = {"include": "users"}


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retries for timeouts and connection errors; ``max_retries=0`` fails fast."""

    max_retries: int = 2
    backoff_base_seconds: float = 0.2

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_seconds(self, retry: int) -> float:
        """Delay before retry number `retry` (0-based): base, 2*base, 4*base, ..."""
        return self.backoff_base_seconds * (2**retry)


class AsyncZendeskClient:
    """Builds authenticated Zendesk ticket requests and sends them.

    Responses are returned whatever their status; interpreting status codes and
    bodies is left to the caller. Only timeouts and connection failures are
    retried, since every request here is an idempotent GET.
    """

    def __init__(
        self,
        *,
        base_url: str,
        email: str,
        api_token: str,
        display_limit: int = 25,
        timeout_seconds: float = 5.0,
        verify_tls: bool = True,
        trust_env: bool = False,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        api_url = httpx.URL(base_url)
        if not api_url.scheme or not api_url.host:
            raise ValueError(
                "base_url must include scheme and host, e.g. https://acme.zendesk.com/api/v2"
            )
        if display_limit < 1:
            raise ValueError("display_limit must be >= 1")

        # Relative joins ("tickets/") need the API path to end in a slash.
        self._base_url = api_url.copy_with(path=api_url.path.rstrip("/") + "/")
        self._display_limit = display_limit
        # Zendesk API tokens authenticate as "{email}/token" with the token as password.
        self._auth = httpx.BasicAuth(f"{email}/token", api_token)
        self._retry = retry_policy or RetryPolicy()
        self._sleep = sleep

        self._owns_http_client = http_client is None
        self._http = http_client or build_async_client(
            self._base_url,
            timeout_seconds=timeout_seconds,
            verify_tls=verify_tls,
            trust_env=trust_env,
        )

    @property
    def display_limit(self) -> int:
        return self._display_limit

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> AsyncZendeskClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> None:
        await self.aclose()

    def build_list_request(self, query: Mapping[str, str]) -> httpx.Request:
        # Caller-supplied values go out verbatim; upstream validates its own bounds.
        params = {
            "page": query.get("page") or "1",
            "per_page": query.get("per_page") or str(self._display_limit),
        }
        return self._build_request(LIST_TICKETS_PATH, params=params)

    def build_detail_request(self, ticket_id: int | str) -> httpx.Request:
        ticket_id = require_ticket_id(ticket_id)
        return self._build_request(f"tickets/{ticket_id}", params=SIDELOAD_PARAMS)

    def _build_request(self, path: str, *, params: Mapping[str, str]) -> httpx.Request:
        request = self._http.build_request(
            "GET",
            self._base_url.join(path),
            params=dict(params),
            headers={"Accept": "application/json"},
        )
        # BasicAuth yields the request with its Authorization header on the first step.
        return next(self._auth.auth_flow(request))

    async def send(self, request: httpx.Request) -> httpx.Response:
        attempts = self._retry.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await self._http.send(request)
            except httpx.TransportError as exc:
                if attempt == attempts:
                    raise TransportError(_transport_message(exc, attempts)) from exc
                delay = self._retry.backoff_seconds(attempt - 1)
                log.warning(
                    "zendesk.request_retry",
                    url=str(request.url),
                    attempt=attempt,
                    max_attempts=attempts,
                    delay_seconds=delay,
                    error=exc.__class__.__name__,
                )
                await self._sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover


def _transport_message(exc: httpx.TransportError, attempts: int) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return ErrorMessages.HTTP_TIMEOUT.format(attempts=attempts)
    return ErrorMessages.HTTP_REQUEST_ERROR.format(attempts=attempts)
