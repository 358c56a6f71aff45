"""Ticket source facade used by the web layer and the CLI.

Each call is one linear pipeline: build request, send, classify an error
status or parse the body. Nothing is cached between calls and every error is
raised to the caller.
"""
from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import httpx
import structlog

from zendesk_ticket_viewer.adapters.zendesk.client import AsyncZendeskClient, RetryPolicy
from zendesk_ticket_viewer.adapters.zendesk.errors import classify_status
from zendesk_ticket_viewer.adapters.zendesk.parser import parse_ticket_detail, parse_ticket_list
from zendesk_ticket_viewer.config.settings import Settings
from zendesk_ticket_viewer.domain.errors import TicketSourceError
from zendesk_ticket_viewer.domain.models import Ticket, TicketList
from zendesk_ticket_viewer.observability import metrics

log = structlog.get_logger(__name__)

_EMPTY_QUERY: Mapping[str, str] = {}


class TicketSource:
    def __init__(self, client: AsyncZendeskClient) -> None:
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        http_client: httpx.AsyncClient | None = None,
    ) -> TicketSource:
        zendesk = settings.zendesk
        client = AsyncZendeskClient(
            base_url=zendesk.api_base_url,
            email=zendesk.email,
            api_token=zendesk.api_token.get_secret_value(),
            display_limit=settings.tickets.display_limit,
            timeout_seconds=zendesk.timeout_seconds,
            verify_tls=zendesk.verify_tls,
            trust_env=settings.hardening.transport.trust_env,
            retry_policy=RetryPolicy(
                max_retries=zendesk.max_retries,
                backoff_base_seconds=zendesk.retry_backoff_seconds,
            ),
            sleep=sleep,
            http_client=http_client,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> TicketSource:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> None:
        await self.aclose()

    async def get_tickets(self, query: Mapping[str, str] | None = None) -> TicketList:
        """Fetch one page of tickets; `query` may carry ``page`` and ``per_page``."""
        with _observe("list_tickets"):
            request = self._client.build_list_request(query or _EMPTY_QUERY)
            response = await self._fetch(request)
            ticket_list = parse_ticket_list(
                response,
                display_limit=self._client.display_limit,
            )
        log.debug(
            "ticket_source.list_fetched",
            count=ticket_list.count,
            page_num=ticket_list.page_num,
            last_page_num=ticket_list.last_page_num,
        )
        return ticket_list

    async def get_ticket(
        self,
        ticket_id: int | str,
        query: Mapping[str, str] | None = None,
    ) -> Ticket:
        """Fetch one ticket with its requester; `query` may carry ``backPage``."""
        with _observe("get_ticket"):
            request = self._client.build_detail_request(ticket_id)
            response = await self._fetch(request)
            ticket = parse_ticket_detail(response, query or _EMPTY_QUERY)
        log.debug("ticket_source.ticket_fetched", ticket_id=ticket.id)
        return ticket

    async def _fetch(self, request: httpx.Request) -> httpx.Response:
        response = await self._client.send(request)
        if response.status_code >= 400:
            log.warning(
                "ticket_source.upstream_error",
                status=response.status_code,
                url=str(request.url),
            )
            raise classify_status(response.status_code)
        return response


@contextmanager
def _observe(operation: str) -> Iterator[None]:
    """Record duration and outcome of one upstream operation."""
    started = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except TicketSourceError as exc:
        outcome = exc.__class__.__name__
        raise
    except asyncio.CancelledError:
        outcome = "cancelled"
        raise
    except Exception:
        outcome = "unexpected"
        raise
    finally:
        metrics.upstream_seconds.labels(operation=operation).observe(
            time.perf_counter() - started
        )
        metrics.upstream_requests_total.labels(operation=operation, outcome=outcome).inc()
