from __future__ import annotations

import asyncio

import httpx
import pytest
import respx
from prometheus_client import REGISTRY
from zendesk_fixtures import API_BASE, TICKETS_URL, list_payload, make_settings, show_payload

from zendesk_ticket_viewer.adapters.zendesk.errors import (
    TransportError,
    UnauthorizedError,
    UpstreamError,
    UpstreamUnavailableError,
)
from zendesk_ticket_viewer.app.ticket_source import TicketSource
from zendesk_ticket_viewer.domain.errors import (
    DecodeError,
    InvalidTicketIdError,
    MissingSideloadDataError,
)
from zendesk_ticket_viewer.domain.models import Ticket, TicketList

FIRST_PAGE = {"page": "1", "per_page": "25"}
DETAIL_PARAMS = {"include": "users"}


async def _no_sleep(_: float) -> None:
    return None


def _source(**overrides) -> TicketSource:
    return TicketSource.from_settings(make_settings(overrides=overrides or None), sleep=_no_sleep)


def _list(query: dict[str, str] | None = None, **overrides) -> TicketList:
    async def run() -> TicketList:
        async with _source(**overrides) as source:
            return await source.get_tickets(query)

    return asyncio.run(run())


def _detail(ticket_id: int | str, query: dict[str, str] | None = None) -> Ticket:
    async def run() -> Ticket:
        async with _source() as source:
            return await source.get_ticket(ticket_id, query)

    return asyncio.run(run())


def _outcome_count(operation: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "upstream_requests_total",
        {"operation": operation, "outcome": outcome},
    )
    return value or 0.0


def test_get_tickets_first_page_of_two() -> None:
    with respx.mock:
        respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            return_value=httpx.Response(200, json=list_payload(count=30))
        )
        result = _list({"page": "1"})

    assert result.next_page_link
    assert result.previous_page_link == ""
    assert result.page_num == 1
    assert result.last_page_num == 2


def test_get_tickets_links_stay_local_behind_a_base_url_override() -> None:
    proxy = {"zendesk": {"subdomain": None, "base_url": "https://proxy.example.com"}}
    with respx.mock:
        respx.get("https://proxy.example.com/tickets/", params=FIRST_PAGE).mock(
            return_value=httpx.Response(200, json=list_payload(count=30))
        )
        result = _list({"page": "1"}, **proxy)

    assert result.next_page_link == "/tickets?page=2&per_page=25"
    assert result.page_num == 1
    assert result.last_page_num == 2


def test_get_tickets_second_page_of_two() -> None:
    with respx.mock:
        respx.get(TICKETS_URL, params={"page": "2", "per_page": "25"}).mock(
            return_value=httpx.Response(200, json=list_payload(count=30, page=2))
        )
        result = _list({"page": "2", "per_page": "25"})

    assert len(result.tickets) == 5
    assert result.next_page_link == ""
    assert result.previous_page_link == "/tickets?page=1&per_page=25"
    assert result.page_num == 2
    assert result.last_page_num == 2


def test_get_tickets_exactly_one_page() -> None:
    with respx.mock:
        respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            return_value=httpx.Response(200, json=list_payload(count=25))
        )
        result = _list()

    assert len(result.tickets) == 25
    assert (result.page_num, result.last_page_num) == (0, 0)
    assert not result.is_paginated


def test_get_tickets_uses_configured_display_limit() -> None:
    with respx.mock:
        route = respx.get(TICKETS_URL, params={"page": "1", "per_page": "10"}).mock(
            return_value=httpx.Response(200, json=list_payload(count=30, per_page=10))
        )
        result = _list(tickets={"display_limit": 10})
        assert route.call_count == 1

    assert result.display_limit == 10
    assert result.last_page_num == 3


def test_get_tickets_survives_one_transient_timeout() -> None:
    with respx.mock:
        route = respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            side_effect=[
                httpx.ConnectTimeout("timed out"),
                httpx.Response(200, json=list_payload(count=30)),
            ]
        )
        result = _list()
        assert route.call_count == 2

    assert result.count == 30


def test_get_tickets_gives_up_after_retries() -> None:
    with respx.mock:
        route = respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            side_effect=httpx.ReadTimeout("timed out")
        )
        with pytest.raises(TransportError):
            _list()
        assert route.call_count == 3


def test_unauthorized_status() -> None:
    with respx.mock:
        respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            return_value=httpx.Response(401, json={"error": "Couldn't authenticate you"})
        )
        with pytest.raises(UnauthorizedError) as excinfo:
            _list()

    assert str(excinfo.value) == "unauthorized access: check your credentials"
    assert excinfo.value.status_code == 401


def test_bad_gateway_status_is_not_retried() -> None:
    with respx.mock:
        route = respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            return_value=httpx.Response(502, text="<html>bad gateway</html>")
        )
        with pytest.raises(UpstreamUnavailableError) as excinfo:
            _list()
        assert route.call_count == 1

    assert "temporarily unavailable" in str(excinfo.value)


def test_unmapped_status_carries_its_code() -> None:
    with respx.mock:
        respx.get(TICKETS_URL, params=FIRST_PAGE).mock(return_value=httpx.Response(503))
        with pytest.raises(UpstreamError) as excinfo:
            _list()

    assert type(excinfo.value) is UpstreamError
    assert str(excinfo.value) == "there was an error with the API, Status Code 503"


def test_malformed_list_body() -> None:
    with respx.mock:
        respx.get(TICKETS_URL, params=FIRST_PAGE).mock(
            return_value=httpx.Response(200, content=b"{not json")
        )
        with pytest.raises(DecodeError):
            _list()


def test_get_ticket_with_requester_and_back_page() -> None:
    with respx.mock:
        respx.get(f"{API_BASE}/tickets/42", params=DETAIL_PARAMS).mock(
            return_value=httpx.Response(200, json=show_payload(42))
        )
        ticket = _detail("42", {"backPage": "/tickets?page=2&per_page=25"})

    assert ticket.id == 42
    assert ticket.requester_name == "Jane Requester"
    assert ticket.back_page == "/tickets?page=2&per_page=25"


def test_get_ticket_without_sideloaded_users() -> None:
    with respx.mock:
        respx.get(f"{API_BASE}/tickets/42", params=DETAIL_PARAMS).mock(
            return_value=httpx.Response(200, json=show_payload(42, users=[]))
        )
        with pytest.raises(MissingSideloadDataError):
            _detail(42)


def test_get_ticket_rejects_invalid_id_without_calling_upstream() -> None:
    with respx.mock(assert_all_called=False) as router:
        with pytest.raises(InvalidTicketIdError):
            _detail("not-a-number")
        assert router.calls.call_count == 0


def test_outcomes_are_counted() -> None:
    before_ok = _outcome_count("get_ticket", "ok")
    before_missing = _outcome_count("get_ticket", "MissingSideloadDataError")

    with respx.mock:
        respx.get(f"{API_BASE}/tickets/1", params=DETAIL_PARAMS).mock(
            side_effect=[
                httpx.Response(200, json=show_payload(1)),
                httpx.Response(200, json=show_payload(1, users=[])),
            ]
        )
        _detail(1)
        with pytest.raises(MissingSideloadDataError):
            _detail(1)

    assert _outcome_count("get_ticket", "ok") == before_ok + 1
    assert _outcome_count("get_ticket", "MissingSideloadDataError") == before_missing + 1


def test_cancellation_abandons_the_call() -> None:
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200, json=list_payload(count=1))

    async def run() -> None:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source = TicketSource.from_settings(make_settings(), http_client=http_client, sleep=_no_sleep)
        try:
            task = asyncio.create_task(source.get_tickets())
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            await http_client.aclose()

    before = _outcome_count("list_tickets", "cancelled")
    asyncio.run(run())
    assert _outcome_count("list_tickets", "cancelled") == before + 1
