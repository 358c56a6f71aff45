from __future__ import annotations

from collections.abc import Callable

import httpx
from fastapi.testclient import TestClient
from zendesk_fixtures import list_payload, make_settings, show_payload

from zendesk_ticket_viewer.app.server import create_app
from zendesk_ticket_viewer.app.ticket_source import TicketSource

Handler = Callable[[httpx.Request], httpx.Response]


async def _no_sleep(_: float) -> None:
    return None


def _client(handler: Handler, **kwargs) -> TestClient:
    settings = make_settings()
    source = TicketSource.from_settings(
        settings,
        sleep=_no_sleep,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return TestClient(create_app(settings, ticket_source=source), **kwargs)


def _list_handler(count: int, seen: list[httpx.Request] | None = None) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        params = request.url.params
        page = int(params.get("page", "1"))
        per_page = int(params.get("per_page", "25"))
        return httpx.Response(200, json=list_payload(count=count, page=page, per_page=per_page))

    return handler


def test_index_renders_first_page_with_navigation() -> None:
    seen: list[httpx.Request] = []
    with _client(_list_handler(30, seen)) as client:
        response = client.get("/tickets")

    assert response.status_code == 200
    assert "Showing page 1 of 2 pages." in response.text
    assert 'href="/tickets?page=2&amp;per_page=25"' in response.text
    assert seen[0].url.path == "/api/v2/tickets/"
    assert seen[0].url.params["page"] == "1"
    assert seen[0].url.params["per_page"] == "25"


def test_root_serves_the_same_list() -> None:
    with _client(_list_handler(3)) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert "Ticket 3" in response.text
    assert "Showing page" not in response.text


def test_second_page_forwards_query() -> None:
    seen: list[httpx.Request] = []
    with _client(_list_handler(30, seen)) as client:
        response = client.get("/tickets?page=2&per_page=25")

    assert response.status_code == 200
    assert "Showing page 2 of 2 pages." in response.text
    assert 'href="/tickets?page=1&amp;per_page=25"' in response.text
    assert seen[0].url.params["page"] == "2"


def test_empty_account_shows_empty_state() -> None:
    with _client(_list_handler(0)) as client:
        response = client.get("/tickets")

    assert response.status_code == 200
    assert "No tickets to display." in response.text


def test_detail_page_shows_requester_and_back_link() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=show_payload(42))

    with _client(handler) as client:
        response = client.get(
            "/tickets/42",
            params={"backPage": "/tickets?page=2&per_page=25"},
        )

    assert response.status_code == 200
    assert "Jane Requester" in response.text
    assert 'href="/tickets?page=2&amp;per_page=25"' in response.text
    assert seen[0].url.path == "/api/v2/tickets/42"
    assert seen[0].url.params["include"] == "users"


def test_upstream_unauthorized_renders_error_page() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Couldn't authenticate you"})

    with _client(handler) as client:
        response = client.get("/tickets", headers={"X-Request-Id": "req-401"})

    assert response.status_code == 502
    assert "unauthorized access: check your credentials" in response.text
    assert "Request ID: req-401" in response.text
    assert response.headers.get("X-Request-Id") == "req-401"


def test_upstream_timeout_renders_error_page() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(handler) as client:
        response = client.get("/tickets")

    assert response.status_code == 502
    assert "did not respond in time" in response.text
    assert len(calls) == 3


def test_missing_requester_renders_error_page() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=show_payload(42, users=[]))

    with _client(handler) as client:
        response = client.get("/tickets/42")

    assert response.status_code == 502
    assert "without its requester" in response.text


def test_invalid_ticket_id_is_not_found() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=show_payload(1))

    with _client(handler) as client:
        response = client.get("/tickets/not-a-number")

    assert response.status_code == 404
    assert "invalid ticket id" in response.text
    assert calls == []


def test_unexpected_errors_render_generic_page() -> None:
    client = _client(_list_handler(1), raise_server_exceptions=False)

    @client.app.get("/boom")
    def _boom() -> dict[str, str]:
        raise RuntimeError("boom")

    response = client.get("/boom", headers={"X-Request-Id": "req-500-1"})

    assert response.status_code == 500
    assert "An internal server error occurred." in response.text
    assert "boom" not in response.text
    assert response.headers.get("X-Request-Id") == "req-500-1"


def test_lifespan_builds_source_from_settings() -> None:
    app = create_app(make_settings())
    with TestClient(app):
        assert isinstance(app.state.ticket_source, TicketSource)
    assert app.state.ticket_source is None
