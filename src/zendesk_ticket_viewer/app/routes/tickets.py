from __future__ import annotations

from fastapi import APIRouter, Request
from starlette.responses import HTMLResponse

from zendesk_ticket_viewer.app.templating import render_page
from zendesk_ticket_viewer.app.ticket_source import TicketSource

router = APIRouter()


def _ticket_source(request: Request) -> TicketSource:
    source = getattr(request.app.state, "ticket_source", None)
    if source is None:
        raise RuntimeError("ticket source is not configured; start the app with settings")
    return source


@router.get("/", response_class=HTMLResponse)
@router.get("/tickets", response_class=HTMLResponse)
async def ticket_index(request: Request) -> HTMLResponse:
    ticket_list = await _ticket_source(request).get_tickets(dict(request.query_params))
    return HTMLResponse(render_page("index.html", ticket_list=ticket_list))


# ticket_id stays a string so malformed ids reach the error page instead of a 422.
@router.get("/tickets/{ticket_id}", response_class=HTMLResponse)
async def ticket_detail(request: Request, ticket_id: str) -> HTMLResponse:
    ticket = await _ticket_source(request).get_ticket(ticket_id, dict(request.query_params))
    return HTMLResponse(render_page("detail.html", ticket=ticket))
