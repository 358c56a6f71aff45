from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from zendesk_ticket_viewer.adapters.zendesk.models import TicketListPage, TicketShow, ZendeskTicket
from zendesk_ticket_viewer.domain.error_messages import ErrorMessages
from zendesk_ticket_viewer.domain.errors import DecodeError
from zendesk_ticket_viewer.domain.models import Ticket, TicketList
from zendesk_ticket_viewer.domain.pagination import (
    last_page_number,
    page_number,
    parse_positive_int,
    rewrite_page_link,
)
from zendesk_ticket_viewer.domain.sideload import resolve_requester_name

_M = TypeVar("_M", bound=BaseModel)

BACK_PAGE_PARAM = "backPage"


def parse_ticket_list(
    response: httpx.Response,
    *,
    display_limit: int,
) -> TicketList:
    """
    Decode a ticket list page and derive page-numbered navigation for it.

    Upstream does not echo the page it served, so page number and page size are
    read back from the request that produced `response`. `display_limit` is only
    used when that request carried no usable ``per_page``.
    """
    page = _validate(TicketListPage, _decode_json(response), resource="ticket list")

    next_link = rewrite_page_link(page.next_page)
    previous_link = rewrite_page_link(page.previous_page)

    sent = response.request.url.params
    limit = parse_positive_int(sent.get("per_page")) or display_limit

    page_num = 0
    last_page_num = 0
    if next_link or previous_link:
        page_num = page_number(sent)
        last_page_num = last_page_number(page.count, limit)

    return TicketList(
        tickets=[_to_ticket(item) for item in page.tickets],
        count=page.count,
        next_page_link=next_link,
        previous_page_link=previous_link,
        page_num=page_num,
        last_page_num=last_page_num,
        display_limit=limit,
    )


def parse_ticket_detail(response: httpx.Response, query: Mapping[str, str]) -> Ticket:
    show = _validate(TicketShow, _decode_json(response), resource="ticket")
    requester_name = resolve_requester_name(show.users, show.ticket.id)
    return _to_ticket(
        show.ticket,
        requester_name=requester_name,
        back_page=query.get(BACK_PAGE_PARAM) or "",
    )


def _to_ticket(
    item: ZendeskTicket,
    *,
    requester_name: str | None = None,
    back_page: str = "",
) -> Ticket:
    return Ticket(
        id=item.id,
        subject=item.subject,
        description=item.description,
        status=item.status,
        priority=item.priority,
        tags=item.tags or [],
        requester_name=requester_name,
        back_page=back_page,
    )


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(ErrorMessages.INVALID_JSON.format(status=response.status_code)) from exc


def _validate(model: type[_M], data: Any, *, resource: str) -> _M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors(include_url=False)[0]
        where = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        detail = f"{where}: {first.get('msg', 'invalid value')}"
        raise DecodeError(
            ErrorMessages.UNEXPECTED_SHAPE.format(resource=resource, detail=detail)
        ) from exc
