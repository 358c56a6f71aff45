"""Upstream payload shapes as returned by the Zendesk tickets endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ZendeskModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ZendeskTicket(_ZendeskModel):
    id: int
    subject: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    tags: list[str] | None = None
    requester_id: int | None = None


class ZendeskUser(_ZendeskModel):
    id: int | None = None
    name: str | None = None


class TicketListPage(_ZendeskModel):
    tickets: list[ZendeskTicket] = Field(default_factory=list)
    count: int = Field(default=0, ge=0)
    next_page: str | None = None
    previous_page: str | None = None


class TicketShow(_ZendeskModel):
    ticket: ZendeskTicket
    users: list[ZendeskUser] = Field(default_factory=list)
