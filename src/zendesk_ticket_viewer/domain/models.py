from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

LIST_PATH = "/tickets"


class _ViewModel(BaseModel):
    # Built fresh per request from upstream JSON; never mutated afterwards.
    model_config = ConfigDict(extra="forbid", frozen=True)


class Ticket(_ViewModel):
    id: int
    subject: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    tags: list[str] = Field(default_factory=list)

    # Only detail fetches sideload the requester.
    requester_name: str | None = None
    # Path of the list page the viewer came from; passed through unvalidated.
    back_page: str = ""

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list) and all(isinstance(tag, str) for tag in value):
            return list(dict.fromkeys(value))
        return value

    @property
    def back_link(self) -> str:
        """`back_page` when it is a local path, otherwise the first list page."""
        page = self.back_page
        if page.startswith("/") and not page.startswith(("//", "/\\")):
            return page
        return LIST_PATH


class TicketList(_ViewModel):
    tickets: list[Ticket] = Field(default_factory=list)
    count: int = Field(default=0, ge=0)
    next_page_link: str = ""
    previous_page_link: str = ""
    # Both stay 0 unless the result spans more than one page.
    page_num: int = 0
    last_page_num: int = 0
    display_limit: int = Field(ge=1)

    @property
    def is_paginated(self) -> bool:
        return bool(self.next_page_link or self.previous_page_link)

    @property
    def has_next(self) -> bool:
        return bool(self.next_page_link)

    @property
    def has_previous(self) -> bool:
        return bool(self.previous_page_link)

    def page_link(self, page: int) -> str:
        return f"{LIST_PATH}?page={page}&per_page={self.display_limit}"

    @property
    def current_page_link(self) -> str:
        """Path that re-fetches this page; used as the detail view's back link."""
        return self.page_link(self.page_num or 1)
