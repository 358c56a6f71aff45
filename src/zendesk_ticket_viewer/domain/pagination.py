"""Translate upstream cursor-style links into local page-numbered navigation.

Upstream lists paginate with absolute ``next_page``/``previous_page`` URLs that
point at its JSON resources (``.../api/v2/tickets.json?page=2&per_page=25``).
The viewer serves the same lists at ``/tickets``, so a link is made local by
keeping only its last path segment without the ``.json`` resource suffix.
Whatever sits in front of the resource (host, API prefix, a proxy path) is
dropped, and the query string is left untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlsplit, urlunsplit

RESOURCE_SUFFIX = ".json"


def rewrite_page_link(link: str | None) -> str:
    if not link:
        return ""

    parts = urlsplit(link)
    resource = parts.path.rstrip("/").rpartition("/")[2].removesuffix(RESOURCE_SUFFIX)
    return urlunsplit(("", "", f"/{resource}", parts.query, parts.fragment))


def parse_positive_int(value: object) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = str(value).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    return number if number > 0 else None


def page_number(params: Mapping[str, str]) -> int:
    """1-based page index of the request that was sent; a missing page means page 1."""
    return parse_positive_int(params.get("page")) or 1


def last_page_number(count: int, display_limit: int) -> int:
    if display_limit < 1:
        raise ValueError(f"display_limit must be >= 1, got {display_limit}")
    if count <= 0:
        return 0
    pages, remainder = divmod(count, display_limit)
    return pages + 1 if remainder else pages
