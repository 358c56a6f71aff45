from __future__ import annotations

from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

ALLOWED_TEMPLATE_NAMES: frozenset[str] = frozenset({"index.html", "detail.html", "errors.html"})


def validate_template_name(template_name: str) -> str:
    name = template_name.strip()
    if name not in ALLOWED_TEMPLATE_NAMES:
        raise ValueError(
            f"template_name must be one of {sorted(ALLOWED_TEMPLATE_NAMES)}, got {name!r}"
        )
    return name


@lru_cache(maxsize=1)
def _env() -> Environment:
    return Environment(
        loader=PackageLoader("zendesk_ticket_viewer", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_page(template_name: str, **context: Any) -> str:
    """Render one page template; each page extends ``layout.html``."""
    template = _env().get_template(validate_template_name(template_name))
    return template.render(**context)
