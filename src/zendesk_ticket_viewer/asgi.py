"""ASGI entry point: ``uvicorn zendesk_ticket_viewer.asgi:app``."""
from __future__ import annotations

from zendesk_ticket_viewer.app.server import create_app
from zendesk_ticket_viewer.runtime import load_configured_settings

app = create_app(load_configured_settings())
