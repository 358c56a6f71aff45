from __future__ import annotations

import uvicorn

from zendesk_ticket_viewer.app.server import create_app
from zendesk_ticket_viewer.config.load import load_settings
from zendesk_ticket_viewer.config.settings import Settings
from zendesk_ticket_viewer.observability.logger import configure_logging


def load_configured_settings() -> Settings:
    """Load settings and configure logging from them; shared by every server entry point."""
    settings = load_settings()
    observability = settings.observability
    configure_logging(
        log_level=observability.log_level,
        log_format=observability.log_format,
        json_logs=observability.json_logs,
    )
    return settings


def main() -> int:
    settings = load_configured_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
    return 0
