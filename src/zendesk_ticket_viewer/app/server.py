from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from starlette.responses import HTMLResponse

from zendesk_ticket_viewer._version import __version__
from zendesk_ticket_viewer.app.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from zendesk_ticket_viewer.app.routes.healthz import router as healthz_router
from zendesk_ticket_viewer.app.routes.tickets import router as tickets_router
from zendesk_ticket_viewer.app.templating import render_page
from zendesk_ticket_viewer.app.ticket_source import TicketSource
from zendesk_ticket_viewer.config.settings import Settings
from zendesk_ticket_viewer.domain.errors import InvalidTicketIdError, TicketSourceError

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned: TicketSource | None = None
    settings = getattr(app.state, "settings", None)
    if getattr(app.state, "ticket_source", None) is None and settings is not None:
        owned = TicketSource.from_settings(settings)
        app.state.ticket_source = owned
    yield
    if owned is not None:
        app.state.ticket_source = None
        await owned.aclose()


def _error_page(request: Request, status_code: int, message: str) -> HTMLResponse:
    request_id = getattr(request.state, "request_id", None)
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return HTMLResponse(
        render_page("errors.html", message=message, request_id=request_id),
        status_code=status_code,
        headers=headers,
    )


async def _ticket_source_error_handler(request: Request, exc: Exception) -> HTMLResponse:
    status_code = 404 if isinstance(exc, InvalidTicketIdError) else 502
    log.info(
        "server.ticket_source_error",
        path=request.url.path,
        error=exc.__class__.__name__,
        status=status_code,
    )
    return _error_page(request, status_code, str(exc))


async def _global_exception_handler(request: Request, exc: Exception) -> HTMLResponse:
    log.exception("server.unhandled_error", path=request.url.path, exc_info=exc)
    return _error_page(request, 500, "An internal server error occurred.")


def _wire_app(app: FastAPI, *, settings: Settings | None) -> None:
    app.state.settings = settings

    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(TicketSourceError, _ticket_source_error_handler)
    app.add_exception_handler(Exception, _global_exception_handler)

    app.include_router(healthz_router)
    app.include_router(tickets_router)
    if settings is not None and settings.observability.metrics_enabled:
        from zendesk_ticket_viewer.app.routes.metrics import router as metrics_router

        app.include_router(metrics_router)


def create_app(
    settings: Settings | None = None,
    *,
    ticket_source: TicketSource | None = None,
) -> FastAPI:
    """Build the viewer app; an injected `ticket_source` is used as-is and not closed."""
    app = FastAPI(title="zendesk-ticket-viewer", version=__version__, lifespan=lifespan)
    app.state.ticket_source = ticket_source
    _wire_app(app, settings=settings)
    return app
