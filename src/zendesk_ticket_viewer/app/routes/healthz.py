from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request

from zendesk_ticket_viewer._version import __version__

router = APIRouter()


@router.get("/healthz")
def healthz(request: Request) -> dict[str, str]:
    out: dict[str, str] = {"status": "ok", "time": datetime.now(UTC).isoformat()}
    settings = getattr(request.app.state, "settings", None)
    if settings is None or not settings.observability.healthz_omit_version:
        out["service"] = "zendesk-ticket-viewer"
        out["version"] = __version__
    return out
