from __future__ import annotations

import hmac

from fastapi import APIRouter, Request
from pydantic import SecretStr
from starlette.responses import PlainTextResponse, Response

from zendesk_ticket_viewer.observability.metrics import render_latest

router = APIRouter()

_BEARER_PREFIX = "Bearer "


def _authorized(request: Request, token: SecretStr | None) -> bool:
    if token is None:
        return True
    expected = token.get_secret_value().encode("utf-8")
    header = request.headers.get("Authorization", "")
    if not expected or not header.startswith(_BEARER_PREFIX):
        return False
    provided = header[len(_BEARER_PREFIX):].strip().encode("utf-8")
    return hmac.compare_digest(expected, provided)


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Prometheus exposition of upstream call counters and latencies."""
    settings = getattr(request.app.state, "settings", None)
    token = settings.observability.metrics_bearer_token if settings is not None else None
    if not _authorized(request, token):
        return PlainTextResponse("Unauthorized\n", status_code=401)
    payload, content_type = render_latest()
    return Response(content=payload, headers={"Content-Type": content_type})
