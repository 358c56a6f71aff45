from __future__ import annotations

import re
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"
# Caller-supplied ids are echoed into headers and pages, so only a safe charset is accepted.
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")

CallNext = Callable[[Request], Awaitable[Response]]


def _request_id_for(request: Request) -> str:
    supplied = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    return supplied if _ACCEPTED_ID.fullmatch(supplied) else uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request, its log events and its response with one request id."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = _request_id_for(request)
        request.state.request_id = request_id

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            path=request.url.path,
        ):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
