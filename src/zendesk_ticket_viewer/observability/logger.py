from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from zendesk_ticket_viewer.config.redact import redact_settings_dict

_FORMATS = frozenset({"json", "human"})

# uvicorn loggers are routed through the root handler.
_PROPAGATED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# httpx logs one INFO line per request, duplicating zendesk.* / ticket_source.* events.
_QUIET_LOGGERS = ("httpx", "httpcore")


def _scrub_event_dict(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    return redact_settings_dict(event_dict)


def _pick_format(configured: str | None, *, json_logs: bool) -> str:
    """Configured format wins, then LOG_FORMAT, then the `json_logs` flag."""
    for candidate in (configured, os.environ.get("LOG_FORMAT")):
        normalized = (candidate or "").strip().lower()
        if normalized in _FORMATS:
            return normalized
    return "json" if json_logs else "human"


def _pick_level(configured: str) -> str:
    return ((os.environ.get("LOG_LEVEL") or "").strip() or configured).upper()


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _scrub_event_dict,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(
    *,
    log_level: str = "INFO",
    json_logs: bool = False,
    log_format: str | None = None,
) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Every event passes the redaction processor before rendering, so API tokens
    and Basic auth headers never reach the output.
    """
    processors = _shared_processors()
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if _pick_format(log_format, json_logs=json_logs) == "json"
        else structlog.dev.ConsoleRenderer()
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processor=renderer, foreign_pre_chain=processors))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(_pick_level(log_level))

    for name in _PROPAGATED_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*processors, ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
