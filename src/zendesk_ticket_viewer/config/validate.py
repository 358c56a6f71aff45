"""Cross-field checks that run after `Settings` parsed successfully.

Each check returns the issues it found; all of them are reported together in
one `ConfigValidationError` so operators can fix a config in one pass.
"""
from __future__ import annotations

import ipaddress
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from urllib.parse import urlsplit

from pydantic import ValidationError

from zendesk_ticket_viewer.config.settings import Settings

ALLOWED_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


@dataclass(frozen=True)
class ConfigValidationIssue:
    path: str
    message: str


class ConfigValidationError(ValueError):
    def __init__(self, issues: Iterable[ConfigValidationIssue]):
        self.issues = list(issues)
        lines = ["Configuration is invalid:"]
        lines.extend(f"- {issue.path}: {issue.message}" for issue in self.issues)
        super().__init__("\n".join(lines))


def issues_from_pydantic_error(error: ValidationError) -> list[ConfigValidationIssue]:
    return [
        ConfigValidationIssue(
            path=".".join(str(part) for part in item.get("loc", ())) or "<root>",
            message=item.get("msg", "Invalid value"),
        )
        for item in error.errors(include_url=False)
    ]


def _is_local_host(host: str) -> bool:
    normalized = host.strip().lower().rstrip(".")
    if normalized in {"localhost", "localhost.localdomain"}:
        return True
    try:
        ip = ipaddress.ip_address(normalized)
    except ValueError:
        return False
    return ip.is_loopback or ip.is_link_local or ip.is_unspecified


def _check_log_level(settings: Settings) -> Iterator[ConfigValidationIssue]:
    level = settings.observability.log_level
    if level.upper() not in ALLOWED_LOG_LEVELS:
        yield ConfigValidationIssue(
            "observability.log_level",
            f"Unsupported log level {level!r} (allowed: {sorted(ALLOWED_LOG_LEVELS)})",
        )


def _check_upstream_url(settings: Settings) -> Iterator[ConfigValidationIssue]:
    transport = settings.hardening.transport
    parts = urlsplit(settings.zendesk.api_base_url)

    if parts.scheme.lower() == "http" and not transport.allow_insecure_http:
        yield ConfigValidationIssue(
            "zendesk.base_url",
            "Plain HTTP upstream is not allowed by default. "
            "Use https:// or set hardening.transport.allow_insecure_http=true.",
        )
    if parts.hostname and _is_local_host(parts.hostname) and not transport.allow_local_upstreams:
        yield ConfigValidationIssue(
            "zendesk.base_url",
            "Loopback/link-local upstream hosts are blocked by default. "
            "Set hardening.transport.allow_local_upstreams=true to override.",
        )


def _check_tls(settings: Settings) -> Iterator[ConfigValidationIssue]:
    if not settings.zendesk.verify_tls and not settings.hardening.transport.allow_insecure_tls:
        yield ConfigValidationIssue(
            "zendesk.verify_tls",
            "Disabling TLS verification is not allowed by default. "
            "Set hardening.transport.allow_insecure_tls=true to override (not recommended).",
        )


def _check_credentials(settings: Settings) -> Iterator[ConfigValidationIssue]:
    if not settings.zendesk.email.strip():
        yield ConfigValidationIssue("zendesk.email", "Agent email must not be empty")
    if not settings.zendesk.api_token.get_secret_value().strip():
        yield ConfigValidationIssue("zendesk.api_token", "API token must not be empty")


_CHECKS: tuple[Callable[[Settings], Iterator[ConfigValidationIssue]], ...] = (
    _check_log_level,
    _check_upstream_url,
    _check_tls,
    _check_credentials,
)


def validate_settings(settings: Settings) -> None:
    issues = [issue for check in _CHECKS for issue in check(settings)]
    if issues:
        raise ConfigValidationError(issues)
