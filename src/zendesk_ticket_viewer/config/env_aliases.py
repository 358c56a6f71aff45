"""Flat environment variable names and legacy aliases.

Operators set ``ZENDESK_EMAIL`` rather than ``ZENDESK__EMAIL``; this module maps
the flat names onto nested settings keys. The names used by earlier releases
(``API_SUBDOMAIN``, ``API_EMAIL``, ``API_TOKEN``) still work but emit a
DeprecationWarning.
"""
from __future__ import annotations

import os
import warnings
from collections.abc import Iterable, Mapping
from typing import Any

SettingsPath = tuple[str, ...]

# Mapping of deprecated env vars to their canonical names
_DEPRECATED_ALIASES: dict[str, str] = {
    "API_SUBDOMAIN": "ZENDESK_SUBDOMAIN",
    "API_EMAIL": "ZENDESK_EMAIL",
    "API_TOKEN": "ZENDESK_API_TOKEN",
}


def _section(prefix: str, path: SettingsPath, fields: Iterable[str]) -> dict[str, SettingsPath]:
    return {f"{prefix}{field.upper()}": (*path, field) for field in fields}


_CANONICAL_MAPPINGS: dict[str, SettingsPath] = {
    **_section("SERVER_", ("server",), ("host", "port")),
    **_section(
        "ZENDESK_",
        ("zendesk",),
        (
            "subdomain",
            "base_url",
            "email",
            "api_token",
            "timeout_seconds",
            "verify_tls",
            "max_retries",
            "retry_backoff_seconds",
        ),
    ),
    **_section("TICKETS_", ("tickets",), ("display_limit",)),
    "LOG_LEVEL": ("observability", "log_level"),
    "LOG_FORMAT": ("observability", "log_format"),
    "LOG_JSON": ("observability", "json_logs"),
    "METRICS_ENABLED": ("observability", "metrics_enabled"),
    "METRICS_BEARER_TOKEN": ("observability", "metrics_bearer_token"),
    "HEALTHZ_OMIT_VERSION": ("observability", "healthz_omit_version"),
    **_section(
        "HARDENING_TRANSPORT_",
        ("hardening", "transport"),
        ("trust_env", "allow_insecure_http", "allow_insecure_tls", "allow_local_upstreams"),
    ),
}


def _warn_deprecated_env_var(old_name: str, new_name: str) -> None:
    warnings.warn(
        f"Environment variable '{old_name}' is deprecated. Use '{new_name}' instead. "
        f"Support for '{old_name}' will be removed in a future version.",
        DeprecationWarning,
        stacklevel=3,
    )


def _set_nested(data: dict[str, Any], path: SettingsPath, value: Any) -> None:
    node = data
    for part in path[:-1]:
        node = node.setdefault(part, {})
    node[path[-1]] = value


def _flat_values(env: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for env_name, path in _CANONICAL_MAPPINGS.items():
        if value := env.get(env_name):
            _set_nested(data, path, value)

    for old_name, new_name in _DEPRECATED_ALIASES.items():
        old_value = env.get(old_name)
        if not old_value or env.get(new_name):
            continue
        _warn_deprecated_env_var(old_name, new_name)
        _set_nested(data, _CANONICAL_MAPPINGS[new_name], old_value)
    return data


def get_flat_env_settings_source() -> dict[str, Any]:
    return _flat_values(os.environ)
