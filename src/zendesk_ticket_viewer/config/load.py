from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from zendesk_ticket_viewer.config.settings import Settings
from zendesk_ticket_viewer.config.validate import (
    ConfigValidationError,
    ConfigValidationIssue,
    issues_from_pydantic_error,
    validate_settings,
)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")
DOTENV_PATH = Path(".env")

# A missing `zendesk` section is reported field by field so every hint shows up.
_SECTION_FIELDS: dict[str, tuple[ConfigValidationIssue, ...]] = {
    "zendesk": (
        ConfigValidationIssue("zendesk.email", "Field required"),
        ConfigValidationIssue("zendesk.api_token", "Field required"),
        ConfigValidationIssue("zendesk", "Either zendesk.subdomain or zendesk.base_url must be set."),
    ),
}

_HINTS: dict[str, str] = {
    "zendesk.email": "Set `ZENDESK_EMAIL` (or YAML `zendesk.email`).",
    "zendesk.api_token": "Set `ZENDESK_API_TOKEN` (or YAML `zendesk.api_token`).",
    "zendesk": "Set `ZENDESK_SUBDOMAIN` or `ZENDESK_BASE_URL`.",
}


def _config_file(config_path: str | Path | None) -> tuple[Path | None, bool]:
    """
    Returns (path, explicit). An explicit path (argument or CONFIG_PATH) must
    exist; the default path is only used when present.
    """
    if config_path is not None:
        return Path(config_path), True
    if env_path := os.environ.get("CONFIG_PATH"):
        return Path(env_path), True
    return (DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None), False


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigValidationError(
            [ConfigValidationIssue(str(path), f"Unable to read config file: {exc}")]
        ) from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            [ConfigValidationIssue(str(path), "YAML root must be a mapping/object")]
        )
    return raw


def _file_values(config_path: str | Path | None) -> dict[str, Any]:
    path, explicit = _config_file(config_path)
    if path is None:
        return {}
    if path.exists():
        return _read_yaml(path)
    if explicit:
        raise ConfigValidationError(
            [ConfigValidationIssue("CONFIG_PATH", f"Config file not found: {path}")]
        )
    return {}


def _explain(exc: ValidationError) -> list[ConfigValidationIssue]:
    issues: list[ConfigValidationIssue] = []
    for issue in issues_from_pydantic_error(exc):
        if issue.path in _SECTION_FIELDS and "Field required" in issue.message:
            issues.extend(_SECTION_FIELDS[issue.path])
        else:
            issues.append(issue)

    explained: list[ConfigValidationIssue] = []
    for issue in issues:
        hint = _HINTS.get(issue.path)
        if hint and hint not in issue.message:
            issue = ConfigValidationIssue(issue.path, f"{issue.message} {hint}")
        explained.append(issue)
    return explained


def load_settings(*, config_path: str | Path | None = None) -> Settings:
    """Load settings once at startup: `.env`, then YAML, then environment overrides."""
    if DOTENV_PATH.is_file():
        load_dotenv(dotenv_path=DOTENV_PATH, override=False)

    try:
        settings = Settings(**_file_values(config_path))
    except ValidationError as exc:
        raise ConfigValidationError(_explain(exc)) from exc

    validate_settings(settings)
    return settings
