"""Operator CLI for zendesk-ticket-viewer.

Configuration commands (``validate-config``, ``dump-config``,
``show-deprecated``) work offline. ``list-tickets`` and ``show-ticket`` call
the Zendesk API with the configured credentials and print JSON, which makes
them handy for checking credentials and pagination without the web UI.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from zendesk_ticket_viewer.app.ticket_source import TicketSource
from zendesk_ticket_viewer.config.env_aliases import _DEPRECATED_ALIASES
from zendesk_ticket_viewer.config.load import load_settings
from zendesk_ticket_viewer.config.redact import redact_settings_dict
from zendesk_ticket_viewer.config.settings import Settings
from zendesk_ticket_viewer.domain.errors import TicketSourceError
from zendesk_ticket_viewer.domain.models import Ticket, TicketList


def _fail(message: str) -> int:
    print(f"✗ {message}", file=sys.stderr)
    return 1


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _try_load_settings(action: str) -> Settings | None:
    try:
        return load_settings()
    except Exception as e:
        _fail(f"{action}: {e}")
        return None


def cmd_validate_config(args: argparse.Namespace) -> int:
    """Validate configuration; exit code 0 when valid, 1 otherwise."""
    settings = _try_load_settings("Configuration is invalid")
    if settings is None:
        return 1
    print("✓ Configuration is valid")
    print(f"  - Zendesk API: {settings.zendesk.api_base_url}")
    print(f"  - Agent email: {settings.zendesk.email}")
    print(f"  - Display limit: {settings.tickets.display_limit}")
    print(f"  - Retries: {settings.zendesk.max_retries}")
    print(f"  - Metrics enabled: {settings.observability.metrics_enabled}")
    return 0


def cmd_dump_config(args: argparse.Namespace) -> int:
    """Dump current configuration as JSON (with secrets redacted)."""
    settings = _try_load_settings("Failed to load configuration")
    if settings is None:
        return 1
    _print_json(redact_settings_dict(settings.model_dump(mode="json")))
    return 0


def cmd_show_deprecated(args: argparse.Namespace) -> int:
    """List deprecated `API_*` variables still set in the environment."""
    in_use = [(old, new) for old, new in _DEPRECATED_ALIASES.items() if old in os.environ]
    if not in_use:
        print("No deprecated environment variables in use.")
        return 0

    print("Deprecated environment variables detected:")
    print()
    for old_name, new_name in in_use:
        if os.environ.get(new_name) is None:
            status = "⚠️  NEEDS MIGRATION"
        else:
            status = f"ℹ️  ignored, {new_name} is set"
        print(f"  {old_name} → {new_name} {status}")
    print()
    print("These variables will be removed in a future version.")
    return 0


async def _list_tickets(settings: Settings, query: dict[str, str]) -> TicketList:
    async with TicketSource.from_settings(settings) as source:
        return await source.get_tickets(query)


async def _show_ticket(settings: Settings, ticket_id: str) -> Ticket:
    async with TicketSource.from_settings(settings) as source:
        return await source.get_ticket(ticket_id)


def _fetch_and_print(
    what: str,
    fetch: Callable[[Settings], Any],
) -> int:
    settings = _try_load_settings("Failed to load configuration")
    if settings is None:
        return 1
    try:
        result: BaseModel = asyncio.run(fetch(settings))
    except TicketSourceError as e:
        return _fail(f"Failed to fetch {what}: {e}")
    _print_json(result.model_dump(mode="json"))
    return 0


def cmd_list_tickets(args: argparse.Namespace) -> int:
    """Print one page of tickets with its pagination metadata as JSON."""
    query = {
        key: str(value)
        for key, value in (("page", args.page), ("per_page", args.per_page))
        if value is not None
    }
    return _fetch_and_print("tickets", lambda settings: _list_tickets(settings, query))


def cmd_show_ticket(args: argparse.Namespace) -> int:
    """Print a single ticket, including its requester, as JSON."""
    return _fetch_and_print(
        f"ticket {args.ticket_id}",
        lambda settings: _show_ticket(settings, args.ticket_id),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zendesk-ticket-viewer-cli",
        description="Zendesk ticket viewer CLI utilities",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    commands: tuple[tuple[str, str, Callable[[argparse.Namespace], int]], ...] = (
        ("validate-config", "Validate configuration and exit", cmd_validate_config),
        ("dump-config", "Dump configuration as JSON (secrets redacted)", cmd_dump_config),
        ("show-deprecated", "Show deprecated environment variables in use", cmd_show_deprecated),
        ("list-tickets", "Fetch one page of tickets as JSON", cmd_list_tickets),
        ("show-ticket", "Fetch a single ticket as JSON", cmd_show_ticket),
    )
    sub: dict[str, argparse.ArgumentParser] = {}
    for name, help_text, func in commands:
        sub[name] = subparsers.add_parser(name, help=help_text)
        sub[name].set_defaults(func=func)

    sub["list-tickets"].add_argument("--page", type=int, help="Page number (default: 1)")
    sub["list-tickets"].add_argument(
        "--per-page",
        type=int,
        help="Page size (default: tickets.display_limit)",
    )
    sub["show-ticket"].add_argument("ticket_id", help="Ticket id")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
