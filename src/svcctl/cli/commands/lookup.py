"""Name resolution and status commands."""

from __future__ import annotations

import argparse
from dataclasses import asdict

from svcctl import api
from svcctl.cli.formatters import (
    print_error,
    print_header,
    print_info,
    print_json,
    print_status,
    print_success,
    print_table,
)
from svcctl.core.context import get_context
from svcctl.errors import ServiceError, ServiceNotFoundError


def cmd_name(args: argparse.Namespace) -> int:
    """Print the concrete service name for a keyword."""
    try:
        print(api.get_service_name(args.keyword))
    except ServiceNotFoundError:
        print_error(f"No installed service matches '{args.keyword}'")
        return 1
    return 0


def cmd_path(args: argparse.Namespace) -> int:
    """Print the unit file or init script for a keyword."""
    try:
        print(api.get_service_path(args.keyword))
    except ServiceError as e:
        print_error(str(e))
        return 1
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show whether a service is active and enabled."""
    try:
        name = api.get_service_name(args.keyword)
        status = api.status(args.keyword)
    except ServiceNotFoundError:
        if args.json:
            print_json({"keyword": args.keyword, "isExists": False})
        else:
            print_status(args.keyword, "missing")
        return 1
    except ServiceError as e:
        print_error(f"Status check failed: {e}")
        return 1

    if args.json:
        data = asdict(status)
        data.update(keyword=args.keyword, name=name)
        print_json(data)
        return 0

    print_header(name)
    print_status("running", "active" if status.is_active else "inactive")
    print_status("at boot", "enabled" if status.is_enabled else "disabled")
    return 0


def cmd_aliases(args: argparse.Namespace) -> int:
    """List learned aliases."""
    ctx = get_context().start()
    table = ctx.aliases.snapshot()
    if args.json:
        print_json(table)
        return 0
    if not table:
        print_info(f"No learned aliases ({ctx.aliases.path})")
        return 0
    rows = [{"Keyword": k, "Services": ", ".join(v)} for k, v in sorted(table.items())]
    print_table(["Keyword", "Services"], rows)
    return 0


def cmd_reload(args: argparse.Namespace) -> int:
    """Detect the init system again."""
    manager = api.reload_manager()
    print_success(f"Using {manager.name} ({manager.tool})")
    return 0


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register lookup commands."""
    name_parser = subparsers.add_parser("name", help="Resolve a keyword to its service name")
    name_parser.add_argument("keyword", help="Service keyword")
    name_parser.set_defaults(func=cmd_name)

    path_parser = subparsers.add_parser("path", help="Show the unit file or init script")
    path_parser.add_argument("keyword", help="Service keyword")
    path_parser.set_defaults(func=cmd_path)

    status_parser = subparsers.add_parser("status", help="Show active/enabled state")
    status_parser.add_argument("keyword", help="Service keyword")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")
    status_parser.set_defaults(func=cmd_status)

    aliases_parser = subparsers.add_parser("aliases", help="List learned aliases")
    aliases_parser.add_argument("--json", action="store_true", help="Output as JSON")
    aliases_parser.set_defaults(func=cmd_aliases)

    reload_parser = subparsers.add_parser("reload", help="Detect the init system again")
    reload_parser.set_defaults(func=cmd_reload)
