"""Service control commands."""

from __future__ import annotations

import argparse

from svcctl import api
from svcctl.cli.formatters import print_error, print_info, print_success, print_warning
from svcctl.core.context import get_context
from svcctl.errors import SafeRestartError, ServiceActionError, ServiceNotFoundError

ACTIONS = ("start", "stop", "restart", "enable", "disable")


def _run_action(action: str, keyword: str) -> int:
    try:
        result = api.custom_action(action, keyword)
    except ServiceNotFoundError:
        print_error(f"No installed service matches '{keyword}'")
        return 1
    except ServiceActionError as e:
        print_error(f"{action} failed for {e.service}")
        if e.output.strip():
            print(e.output.rstrip())
        return 1

    print_success(result.message)
    return 0


def cmd_control(args: argparse.Namespace) -> int:
    """Run start/stop/restart/enable/disable."""
    return _run_action(args.command, args.keyword)


def cmd_action(args: argparse.Namespace) -> int:
    """Run an arbitrary manager action."""
    return _run_action(args.action, args.keyword)


def cmd_safe_restart(args: argparse.Namespace) -> int:
    """Check configuration, restart, and verify the service came back."""
    print_info(f"Safely restarting {args.keyword}...")
    if not args.check and args.keyword.strip().lower() not in get_context().config.self_tests:
        print_warning(f"No config self-test known for {args.keyword}, restarting without one")
    try:
        api.safe_restart(args.keyword, args.config_paths or (), args.check or None)
    except ServiceNotFoundError:
        print_error(f"No installed service matches '{args.keyword}'")
        return 1
    except SafeRestartError as e:
        print_error(str(e))
        return 1

    print_success(f"{args.keyword} restarted and active")
    return 0


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register control commands."""
    for action in ACTIONS:
        parser = subparsers.add_parser(action, help=f"{action.capitalize()} a service")
        parser.add_argument("keyword", help="Service keyword, e.g. docker")
        parser.set_defaults(func=cmd_control)

    action_parser = subparsers.add_parser(
        "action",
        help="Run any action the init system supports (e.g. reload)",
    )
    action_parser.add_argument("action", help="Action name")
    action_parser.add_argument("keyword", help="Service keyword")
    action_parser.set_defaults(func=cmd_action)

    safe_parser = subparsers.add_parser(
        "safe-restart",
        help="Restart only if configuration files exist and pass a self-test",
    )
    safe_parser.add_argument("keyword", help="Service keyword")
    safe_parser.add_argument(
        "--config",
        dest="config_paths",
        action="append",
        metavar="PATH",
        help="Config file that must exist (repeatable)",
    )
    safe_parser.add_argument(
        "--check",
        nargs=argparse.REMAINDER,
        help="Self-test command to run instead of the configured one",
    )
    safe_parser.set_defaults(func=cmd_safe_restart)
