"""Log and config file viewing commands."""

from __future__ import annotations

import argparse

from svcctl import api
from svcctl.cli.formatters import print_error
from svcctl.errors import CommandError


def cmd_log(args: argparse.Namespace) -> int:
    """Show the end of a log file."""
    try:
        output = api.view_log(args.path, api.LogOption(tail_lines=args.lines))
    except FileNotFoundError as e:
        print_error(str(e))
        return 1
    except CommandError as e:
        print_error(f"tail failed: {e.output.strip() or e.reason}")
        return 1
    print(output, end="")
    return 0


def cmd_cat(args: argparse.Namespace) -> int:
    """Show a config file."""
    try:
        output = api.view_config(args.path, api.ConfigOption(tail_lines=args.lines or ""))
    except CommandError as e:
        print_error(f"view config failed: {e.output.strip() or e.reason}")
        return 1
    print(output, end="")
    return 0


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register file viewing commands."""
    log_parser = subparsers.add_parser("log", help="Tail a log file")
    log_parser.add_argument("path", help="Log file path")
    log_parser.add_argument("-n", "--lines", default="100", help="Number of lines (default: 100)")
    log_parser.set_defaults(func=cmd_log)

    cat_parser = subparsers.add_parser("cat", help="Show a config file")
    cat_parser.add_argument("path", help="Config file path")
    cat_parser.add_argument("-n", "--lines", default="", help="Only show the last N lines")
    cat_parser.set_defaults(func=cmd_cat)
