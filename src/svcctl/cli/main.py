"""Main CLI entry point."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from svcctl import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="svcctl",
        description="Control services by keyword across systemd, OpenRC and SysV init",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  svcctl name docker          Resolve a keyword to its unit name
  svcctl status fail2ban      Show active/enabled state
  svcctl restart supervisor   Restart whatever supervisor is called here
  svcctl aliases              List learned keyword aliases

Config:  ~/.svcctl/config.json
Aliases: ~/.svcctl/svcaliases.json
""",
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"svcctl {__version__}",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Config file (default: ~/.svcctl/config.json)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        metavar="<command>",
        title="Commands",
    )

    from svcctl.cli.commands import control, files, lookup

    lookup.register_commands(subparsers)
    control.register_commands(subparsers)
    files.register_commands(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None or not hasattr(args, "func"):
        parser.print_help()
        return 0

    from svcctl.core.config import Config
    from svcctl.core.context import ServiceContext, set_context
    from svcctl.utils.logging import setup_logging

    config = Config(args.config).data
    setup_logging(
        log_file=config.logging.file,
        level="WARNING" if args.quiet else config.logging.level,
    )
    context = ServiceContext(config)
    previous = set_context(context)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception as e:
        if not args.quiet:
            print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        context.close()
        set_context(previous)


if __name__ == "__main__":
    sys.exit(main())
