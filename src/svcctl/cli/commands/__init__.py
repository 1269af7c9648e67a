"""Subcommand modules; each exposes register_commands(subparsers)."""
