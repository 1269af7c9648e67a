"""Output formatters for CLI commands."""

from __future__ import annotations

import json
import sys
from typing import Any


class TableFormatter:
    """Render rows of dicts as left-aligned columns."""

    def __init__(self, headers: list[str], gap: int = 2) -> None:
        self.headers = headers
        self.gap = gap

    def format(self, rows: list[dict[str, Any]]) -> str:
        if not rows:
            return "(none)"

        widths = [
            max(len(h), *(len(str(row.get(h, ""))) for row in rows))
            for h in self.headers
        ]
        sep = " " * self.gap

        def line(values: list[str]) -> str:
            return sep.join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

        out = [line(self.headers), line(["-" * w for w in widths])]
        out.extend(line([str(row.get(h, "")) for h in self.headers]) for row in rows)
        return "\n".join(out)


class StatusFormatter:
    """Symbols for service states."""

    STATUS_SYMBOLS = {
        "active": "[+]",
        "enabled": "[+]",
        "inactive": "[-]",
        "disabled": "[-]",
        "missing": "[?]",
    }

    @classmethod
    def format_status(cls, label: str, state: str) -> str:
        symbol = cls.STATUS_SYMBOLS.get(state.lower(), "[?]")
        return f"{symbol} {label}: {state}"


def print_table(headers: list[str], rows: list[dict[str, Any]]) -> None:
    """Print data as a table."""
    print(TableFormatter(headers).format(rows))


def print_json(data: Any) -> None:
    """Print data as JSON."""
    print(json.dumps(data, indent=2, default=str))


def print_status(label: str, state: str) -> None:
    print(StatusFormatter.format_status(label, state))


def print_header(text: str) -> None:
    print(text)
    print("=" * len(text))


def print_success(message: str) -> None:
    print(f"[+] {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    print(f"[!] {message}", file=sys.stderr)


def print_info(message: str) -> None:
    print(f"[*] {message}")


def print_warning(message: str) -> None:
    print(f"[~] {message}")
