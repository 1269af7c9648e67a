"""Bounded execution of external commands."""

from __future__ import annotations

import shlex
import subprocess
from typing import Optional, Sequence

from svcctl.errors import CommandError, CommandTimeoutError
from svcctl.utils.logging import get_logger

DEFAULT_TIMEOUT = 30.0
PROBE_TIMEOUT = 5.0
CONTROL_TIMEOUT = 10.0


class CommandExecutor:
    """
    Runs external commands with a deadline and captures combined output.

    Every call is bounded: when no timeout is given the executor's default
    applies, so a hung tool cannot stall name resolution.
    """

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT) -> None:
        self.default_timeout = default_timeout
        self._logger = get_logger("svcctl.executor")

    def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> str:
        """
        Run ``argv`` to completion.

        Args:
            argv: Program followed by its arguments.
            timeout: Seconds before the process is killed.

        Returns:
            Combined stdout and stderr.

        Raises:
            CommandTimeoutError: The deadline expired.
            CommandError: Non-zero exit or the program could not be started.
        """
        if not argv:
            raise ValueError("empty command")
        limit = self.default_timeout if timeout is None else timeout
        command = shlex.join(argv)
        self._logger.debug(f"exec ({limit:g}s): {command}")

        try:
            result = subprocess.run(
                list(argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=limit,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(command, limit, _as_text(e.output)) from e
        except OSError as e:
            raise CommandError(command, "", None, str(e)) from e

        if result.returncode != 0:
            raise CommandError(command, result.stdout or "", result.returncode)
        return result.stdout or ""


def _as_text(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
