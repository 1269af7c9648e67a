"""Exception hierarchy for service control and name resolution."""

from __future__ import annotations

from typing import Optional, Sequence


class ServiceError(Exception):
    """Base class for every error raised by svcctl."""


class CommandError(ServiceError):
    """
    An external command failed.

    Attributes:
        command: The command line that was run, as a single string.
        output: Combined stdout/stderr captured before the failure.
        returncode: Exit status, or None if the process never ran to completion.
    """

    def __init__(
        self,
        command: str,
        output: str = "",
        returncode: Optional[int] = None,
        reason: str = "",
    ) -> None:
        self.command = command
        self.output = output
        self.returncode = returncode
        self.reason = reason or (
            f"exit status {returncode}" if returncode is not None else "could not run"
        )
        super().__init__(f"command {command!r} failed: {self.reason}\nOutput: {output}")

    @property
    def exited(self) -> bool:
        """True if the process ran and exited with a non-zero status."""
        return self.returncode is not None


class CommandTimeoutError(CommandError):
    """An external command exceeded its deadline."""

    def __init__(self, command: str, timeout: float, output: str = "") -> None:
        self.timeout = timeout
        super().__init__(command, output, None, f"timed out after {timeout:g}s")


class ServiceNotFoundError(ServiceError):
    """A keyword did not resolve to a confirmed, existing service."""

    def __init__(self, keyword: str, detail: str = "") -> None:
        self.keyword = keyword
        message = f"service not found: {keyword}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DiscoveryError(ServiceError):
    """The manager's service enumeration failed."""

    def __init__(self, keyword: str, detail: str = "") -> None:
        self.keyword = keyword
        message = f"service discovery failed for: {keyword}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DiscoveryTimeoutError(DiscoveryError):
    """No candidate was confirmed within the race window."""

    def __init__(self, keyword: str, window: float) -> None:
        self.window = window
        super().__init__(keyword, f"no candidate confirmed within {window:g}s")


class ServiceActionError(ServiceError):
    """A control action (start, stop, ...) failed on a resolved service."""

    def __init__(self, action: str, service: str, output: str = "") -> None:
        self.action = action
        self.service = service
        self.output = output
        super().__init__(f"{action} operation failed for {service} | Output: {output}")


class ManagerUnavailableError(ServiceError):
    """No supported init system could be detected on this host."""

    def __init__(self, tried: Sequence[str]) -> None:
        self.tried = list(tried)
        super().__init__(
            f"no available service manager found (tried: {', '.join(self.tried)})"
        )


class SafeRestartError(ServiceError):
    """A stage of a safe restart failed."""

    def __init__(self, service: str, reason: str) -> None:
        self.service = service
        self.reason = reason
        super().__init__(f"safe restart of {service} failed: {reason}")
