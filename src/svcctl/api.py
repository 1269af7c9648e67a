"""
Keyword-based service control.

Every function takes a logical keyword ("docker", "fail2ban", ...) and
resolves it to the concrete service name of the host's init system before
acting. Pass ``context`` to use something other than the process-wide
ServiceContext.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from svcctl.core.context import ServiceContext, get_context
from svcctl.errors import (
    CommandError,
    ManagerUnavailableError,
    SafeRestartError,
    ServiceError,
    ServiceNotFoundError,
)
from svcctl.service.base import ServiceManager, ServiceResult, ServiceStatus
from svcctl.service.handler import ServiceHandler
from svcctl.utils.logging import get_logger
from svcctl.utils.paths import file_exists

logger = get_logger("svcctl.api")


@dataclass
class LogOption:
    """How much of a log file to show."""

    tail_lines: str = "100"


@dataclass
class ConfigOption:
    """How much of a config file to show; empty or "0" shows all of it."""

    tail_lines: str = ""


def _ctx(context: Optional[ServiceContext]) -> ServiceContext:
    return context or get_context()


def default_handler(keyword: str, context: Optional[ServiceContext] = None) -> ServiceHandler:
    """
    Resolve a keyword and build a handler for it.

    Raises:
        ServiceNotFoundError: The keyword does not resolve to an installed service.
    """
    return _ctx(context).handler(keyword)


def get_service_name(keyword: str, context: Optional[ServiceContext] = None) -> str:
    """Return the concrete service name for ``keyword``."""
    return _ctx(context).resolve(keyword)


def get_service_path(keyword: str, context: Optional[ServiceContext] = None) -> Path:
    """Return the unit file or init script backing ``keyword``."""
    return default_handler(keyword, context).service_path()


def custom_action(action: str, keyword: str, context: Optional[ServiceContext] = None) -> ServiceResult:
    """Run an arbitrary manager action (e.g. "reload") on a service."""
    try:
        handler = default_handler(keyword, context)
    except ServiceNotFoundError:
        logger.error(f"CustomAction handler init failed for {keyword}")
        raise
    return handler.execute(action)


def is_exist(keyword: str, context: Optional[ServiceContext] = None) -> bool:
    """
    True if ``keyword`` resolves to an installed service.

    Raises:
        ManagerUnavailableError: No init system was detected.
    """
    try:
        return default_handler(keyword, context).is_exists().is_exists
    except ManagerUnavailableError:
        raise
    except (ServiceError, OSError):
        return False


def start(keyword: str, context: Optional[ServiceContext] = None) -> ServiceResult:
    return default_handler(keyword, context).start()


def stop(keyword: str, context: Optional[ServiceContext] = None) -> ServiceResult:
    return default_handler(keyword, context).stop()


def restart(keyword: str, context: Optional[ServiceContext] = None) -> ServiceResult:
    return default_handler(keyword, context).restart()


def enable(keyword: str, context: Optional[ServiceContext] = None) -> ServiceResult:
    return default_handler(keyword, context).enable()


def disable(keyword: str, context: Optional[ServiceContext] = None) -> ServiceResult:
    return default_handler(keyword, context).disable()


def status(keyword: str, context: Optional[ServiceContext] = None) -> ServiceStatus:
    """
    Report whether a service is active, enabled and installed.

    Raises:
        ServiceNotFoundError: The keyword does not resolve.
        CommandError: A probe timed out or could not run.
    """
    handler = default_handler(keyword, context)
    try:
        result = handler.check_status()
    except CommandError as e:
        logger.error(f"Status check failed for {handler.service_name}: {e}")
        raise
    result.is_exists = True
    return result


def is_active(keyword: str, context: Optional[ServiceContext] = None) -> bool:
    """True if the service is running; unresolvable keywords and probe faults give False."""
    try:
        return default_handler(keyword, context).is_active().is_active
    except ManagerUnavailableError:
        raise
    except (ServiceError, OSError):
        return False


def is_enabled(keyword: str, context: Optional[ServiceContext] = None) -> bool:
    """True if the service starts at boot; unresolvable keywords and probe faults give False."""
    try:
        return default_handler(keyword, context).is_enabled().is_enabled
    except ManagerUnavailableError:
        raise
    except (ServiceError, OSError):
        return False


def safe_restart(
    keyword: str,
    config_paths: Sequence[str] = (),
    check_command: Optional[Sequence[str]] = None,
    context: Optional[ServiceContext] = None,
) -> ServiceResult:
    """
    Restart a service only after its configuration checks out.

    Stages: every path in ``config_paths`` must exist; the self-test
    command (``check_command``, or the one configured for ``keyword``)
    must succeed; then the restart runs and the service must come back
    active. Nothing is rolled back; a failed stage raises.

    Raises:
        SafeRestartError: A stage failed; chained to its cause.
        ServiceNotFoundError: The keyword does not resolve.
    """
    ctx = _ctx(context)
    for path in config_paths:
        if not file_exists(path):
            logger.error(f"Config file missing: {path}")
            raise SafeRestartError(keyword, f"config file missing: {path}")

    handler = ctx.handler(keyword)
    service = handler.service_name

    argv = list(check_command) if check_command else ctx.config.self_tests.get(keyword.strip().lower())
    if argv:
        try:
            ctx.executor.run(argv, ctx.config.timeouts.probe)
        except CommandError as e:
            logger.error(f"Config test failed: {e}")
            raise SafeRestartError(service, f"config test failed: {e.output.strip() or e.reason}") from e
    else:
        logger.debug(f"No config self-test known for {keyword}")

    try:
        result = handler.restart()
    except ServiceError as e:
        logger.error(f"SafeRestart failed: {e}")
        raise SafeRestartError(service, str(e)) from e

    if not handler.is_active().is_active:
        logger.error(f"Service {service} not active after safe restart")
        raise SafeRestartError(service, "service not active after restart")
    return result


def view_log(
    path: str,
    option: Optional[LogOption] = None,
    context: Optional[ServiceContext] = None,
) -> str:
    """
    Return the tail of a log file.

    Raises:
        FileNotFoundError: The log file does not exist.
        CommandError: tail failed.
    """
    if not file_exists(path):
        raise FileNotFoundError(f"log file not found: {path}")
    option = option or LogOption()
    lines = "1" if option.tail_lines == "+1" else option.tail_lines
    return _ctx(context).executor.run(["tail", "-n", lines, str(path)], 10.0)


def view_config(
    path: str,
    option: Optional[ConfigOption] = None,
    context: Optional[ServiceContext] = None,
) -> str:
    """Return a config file, or its last lines when ``tail_lines`` is set."""
    option = option or ConfigOption()
    if option.tail_lines and option.tail_lines != "0":
        argv = ["tail", "-n", option.tail_lines, str(path)]
    else:
        argv = ["cat", str(path)]
    return _ctx(context).executor.run(argv, 5.0)


def register_aliases(
    aliases: Mapping[str, Sequence[str]],
    persist: bool = False,
    context: Optional[ServiceContext] = None,
) -> None:
    """Teach the resolver extra keyword-to-name mappings."""
    _ctx(context).aliases.register(aliases, persist=persist)


def reload_manager(context: Optional[ServiceContext] = None) -> ServiceManager:
    """Force the init system to be detected again."""
    return _ctx(context).reload()
