"""
Preflight checks for the container runtime.
"""

import ctypes
import logging
import shutil
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import is_windows
from ..errors import (
    InsufficientPrivilege,
    OrchestratorMissing,
    RuntimeNotInstalled,
    RuntimeNotRunning,
)
from .command import CommandRunner, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeHandle:
    """The Docker client and the compose command form selected for this run."""
    docker_bin: str
    compose_argv: Tuple[str, ...]
    legacy: bool
    compose_version: str
    platform: str

    @property
    def compose_display(self) -> str:
        return " ".join(self.compose_argv)


def is_admin() -> bool:
    """Return True when the current Windows process is elevated."""
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        return False


def _first_line(text: str) -> str:
    lines = text.strip().splitlines()
    return lines[0].strip() if lines else ""


def detect_compose(docker_bin: str, runner: CommandRunner) -> Tuple[Tuple[str, ...], bool, str]:
    """
    Pick the compose command form, preferring the integrated plugin.

    Args:
        docker_bin: Docker client executable
        runner: Command runner

    Returns:
        (argv prefix, legacy flag, version string)

    Raises:
        OrchestratorMissing: If neither form is available
    """
    result = runner([docker_bin, "compose", "version"])
    if result.ok:
        return (docker_bin, "compose"), False, _first_line(result.stdout)

    logger.warning("'docker compose' plugin not found, trying legacy 'docker-compose'")
    legacy_bin = shutil.which("docker-compose")
    if legacy_bin:
        result = runner([legacy_bin, "version"])
        if result.ok:
            return (legacy_bin,), True, _first_line(result.stdout)

    raise OrchestratorMissing("Docker Compose is not available")


def check_environment(
    runner: Optional[CommandRunner] = None,
    platform: Optional[str] = None,
    require_admin: Optional[bool] = None,
) -> RuntimeHandle:
    """
    Verify Docker is installed and running and select the compose command.

    Args:
        runner: Command runner (defaults to run_cmd)
        platform: Platform override, sys.platform when omitted
        require_admin: Check for elevation; defaults to True on Windows

    Returns:
        RuntimeHandle used for every later docker invocation

    Raises:
        RuntimeNotInstalled, RuntimeNotRunning, OrchestratorMissing,
        InsufficientPrivilege
    """
    runner = runner or run_cmd
    platform = platform or sys.platform
    if require_admin is None:
        require_admin = is_windows(platform)

    docker_bin = shutil.which("docker")
    if not docker_bin:
        raise RuntimeNotInstalled("Docker was not found on PATH")

    if not runner([docker_bin, "info"]).ok:
        raise RuntimeNotRunning("The Docker daemon is not running")

    compose_argv, legacy, version = detect_compose(docker_bin, runner)

    if require_admin and not is_admin():
        raise InsufficientPrivilege("Administrator rights are required to install on Windows")

    handle = RuntimeHandle(
        docker_bin=docker_bin,
        compose_argv=compose_argv,
        legacy=legacy,
        compose_version=version,
        platform=platform,
    )
    logger.info("Environment OK, using compose command: %s", handle.compose_display)
    return handle
