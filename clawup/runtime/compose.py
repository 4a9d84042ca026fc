"""
Thin wrapper around the compose command selected during preflight.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..config import SERVICE_NAME
from .command import CmdResult, CommandRunner, run_cmd
from .detect import RuntimeHandle
from .status import ServiceState, ServiceStatus, parse_inspect_state, parse_ps_json

logger = logging.getLogger(__name__)


class ComposeRunner:
    """Runs compose operations against one project directory."""

    def __init__(self, handle: RuntimeHandle, project_dir: Path, runner: Optional[CommandRunner] = None):
        self.handle = handle
        self.project_dir = Path(project_dir)
        self.runner = runner or run_cmd

    def _run(self, *args: str, capture: bool = True) -> CmdResult:
        argv: List[str] = [*self.handle.compose_argv, *args]
        return self.runner(argv, cwd=str(self.project_dir), capture=capture)

    def pull(self) -> CmdResult:
        return self._run("pull", capture=False)

    def up(self) -> CmdResult:
        return self._run("up", "-d", capture=False)

    def down(self) -> CmdResult:
        return self._run("down", capture=False)

    def logs(self, follow: bool = False) -> CmdResult:
        args = ["logs"]
        if follow:
            args.append("-f")
        return self._run(*args, capture=False)

    def ps(self, service: str = SERVICE_NAME) -> ServiceStatus:
        """
        Query the service state through the machine-readable interface.

        The integrated plugin supports ``ps --format json``. The legacy
        binary does not, so its container id is resolved with ``ps -q`` and
        the state read with ``docker inspect``.
        """
        if not self.handle.legacy:
            result = self._run("ps", "--all", "--format", "json")
            if not result.ok:
                logger.warning("compose ps failed (exit %s)", result.returncode)
                return ServiceStatus(service=service, state=ServiceState.UNKNOWN)
            return parse_ps_json(result.stdout, service)

        result = self._run("ps", "-q", service)
        if not result.ok:
            logger.warning("compose ps failed (exit %s)", result.returncode)
            return ServiceStatus(service=service, state=ServiceState.UNKNOWN)

        ids = result.stdout.split()
        if not ids:
            return ServiceStatus(service=service, state=ServiceState.MISSING)

        container = ids[0]
        inspect = self.runner(
            [self.handle.docker_bin, "inspect", "--format", "{{json .State}}", container],
            cwd=str(self.project_dir),
            capture=True,
        )
        if not inspect.ok:
            return ServiceStatus(service=service, state=ServiceState.UNKNOWN, container=container)
        return parse_inspect_state(inspect.stdout, service, container)
