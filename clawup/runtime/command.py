from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..redact import redact_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# (argv, cwd, capture) -> CmdResult
CommandRunner = Callable[..., CmdResult]


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    cwd: Optional[str] = None,
    capture: bool = True,
) -> CmdResult:
    """Run a command and return its exit status and output.

    - Never raises on a non-zero exit; callers map failures to their own errors.
    - A missing executable is reported as exit code 127, like a shell would.
    - With capture=False the child inherits the terminal (pull progress, logs -f).
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        logger.debug("Executable not found: %s", e)
        return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", redact_string(stdout.strip()))
    if stderr:
        logger.debug("STDERR %s", redact_string(stderr.strip()))

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
