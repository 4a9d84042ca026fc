from typing import List, Optional, Tuple

import pytest

from clawup.runtime.command import CmdResult
from clawup.runtime.detect import RuntimeHandle


class FakeRunner:
    """Records docker invocations and answers them from a fragment table."""

    def __init__(self, responses: Optional[List[Tuple[str, int, str]]] = None):
        self.responses = responses or []
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []

    def __call__(self, argv, cwd=None, capture=True):
        self.calls.append(list(argv))
        self.cwds.append(cwd)
        line = " ".join(argv[1:])
        for fragment, code, stdout in self.responses:
            if fragment in line:
                return CmdResult(argv=list(argv), returncode=code, stdout=stdout, stderr="")
        return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")

    def ran(self, fragment: str) -> bool:
        return any(fragment in " ".join(call[1:]) for call in self.calls)


RUNNING_PS = '{"Name":"openclaw-gateway","Service":"openclaw-gateway","State":"running","Health":"healthy"}\n'


@pytest.fixture
def handle():
    return RuntimeHandle(
        docker_bin="docker",
        compose_argv=("docker", "compose"),
        legacy=False,
        compose_version="Docker Compose version v2.29.1",
        platform="linux",
    )


@pytest.fixture
def running_runner():
    return FakeRunner([("ps --all", 0, RUNNING_PS)])
