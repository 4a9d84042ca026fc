from .command import CmdResult, run_cmd
from .compose import ComposeRunner
from .detect import RuntimeHandle, check_environment
from .status import HealthState, ServiceState, ServiceStatus

__all__ = [
    "CmdResult",
    "run_cmd",
    "ComposeRunner",
    "RuntimeHandle",
    "check_environment",
    "HealthState",
    "ServiceState",
    "ServiceStatus",
]
