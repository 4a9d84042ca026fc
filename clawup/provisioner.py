"""
The provisioning workflow: preflight, parameters, staging, manifest, launch.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from .config import DeploymentConfig, ProvisionOptions, get_settle_seconds
from .errors import ProvisionError
from .launch import LaunchResult, launch
from .manifest import OrchestrationManifest, generate_manifest
from .params import ConfirmFn, PromptFn, confirm_parameters, resolve_parameters
from .runtime import RuntimeHandle, check_environment
from .runtime.command import CommandRunner, run_cmd
from .staging import install_lock, stage
from .token import TokenProvider, TokenResult

logger = logging.getLogger(__name__)


class ProvisionState(Enum):
    """Workflow states."""
    START = "start"
    PREFLIGHTED = "preflighted"
    PARAMETERS_RESOLVED = "parameters_resolved"
    STAGED = "staged"
    MANIFEST_WRITTEN = "manifest_written"
    LAUNCHED = "launched"
    VERIFIED = "verified"
    VERIFY_WARNED = "verify_warned"
    ABORTED = "aborted"


TRANSITIONS: Dict[ProvisionState, List[ProvisionState]] = {
    ProvisionState.START: [ProvisionState.PREFLIGHTED],
    ProvisionState.PREFLIGHTED: [ProvisionState.PARAMETERS_RESOLVED],
    ProvisionState.PARAMETERS_RESOLVED: [ProvisionState.STAGED],
    ProvisionState.STAGED: [ProvisionState.MANIFEST_WRITTEN],
    ProvisionState.MANIFEST_WRITTEN: [ProvisionState.LAUNCHED],
    ProvisionState.LAUNCHED: [ProvisionState.VERIFIED, ProvisionState.VERIFY_WARNED],
    ProvisionState.VERIFIED: [],
    ProvisionState.VERIFY_WARNED: [],
    ProvisionState.ABORTED: [],
}


@dataclass
class ProvisionResult:
    """Everything the caller needs to report a finished run."""
    state: ProvisionState
    config: DeploymentConfig
    handle: RuntimeHandle
    token: TokenResult
    manifest: OrchestrationManifest
    launch: LaunchResult

    @property
    def access_url(self) -> str:
        return self.config.access_url

    @property
    def verified(self) -> bool:
        return self.state is ProvisionState.VERIFIED


@dataclass
class Provisioner:
    """
    Runs the five stages in order.

    Each stage only starts after the previous one succeeded. A failure moves
    the run to ABORTED and re-raises; nothing created so far is removed.
    """
    options: ProvisionOptions
    prompt: PromptFn
    confirm: ConfirmFn
    runner: CommandRunner = run_cmd
    sleep: Callable[[float], None] = time.sleep
    token_source: Optional[Sequence[TokenProvider]] = None
    preflight: Callable[..., RuntimeHandle] = check_environment
    state: ProvisionState = ProvisionState.START
    history: List[ProvisionState] = field(default_factory=list)

    def _advance(self, new_state: ProvisionState) -> None:
        if new_state is not ProvisionState.ABORTED and new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid transition {self.state.value} -> {new_state.value}")
        logger.debug("State %s -> %s", self.state.value, new_state.value)
        self.history.append(self.state)
        self.state = new_state

    def run(self) -> ProvisionResult:
        try:
            return self._run()
        except (ProvisionError, KeyboardInterrupt):
            self._advance(ProvisionState.ABORTED)
            raise

    def _run(self) -> ProvisionResult:
        opts = self.options

        handle = self.preflight(runner=self.runner, platform=opts.platform)
        self._advance(ProvisionState.PREFLIGHTED)

        config = resolve_parameters(self.prompt, install_dir=opts.install_dir, port=opts.port)
        confirm_parameters(config, self.confirm, assume_yes=opts.assume_yes)
        self._advance(ProvisionState.PARAMETERS_RESOLVED)

        with install_lock(config):
            stage(config, platform=opts.platform)
            self._advance(ProvisionState.STAGED)

            manifest, token = generate_manifest(
                config,
                token_source=self.token_source,
                platform=opts.platform,
                overwrite=opts.overwrite,
                allow_weak=opts.allow_weak_token,
            )
            self._advance(ProvisionState.MANIFEST_WRITTEN)

        settle = opts.settle_seconds if opts.settle_seconds is not None else get_settle_seconds()
        result = launch(
            config,
            manifest,
            handle,
            runner=self.runner,
            sleep=self.sleep,
            settle_seconds=settle,
            http_check=opts.probe_http,
        )
        self._advance(ProvisionState.LAUNCHED)
        self._advance(ProvisionState.VERIFIED if result.verified else ProvisionState.VERIFY_WARNED)

        return ProvisionResult(
            state=self.state,
            config=config,
            handle=handle,
            token=token,
            manifest=manifest,
            launch=result,
        )


def run_provisioning(
    options: ProvisionOptions,
    prompt: PromptFn,
    confirm: ConfirmFn,
    **kwargs,
) -> ProvisionResult:
    """Run the whole workflow once. See Provisioner for the keyword arguments."""
    return Provisioner(options=options, prompt=prompt, confirm=confirm, **kwargs).run()
