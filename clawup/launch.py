"""
Pull and start the gateway, then check that it came up.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .config import SERVICE_NAME, DeploymentConfig
from .errors import ImagePullError, ServiceStartError, VerificationWarning
from .manifest import OrchestrationManifest
from .runtime import ComposeRunner, HealthState, RuntimeHandle, ServiceState, ServiceStatus
from .runtime.command import CommandRunner

logger = logging.getLogger(__name__)


@dataclass
class LaunchResult:
    """Outcome of the post-launch check."""
    verified: bool
    status: ServiceStatus
    http_reachable: Optional[bool] = None
    warning: Optional[VerificationWarning] = None

    @property
    def state(self) -> ServiceState:
        return self.status.state

    @property
    def health(self) -> HealthState:
        return self.status.health


def probe_http(url: str, timeout: float = 5.0) -> bool:
    """
    Check whether anything answers on the access URL.

    Any HTTP response counts: the console may answer 401 before setup.
    """
    try:
        response = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.debug("HTTP probe of %s failed: %s", url, e)
        return False
    logger.debug("HTTP probe of %s returned %s", url, response.status_code)
    return True


def launch(
    config: DeploymentConfig,
    manifest: OrchestrationManifest,
    handle: RuntimeHandle,
    *,
    runner: Optional[CommandRunner] = None,
    sleep: Callable[[float], None] = time.sleep,
    settle_seconds: float = 5,
    http_check: bool = True,
) -> LaunchResult:
    """
    Pull the image, start the service detached and verify its state.

    Args:
        config: Resolved deployment parameters
        manifest: Manifest written for this run
        handle: Runtime handle from preflight
        runner: Command runner
        sleep: Sleep function used for the settle period
        settle_seconds: Wait between ``up -d`` and the status query
        http_check: Also probe the access URL

    Returns:
        LaunchResult; a failed verification is reported, not raised

    Raises:
        ImagePullError: If pull exits non-zero (up is not attempted)
        ServiceStartError: If up -d exits non-zero
    """
    service = SERVICE_NAME if SERVICE_NAME in manifest.services else next(iter(manifest.services))
    compose = ComposeRunner(handle, config.install_dir, runner)

    logger.info("Pulling %s", config.image)
    if not compose.pull().ok:
        raise ImagePullError(f"Failed to pull {config.image}")

    if not compose.up().ok:
        raise ServiceStartError(
            "Failed to start the gateway container",
            hint=f"Check whether port {config.port} is already in use.",
        )

    if settle_seconds > 0:
        logger.debug("Waiting %ss for the service to settle", settle_seconds)
        sleep(settle_seconds)

    status = compose.ps(service)
    http_reachable = probe_http(config.access_url) if http_check else None
    logger.info("Service %s: state=%s health=%s http=%s", service, status.state.value, status.health.value, http_reachable)

    if status.ok:
        return LaunchResult(verified=True, status=status, http_reachable=http_reachable)

    warning = VerificationWarning(
        f"Service {service} is {status.state.value} (health: {status.health.value}). "
        f"Inspect it with: cd {config.install_dir} && {handle.compose_display} logs"
    )
    logger.warning(str(warning))
    return LaunchResult(verified=False, status=status, http_reachable=http_reachable, warning=warning)
