"""
Constants and run options for provisioning.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

SERVICE_NAME = "openclaw-gateway"
CONTAINER_NAME = "openclaw-gateway"
IMAGE_REFERENCE = "ghcr.io/openclaw/openclaw:latest"
CONTAINER_PORT = 18789
DEFAULT_PORT = 18789
DEFAULT_DIR_NAME = ".openclaw"
MANIFEST_FILENAME = "docker-compose.yml"
LOCK_FILENAME = ".clawup.lock"

# The image runs as the "node" account, home /home/node
CONTAINER_USER = "node"
CONTAINER_CONFIG_PATH = f"/home/{CONTAINER_USER}/.openclaw"
CONTAINER_WORKSPACE_PATH = f"{CONTAINER_CONFIG_PATH}/workspace"

HEALTH_PATH = "/healthz"
HEALTH_INTERVAL = "30s"
HEALTH_TIMEOUT = "10s"
HEALTH_RETRIES = 3

DEFAULT_SETTLE_SECONDS = 5
DOCKER_INSTALL_URL = "https://docs.docker.com/get-docker/"


def is_windows(platform: Optional[str] = None) -> bool:
    """Return True when the given (or current) platform is Windows."""
    return (platform or sys.platform).startswith("win")


def get_home() -> Path:
    """
    Get the base directory the default install directory lives under.

    Returns:
        Path: ``CLAWUP_HOME`` when set, otherwise the user's home directory
    """
    override = os.environ.get("CLAWUP_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home()


def get_settle_seconds() -> float:
    """Seconds to wait between ``up -d`` and the status query."""
    raw = os.environ.get("CLAWUP_SETTLE_SECONDS")
    if not raw:
        return DEFAULT_SETTLE_SECONDS
    try:
        return max(0.0, float(raw))
    except ValueError:
        return DEFAULT_SETTLE_SECONDS


@dataclass(frozen=True)
class DeploymentConfig:
    """Resolved parameters for one provisioning run."""
    install_dir: Path
    port: int
    image: str = IMAGE_REFERENCE

    @property
    def config_dir(self) -> Path:
        return self.install_dir / "config"

    @property
    def workspace_dir(self) -> Path:
        return self.install_dir / "workspace"

    @property
    def manifest_path(self) -> Path:
        return self.install_dir / MANIFEST_FILENAME

    @property
    def lock_path(self) -> Path:
        return self.install_dir / LOCK_FILENAME

    @property
    def access_url(self) -> str:
        return f"http://localhost:{self.port}"


@dataclass
class ProvisionOptions:
    """Command-line choices threaded through the workflow."""
    install_dir: Optional[str] = None
    port: Optional[str] = None
    assume_yes: bool = False
    overwrite: bool = True
    allow_weak_token: bool = False
    settle_seconds: Optional[float] = None
    probe_http: bool = True
    platform: Optional[str] = None
