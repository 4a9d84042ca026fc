"""
Build the gateway manifest and write it into the install directory.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ..config import (
    CONTAINER_CONFIG_PATH,
    CONTAINER_NAME,
    CONTAINER_PORT,
    CONTAINER_WORKSPACE_PATH,
    HEALTH_INTERVAL,
    HEALTH_PATH,
    HEALTH_RETRIES,
    HEALTH_TIMEOUT,
    SERVICE_NAME,
    DeploymentConfig,
    is_windows,
)
from ..errors import FilesystemError, ManifestExists
from ..redact import redact_environment
from ..token import TokenProvider, TokenResult, generate_token
from .model import ComposeService, HealthCheck, OrchestrationManifest

logger = logging.getLogger(__name__)

TOKEN_ENV = "OPENCLAW_GATEWAY_TOKEN"
RESTART_POLICY = "unless-stopped"


def health_probe_command(port: int = CONTAINER_PORT, path: str = HEALTH_PATH) -> list:
    """Probe run inside the container; the image ships node but not curl."""
    script = (
        f"fetch('http://127.0.0.1:{port}{path}')"
        ".then(r=>process.exit(r.ok?0:1))"
        ".catch(()=>process.exit(1))"
    )
    return ["CMD", "node", "-e", script]


def build_manifest(config: DeploymentConfig, token: str, platform: Optional[str] = None) -> OrchestrationManifest:
    """
    Build the compose model for one gateway service.

    Args:
        config: Resolved deployment parameters
        token: Gateway token for the environment block
        platform: Platform override (the bind address is set outside Windows)

    Returns:
        OrchestrationManifest
    """
    environment = [
        "NODE_ENV=production",
        f"{TOKEN_ENV}={token}",
        # lets the first boot reach the setup wizard
        "OPENCLAW_ALLOW_UNCONFIGURED=true",
    ]
    if not is_windows(platform):
        environment.append("OPENCLAW_GATEWAY_BIND=0.0.0.0")

    service = ComposeService(
        image=config.image,
        container_name=CONTAINER_NAME,
        restart=RESTART_POLICY,
        ports=[f"{config.port}:{CONTAINER_PORT}"],
        volumes=[
            f"./config:{CONTAINER_CONFIG_PATH}",
            f"./workspace:{CONTAINER_WORKSPACE_PATH}",
        ],
        environment=environment,
        healthcheck=HealthCheck(
            test=health_probe_command(),
            interval=HEALTH_INTERVAL,
            timeout=HEALTH_TIMEOUT,
            retries=HEALTH_RETRIES,
        ),
        command=["gateway"],
    )
    return OrchestrationManifest(services={SERVICE_NAME: service})


def write_manifest(manifest: OrchestrationManifest, path: Path, overwrite: bool = True) -> Path:
    """
    Write the manifest as UTF-8 (no BOM) with LF line endings.

    The file is written next to its destination and renamed into place.

    Raises:
        ManifestExists: If the file exists and overwrite is False
        FilesystemError: If the file cannot be written
    """
    path = Path(path)
    if path.exists() and not overwrite:
        raise ManifestExists(f"{path} already exists")

    data = manifest.to_yaml().encode("utf-8")
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile("wb", dir=path.parent, prefix=".compose-", suffix=".tmp", delete=False) as f:
            tmp_name = f.name
            f.write(data)
        os.chmod(tmp_name, 0o600)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FilesystemError(f"Cannot write manifest {path}: {e.strerror or e}", path) from e

    logger.info("Wrote %s", path)
    return path


def load_manifest(path: Path) -> OrchestrationManifest:
    with open(path, "r", encoding="utf-8") as f:
        return OrchestrationManifest.from_yaml(f.read())


def generate_manifest(
    config: DeploymentConfig,
    *,
    token_source: Optional[Sequence[TokenProvider]] = None,
    platform: Optional[str] = None,
    overwrite: bool = True,
    allow_weak: bool = False,
) -> Tuple[OrchestrationManifest, TokenResult]:
    """
    Generate a fresh token and write the manifest that carries it.

    Args:
        config: Resolved deployment parameters (install directory already staged)
        token_source: Token providers in preference order
        platform: Platform override
        overwrite: Replace an existing manifest
        allow_weak: Accept a non-cryptographic token source

    Returns:
        (manifest, token)
    """
    if config.manifest_path.exists() and not overwrite:
        raise ManifestExists(f"{config.manifest_path} already exists")

    token = generate_token(token_source, allow_weak=allow_weak)
    manifest = build_manifest(config, token.value, platform)
    write_manifest(manifest, config.manifest_path, overwrite=overwrite)
    logger.debug("Environment: %s", redact_environment(manifest.gateway.environment))
    logger.info("Generated gateway token (source: %s)", token.provider)
    return manifest, token
