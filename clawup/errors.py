"""
Error taxonomy for the provisioning workflow.

Every failure before launch is fatal and carries a user-facing hint. The
post-launch status check only ever produces a VerificationWarning.
"""

from pathlib import Path
from typing import Optional, Union

from .config import DOCKER_INSTALL_URL


class ProvisionError(Exception):
    """Base class for fail-stop provisioning errors."""

    exit_code = 1
    default_hint: Optional[str] = None

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint if hint is not None else self.default_hint


class RuntimeNotInstalled(ProvisionError):
    default_hint = f"OpenClaw runs on Docker. Install it from {DOCKER_INSTALL_URL}"


class RuntimeNotRunning(ProvisionError):
    default_hint = "Start Docker Desktop, or run 'sudo systemctl start docker'."


class OrchestratorMissing(ProvisionError):
    default_hint = "Docker Compose was not found. Update Docker to a release that ships 'docker compose'."


class InsufficientPrivilege(ProvisionError):
    default_hint = "Re-run from a terminal started with 'Run as administrator'."


class InvalidPort(ProvisionError):
    default_hint = "Use a whole number between 1 and 65535."


class FilesystemError(ProvisionError):
    """Directory creation, permission or manifest write failure."""

    def __init__(self, message: str, path: Union[str, Path], hint: Optional[str] = None):
        super().__init__(message, hint)
        self.path = Path(path)


class InstallLocked(ProvisionError):
    default_hint = "Another clawup run is using this directory. Wait for it to finish."


class TokenGenerationError(ProvisionError):
    pass


class ManifestExists(ProvisionError):
    default_hint = "Drop --no-overwrite to regenerate the manifest and token."


class ImagePullError(ProvisionError):
    default_hint = "Usually ghcr.io is unreachable. Check your network connection or proxy settings."


class ServiceStartError(ProvisionError):
    pass


class Cancelled(ProvisionError):
    exit_code = 130


class VerificationWarning(UserWarning):
    """The service was started but did not report a running state."""
