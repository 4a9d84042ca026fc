"""
Install directory and port resolution.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from .config import DEFAULT_DIR_NAME, DEFAULT_PORT, DeploymentConfig, get_home
from .errors import Cancelled, InvalidPort

logger = logging.getLogger(__name__)

# (message, default) -> raw answer
PromptFn = Callable[[str, str], str]
ConfirmFn = Callable[[str], bool]


def default_install_dir(home: Optional[Path] = None) -> Path:
    """Default install directory: <home>/.openclaw."""
    return (home or get_home()) / DEFAULT_DIR_NAME


def parse_port(value: Union[str, int]) -> int:
    """
    Validate a TCP port.

    Args:
        value: Raw port string or int

    Returns:
        int: Port in 1..65535

    Raises:
        InvalidPort: If the value is not a base-10 integer in range
    """
    text = str(value).strip()
    if not text.isdigit() or not text.isascii():
        raise InvalidPort(f"Invalid port: {value!r}")

    port = int(text)
    if not 1 <= port <= 65535:
        raise InvalidPort(f"Port out of range: {port}")
    return port


def _resolve_dir(raw: str) -> Path:
    return Path(raw).expanduser().absolute()


def resolve_parameters(
    prompt_fn: PromptFn,
    *,
    install_dir: Optional[str] = None,
    port: Optional[Union[str, int]] = None,
    home: Optional[Path] = None,
) -> DeploymentConfig:
    """
    Collect install directory and port, falling back to defaults.

    Values passed in skip their prompt. A blank answer keeps the default.

    Args:
        prompt_fn: Called as prompt_fn(message, default) for missing values
        install_dir: Install directory from the command line
        port: Port from the command line
        home: Base directory for the default install directory

    Returns:
        DeploymentConfig
    """
    default_dir = default_install_dir(home)

    if install_dir is None:
        install_dir = prompt_fn("Install directory", str(default_dir))
    if not install_dir or not str(install_dir).strip():
        install_dir = str(default_dir)

    if port is None:
        port = prompt_fn("Web console port", str(DEFAULT_PORT))
    if port is None or not str(port).strip():
        port = DEFAULT_PORT

    config = DeploymentConfig(install_dir=_resolve_dir(str(install_dir).strip()), port=parse_port(port))
    logger.info("Resolved install_dir=%s port=%s", config.install_dir, config.port)
    return config


def describe_config(config: DeploymentConfig) -> str:
    return "\n".join([
        f"Install directory: {config.install_dir}",
        f"Service port:      {config.port}",
        f"Image:             {config.image}",
    ])


def confirm_parameters(config: DeploymentConfig, confirm_fn: ConfirmFn, assume_yes: bool = False) -> None:
    """
    Block on an explicit go/no-go before anything is written.

    Raises:
        Cancelled: If the user declines
    """
    if assume_yes:
        logger.info("Confirmation skipped (non-interactive)")
        return
    if not confirm_fn(describe_config(config)):
        raise Cancelled("Installation cancelled, nothing was changed", hint="")
