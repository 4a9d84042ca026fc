"""
Install directory layout and the per-directory install lock.
"""

import logging
import os
import stat
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import DeploymentConfig, is_windows
from .errors import FilesystemError, InstallLocked

logger = logging.getLogger(__name__)

# rwx for everyone: the container's non-root account (uid 1000) rarely
# matches the host owner of a bind mount
SHARED_DIR_MODE = stat.S_IRWXU | stat.S_IRWXG | stat.S_IRWXO


def _mkdir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Cannot create directory {path}: {e.strerror or e}", path) from e
    if not path.is_dir():
        raise FilesystemError(f"{path} exists and is not a directory", path)


def stage(config: DeploymentConfig, *, platform: Optional[str] = None) -> None:
    """
    Create the install directory with its config and workspace folders.

    Safe to repeat: existing directories are kept as they are apart from
    their permission bits.

    Raises:
        FilesystemError: Naming the path that could not be created or opened up
    """
    for path in (config.install_dir, config.config_dir, config.workspace_dir):
        _mkdir(path)

    if not is_windows(platform):
        for path in (config.config_dir, config.workspace_dir):
            try:
                os.chmod(path, SHARED_DIR_MODE)
            except OSError as e:
                raise FilesystemError(f"Cannot set permissions on {path}: {e.strerror or e}", path) from e

    for path in (config.install_dir, config.config_dir, config.workspace_dir):
        if not os.access(path, os.W_OK):
            raise FilesystemError(f"{path} is not writable", path)

    logger.info("Staged %s", config.install_dir)


def _try_lock(fd: int) -> bool:
    if os.name == "nt":
        import msvcrt
        try:
            msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
        except OSError:
            return False
        return True

    import fcntl
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


def _unlock(fd: int) -> None:
    if os.name == "nt":
        import msvcrt
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)
    else:
        import fcntl
        fcntl.flock(fd, fcntl.LOCK_UN)


@contextmanager
def install_lock(config: DeploymentConfig) -> Iterator[Path]:
    """
    Hold an exclusive advisory lock on the install directory.

    Creates the install directory if needed. A lock held by another run
    fails immediately instead of waiting.
    """
    _mkdir(config.install_dir)
    lock_path = config.lock_path
    try:
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as e:
        raise FilesystemError(f"Cannot open lock file {lock_path}: {e.strerror or e}", lock_path) from e

    try:
        if not _try_lock(fd):
            raise InstallLocked(f"{config.install_dir} is locked by another run")
        logger.debug("Acquired %s", lock_path)
        try:
            yield lock_path
        finally:
            _unlock(fd)
    finally:
        os.close(fd)
