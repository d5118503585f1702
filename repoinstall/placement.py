"""Moving a downloaded binary into the install directory."""

import logging
import os
import shutil
from pathlib import Path

from .dependencies import SUDO, require
from .errors import PlacementError
from .execution import join_command, run_command_async
from .paths import child_path

_logging = logging.getLogger(__name__)

EXECUTABLE_PERMISSIONS = 0o755


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def needs_sudo(install_dir: Path, use_sudo: bool) -> bool:
    """True when writing into ``install_dir`` requires elevating through sudo."""
    if not use_sudo or is_root():
        return False
    target = install_dir if install_dir.exists() else install_dir.parent
    return not os.access(target, os.W_OK)


def make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | EXECUTABLE_PERMISSIONS)


async def _run_privileged(args: list[str]) -> None:
    output, returncode = await run_command_async(join_command(["sudo", *args]))
    if returncode != 0:
        raise PlacementError(f"'sudo {' '.join(args)}' failed: {output}")


async def place_binary(source: Path, install_dir: Path, name: str, use_sudo: bool) -> Path:
    """Move ``source`` to ``install_dir/name`` and mark it executable.

    Concurrent runs installing the same name are not coordinated; the last
    move wins.
    """
    destination = child_path(install_dir, name)

    if needs_sudo(install_dir, use_sudo):
        require(SUDO)
        _logging.info(f"Using sudo to write into {install_dir}")
        await _run_privileged(["mkdir", "-p", str(install_dir)])
        await _run_privileged(["mv", str(source), str(destination)])
        await _run_privileged(["chmod", "u+x,g+x,o+x", str(destination)])
        return destination

    try:
        install_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))
        make_executable(destination)
    except OSError as e:
        hint = None if use_sudo else "drop --no-sudo or choose a writable --binary-install-dir"
        raise PlacementError(f"cannot install {name} into {install_dir}: {e}", hint=hint) from e
    return destination


__all__ = [
    "EXECUTABLE_PERMISSIONS",
    "is_root",
    "needs_sudo",
    "make_executable",
    "place_binary",
]
