"""Filesystem locations used by repoinstall."""

import os
import shutil
import tempfile
from pathlib import Path

from .errors import UsageError

DEFAULT_BIN_DIR = Path("/usr/local/bin")
MODULES_SUBPATH = "modules"
MODULE_ENTRYPOINT = "install.sh"
CONFIG_ENV_VAR = "REPOINSTALL_CONFIG"


def get_default_download_dir() -> Path:
    """Return the staging root shared by all invocations on this host."""
    return Path(tempfile.gettempdir()) / "repoinstall-downloads"


def get_config_dir() -> Path:
    """Return XDG-compliant config directory: ~/.config/repoinstall"""
    return Path.home() / ".config" / "repoinstall"


def get_config_path() -> Path:
    """Return path to the user settings file.

    Priority:
    1. REPOINSTALL_CONFIG environment variable (if set)
    2. ~/.config/repoinstall/config.yaml
    """
    if os.environ.get(CONFIG_ENV_VAR):
        return Path(os.environ[CONFIG_ENV_VAR])
    return get_config_dir() / "config.yaml"


def is_plain_name(name: str) -> bool:
    """True when ``name`` is a single path component that stays in its parent."""
    if not name or name in (".", ".."):
        return False
    separators = {os.sep, "/"} | ({os.altsep} if os.altsep else set())
    return not any(sep in name for sep in separators)


def child_path(parent: Path, name: str) -> Path:
    """Return ``parent / name``, refusing names that would land outside ``parent``."""
    path = parent / name
    if not is_plain_name(name) or path.parent != parent:
        raise UsageError(f"'{name}' is not a plain name; it would escape {parent}")
    return path


def module_staging_dir(download_dir: Path, module_name: str) -> Path:
    return child_path(download_dir, module_name)


def module_entrypoint(staging_dir: Path) -> Path:
    return staging_dir / MODULE_ENTRYPOINT


def module_source_path(module_name: str) -> str:
    """Repository path holding a module, as understood by the fetch tool."""
    return f"/{MODULES_SUBPATH}/{module_name}"


def prepare_staging_dir(path: Path) -> Path:
    """Guarantee ``path`` exists and is empty.

    Parents are created as needed; the leaf is removed and recreated so no
    residue from an earlier run survives.
    """
    remove_stale_file(path)
    path.mkdir()
    return path


def remove_stale_file(path: Path) -> None:
    """Delete a leftover download at ``path``, creating its parent directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
