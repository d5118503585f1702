"""External tools the installer shells out to."""

import shutil
from dataclasses import dataclass

from .errors import DependencyMissingError


@dataclass(frozen=True)
class Dependency:
    name: str
    install_hint: str

    def is_available(self, command: str | None = None) -> bool:
        return shutil.which(command or self.name) is not None


FETCH = Dependency(
    name="fetch",
    install_hint="install it from https://github.com/gruntwork-io/fetch/releases",
)
CURL = Dependency(
    name="curl",
    install_hint="install curl with your system package manager",
)
SUDO = Dependency(
    name="sudo",
    install_hint="install sudo, run as root, or pass --no-sudo with a writable --binary-install-dir",
)


def require(dependency: Dependency, command: str | None = None) -> None:
    """Raise DependencyMissingError unless ``dependency`` is on PATH."""
    if not dependency.is_available(command):
        name = command or dependency.name
        raise DependencyMissingError(
            f"required dependency '{name}' not found on PATH",
            hint=dependency.install_hint,
        )


__all__ = ["Dependency", "FETCH", "CURL", "SUDO", "require"]
