"""Host platform detection used to pick release assets."""

import logging
import platform
from functools import lru_cache

from .models import PlatformTag

_logging = logging.getLogger(__name__)

UNKNOWN_ARCH = ""


def classify_arch(machine: str) -> str:
    """Map a raw machine hardware string onto a release asset arch tag.

    Rules are checked in order: anything containing "64" is amd64, then
    "386", then "arm". Unrecognised strings yield an empty tag rather than an
    error, so e.g. "i686" produces asset names ending in "_".
    """
    if "64" in machine:
        return "amd64"
    if "386" in machine:
        return "386"
    if "arm" in machine:
        return "arm"
    return UNKNOWN_ARCH


def classify_os(system: str) -> str:
    return system.lower()


@lru_cache(maxsize=None)
def identify_platform() -> PlatformTag:
    """Return the PlatformTag for this host. Computed once per process."""
    machine = platform.machine()
    tag = PlatformTag(os=classify_os(platform.system()), arch=classify_arch(machine))
    if tag.arch == UNKNOWN_ARCH:
        _logging.warning(
            f"Unrecognized CPU architecture '{machine}'; binary names will have an empty arch suffix"
        )
    _logging.debug(f"Detected platform: os={tag.os} arch={tag.arch}")
    return tag


__all__ = ["UNKNOWN_ARCH", "classify_arch", "classify_os", "identify_platform"]
