"""Data models for a single install run."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ChecksumAlgorithm(Enum):
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def hex_length(self) -> int:
        return 64 if self is ChecksumAlgorithm.SHA256 else 128


@dataclass(frozen=True)
class Checksum:
    algorithm: ChecksumAlgorithm
    value: str


@dataclass(frozen=True)
class VersionSelector:
    """Tag constraint and/or branch. A branch always wins over a tag."""

    tag: str | None = None
    branch: str | None = None

    @property
    def is_latest(self) -> bool:
        return not self.tag and not self.branch

    def describe(self) -> str:
        if self.branch:
            return f"branch '{self.branch}'"
        if self.tag:
            return f"tag '{self.tag}'"
        return "latest tag"


@dataclass(frozen=True)
class BinaryTarget:
    name: str
    checksum: Checksum | None = None


@dataclass(frozen=True)
class PlatformTag:
    os: str
    arch: str


@dataclass
class InstallRequest:
    repo: str
    version: VersionSelector
    download_dir: Path
    module_name: str | None = None
    binary: BinaryTarget | None = None
    module_params: list[str] = field(default_factory=list)

    @property
    def is_module(self) -> bool:
        return self.module_name is not None

    @property
    def artifact_name(self) -> str:
        if self.module_name is not None:
            return self.module_name
        return self.binary.name if self.binary else ""


def resolve_binary_name(binary_name: str, platform: PlatformTag) -> str:
    """Release asset name for ``binary_name`` on ``platform``.

    >>> resolve_binary_name("foo", PlatformTag(os="linux", arch="amd64"))
    'foo_linux_amd64'
    """
    return f"{binary_name}_{platform.os}_{platform.arch}"


__all__ = [
    "ChecksumAlgorithm",
    "Checksum",
    "VersionSelector",
    "BinaryTarget",
    "PlatformTag",
    "InstallRequest",
    "resolve_binary_name",
]
