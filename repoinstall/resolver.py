"""Artifact retrieval through the external fetch tool.

:class:`Resolver` is the narrow seam around the fetch collaborator: it knows
how to place a repository subdirectory or a release asset on disk, nothing
more. :func:`fetch_module` and :func:`fetch_binary` own the staging directory
handling around it and the final binary placement.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .config import Settings
from .errors import FetchError, UsageError
from .execution import join_command, run_command_async
from .host import identify_platform
from .models import BinaryTarget, Checksum, PlatformTag, VersionSelector, resolve_binary_name
from .paths import (
    child_path,
    module_source_path,
    module_staging_dir,
    prepare_staging_dir,
    remove_stale_file,
)
from .placement import place_binary

_logging = logging.getLogger(__name__)

# Matches every release tag, so the fetch tool picks the newest one.
LATEST_TAG_CONSTRAINT = ">=0.0.0"


class Resolver(ABC):
    """Retrieves artifacts from a repository at a tag constraint or branch."""

    @abstractmethod
    async def download_source_path(
        self, repo: str, version: VersionSelector, source_path: str, destination: Path
    ) -> None:
        """Place the contents of ``source_path`` into ``destination``.

        Raises:
            FetchError: If the revision cannot be resolved or retrieved.
        """

    @abstractmethod
    async def download_release_asset(
        self,
        repo: str,
        tag: str,
        asset_name: str,
        destination: Path,
        checksum: Checksum | None = None,
    ) -> None:
        """Download release asset ``asset_name`` into the ``destination`` directory.

        When ``checksum`` is given the asset must match it before this returns.

        Raises:
            FetchError: On network, auth, not-found or checksum mismatch.
        """


class FetchToolResolver(Resolver):
    """Resolver backed by the ``fetch`` command line tool."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _version_args(self, version: VersionSelector) -> list[str]:
        if version.branch:
            return [f"--branch={version.branch}"]
        return [f"--tag={version.tag or LATEST_TAG_CONSTRAINT}"]

    def source_path_command(
        self, repo: str, version: VersionSelector, source_path: str, destination: Path
    ) -> list[str]:
        return [
            self.settings.fetch_command,
            f"--repo={repo}",
            *self._version_args(version),
            f"--source-path={source_path}",
            str(destination),
        ]

    def release_asset_command(
        self,
        repo: str,
        tag: str,
        asset_name: str,
        destination: Path,
        checksum: Checksum | None = None,
    ) -> list[str]:
        args = [
            self.settings.fetch_command,
            f"--repo={repo}",
            f"--tag={tag}",
            f"--release-asset={asset_name}",
        ]
        if checksum:
            args.append(f"--release-asset-checksum={checksum.value}")
            args.append(f"--release-asset-checksum-algo={checksum.algorithm.value}")
        args.append(str(destination))
        return args

    async def _run(self, args: list[str], what: str) -> None:
        output, returncode = await run_command_async(
            join_command(args), env=self.settings.subprocess_env()
        )
        if returncode != 0:
            raise FetchError(f"failed to fetch {what}: {output or f'exit status {returncode}'}")
        if output:
            _logging.debug(output)

    async def download_source_path(
        self, repo: str, version: VersionSelector, source_path: str, destination: Path
    ) -> None:
        args = self.source_path_command(repo, version, source_path, destination)
        await self._run(args, f"{source_path} from {repo} at {version.describe()}")

    async def download_release_asset(
        self,
        repo: str,
        tag: str,
        asset_name: str,
        destination: Path,
        checksum: Checksum | None = None,
    ) -> None:
        args = self.release_asset_command(repo, tag, asset_name, destination, checksum)
        await self._run(args, f"release asset {asset_name} from {repo} at tag '{tag}'")


async def fetch_module(
    resolver: Resolver,
    module_name: str,
    version: VersionSelector,
    download_dir: Path,
    repo: str,
) -> Path:
    """Fetch ``modules/<module_name>`` into a freshly emptied staging directory."""
    staging_dir = prepare_staging_dir(module_staging_dir(download_dir, module_name))
    _logging.info(
        f"Downloading module {module_name} from {repo} ({version.describe()}) into {staging_dir}"
    )
    await resolver.download_source_path(
        repo, version, module_source_path(module_name), staging_dir
    )
    return staging_dir


async def fetch_binary(
    resolver: Resolver,
    binary: BinaryTarget,
    version: VersionSelector,
    download_dir: Path,
    repo: str,
    settings: Settings,
    platform: PlatformTag | None = None,
) -> Path:
    """Download the platform asset for ``binary`` and install it.

    The asset is fetched as ``<name>_<os>_<arch>`` and installed into
    ``settings.bin_dir`` under the bare ``<name>``.
    """
    if not version.tag:
        raise UsageError("--binary-name requires --tag")
    if version.branch:
        _logging.warning(
            f"Ignoring --branch {version.branch}; binaries are fetched from release tag '{version.tag}'"
        )

    child_path(settings.bin_dir, binary.name)
    platform = platform or identify_platform()
    asset_name = resolve_binary_name(binary.name, platform)
    download_path = child_path(download_dir, asset_name)
    remove_stale_file(download_path)

    _logging.info(f"Downloading release asset {asset_name} from {repo} (tag '{version.tag}')")
    if binary.checksum:
        _logging.info(f"Verifying {binary.checksum.algorithm.value} checksum of {asset_name}")
    await resolver.download_release_asset(
        repo, version.tag, asset_name, download_dir, binary.checksum
    )

    if not download_path.is_file():
        raise FetchError(f"release asset {asset_name} was not found at {download_path} after download")

    destination = await place_binary(
        download_path, settings.bin_dir, binary.name, settings.use_sudo
    )
    _logging.info(f"Installed {binary.name} to {destination}")
    return destination


__all__ = [
    "LATEST_TAG_CONSTRAINT",
    "Resolver",
    "FetchToolResolver",
    "fetch_module",
    "fetch_binary",
]
