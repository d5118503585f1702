"""Install pipeline: validate, authorize, resolve, then execute or place.

One invocation installs exactly one module or binary. Steps run strictly in
sequence and the first failure aborts the run; nothing is retried or rolled
back.

Running a module executes ``install.sh`` from the fetched repository with the
caller's privileges. That is the purpose of a module install, not something
this package sandboxes: only install modules from repositories you trust.
"""

import logging
import re
from pathlib import Path
from typing import Sequence

from .access import AccessClassifier, CurlAccessClassifier, authorize
from .config import Settings
from .dependencies import CURL, FETCH, require
from .errors import EmptyResultError, ExecutionError, UsageError
from .execution import join_command, run_command_async
from .models import (
    BinaryTarget,
    Checksum,
    ChecksumAlgorithm,
    InstallRequest,
    PlatformTag,
    VersionSelector,
)
from .params import translate_params
from .paths import is_plain_name, module_entrypoint
from .placement import make_executable
from .resolver import FetchToolResolver, Resolver, fetch_binary, fetch_module

_logging = logging.getLogger(__name__)

_HEX = re.compile(r"^[0-9a-fA-F]+$")


def _parse_checksum(
    sha256: str | None, sha512: str | None
) -> Checksum | None:
    if sha256 and sha512:
        raise UsageError(
            "only one of --binary-sha256-checksum and --binary-sha512-checksum may be given"
        )
    if sha256:
        algorithm, value = ChecksumAlgorithm.SHA256, sha256
    elif sha512:
        algorithm, value = ChecksumAlgorithm.SHA512, sha512
    else:
        return None

    value = value.strip()
    if len(value) != algorithm.hex_length or not _HEX.match(value):
        raise UsageError(
            f"--binary-{algorithm.value}-checksum must be {algorithm.hex_length} hexadecimal characters"
        )
    return Checksum(algorithm=algorithm, value=value.lower())


def build_request(
    repo: str | None,
    download_dir: Path,
    tag: str | None = None,
    branch: str | None = None,
    module_name: str | None = None,
    binary_name: str | None = None,
    sha256: str | None = None,
    sha512: str | None = None,
    module_params: Sequence[str] = (),
) -> InstallRequest:
    """Validate raw command line values and assemble an InstallRequest.

    Raises:
        UsageError: When a required flag is missing or flags conflict.
    """
    if not repo:
        raise UsageError("--repo is required")
    if module_name and binary_name:
        raise UsageError("only one of --module-name and --binary-name may be given")
    if not module_name and not binary_name:
        raise UsageError("one of --module-name or --binary-name is required")

    checksum = _parse_checksum(sha256, sha512)
    if binary_name and not tag:
        raise UsageError("--binary-name requires --tag")

    for flag, name in (("--module-name", module_name), ("--binary-name", binary_name)):
        if name and not is_plain_name(name):
            raise UsageError(f"{flag} must be a plain name without path separators, got '{name}'")

    for pair in module_params:
        if "=" not in pair:
            raise UsageError(f"--module-param must be in key=value form, got '{pair}'")

    version = VersionSelector(tag=tag or None, branch=branch or None)

    if module_name:
        if checksum:
            _logging.warning("Ignoring binary checksum; it only applies to --binary-name installs")
        return InstallRequest(
            repo=repo,
            version=version,
            download_dir=download_dir,
            module_name=module_name,
            module_params=list(module_params),
        )

    if not binary_name:
        raise UsageError("one of --module-name or --binary-name is required")
    if module_params:
        _logging.warning("Ignoring --module-param; it only applies to --module-name installs")
    return InstallRequest(
        repo=repo,
        version=version,
        download_dir=download_dir,
        binary=BinaryTarget(name=binary_name, checksum=checksum),
    )


def check_dependencies(settings: Settings, probe: bool = True, fetch: bool = True) -> None:
    """Raise DependencyMissingError for any missing tool the run will call."""
    if fetch:
        require(FETCH, settings.fetch_command)
    if probe:
        require(CURL)


def verify_module_contents(staging_dir: Path, request: InstallRequest) -> None:
    """Fail unless the module fetch left files in ``staging_dir``."""
    if staging_dir.is_dir() and any(staging_dir.iterdir()):
        return
    version = request.version
    raise EmptyResultError(
        f"no files found for module '{request.module_name}' in {request.repo} "
        f"(tag: '{version.tag or ''}', branch: '{version.branch or ''}')",
        hint="check that the module exists under modules/ at that tag or branch",
    )


async def run_module_entrypoint(staging_dir: Path, module_params: Sequence[str]) -> None:
    """Run the module's install script with translated params.

    The script inherits stdin, stdout and stderr. A non-zero exit raises
    ExecutionError carrying the script's exit status.
    """
    entrypoint = module_entrypoint(staging_dir)
    if not entrypoint.is_file():
        raise EmptyResultError(f"module is missing its install entrypoint {entrypoint}")

    make_executable(entrypoint)
    command = join_command([str(entrypoint), *translate_params(module_params)])
    _logging.info(f"Executing {command}")
    _, returncode = await run_command_async(command, capture=False)
    if returncode != 0:
        raise ExecutionError(
            f"{entrypoint} exited with status {returncode}", returncode=returncode
        )


async def run_install(
    request: InstallRequest,
    settings: Settings,
    resolver: Resolver | None = None,
    classifier: AccessClassifier | None = None,
    platform: PlatformTag | None = None,
) -> Path:
    """Carry out ``request``.

    Returns the module staging directory for module installs, or the
    installed binary path for binary installs.
    """
    check_dependencies(settings, probe=classifier is None, fetch=resolver is None)
    resolver = resolver or FetchToolResolver(settings)
    classifier = classifier or CurlAccessClassifier()

    await authorize(request.repo, settings, classifier)

    if request.module_name is not None:
        staging_dir = await fetch_module(
            resolver,
            request.module_name,
            request.version,
            request.download_dir,
            request.repo,
        )
        verify_module_contents(staging_dir, request)
        await run_module_entrypoint(staging_dir, request.module_params)
        _logging.info(f"Successfully installed module {request.module_name}")
        return staging_dir

    if request.binary is None:
        raise UsageError("one of --module-name or --binary-name is required")
    destination = await fetch_binary(
        resolver,
        request.binary,
        request.version,
        request.download_dir,
        request.repo,
        settings,
        platform=platform,
    )
    _logging.info(f"Successfully installed binary {request.binary.name}")
    return destination


__all__ = [
    "build_request",
    "check_dependencies",
    "verify_module_contents",
    "run_module_entrypoint",
    "run_install",
]
