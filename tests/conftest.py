"""Pytest fixtures and utilities for repoinstall tests."""

import hashlib
import logging
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from repoinstall.access import AccessClassifier
from repoinstall.config import Settings
from repoinstall.errors import FetchError
from repoinstall.models import Checksum, VersionSelector
from repoinstall.resolver import Resolver

INSTALL_SCRIPT = """#!/bin/sh
printf '%s\\n' "$@" > "$(dirname "$0")/args.txt"
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(temp_dir: Path) -> Settings:
    """Settings pointing at throwaway download and install directories."""
    return Settings(
        download_dir=temp_dir / "downloads",
        bin_dir=temp_dir / "bin",
        use_sudo=False,
    )


class FakeClassifier(AccessClassifier):
    def __init__(self, public: bool = True):
        self.public = public
        self.probed: list[str] = []

    async def is_public(self, repo_url: str) -> bool:
        self.probed.append(repo_url)
        return self.public


class FakeResolver(Resolver):
    """Resolver that writes canned files instead of calling the fetch tool."""

    def __init__(
        self,
        module_files: dict[str, str] | None = None,
        asset_content: bytes = b"\x7fELF fake binary",
        error: str | None = None,
    ):
        self.module_files = module_files if module_files is not None else {"install.sh": INSTALL_SCRIPT}
        self.asset_content = asset_content
        self.error = error
        self.calls: list[tuple] = []

    async def download_source_path(
        self, repo: str, version: VersionSelector, source_path: str, destination: Path
    ) -> None:
        self.calls.append(("source", repo, version, source_path, destination))
        if self.error:
            raise FetchError(self.error)
        for name, content in self.module_files.items():
            (destination / name).write_text(content)

    async def download_release_asset(
        self,
        repo: str,
        tag: str,
        asset_name: str,
        destination: Path,
        checksum: Checksum | None = None,
    ) -> None:
        self.calls.append(("asset", repo, tag, asset_name, destination, checksum))
        if self.error:
            raise FetchError(self.error)
        if checksum:
            actual = hashlib.new(checksum.algorithm.value, self.asset_content).hexdigest()
            if actual != checksum.value:
                raise FetchError(f"checksum mismatch for {asset_name}")
        (destination / asset_name).write_bytes(self.asset_content)


@pytest.fixture
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def public_classifier() -> FakeClassifier:
    return FakeClassifier(public=True)


@pytest.fixture
def private_classifier() -> FakeClassifier:
    return FakeClassifier(public=False)


@pytest.fixture
def no_user_config(monkeypatch, temp_dir: Path) -> Path:
    """Point REPOINSTALL_CONFIG at a file that does not exist."""
    path = temp_dir / "missing-config.yaml"
    monkeypatch.setenv("REPOINSTALL_CONFIG", str(path))
    return path


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Drop handlers installed by setup_logging so streams don't leak between tests."""
    yield
    logger = logging.getLogger("repoinstall")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
