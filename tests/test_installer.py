"""Tests for the install pipeline."""

import asyncio
import hashlib
import os
from dataclasses import replace

import pytest

from repoinstall.errors import (
    CredentialMissingError,
    DependencyMissingError,
    EmptyResultError,
    ExecutionError,
    FetchError,
    UsageError,
)
from repoinstall.installer import build_request, run_install
from repoinstall.models import ChecksumAlgorithm, PlatformTag

from tests.conftest import FakeResolver

REPO = "https://github.com/acme/tools"
LINUX_AMD64 = PlatformTag(os="linux", arch="amd64")
SHA256 = "a" * 64
SHA512 = "b" * 128


class TestBuildRequest:
    """Validation of command line values."""

    def test_module_request(self, temp_dir):
        request = build_request(
            repo=REPO,
            download_dir=temp_dir,
            tag="~>0.1.0",
            module_name="vpc",
            module_params=["region=us-east-1"],
        )
        assert request.is_module
        assert request.module_name == "vpc"
        assert request.binary is None
        assert request.module_params == ["region=us-east-1"]
        assert request.version.tag == "~>0.1.0"

    def test_binary_request_with_checksum(self, temp_dir):
        request = build_request(
            repo=REPO, download_dir=temp_dir, tag="v1", binary_name="foo", sha512=SHA512
        )
        assert request.binary.name == "foo"
        assert request.binary.checksum.algorithm is ChecksumAlgorithm.SHA512
        assert request.artifact_name == "foo"

    def test_repo_required(self, temp_dir):
        with pytest.raises(UsageError, match="--repo"):
            build_request(repo=None, download_dir=temp_dir, module_name="vpc")

    def test_rejects_module_and_binary(self, temp_dir):
        with pytest.raises(UsageError, match="only one of --module-name and --binary-name"):
            build_request(
                repo=REPO, download_dir=temp_dir, tag="v1", module_name="vpc", binary_name="foo"
            )

    def test_rejects_neither_module_nor_binary(self, temp_dir):
        with pytest.raises(UsageError, match="one of --module-name or --binary-name"):
            build_request(repo=REPO, download_dir=temp_dir, tag="v1")

    def test_rejects_both_checksums(self, temp_dir):
        with pytest.raises(UsageError, match="only one of --binary-sha256-checksum"):
            build_request(
                repo=REPO, download_dir=temp_dir, tag="v1", binary_name="foo",
                sha256=SHA256, sha512=SHA512,
            )

    def test_rejects_binary_without_tag(self, temp_dir):
        with pytest.raises(UsageError, match="--binary-name requires --tag"):
            build_request(repo=REPO, download_dir=temp_dir, binary_name="foo")

    def test_rejects_binary_with_only_branch(self, temp_dir):
        with pytest.raises(UsageError, match="--binary-name requires --tag"):
            build_request(repo=REPO, download_dir=temp_dir, branch="main", binary_name="foo")

    @pytest.mark.parametrize("value", ["abc", "g" * 64, "a" * 63, "a" * 128])
    def test_rejects_malformed_sha256(self, temp_dir, value):
        with pytest.raises(UsageError, match="64 hexadecimal"):
            build_request(
                repo=REPO, download_dir=temp_dir, tag="v1", binary_name="foo", sha256=value
            )

    def test_checksum_normalized_to_lowercase(self, temp_dir):
        request = build_request(
            repo=REPO, download_dir=temp_dir, tag="v1", binary_name="foo", sha256="A" * 64
        )
        assert request.binary.checksum.value == "a" * 64

    def test_rejects_param_without_equals(self, temp_dir):
        with pytest.raises(UsageError, match="key=value"):
            build_request(
                repo=REPO, download_dir=temp_dir, module_name="vpc", module_params=["novalue"]
            )

    def test_module_params_ignored_for_binary(self, temp_dir, caplog):
        with caplog.at_level("WARNING", logger="repoinstall"):
            request = build_request(
                repo=REPO, download_dir=temp_dir, tag="v1", binary_name="foo",
                module_params=["a=b"],
            )
        assert request.module_params == []
        assert "Ignoring --module-param" in caplog.text

    @pytest.mark.parametrize("name", ["/home/user", "..", ".", "../etc", "nested/vpc"])
    def test_rejects_module_name_with_path(self, temp_dir, name):
        with pytest.raises(UsageError, match="--module-name must be a plain name"):
            build_request(repo=REPO, download_dir=temp_dir, module_name=name)

    @pytest.mark.parametrize("name", ["/usr/bin/foo", "../foo", "bin/foo"])
    def test_rejects_binary_name_with_path(self, temp_dir, name):
        with pytest.raises(UsageError, match="--binary-name must be a plain name"):
            build_request(repo=REPO, download_dir=temp_dir, tag="v1", binary_name=name)

    def test_module_without_tag_or_branch_means_latest(self, temp_dir):
        request = build_request(repo=REPO, download_dir=temp_dir, module_name="vpc")
        assert request.version.is_latest


def _module_request(settings, **kwargs):
    return build_request(
        repo=REPO, download_dir=settings.download_dir, module_name="vpc", **kwargs
    )


class TestModuleInstall:
    def test_runs_entrypoint_with_translated_params(self, settings, public_classifier):
        fake = FakeResolver()
        request = _module_request(
            settings, tag="v1", module_params=["region=us east", "filter=a=b"]
        )
        staging = asyncio.run(
            run_install(request, settings, resolver=fake, classifier=public_classifier)
        )
        args = (staging / "args.txt").read_text().splitlines()
        assert args == ["--region", "us east", "--filter", "a=b"]
        assert os.access(staging / "install.sh", os.X_OK)
        assert public_classifier.probed == [REPO]

    def test_private_repo_without_credential_never_fetches(self, settings, private_classifier):
        fake = FakeResolver()
        with pytest.raises(CredentialMissingError):
            asyncio.run(
                run_install(
                    _module_request(settings), settings, resolver=fake,
                    classifier=private_classifier,
                )
            )
        assert fake.calls == []

    def test_private_repo_with_credential(self, settings, private_classifier):
        settings = replace(settings, credential="tok")
        fake = FakeResolver()
        asyncio.run(
            run_install(
                _module_request(settings), settings, resolver=fake, classifier=private_classifier
            )
        )
        assert len(fake.calls) == 1

    def test_empty_module_result(self, settings, public_classifier):
        fake = FakeResolver(module_files={})
        with pytest.raises(EmptyResultError) as exc_info:
            asyncio.run(
                run_install(
                    _module_request(settings, tag="v1.2.3", branch="dev"), settings,
                    resolver=fake, classifier=public_classifier,
                )
            )
        message = str(exc_info.value)
        assert "vpc" in message
        assert REPO in message
        assert "v1.2.3" in message
        assert "dev" in message

    def test_missing_entrypoint(self, settings, public_classifier):
        fake = FakeResolver(module_files={"README.md": "docs"})
        with pytest.raises(EmptyResultError, match="install.sh"):
            asyncio.run(
                run_install(
                    _module_request(settings), settings, resolver=fake,
                    classifier=public_classifier,
                )
            )

    def test_entrypoint_failure_propagates_exit_code(self, settings, public_classifier):
        fake = FakeResolver(module_files={"install.sh": "#!/bin/sh\nexit 7\n"})
        with pytest.raises(ExecutionError) as exc_info:
            asyncio.run(
                run_install(
                    _module_request(settings), settings, resolver=fake,
                    classifier=public_classifier,
                )
            )
        assert exc_info.value.exit_code == 7

    def test_fetch_failure_is_fatal(self, settings, public_classifier):
        fake = FakeResolver(error="repository not found")
        with pytest.raises(FetchError, match="repository not found"):
            asyncio.run(
                run_install(
                    _module_request(settings), settings, resolver=fake,
                    classifier=public_classifier,
                )
            )

    def test_rerun_leaves_only_second_run_contents(self, settings, public_classifier):
        first = FakeResolver(module_files={"install.sh": "#!/bin/sh\n", "first.txt": "1"})
        second = FakeResolver(module_files={"install.sh": "#!/bin/sh\n", "second.txt": "2"})
        request = _module_request(settings)

        asyncio.run(run_install(request, settings, resolver=first, classifier=public_classifier))
        staging = asyncio.run(
            run_install(request, settings, resolver=second, classifier=public_classifier)
        )
        assert sorted(p.name for p in staging.iterdir()) == ["install.sh", "second.txt"]


class TestBinaryInstall:
    def test_installs_verified_binary(self, settings, public_classifier):
        content = b"#!/bin/sh\necho foo\n"
        fake = FakeResolver(asset_content=content)
        request = build_request(
            repo=REPO, download_dir=settings.download_dir, tag="v0.0.3",
            binary_name="foo", sha256=hashlib.sha256(content).hexdigest(),
        )
        dest = asyncio.run(
            run_install(
                request, settings, resolver=fake, classifier=public_classifier,
                platform=LINUX_AMD64,
            )
        )
        assert dest == settings.bin_dir / "foo"
        assert dest.name == "foo"
        assert os.access(dest, os.X_OK)
        assert fake.calls[0][3] == "foo_linux_amd64"


class TestDependencies:
    def test_missing_fetch_tool(self, monkeypatch, settings):
        monkeypatch.setattr("repoinstall.dependencies.shutil.which", lambda name: None)
        with pytest.raises(DependencyMissingError, match="fetch"):
            asyncio.run(run_install(_module_request(settings), settings))

    def test_missing_curl_when_probing(self, monkeypatch, settings):
        monkeypatch.setattr(
            "repoinstall.dependencies.shutil.which",
            lambda name: None if name == "curl" else f"/usr/bin/{name}",
        )
        with pytest.raises(DependencyMissingError, match="curl"):
            asyncio.run(
                run_install(
                    _module_request(settings), settings, resolver=FakeResolver(),
                    classifier=None,
                )
            )

    def test_injected_collaborators_skip_check(self, monkeypatch, settings, public_classifier):
        monkeypatch.setattr("repoinstall.dependencies.shutil.which", lambda name: None)
        asyncio.run(
            run_install(
                _module_request(settings), settings, resolver=FakeResolver(),
                classifier=public_classifier,
            )
        )
