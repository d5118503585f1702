"""Install command implementation."""

import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from repoinstall import (
    InstallerError,
    UsageError,
    __version__,
    build_request,
    load_settings,
    run_install,
    setup_logging,
)

_logging = logging.getLogger(__name__)

EXIT_USAGE = 1


class InstallCommand(click.Command):
    """Command that reports every usage error with exit status 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = EXIT_USAGE
            raise


def _usage_error(ctx: click.Context, message: str) -> click.UsageError:
    error = click.UsageError(message, ctx=ctx)
    error.exit_code = EXIT_USAGE
    return error


@click.command(
    cls=InstallCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=(
        "Module installs run the module's install.sh from the fetched "
        "repository with your privileges. Only install from repositories you trust."
    ),
)
@click.option("--repo", required=True, help="URL of the repository to install from.")
@click.option("--tag", help="Tag constraint to fetch, e.g. '~>0.5.0'. Required for binaries.")
@click.option("--branch", help="Branch to fetch. Overrides --tag for module installs.")
@click.option("--module-name", help="Name of the module under modules/ to install.")
@click.option("--binary-name", help="Name of the release asset binary to install.")
@click.option(
    "--binary-sha256-checksum",
    metavar="HEX",
    help="Expected sha256 checksum (64 hex chars) of the binary.",
)
@click.option(
    "--binary-sha512-checksum",
    metavar="HEX",
    help="Expected sha512 checksum (128 hex chars) of the binary.",
)
@click.option(
    "--module-param",
    "module_params",
    multiple=True,
    metavar="KEY=VALUE",
    help="Passed to the module's install script as --KEY VALUE. Repeatable.",
)
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory artifacts are staged in before install.",
)
@click.option(
    "--binary-install-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory binaries are installed into (default: /usr/local/bin).",
)
@click.option("--no-sudo", is_flag=True, help="Never use sudo to install binaries.")
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting.")
@click.version_option(__version__, prog_name="repoinstall")
@click.pass_context
def install(
    ctx,
    repo: str,
    tag: str | None,
    branch: str | None,
    module_name: str | None,
    binary_name: str | None,
    binary_sha256_checksum: str | None,
    binary_sha512_checksum: str | None,
    module_params: tuple[str, ...],
    download_dir: Path | None,
    binary_install_dir: Path | None,
    no_sudo: bool,
    debug: bool,
):
    """Install a module or a release binary from a repository."""
    setup_logging(debug)

    try:
        settings = load_settings()
        overrides = {}
        if download_dir is not None:
            overrides["download_dir"] = download_dir
        if binary_install_dir is not None:
            overrides["bin_dir"] = binary_install_dir
        if no_sudo:
            overrides["use_sudo"] = False
        settings = replace(settings, **overrides)

        request = build_request(
            repo=repo,
            download_dir=settings.download_dir,
            tag=tag,
            branch=branch,
            module_name=module_name,
            binary_name=binary_name,
            sha256=binary_sha256_checksum,
            sha512=binary_sha512_checksum,
            module_params=module_params,
        )
    except UsageError as e:
        raise _usage_error(ctx, str(e))
    except InstallerError as e:
        click.echo(e.render(), err=True)
        sys.exit(e.exit_code)

    _logging.debug(f"Resolved request: {request}")

    try:
        asyncio.run(run_install(request, settings))
    except InstallerError as e:
        click.echo(e.render(), err=True)
        sys.exit(e.exit_code)
