"""CLI command definitions for repoinstall."""

from repoinstall.commands.install import install

cli = install

__all__ = ["cli", "install"]
