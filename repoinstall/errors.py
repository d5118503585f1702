"""Error types and message formatting for repoinstall.

Every failure in the install pipeline is fatal. Each error type carries the
process exit code the CLI should terminate with, so the command layer only has
to print the message and exit.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("module 'vpc' not found")
        "Error: module 'vpc' not found"
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Examples:
        >>> format_field_error("Config", "bin_dir", "must be a string")
        "Config field 'bin_dir' must be a string"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("fetch not found", "install it from https://github.com/gruntwork-io/fetch")
        'Error: fetch not found. Hint: install it from https://github.com/gruntwork-io/fetch'
    """
    return f"{format_error(message)}. Hint: {suggestion}"


class InstallerError(Exception):
    """Base class for every fatal install failure."""

    exit_code = 1

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint

    def render(self) -> str:
        if self.hint:
            return format_suggestion(str(self), self.hint)
        return format_error(str(self))


class UsageError(InstallerError):
    """Missing, malformed or conflicting command line flags."""


class ConfigError(InstallerError):
    """Raised when the settings file cannot be read or is invalid."""


class DependencyMissingError(InstallerError):
    """A required external tool is not available on PATH."""


class CredentialMissingError(InstallerError):
    """The repository is private and no credential was provided."""


class FetchError(InstallerError):
    """The fetch collaborator failed (network, auth, not found, checksum)."""


class PlacementError(InstallerError):
    """The downloaded binary could not be moved into the install directory."""


class EmptyResultError(InstallerError):
    """A module fetch succeeded but left the staging directory empty."""


class ExecutionError(InstallerError):
    """A module install entrypoint exited non-zero.

    The exit code of the entrypoint becomes the exit code of the run.
    """

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.exit_code = returncode if returncode > 0 else 1


__all__ = [
    "format_error",
    "format_field_error",
    "format_suggestion",
    "InstallerError",
    "UsageError",
    "ConfigError",
    "DependencyMissingError",
    "CredentialMissingError",
    "FetchError",
    "PlacementError",
    "EmptyResultError",
    "ExecutionError",
]
