"""Install modules and release binaries straight from a source repository."""

__version__ = "0.1.0"

from .config import ConfigError, Settings, load_settings
from .errors import (
    CredentialMissingError,
    DependencyMissingError,
    EmptyResultError,
    ExecutionError,
    FetchError,
    InstallerError,
    PlacementError,
    UsageError,
    format_error,
    format_suggestion,
)
from .execution import run_command_async
from .host import identify_platform
from .installer import build_request, run_install
from .logs import setup_logging
from .models import InstallRequest, PlatformTag, VersionSelector, resolve_binary_name
from .params import translate_param
from .resolver import FetchToolResolver, Resolver

__all__ = [
    "__version__",
    "ConfigError",
    "Settings",
    "load_settings",
    "InstallerError",
    "UsageError",
    "DependencyMissingError",
    "CredentialMissingError",
    "FetchError",
    "PlacementError",
    "EmptyResultError",
    "ExecutionError",
    "format_error",
    "format_suggestion",
    "run_command_async",
    "identify_platform",
    "build_request",
    "run_install",
    "setup_logging",
    "InstallRequest",
    "PlatformTag",
    "VersionSelector",
    "resolve_binary_name",
    "translate_param",
    "FetchToolResolver",
    "Resolver",
]
