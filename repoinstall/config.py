"""Settings loading for repoinstall.

Settings are resolved once at startup and passed explicitly through the
install pipeline. Sources, lowest precedence first:

1. Built-in defaults
2. The YAML settings file (``$REPOINSTALL_CONFIG`` or
   ``~/.config/repoinstall/config.yaml``), if it exists
3. Command line flags, applied by the caller via :func:`dataclasses.replace`
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError, format_field_error
from .paths import DEFAULT_BIN_DIR, get_config_path, get_default_download_dir

DEFAULT_FETCH_COMMAND = "fetch"
DEFAULT_CREDENTIAL_ENV_VAR = "GITHUB_OAUTH_TOKEN"

_PATH_FIELDS = ("download_dir", "bin_dir")
_STRING_FIELDS = ("fetch_command", "credential_env_var")
_BOOL_FIELDS = ("use_sudo",)
KNOWN_FIELDS = _PATH_FIELDS + _STRING_FIELDS + _BOOL_FIELDS


@dataclass(frozen=True)
class Settings:
    """Everything the pipeline reads from the environment, captured once."""

    download_dir: Path = field(default_factory=get_default_download_dir)
    bin_dir: Path = DEFAULT_BIN_DIR
    fetch_command: str = DEFAULT_FETCH_COMMAND
    credential_env_var: str = DEFAULT_CREDENTIAL_ENV_VAR
    use_sudo: bool = True
    credential: str | None = None

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)

    def subprocess_env(self) -> dict[str, str]:
        """Environment handed to the fetch tool, with the credential exported."""
        env = dict(os.environ)
        if self.credential:
            env[self.credential_env_var] = self.credential
        return env


def validate_settings(data: Any, source: str = "Config") -> dict[str, Any]:
    """Validate raw YAML data and convert it into Settings keyword arguments.

    Raises:
        ConfigError: On unknown keys or wrongly typed values.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{source} must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - set(KNOWN_FIELDS))
    if unknown:
        raise ConfigError(
            f"{source} has unknown field(s): {', '.join(unknown)}",
            hint=f"valid fields are {', '.join(KNOWN_FIELDS)}",
        )

    values: dict[str, Any] = {}
    for name, value in data.items():
        if name in _PATH_FIELDS or name in _STRING_FIELDS:
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(
                    format_field_error(source, name, "must be a non-empty string")
                )
            values[name] = Path(value).expanduser() if name in _PATH_FIELDS else value
        elif name in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ConfigError(format_field_error(source, name, "must be true or false"))
            values[name] = value
    return values


def read_settings_file(path: Path) -> dict[str, Any]:
    """Load the YAML settings file at ``path``. A missing file yields no overrides."""
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except PermissionError:
        raise ConfigError(f"Permission denied reading config file: {path}")
    except UnicodeDecodeError:
        raise ConfigError(f"Config file is not valid UTF-8: {path}")
    except OSError as e:
        raise ConfigError(f"Error reading config file {path}: {e}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config syntax error in {path}: {e}") from e

    return validate_settings(data, source=f"Config '{path}'")


def load_settings(
    config_path: Path | None = None, environ: Mapping[str, str] | None = None
) -> Settings:
    """Resolve Settings from defaults, the settings file and the environment."""
    environ = os.environ if environ is None else environ
    path = config_path if config_path is not None else get_config_path()
    values = read_settings_file(path)

    credential_env_var = values.get("credential_env_var", DEFAULT_CREDENTIAL_ENV_VAR)
    credential = environ.get(credential_env_var) or None
    return Settings(credential=credential, **values)


__all__ = [
    "DEFAULT_FETCH_COMMAND",
    "DEFAULT_CREDENTIAL_ENV_VAR",
    "KNOWN_FIELDS",
    "Settings",
    "validate_settings",
    "read_settings_file",
    "load_settings",
]
