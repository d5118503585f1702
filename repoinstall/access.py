"""Repository visibility probing and credential enforcement."""

import logging
from abc import ABC, abstractmethod

from .config import Settings
from .errors import CredentialMissingError
from .execution import join_command, run_command_async

_logging = logging.getLogger(__name__)


class AccessClassifier(ABC):
    """Decides whether a repository can be read without credentials."""

    @abstractmethod
    async def is_public(self, repo_url: str) -> bool:
        pass


class CurlAccessClassifier(AccessClassifier):
    """Probe the repository URL with an unauthenticated curl request.

    A zero exit status with a non-empty body means the repository is public.
    Private GitHub repositories answer anonymous requests with 404, which
    ``--fail`` turns into a non-zero exit.
    """

    def __init__(self, curl_command: str = "curl"):
        self.curl_command = curl_command

    async def is_public(self, repo_url: str) -> bool:
        command = join_command(
            [self.curl_command, "--silent", "--location", "--fail", repo_url]
        )
        output, returncode = await run_command_async(command)
        public = returncode == 0 and bool(output)
        _logging.debug(
            f"Probe of {repo_url}: returncode={returncode} public={public}"
        )
        return public


def require_credential(settings: Settings) -> None:
    """Fail unless the credential variable named in ``settings`` is set."""
    if not settings.has_credential:
        raise CredentialMissingError(
            f"repository is not public and environment variable {settings.credential_env_var} is not set",
            hint=f"export {settings.credential_env_var} with a token that can read the repository",
        )


async def authorize(
    repo_url: str, settings: Settings, classifier: AccessClassifier
) -> bool:
    """Gate a run on repository access. Returns True when the repo is public."""
    if await classifier.is_public(repo_url):
        _logging.debug(f"Repository {repo_url} is public")
        return True

    _logging.info(
        f"Repository {repo_url} is not publicly reachable; checking {settings.credential_env_var}"
    )
    require_credential(settings)
    return False


__all__ = [
    "AccessClassifier",
    "CurlAccessClassifier",
    "require_credential",
    "authorize",
]
