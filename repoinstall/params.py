"""Translation of ``key=value`` module params into install script flags."""

from typing import Iterable


def translate_param(pair: str) -> str:
    """Convert ``key=value`` into ``--key value``.

    Only the first ``=`` separates key from value; the value keeps any further
    ``=`` characters. The key is not validated.

    >>> translate_param("aws-region=us-east-1")
    '--aws-region us-east-1'
    >>> translate_param("filter=a=b")
    '--filter a=b'
    """
    key, value = split_param(pair)
    return f"--{key} {value}"


def split_param(pair: str) -> tuple[str, str]:
    key, _, value = pair.partition("=")
    return key, value


def translate_params(pairs: Iterable[str]) -> list[str]:
    """Build the argument vector passed to a module install entrypoint.

    Each pair becomes two arguments so values containing spaces survive intact.
    """
    args: list[str] = []
    for pair in pairs:
        key, value = split_param(pair)
        args.extend([f"--{key}", value])
    return args


__all__ = ["translate_param", "split_param", "translate_params"]
