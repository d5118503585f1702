"""Async command execution utilities."""

import asyncio
import logging
import shlex
from typing import Mapping, Sequence, Tuple

_logging = logging.getLogger(__name__)


def join_command(args: Sequence[str]) -> str:
    """Quote an argument vector into a single shell command line."""
    return shlex.join(list(args))


async def run_command_async(
    command: str,
    timeout: float | None = None,
    capture: bool = True,
    env: Mapping[str, str] | None = None,
) -> Tuple[str, int]:
    """Run a command asynchronously and return output and return code.

    With ``capture=False`` the child inherits this process's standard streams
    and the returned output is empty. No timeout is applied unless one is given.
    """
    process = None
    pipe = asyncio.subprocess.PIPE if capture else None
    try:
        _logging.debug(f"Running command: {command}")
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=pipe,
            stderr=pipe,
            env=dict(env) if env is not None else None,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {command}")
            return f"Command timed out after {timeout} seconds", 1

        output = stdout.decode(errors="replace").strip() if stdout else ""
        returncode = process.returncode if process.returncode is not None else 1
        if stderr:
            err_text = stderr.decode(errors="replace").strip()
            _logging.debug(f"stderr: {err_text}")
            if returncode != 0 and not output:
                output = err_text
        return output, returncode
    except OSError as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {str(e)}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()


__all__ = ["join_command", "run_command_async"]
