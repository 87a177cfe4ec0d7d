"""
Subprocess helpers.

All external tools (jpegoptim, optipng, mail, sendmail, free) are invoked
through ``run_command`` so that every call has an explicit timeout and a
failure surfaces as a single exception type.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


class CommandError(Exception):
    """An external command could not be run, timed out, or exited non-zero."""

    def __init__(
        self,
        command: Sequence[str],
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{self.command[0]}: {message}")


def run_command(
    args: Sequence[str],
    *,
    input_text: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    cwd: Optional[Path] = None,
) -> subprocess.CompletedProcess:
    """
    Run an external command and wait for it to finish.

    Args:
        args: Command and arguments
        input_text: Text passed on stdin (optional)
        timeout: Seconds before the command is killed
        cwd: Working directory (optional)

    Returns:
        The completed process, with stdout/stderr captured as text

    Raises:
        CommandError: The executable is missing, the timeout expired,
            or the command exited with a non-zero status
    """
    command = [str(arg) for arg in args]
    logger.debug(f"Command: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            input=input_text,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandError(command, "command not found") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(command, f"timed out after {timeout}s") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise CommandError(
            command,
            f"exited with status {result.returncode}" + (f": {stderr}" if stderr else ""),
            returncode=result.returncode,
            stderr=stderr,
        )

    return result
