"""Subprocess execution with uniform error handling.

Used to launch the external file manager for item folders.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class SubprocessResult:
    """Result of a subprocess execution.

    Attributes:
        returncode: Exit code of the process (0 = success)
        stdout: Captured standard output
        stderr: Captured standard error
        cmd_str: The command as one string, for logging
    """

    returncode: int
    stdout: str
    stderr: str
    cmd_str: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def failed(self) -> bool:
        return self.returncode != 0


def run_subprocess(
    argv: List[str],
    timeout: Optional[int] = None,
) -> SubprocessResult:
    """Run ``argv`` and capture its output.

    Args:
        argv: Command and arguments as a list
        timeout: Maximum seconds to wait

    Returns:
        SubprocessResult with returncode, stdout and stderr

    Raises:
        RuntimeError: If the command times out or is not found
    """
    cmd_str = " ".join(argv)

    kwargs: dict = {"capture_output": True, "text": True}
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        cp = subprocess.run(argv, **kwargs)
    except subprocess.TimeoutExpired as e:
        raise RuntimeError(f"Command timed out after {timeout}s: {cmd_str}") from e
    except FileNotFoundError as e:
        raise RuntimeError(
            f"Command not found: {argv[0]}\n"
            f"Ensure the command is installed and available in PATH."
        ) from e

    return SubprocessResult(
        returncode=cp.returncode,
        stdout=cp.stdout or "",
        stderr=cp.stderr or "",
        cmd_str=cmd_str,
    )


def check_command_available(cmd: str) -> bool:
    """True if ``cmd`` is found in PATH."""
    return shutil.which(cmd) is not None
