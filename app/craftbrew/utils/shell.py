"""Shell execution utilities.

Provides subprocess execution with bounded timeouts for talking to the
package manager command-line tools.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one brew or mas invocation."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """True for exit status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stderr and stdout, for error classification."""
        return f"{self.stderr}\n{self.stdout}".strip()


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    env: dict[str, str] | None = None,
    new_session: bool = False,
) -> CommandResult:
    """Run a command to completion, capturing its output as text.

    A nonzero exit status is returned, never raised.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.
        env: Additional environment variables (merged with current env).
        new_session: Run the command in its own session so that a terminal
            interrupt aimed at craftbrew does not also kill the child.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    full_env = {**os.environ, **env} if env else None
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        env=full_env,
        start_new_session=new_session,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """True if ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None
