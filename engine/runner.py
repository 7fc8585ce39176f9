"""Subprocess runner for git and package manager commands."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel

from engine import workflow

logger = logging.getLogger(__name__)

# Exit status reported by shells for a missing executable
COMMAND_NOT_FOUND = 127


class CommandError(Exception):
    """Exception raised when an external command exits non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        """Initialize with the failed command and its exit status.

        Args:
            command: The command that was run
            returncode: Exit status of the command
            stderr: Captured error output, if any
        """
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command '{' '.join(self.command)}' failed with exit code {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)

    @property
    def exit_status(self) -> int:
        """Process exit status a shell would report for this failure.

        Commands killed by a signal have a negative returncode and map to
        128 + signal number.
        """
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode or 1


class CommandResult(BaseModel):
    """Result of a finished command."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs commands in a working directory, streaming output to the CI log."""

    def __init__(self, cwd: Optional[Path] = None) -> None:
        """Initialize the runner.

        Args:
            cwd: Directory commands run in, defaults to the process cwd
        """
        self.cwd = Path(cwd) if cwd is not None else None

    def run(
        self,
        command: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        group: bool = False,
    ) -> CommandResult:
        """Run a command.

        Args:
            command: Program and arguments
            check: Raise CommandError on a non-zero exit status
            capture: Capture stdout/stderr instead of inheriting them
            group: Open a log group titled with the command line first

        Returns:
            CommandResult for the finished command

        Raises:
            CommandError: If check is set and the command fails or is missing
        """
        command = list(command)
        if group:
            workflow.group(" ".join(command))
        logger.debug(f"Running {command} in {self.cwd or Path.cwd()}")

        try:
            completed = subprocess.run(
                command,
                cwd=self.cwd,
                capture_output=capture,
                text=True,
            )
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {command[0]}")
            if check:
                raise CommandError(command, COMMAND_NOT_FOUND, str(e)) from e
            return CommandResult(command=command, returncode=COMMAND_NOT_FOUND, stderr=str(e))

        result = CommandResult(
            command=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if check and not result.ok:
            raise CommandError(command, result.returncode, result.stderr)
        return result
